"""Data models for the login session."""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class User(BaseModel):
    """Identity snapshot cached locally after login.

    Only what the client needs for display and capability checks is kept;
    everything else the server sends (hashes, timestamps) is ignored.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    username: str | None = None
    email: str | None = None
    first_name: str | None = None
    role: str = "customer"
    permissions: list[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _from_server_shape(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if "id" not in data and "_id" in data:
            data["id"] = str(data["_id"])
        if "first_name" not in data and "firstName" in data:
            data["first_name"] = data["firstName"]
        if data.get("role") is None:
            data.pop("role", None)
        if data.get("permissions") is None:
            data.pop("permissions", None)
        return data

    @property
    def display_name(self) -> str:
        return self.first_name or self.username or self.email or self.id


class Session(BaseModel):
    """The single active session of the application.

    Created on login, destroyed on logout, read-only otherwise.
    """

    model_config = ConfigDict(frozen=True)

    token: str = Field(min_length=1, description="Opaque credential sent with every request")
    user: User
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
