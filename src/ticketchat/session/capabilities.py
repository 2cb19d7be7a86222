"""Capability resolution for gated UI actions.

Every screen asks this module which actions the current identity may
offer instead of checking roles and permissions itself. The result only
decides what is displayed; the server enforces authorization on its own.
"""

from enum import Enum

from .models import User

ADMIN_ROLES = frozenset({"admin", "super_admin"})
MANAGER_ROLES = frozenset({
    "bike_manager",
    "cleaning_manager",
    "motor_manager",
    "service_manager",
    "robby_manager",
})
FEED_POSTER_ROLES = ADMIN_ROLES | (MANAGER_ROLES - {"robby_manager"})

FULL_ACCESS_PERMISSIONS = frozenset({"full_access", "full_access_grant"})
OFFER_PERMISSIONS = FULL_ACCESS_PERMISSIONS | {"motor"}
# Ticket types; holding one lets staff answer and close tickets of that type
TICKET_TYPE_PERMISSIONS = frozenset({"bike", "cleaning", "motor", "service", "robby"})


class Capability(str, Enum):
    """Actions the client may offer to the current user."""

    CHAT = "chat"
    POST_OFFER = "post_offer"
    POST_TO_FEED = "post_to_feed"
    DELETE_POSTS = "delete_posts"
    MANAGE_CLOSED_DAYS = "manage_closed_days"
    VIEW_ALL_TICKETS = "view_all_tickets"
    CLOSE_TICKET = "close_ticket"
    FORWARD_TICKET = "forward_ticket"


def is_staff(user: User) -> bool:
    """Anyone who is not a plain customer, or holds a ticket-type permission."""
    perms = set(user.permissions)
    return (
        user.role != "customer"
        or bool(perms & TICKET_TYPE_PERMISSIONS)
        or bool(perms & FULL_ACCESS_PERMISSIONS)
    )


def resolve_capabilities(user: User | None) -> frozenset[Capability]:
    """Return the set of actions available to ``user``.

    Args:
        user: Current identity, or None when logged out

    Returns:
        Frozen set of capabilities (empty when logged out)
    """
    if user is None:
        return frozenset()

    perms = set(user.permissions)
    full_access = bool(perms & FULL_ACCESS_PERMISSIONS)
    admin = user.role in ADMIN_ROLES or full_access

    caps = {Capability.CHAT}
    if perms & OFFER_PERMISSIONS:
        caps.add(Capability.POST_OFFER)
    if user.role in FEED_POSTER_ROLES or full_access:
        caps.add(Capability.POST_TO_FEED)
    if admin:
        caps.update({
            Capability.DELETE_POSTS,
            Capability.MANAGE_CLOSED_DAYS,
            Capability.VIEW_ALL_TICKETS,
        })
    if is_staff(user):
        caps.update({Capability.CLOSE_TICKET, Capability.FORWARD_TICKET})
    return frozenset(caps)


def has_capability(user: User | None, capability: Capability) -> bool:
    return capability in resolve_capabilities(user)
