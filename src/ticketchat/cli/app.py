"""Main CLI application using Typer."""
import asyncio

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from ..api import AuthApi, ServiceApi
from ..chat.history import HistoryLoader
from ..errors import ApiError, HistoryLoadError, TicketChatError
from ..session import resolve_capabilities
from .providers import (
    console_debug_callback,
    get_api_client,
    get_session_store,
    get_transport,
    require_session,
)

# Load environment variables
load_dotenv()

# Create Typer app
app = typer.Typer(
    name="ticketchat",
    help="Support ticket chat client for the shop backend",
    no_args_is_help=True,
    add_completion=True,
)

# Console for rich output
console = Console()


@app.command()
def login(
    email: str = typer.Option(
        ...,
        "--email",
        "-e",
        prompt="Last name or e-mail",
        help="Last name or e-mail address of the account"
    ),
    password: str = typer.Option(
        ...,
        "--password",
        "-p",
        prompt=True,
        hide_input=True,
        help="Account password"
    ),
    customer_number: str | None = typer.Option(
        None,
        "--customer-number",
        "-c",
        help="Shop customer number, when the account has one"
    ),
):
    """Log in and store the session."""
    async def _login():
        client = get_api_client()
        try:
            session = await AuthApi(client).login(email, password, customer_number)
            console.print(f"[green]Logged in as {session.user.display_name}[/green]")
        except ApiError as e:
            console.print(f"[red]Login failed: {e.message}[/red]")
            raise typer.Exit(code=1)
        finally:
            await client.close()

    asyncio.run(_login())


@app.command()
def logout():
    """Forget the stored session."""
    async def _logout():
        await get_session_store().clear()
        console.print("[dim]Logged out.[/dim]")

    asyncio.run(_logout())


@app.command()
def whoami():
    """Show the logged-in user."""
    async def _whoami():
        session = await require_session(get_session_store(), console)
        user = session.user

        table = Table(title="Current User", show_header=False)
        table.add_column("Field", style="cyan")
        table.add_column("Value", style="green")
        table.add_row("Id", user.id or "-")
        table.add_row("Username", user.username)
        table.add_row("E-mail", user.email or "-")
        table.add_row("Role", user.role)
        table.add_row("Permissions", ", ".join(user.permissions) or "-")
        table.add_row("Logged in", session.created_at.astimezone().strftime("%Y-%m-%d %H:%M"))
        console.print(table)

    asyncio.run(_whoami())


@app.command()
def capabilities():
    """List the actions offered to the logged-in user."""
    async def _capabilities():
        session = await require_session(get_session_store(), console)
        caps = sorted(c.value for c in resolve_capabilities(session.user))
        console.print(f"[bold cyan]Capabilities of {session.user.display_name}[/bold cyan]")
        for cap in caps:
            console.print(f"[green]+[/green] {cap}")

    asyncio.run(_capabilities())


@app.command(name="open-ticket")
def open_ticket():
    """Show whether the logged-in user has an open ticket."""
    async def _open_ticket():
        store = get_session_store()
        await require_session(store, console)
        client = get_api_client(store)
        try:
            status = await ServiceApi(client).get_open_ticket()
        except ApiError as e:
            console.print(f"[red]Error: {e.message}[/red]")
            raise typer.Exit(code=1)
        finally:
            await client.close()

        if status.has_open:
            console.print(f"[green]Open ticket: {status.ticket_id}[/green]")
            console.print(f"[dim]Continue with: ticketchat chat {status.ticket_id}[/dim]")
        else:
            console.print("[yellow]No open ticket[/yellow]")

    asyncio.run(_open_ticket())


@app.command()
def history(
    ticket_id: str = typer.Argument(..., help="Ticket whose messages to show"),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Print client log lines at level: debug (all), info, warning, or error"
    ),
):
    """Print the message history of a ticket."""
    async def _history():
        store = get_session_store()
        session = await require_session(store, console)
        client = get_api_client(store)
        loader = HistoryLoader(ServiceApi(client))
        if log_level is not None:
            callback = console_debug_callback(log_level, console)
            client.set_debug_callback(callback)
            loader.set_debug_callback(callback)
        try:
            messages = await loader.load(ticket_id)
        except HistoryLoadError as e:
            console.print(f"[red]Messages could not be loaded: {e.cause.message}[/red]")
            raise typer.Exit(code=1)
        finally:
            await client.close()

        if not messages:
            console.print("[yellow]No messages yet[/yellow]")
            return

        table = Table(title=f"Ticket {ticket_id}")
        table.add_column("Time", style="dim", width=16)
        table.add_column("From", style="cyan")
        table.add_column("Message")
        for message in messages:
            sender = "You" if message.author_id == session.user.id else (message.author_name or "Support")
            table.add_row(
                message.created_at.astimezone().strftime("%Y-%m-%d %H:%M"),
                sender,
                message.text,
            )
        console.print(table)

    asyncio.run(_history())


@app.command()
def chat(
    ticket_id: str | None = typer.Argument(
        None,
        help="Ticket to open right away (omit to start on the home screen)"
    ),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Show log panel with level: debug (all), info, warning, or error"
    ),
):
    """Launch the interactive chat TUI."""
    async def _chat():
        from ..ui import run_textual_tui

        store = get_session_store()
        session = await require_session(store, console)
        try:
            transport = get_transport()
        except (TypeError, ValueError) as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(code=1)

        await run_textual_tui(
            client=get_api_client(store),
            transport=transport,
            session=session,
            ticket_id=ticket_id,
            log_level=log_level,
        )
        console.print("\n[dim]Goodbye![/dim]")

    try:
        asyncio.run(_chat())
    except KeyboardInterrupt:
        pass
    except TicketChatError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
