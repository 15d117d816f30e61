"""
Chat Relay CLI.

Command-line interface for running and inspecting the relay.
"""

import json
import sys

import typer
from rich.console import Console
from rich.table import Table

from chat_relay import __version__
from chat_relay.components.core.constants import RelayConstants
from shared.config.settings import settings

app = typer.Typer(
    name="chat-relay",
    help="Real-time chat relay CLI",
    add_completion=False,
)
console = Console()


# =============================================================================
# Server Commands
# =============================================================================

@app.command()
def serve(
    host: str = typer.Option(settings.relay_host, help="Interface to bind"),
    port: int = typer.Option(settings.relay_port, help="Port to listen on"),
    reload: bool = typer.Option(False, "--reload", help="Restart on code changes"),
):
    """Run the relay under uvicorn."""
    import uvicorn

    console.print(f"[blue]Starting chat relay on {host}:{port}[/blue]")
    uvicorn.run(
        "chat_relay.main:app",
        host=host,
        port=port,
        reload=reload,
        log_config=None,
    )


@app.command()
def show_config():
    """Show effective settings."""
    table = Table(title="Chat Relay Settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    for name, value in settings.model_dump().items():
        table.add_row(name, str(value))

    console.print(table)

    problems = settings.validate_production_config()
    for problem in problems:
        console.print(f"[red]✗ {problem}[/red]")
    if problems:
        raise typer.Exit(1)


# =============================================================================
# Health Commands
# =============================================================================

@app.command()
def health(
    url: str = typer.Option(
        f"http://localhost:{settings.relay_port}/health",
        help="Health endpoint URL",
    ),
):
    """Check a running relay."""
    import time

    import httpx

    table = Table(title="Relay Health")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")

    try:
        start = time.time()
        response = httpx.get(url, timeout=5.0)
        elapsed = (time.time() - start) * 1000
    except httpx.HTTPError as e:
        console.print(f"[red]✗ {type(e).__name__}: {e}[/red]")
        raise typer.Exit(1)

    if response.status_code != 200:
        console.print(f"[red]✗ Status {response.status_code}[/red]")
        raise typer.Exit(1)

    data = response.json()
    table.add_row("Status", str(data.get("status")))
    table.add_row("Response Time", f"{elapsed:.0f}ms")
    table.add_row("Connections", str(data.get("total_connections")))
    table.add_row("Named", str(data.get("named_connections")))
    table.add_row("Pending", str(data.get("pending_connections")))
    console.print(table)


@app.command()
def ws_test(
    url: str = typer.Option(
        f"ws://localhost:{settings.relay_port}{RelayConstants.WS_ENDPOINT}",
        help="WebSocket URL",
    ),
    username: str = typer.Option("relay-probe", help="Display name to announce"),
    origin: str = typer.Option(None, help="Origin header to send"),
):
    """Test WebSocket connectivity by announcing a name and waiting for the echo."""
    import asyncio

    import websockets

    async def _test():
        console.print(f"[blue]Testing WebSocket: {url}[/blue]")

        try:
            async with websockets.connect(url, origin=origin, close_timeout=5) as ws:
                await ws.send(json.dumps({"type": "set-username", "payload": username}))
                response = await asyncio.wait_for(ws.recv(), timeout=5)
                console.print(f"[green]✓ Connected! Response: {response}[/green]")
        except asyncio.TimeoutError:
            console.print("[red]✗ No broadcast received[/red]")
            raise typer.Exit(1)
        except (OSError, websockets.WebSocketException) as e:
            console.print(f"[red]✗ Connection failed: {e}[/red]")
            raise typer.Exit(1)

    asyncio.run(_test())


@app.command()
def version():
    """Show version information."""
    table = Table(title="Chat Relay Version")
    table.add_column("Component", style="cyan")
    table.add_column("Version", style="green")

    table.add_row("Relay", __version__)
    table.add_row("Python", sys.version.split()[0])

    console.print(table)


if __name__ == "__main__":
    app()
