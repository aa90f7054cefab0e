"""warmcp command line: server management and catalogue inspection."""

import logging
import signal
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from warmcp.config import MCPConfig, PIDFileManager, default_config_file
from warmcp.server import MCPServer

app = typer.Typer(help="MCP server exposing Taskwarrior and Timewarrior")

# stdout belongs to the stdio transport
console = Console(stderr=True)


def _load_config(config_file: Optional[Path]) -> MCPConfig:
    return MCPConfig.load(config_file)


def _pid_manager(config: MCPConfig, config_file: Optional[Path]) -> PIDFileManager:
    default_pid = (config_file or default_config_file()).parent / "warmcp.pid"
    return PIDFileManager(config.pid_file or default_pid)


def _setup_signal_handlers(pid_manager: PIDFileManager):
    """Clean up the PID file and exit on SIGTERM/SIGINT."""
    def signal_handler(signum, frame):
        console.print("\n[yellow]Shutting down MCP server...[/yellow]")
        pid_manager.remove()
        console.print("[green]Server stopped successfully[/green]")
        sys.exit(0)

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)


@app.command()
def start(
    host: str = typer.Option(None, help="Server host (SSE only, overrides config)"),
    port: int = typer.Option(None, help="Server port (SSE only, overrides config)"),
    transport: str = typer.Option(None, help="Transport: stdio or sse (overrides config)"),
    config_file: Optional[Path] = typer.Option(None, "--config", help="Path to config.yaml"),
    use_config: bool = typer.Option(True, "--config-file/--no-config-file", help="Load config.yaml"),
    log_level: str = typer.Option("WARNING", help="Logging level for stderr output"),
):
    """
    Start the MCP server.

    Configuration is loaded from config.yaml if it exists. Environment
    variables override the file; command-line options override both.

    Examples:
        # Start with stdio transport (uses config or defaults)
        warmcp start

        # Start with SSE transport
        warmcp start --transport sse --host 0.0.0.0 --port 8000
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.WARNING),
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    pid_manager = None
    try:
        config = _load_config(config_file) if use_config else MCPConfig()

        if host is not None:
            config.host = host
        if port is not None:
            config.port = port
        if transport is not None:
            config.transport = transport

        pid_manager = _pid_manager(config, config_file)

        try:
            pid_manager.write()
        except RuntimeError as e:
            console.print(f"[red]{e}[/red]")
            raise typer.Exit(1)

        _setup_signal_handlers(pid_manager)

        server = MCPServer.from_config(config)

        console.print("[green]Starting MCP server...[/green]")
        console.print(f"Transport: {config.transport}")
        if config.transport == "sse":
            console.print(f"Listening on {config.host}:{config.port}")
        console.print(f"PID file: {pid_manager.pid_file}")

        server.start()
    except typer.Exit:
        raise
    except ValueError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        if pid_manager:
            pid_manager.remove()
        raise typer.Exit(1)
    except RuntimeError as e:
        console.print(f"[red]Error starting server:[/red] {e}")
        if pid_manager:
            pid_manager.remove()
        raise typer.Exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Server stopped by user[/yellow]")
        if pid_manager:
            pid_manager.remove()
        raise typer.Exit(0)


@app.command()
def status(
    config_file: Optional[Path] = typer.Option(None, "--config", help="Path to config.yaml"),
):
    """
    Check if MCP server is running.

    Displays server status, PID, and configuration information.
    """
    try:
        config = _load_config(config_file)
    except ValueError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(1)

    server_status = _pid_manager(config, config_file).status()

    table = Table(title="MCP Server Status", show_header=False)
    table.add_column("Property", style="cyan")
    table.add_column("Value")

    if server_status.running:
        table.add_row("Status", "[green]Running[/green]")
        table.add_row("PID", str(server_status.pid))
    else:
        table.add_row("Status", "[red]Not running[/red]")

    table.add_row("PID File", str(server_status.pid_file))
    table.add_row("Transport", config.transport)
    if config.transport == "sse":
        table.add_row("Host", config.host)
        table.add_row("Port", str(config.port))
    table.add_row("Task Command", config.task_command)
    table.add_row("Timew Command", config.timew_command)

    console.print(table)

    if not server_status.running:
        raise typer.Exit(1)


@app.command()
def stop(
    timeout: int = typer.Option(10, help="Seconds to wait for graceful shutdown"),
    config_file: Optional[Path] = typer.Option(None, "--config", help="Path to config.yaml"),
):
    """Stop the MCP server gracefully."""
    try:
        config = _load_config(config_file)
        pid_manager = _pid_manager(config, config_file)

        console.print("[yellow]Stopping MCP server...[/yellow]")

        if pid_manager.stop_server(timeout=timeout):
            console.print("[green]Server stopped successfully[/green]")
        else:
            console.print(
                f"[red]Server did not stop within {timeout} seconds.[/red]\n"
                "[yellow]Consider increasing timeout or manually killing the process.[/yellow]"
            )
            raise typer.Exit(1)
    except typer.Exit:
        raise
    except (RuntimeError, ValueError) as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)


@app.command()
def tools(
    config_file: Optional[Path] = typer.Option(None, "--config", help="Path to config.yaml"),
):
    """List the tool catalogue with its confirmation policy."""
    try:
        config = _load_config(config_file)
    except ValueError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(1)

    server = MCPServer.from_config(config)

    table = Table(title="warmcp tools")
    table.add_column("Tool", style="cyan")
    table.add_column("Confirmation")
    table.add_column("Fields")

    for spec in server.dispatcher.specs:
        fields = ", ".join(f"{f.name}*" if f.required else f.name for f in spec.fields)
        table.add_row(spec.name, spec.confirmation.value, fields or "-")

    console.print(table)


def main():
    app()


if __name__ == "__main__":
    main()
