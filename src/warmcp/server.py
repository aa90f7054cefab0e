"""
FastMCP server initialization and configuration.

Main server class that wires the Taskwarrior and Timewarrior tool
catalogues, resources and prompts into a FastMCP application. Supports
both stdio and SSE transports.
"""

import logging
import socket
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Literal, Optional

import anyio
from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from fastmcp.tools import Tool
from fastmcp.tools.tool import ToolResult
from mcp.types import ToolAnnotations

from warmcp.adapters import CommandRunner, SubprocessRunner
from warmcp.config import MCPConfig, resolve_taskrc_path, resolve_timew_config_path
from warmcp.features import register_features
from warmcp.tools import (
    Confirmation,
    Dispatcher,
    ToolSpec,
    build_task_specs,
    build_timew_specs,
    task_family,
    timew_family,
)

logger = logging.getLogger(__name__)

SERVER_NAME = "warmcp"


class CommandTool(Tool):
    """
    FastMCP tool backed by a dispatch table entry.

    Arguments arrive unvalidated and are resolved by the dispatcher, so
    missing fields degrade to empty strings instead of protocol faults.
    """

    dispatcher: Any

    @classmethod
    def from_spec(cls, spec: ToolSpec, dispatcher: Dispatcher) -> "CommandTool":
        return cls(
            name=spec.name,
            description=spec.description,
            parameters=spec.input_schema(),
            annotations=ToolAnnotations(
                title=spec.name,
                readOnlyHint=spec.read_only,
                destructiveHint=spec.confirmation is Confirmation.REQUIRED,
                openWorldHint=False,
            ),
            dispatcher=dispatcher,
        )

    async def run(self, arguments: Dict[str, Any]) -> ToolResult:
        # External commands block; run each call on its own worker thread
        result = await anyio.to_thread.run_sync(self.dispatcher.call, self.name, arguments)
        if not result.success:
            raise ToolError(result.message)
        return ToolResult(content=result.message)


@dataclass
class MCPServer:
    """
    Main MCP server instance for the Taskwarrior/Timewarrior interface.

    Attributes:
        host: Server bind address (default: "127.0.0.1")
        port: Server port (default: 8000, SSE only)
        transport: Transport mode ("stdio" or "sse")
        task_command: Taskwarrior binary
        timew_command: Timewarrior binary
        command_timeout: Optional deadline in seconds per external command
        taskrc: taskrc exported as TASKRC (default: resolved from environment)
        timew_config: timewarrior.cfg served as a resource (default: resolved)
        runner: Process runner shared by every tool and resource
    """

    host: str = "127.0.0.1"
    port: int = 8000
    transport: Literal["stdio", "sse"] = "stdio"
    task_command: str = "task"
    timew_command: str = "timew"
    command_timeout: Optional[float] = None
    taskrc: Optional[Path] = None
    timew_config: Optional[Path] = None
    runner: CommandRunner = field(default_factory=SubprocessRunner)
    dispatcher: Optional[Dispatcher] = field(default=None, init=False, repr=False)
    _app: Optional[FastMCP] = field(default=None, init=False, repr=False)

    def __post_init__(self):
        """Validate configuration and build the FastMCP app."""
        if self.transport not in ("stdio", "sse"):
            raise ValueError(
                f"Invalid transport '{self.transport}'. "
                "Must be 'stdio' or 'sse'."
            )

        # Config paths are fixed for the life of the process
        if self.taskrc is None:
            self.taskrc = resolve_taskrc_path()
        if self.timew_config is None:
            self.timew_config = resolve_timew_config_path()

        task = task_family(self.task_command, self.taskrc)
        timew = timew_family(self.timew_command)

        self.dispatcher = Dispatcher(
            specs=build_task_specs(task) + build_timew_specs(timew),
            runner=self.runner,
            timeout=self.command_timeout,
        )

        self._app = FastMCP(SERVER_NAME)

        self._register_tools()
        register_features(
            self._app,
            task=task,
            runner=self.runner,
            taskrc=self.taskrc,
            timew_config=self.timew_config,
            timeout=self.command_timeout,
        )

    @classmethod
    def from_config(cls, config: MCPConfig, runner: Optional[CommandRunner] = None) -> "MCPServer":
        """Create a server from loaded configuration."""
        return cls(
            host=config.host,
            port=config.port,
            transport=config.transport,
            task_command=config.task_command,
            timew_command=config.timew_command,
            command_timeout=config.command_timeout,
            runner=runner or SubprocessRunner(),
        )

    @property
    def app(self) -> FastMCP:
        return self._app

    def _check_port_available(self, host: str, port: int) -> bool:
        try:
            with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
                s.bind((host, port))
                return True
        except OSError:
            return False

    def _register_tools(self):
        """Register every catalogue entry with the FastMCP app."""
        for spec in self.dispatcher.specs:
            self._app.add_tool(CommandTool.from_spec(spec, self.dispatcher))
        logger.info("Registered %d tools with MCP server", len(self.dispatcher.specs))

    def start(self):
        """
        Start the MCP server with configured transport.

        Raises:
            RuntimeError: If port unavailable (SSE) or FastMCP fails to start
        """
        if self.transport == "stdio":
            # JSON-RPC over stdin/stdout; host/port ignored
            try:
                self._app.run()
            except Exception as e:
                raise RuntimeError(f"Failed to start MCP server with stdio transport: {e}") from e

        elif self.transport == "sse":
            if not self._check_port_available(self.host, self.port):
                raise RuntimeError(
                    f"Port {self.port} already in use. "
                    f"Choose a different port or stop the conflicting service."
                )

            try:
                self._app.run(transport="sse", host=self.host, port=self.port)
            except Exception as e:
                raise RuntimeError(
                    f"Failed to start MCP server on {self.host}:{self.port}: {e}"
                ) from e
