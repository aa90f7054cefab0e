"""
MCP (Model Context Protocol) server for Taskwarrior and Timewarrior.

Exposes the ``task`` and ``timew`` subcommands as MCP tools so an AI agent
can manage tasks and tracked time through the real command-line tools.

Architecture:
- server.py: FastMCP server initialization and tool registration
- config.py: Configuration, tool config-path resolution, PID file management
- tools/: Dispatch table and the two tool catalogues
- adapters/: Command model and process runner
- features.py: Resources and prompts
- cli.py: ``warmcp`` command line
"""

__version__ = "1.0.0"

__all__ = ["MCPServer", "MCPConfig", "PIDFileManager"]

from .config import MCPConfig, PIDFileManager
from .server import MCPServer
