"""
MCP server configuration and PID file management.

Handles server configuration file loading (warmcp/config.yaml under the XDG
config home), resolution of the Taskwarrior and Timewarrior config paths,
and PID file operations for server lifecycle management.
"""

import os
import signal
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Optional

import yaml


def _config_home() -> Path:
    """Return $XDG_CONFIG_HOME, falling back to ~/.config."""
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg)
    return Path.home() / ".config"


def resolve_taskrc_path() -> Path:
    """
    Locate the taskrc handed to every ``task`` invocation.

    Priority: $TASKRC, then $XDG_CONFIG_HOME/task/taskrc, then
    ~/.config/task/taskrc.
    """
    explicit = os.environ.get("TASKRC")
    if explicit:
        return Path(explicit)
    return _config_home() / "task" / "taskrc"


def resolve_timew_config_path() -> Path:
    """
    Locate timewarrior.cfg.

    Priority: $TIMEW_CONFIG, then $XDG_CONFIG_HOME/timewarrior/timewarrior.cfg,
    then ~/.config/timewarrior/timewarrior.cfg.
    """
    explicit = os.environ.get("TIMEW_CONFIG")
    if explicit:
        return Path(explicit)
    return _config_home() / "timewarrior" / "timewarrior.cfg"


def default_config_file() -> Path:
    """Return $WARMCP_CONFIG or the XDG location of config.yaml."""
    explicit = os.environ.get("WARMCP_CONFIG")
    if explicit:
        return Path(explicit)
    return _config_home() / "warmcp" / "config.yaml"


@dataclass
class MCPConfig:
    """
    MCP server configuration loaded from warmcp/config.yaml.

    Attributes:
        host: Server bind address (default: "127.0.0.1")
        port: Server port for SSE transport (default: 8000)
        transport: Transport mode ("stdio" or "sse", default: "stdio")
        pid_file: Path to PID file (default: next to the config file)
        task_command: Taskwarrior binary (default: "task")
        timew_command: Timewarrior binary (default: "timew")
        command_timeout: Seconds before an external command is terminated
            (default: None, wait indefinitely)
    """

    host: str = "127.0.0.1"
    port: int = 8000
    transport: Literal["stdio", "sse"] = "stdio"
    pid_file: Optional[Path] = None
    task_command: str = "task"
    timew_command: str = "timew"
    command_timeout: Optional[float] = None

    @classmethod
    def load(cls, config_file: Optional[Path] = None) -> "MCPConfig":
        """
        Load MCP configuration from YAML.

        Falls back to defaults if file doesn't exist. Environment variables
        override config file values.

        Args:
            config_file: Path to config.yaml (default: default_config_file())

        Returns:
            MCPConfig instance with loaded/default values

        Raises:
            ValueError: If config file or an environment value has invalid format
        """
        config_file = config_file or default_config_file()
        config_dict = {}

        if config_file.exists():
            try:
                with open(config_file) as f:
                    config_dict = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid {config_file.name}: {e}") from e
            if not isinstance(config_dict, dict):
                raise ValueError(f"Invalid {config_file.name}: expected a mapping")

        # Environment variables override config file
        if "MCP_SERVER_HOST" in os.environ:
            config_dict["host"] = os.environ["MCP_SERVER_HOST"]

        if "MCP_SERVER_PORT" in os.environ:
            try:
                config_dict["port"] = int(os.environ["MCP_SERVER_PORT"])
            except ValueError:
                raise ValueError(
                    f"Invalid MCP_SERVER_PORT: {os.environ['MCP_SERVER_PORT']}. "
                    "Must be an integer."
                )

        if "MCP_SERVER_TRANSPORT" in os.environ:
            config_dict["transport"] = os.environ["MCP_SERVER_TRANSPORT"]

        if "WARMCP_TASK_COMMAND" in os.environ:
            config_dict["task_command"] = os.environ["WARMCP_TASK_COMMAND"]

        if "WARMCP_TIMEW_COMMAND" in os.environ:
            config_dict["timew_command"] = os.environ["WARMCP_TIMEW_COMMAND"]

        if "WARMCP_COMMAND_TIMEOUT" in os.environ:
            try:
                config_dict["command_timeout"] = float(os.environ["WARMCP_COMMAND_TIMEOUT"])
            except ValueError:
                raise ValueError(
                    f"Invalid WARMCP_COMMAND_TIMEOUT: {os.environ['WARMCP_COMMAND_TIMEOUT']}. "
                    "Must be a number of seconds."
                )

        # Set default PID file path if not specified
        if "pid_file" not in config_dict:
            config_dict["pid_file"] = config_file.parent / "warmcp.pid"
        else:
            config_dict["pid_file"] = Path(config_dict["pid_file"])

        return cls(**{k: v for k, v in config_dict.items() if k in cls.__annotations__})

    def save(self, config_file: Optional[Path] = None):
        """
        Save MCP configuration to YAML.

        Args:
            config_file: Target path (default: default_config_file())
        """
        config_file = config_file or default_config_file()
        config_file.parent.mkdir(parents=True, exist_ok=True)

        config_dict = {
            "host": self.host,
            "port": self.port,
            "transport": self.transport,
            "task_command": self.task_command,
            "timew_command": self.timew_command,
        }
        if self.command_timeout is not None:
            config_dict["command_timeout"] = self.command_timeout

        with open(config_file, "w") as f:
            yaml.dump(config_dict, f, default_flow_style=False, sort_keys=False)


def process_alive(pid: int) -> bool:
    """Probe ``pid`` with signal 0; a process owned by another user counts as alive."""
    try:
        os.kill(pid, 0)
    except PermissionError:
        return True
    except OSError:
        return False
    return True


@dataclass(frozen=True)
class ServerStatus:
    """What the PID file says about the server."""

    pid_file: Path
    pid: Optional[int] = None

    @property
    def running(self) -> bool:
        return self.pid is not None


@dataclass
class PIDFileManager:
    """
    PID file guarding a single warmcp server per config directory.

    ``start`` writes it, ``status`` reads it and ``stop`` signals the
    recorded process. A file naming a dead process is stale and is replaced
    or removed on sight.
    """

    pid_file: Path

    def read(self) -> Optional[int]:
        """Recorded PID, or None when the file is missing or garbled."""
        try:
            pid = int(self.pid_file.read_text().strip())
        except (OSError, ValueError):
            return None
        return pid if pid > 0 else None

    def status(self) -> ServerStatus:
        pid = self.read()
        if pid is not None and process_alive(pid):
            return ServerStatus(self.pid_file, pid)
        return ServerStatus(self.pid_file)

    def write(self) -> None:
        """
        Record the current process.

        Raises:
            RuntimeError: If another live server owns the PID file
        """
        current = self.status()
        if current.running:
            raise RuntimeError(
                f"MCP server already running (PID: {current.pid}). "
                "Stop it first with: warmcp stop"
            )
        self.pid_file.parent.mkdir(parents=True, exist_ok=True)
        self.pid_file.write_text(str(os.getpid()))

    def remove(self) -> None:
        self.pid_file.unlink(missing_ok=True)

    def stop_server(self, timeout: float = 10) -> bool:
        """
        Send SIGTERM to the recorded server and wait for it to exit.

        Returns:
            True once the process is gone, False if it outlived ``timeout``

        Raises:
            RuntimeError: If no live server is recorded or it cannot be signalled
        """
        pid = self.read()
        if pid is None:
            raise RuntimeError(f"No MCP server running (no valid PID file at {self.pid_file})")

        if not process_alive(pid):
            self.remove()
            raise RuntimeError(f"MCP server (PID: {pid}) is not running; removed stale PID file")

        try:
            os.kill(pid, signal.SIGTERM)
        except ProcessLookupError:
            self.remove()
            return True
        except PermissionError as e:
            raise RuntimeError(f"Permission denied signalling server (PID: {pid})") from e

        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if not process_alive(pid):
                self.remove()
                return True
            time.sleep(0.2)
        return False
