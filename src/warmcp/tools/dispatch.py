"""Operation dispatch table shared by the task and timew tool families.

Each tool is a ``ToolSpec``: a name, a description, the free-text fields it
accepts, whether the calling agent should confirm before running it, and a
``build`` callable that turns resolved arguments into a ``Command``. The
``Dispatcher`` resolves the untyped MCP payload once, builds the command and
runs it through the injected ``CommandRunner``.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from warmcp.adapters import (
    Command,
    CommandRunner,
    InvocationResult,
    SubprocessRunner,
    execute_command,
)

logger = logging.getLogger(__name__)


class DispatchError(Exception):
    """Base exception for requests the dispatcher cannot interpret."""
    pass


class UnknownToolError(DispatchError):
    """Raised when a tool name is not in the catalogue."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown tool: {name}")


class InvalidPayloadError(DispatchError):
    """Raised when tool arguments are not a mapping."""

    def __init__(self, name: str, payload: Any):
        super().__init__(
            f"Arguments for {name} must be an object, got {type(payload).__name__}"
        )


class Confirmation(str, Enum):
    """Advisory confirmation policy surfaced to the calling agent."""
    REQUIRED = "required"
    NONE = "none"
    CONDITIONAL = "conditional"

    @property
    def notice(self) -> str:
        return _CONFIRMATION_NOTICES[self]


_CONFIRMATION_NOTICES = {
    Confirmation.REQUIRED: "PROMPT FOR CONFIRMATION.",
    Confirmation.NONE: "NO CONFIRMATION NEEDED.",
    Confirmation.CONDITIONAL: "PROMPT FOR CONFIRMATION for modifications.",
}


@dataclass(frozen=True)
class ToolField:
    """A named free-text input of a tool."""

    name: str
    description: str
    required: bool = False


class ToolArguments:
    """Tool input resolved against a spec: every declared field is a str."""

    def __init__(self, values: Dict[str, str]):
        self._values = values

    @classmethod
    def resolve(cls, spec: "ToolSpec", payload: Any) -> "ToolArguments":
        """
        Extract the tool's declared fields from an untyped payload.

        Missing fields and non-string values become "". Required fields
        are not enforced here; the external tool reports what it rejects.

        Raises:
            InvalidPayloadError: If payload is not a mapping
        """
        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise InvalidPayloadError(spec.name, payload)

        values = {}
        for tool_field in spec.fields:
            value = payload.get(tool_field.name)
            values[tool_field.name] = value if isinstance(value, str) else ""
        return cls(values)

    def __getitem__(self, name: str) -> str:
        return self._values[name]

    def as_dict(self) -> Dict[str, str]:
        return dict(self._values)


@dataclass(frozen=True)
class ToolSpec:
    """
    Catalogue entry for one MCP tool.

    Attributes:
        name: Tool name exposed over MCP (e.g. "task_add")
        summary: Human-readable description without the confirmation notice
        confirmation: Whether the agent should confirm before calling
        build: Callable producing the Command from resolved arguments
        fields: Declared inputs, all free text
    """

    name: str
    summary: str
    confirmation: Confirmation
    build: Callable[[ToolArguments], Command]
    fields: Tuple[ToolField, ...] = ()

    @property
    def description(self) -> str:
        return f"{self.summary} {self.confirmation.notice}"

    @property
    def read_only(self) -> bool:
        return self.confirmation is Confirmation.NONE

    def input_schema(self) -> Dict[str, Any]:
        """Render the fields as a JSON Schema object."""
        schema: Dict[str, Any] = {
            "type": "object",
            "properties": {
                f.name: {"type": "string", "description": f.description}
                for f in self.fields
            },
        }
        required = [f.name for f in self.fields if f.required]
        if required:
            schema["required"] = required
        return schema


@dataclass
class Dispatcher:
    """
    Routes tool calls to their spec and runs the resulting command.

    Attributes:
        specs: Catalogue entries, names must be unique
        runner: Process runner used for every invocation
        timeout: Optional deadline in seconds for each invocation
    """

    specs: Iterable[ToolSpec]
    runner: CommandRunner = field(default_factory=SubprocessRunner)
    timeout: Optional[float] = None
    _by_name: Dict[str, ToolSpec] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self):
        self.specs = list(self.specs)
        for spec in self.specs:
            if spec.name in self._by_name:
                raise ValueError(f"Duplicate tool name: {spec.name}")
            self._by_name[spec.name] = spec

    def get(self, name: str) -> ToolSpec:
        try:
            return self._by_name[name]
        except KeyError:
            raise UnknownToolError(name) from None

    def names(self) -> List[str]:
        return [spec.name for spec in self.specs]

    def build(self, name: str, payload: Any) -> Command:
        """Resolve the payload and build the command without running it."""
        spec = self.get(name)
        return spec.build(ToolArguments.resolve(spec, payload))

    def call(self, name: str, payload: Any) -> InvocationResult:
        """
        Execute one tool call.

        Returns:
            InvocationResult; external failures are reported here, never raised

        Raises:
            UnknownToolError: If name is not registered
            InvalidPayloadError: If payload is not a mapping
        """
        command = self.build(name, payload)
        return execute_command(self.runner, command, timeout=self.timeout)
