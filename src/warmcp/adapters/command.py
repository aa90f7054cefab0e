"""Command model for Taskwarrior and Timewarrior invocations."""

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple


def split_tokens(text: str) -> List[str]:
    """Split caller text on whitespace.

    Quotes are not interpreted: ``description:'new text'`` becomes two
    tokens. Callers that need an embedded space keep the text as one token
    instead of passing it through here.
    """
    return text.split()


@dataclass(frozen=True)
class CommandFamily:
    """
    Fixed settings shared by every invocation of one external tool.

    Attributes:
        program: Binary name or path (e.g. "task")
        overrides: Tokens placed before anything else on every command line
        environment: Callable returning variables added to the inherited
            environment (empty mapping leaves it unmodified)
    """

    program: str
    overrides: Tuple[str, ...] = ()
    environment: Callable[[], Dict[str, str]] = dict

    def command(
        self,
        operation: str = "",
        filters: Optional[List[str]] = None,
        modifications: Optional[List[str]] = None,
        attachment: Optional[str] = None,
    ) -> "Command":
        """Build a command for this family."""
        return Command(
            family=self,
            filters=list(filters or []),
            operation=operation,
            modifications=list(modifications or []),
            attachment=attachment,
        )


@dataclass
class Command:
    """
    A single external invocation as ordered argument groups.

    The final argument vector is always
    overrides + filters + operation + modifications. Both external tools
    read their command line positionally, so this order must not change.

    Attributes:
        family: Tool family supplying program, overrides and environment
        filters: Selector tokens identifying the records to act on
        operation: Subcommand keyword; empty for raw invocations that
            carry no keyword at all
        modifications: Payload tokens of the operation
        attachment: Bulk payload written to a transient file at run time;
            the file path is appended as the last modification
    """

    family: CommandFamily
    filters: List[str] = field(default_factory=list)
    operation: str = ""
    modifications: List[str] = field(default_factory=list)
    attachment: Optional[str] = None

    @property
    def overrides(self) -> List[str]:
        return list(self.family.overrides)

    def argv(self, attachment_path: Optional[str] = None) -> List[str]:
        """Assemble the ordered argument vector (program name excluded)."""
        args = self.overrides + self.filters
        if self.operation:
            args.append(self.operation)
        args.extend(self.modifications)
        if attachment_path is not None:
            args.append(attachment_path)
        return args

    @classmethod
    def raw(cls, family: CommandFamily, command_line: str) -> "Command":
        """
        Build a pass-through command from one whitespace-separated string.

        The first token is the operation keyword and the rest are
        modifications. An empty string yields an overrides-only command,
        which the external tool rejects on its own.
        """
        tokens = split_tokens(command_line)
        if not tokens:
            return cls(family=family)
        return cls(family=family, operation=tokens[0], modifications=tokens[1:])
