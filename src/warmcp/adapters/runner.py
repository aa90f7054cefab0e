"""Process runner for external command invocation."""

import logging
import os
import subprocess
import tempfile
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, List, Mapping, Optional

from . import InvocationResult
from .command import Command

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunOutcome:
    """
    Raw outcome of running a program.

    Attributes:
        output: Merged stdout/stderr text, surrounding whitespace trimmed
        error: None on exit status 0, otherwise a description of the
            failure (exit status, spawn error or expired deadline)
    """

    output: str
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class CommandRunner(ABC):
    """Executes one external program and reports what happened."""

    @abstractmethod
    def run(
        self,
        program: str,
        args: List[str],
        env: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> RunOutcome:
        """
        Run ``program`` with ``args`` and wait for it to finish.

        Args:
            program: Binary name or path
            args: Full ordered argument vector
            env: Variables added on top of the inherited environment
            timeout: Seconds before the process is terminated (None waits
                indefinitely)

        Returns:
            RunOutcome with combined output and failure description
        """


class SubprocessRunner(CommandRunner):
    """Runs programs with :func:`subprocess.run`, stderr merged into stdout."""

    def run(
        self,
        program: str,
        args: List[str],
        env: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> RunOutcome:
        full_env = dict(os.environ)
        if env:
            full_env.update(env)

        try:
            completed = subprocess.run(
                [program, *args],
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                stdin=subprocess.DEVNULL,
                env=full_env,
                encoding="utf-8",
                errors="replace",
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as e:
            partial = e.output or ""
            if isinstance(partial, bytes):
                partial = partial.decode("utf-8", errors="replace")
            return RunOutcome(
                output=partial.strip(),
                error=f"deadline of {timeout}s exceeded, process terminated",
            )
        except OSError as e:
            return RunOutcome(output="", error=str(e))

        output = (completed.stdout or "").strip()
        if completed.returncode != 0:
            return RunOutcome(output=output, error=f"exit status {completed.returncode}")
        return RunOutcome(output=output)


def run_command(
    runner: CommandRunner,
    program: str,
    args: List[str],
    env: Optional[Mapping[str, str]] = None,
    timeout: Optional[float] = None,
) -> InvocationResult:
    """
    Run a program and classify the outcome.

    Failures keep the program's own output next to the failure
    description, since both tools print the actionable diagnostic
    ("No matching tasks") rather than encoding it in the exit status.
    """
    logger.debug("Running %s %s", program, args)
    outcome = runner.run(program, args, env=env, timeout=timeout)
    if outcome.ok:
        return InvocationResult.success_result(outcome.output)

    logger.info("%s failed: %s", program, outcome.error)
    return InvocationResult.error_result(
        f"{program} error: {outcome.error}\nOutput: {outcome.output}"
    )


@contextmanager
def transient_file(content: str, prefix: str = "warmcp_", suffix: str = ".json") -> Iterator[str]:
    """
    Write ``content`` to a temporary file and yield its path.

    The file is removed when the block exits, however it exits.
    """
    fd, path = tempfile.mkstemp(prefix=prefix, suffix=suffix)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        yield path
    finally:
        try:
            os.unlink(path)
        except FileNotFoundError:
            pass


def execute_command(
    runner: CommandRunner,
    command: Command,
    timeout: Optional[float] = None,
) -> InvocationResult:
    """Run a Command through ``runner``, materialising any bulk attachment."""
    family = command.family
    env = family.environment()

    if command.attachment is None:
        return run_command(runner, family.program, command.argv(), env=env, timeout=timeout)

    with transient_file(command.attachment, prefix=f"{os.path.basename(family.program)}_import_") as path:
        return run_command(runner, family.program, command.argv(path), env=env, timeout=timeout)
