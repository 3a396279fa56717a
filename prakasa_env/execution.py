"""
Command execution for the environment engine.

Every probe and remediation issued by a component goes through the
CommandExecutor in this module. A command runs against one of three targets:

- LOCAL: the program is started directly on the host
- ELEVATED: the command is a PowerShell script run by the administrative shell
- SECONDARY_OS: the command is a bash script run as root inside the WSL distro

A run never raises for the expected failure modes. Timeouts, programs that
cannot be started and output that cannot be decoded are all reported as a
CommandOutcome carrying a SyntheticExitCode.

Classes:
    ExecutionTarget: Where a command runs.
    Shell: Quoting dialect used to render a Command.
    SyntheticExitCode: Exit codes produced by the executor itself.
    CommandOutcome: Exit code plus captured stdout and stderr.
    Command: Program, arguments and environment assignments.
    CommandExecutor: Runs commands with timeouts and captured output.

Functions:
    quote_bash: Quote one argument for bash.
    quote_powershell: Quote one argument for PowerShell.
    chain: Join commands and literal fragments with '&&'.
    normalize_output: Decode raw process output to canonical text.
"""

import codecs
import enum
import locale
import logging
import os
import re
import shlex
import subprocess
import sys
import threading
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple, Union

import psutil

from prakasa_env.config import DEFAULT_COMMAND_TIMEOUT, DEFAULT_WSL_LINUX_DISTRO


class ExecutionTarget(enum.Enum):
    LOCAL = "local"
    ELEVATED = "elevated"
    SECONDARY_OS = "secondary_os"


class Shell(enum.Enum):
    BASH = "bash"
    POWERSHELL = "powershell"


class SyntheticExitCode(enum.IntEnum):
    """Exit codes reported when the executor, not the child, ended the run."""
    ENCODING_FAILURE = 65
    TIMEOUT = 124
    SPAWN_FAILURE = 127


@dataclass(frozen=True)
class CommandOutcome:
    """Result of a single command invocation.

    Attributes:
        exit_code: Process exit code, or a SyntheticExitCode value.
        stdout: Captured standard output, empty for streamed runs.
        stderr: Captured standard error, empty for streamed runs.
    """
    exit_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0

    @property
    def timed_out(self) -> bool:
        return self.exit_code == SyntheticExitCode.TIMEOUT

    @property
    def output(self) -> str:
        """Stripped stdout and stderr joined by a newline, skipping empty parts."""
        return "\n".join(part for part in (self.stdout.strip(), self.stderr.strip()) if part)


_BASH_SAFE = re.compile(r"^[A-Za-z0-9_@%+=:,./~-]+$")
_POWERSHELL_SAFE = re.compile(r"^[A-Za-z0-9_@%+=:,./\\-]+$")
_ENV_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def quote_bash(arg: str) -> str:
    """Quote a single argument for bash.

    Arguments made only of safe characters are returned unchanged so that
    paths such as ``~/prakasa`` keep their tilde expansion. Everything else
    is wrapped in single quotes, with embedded single quotes closed, emitted
    inside double quotes, and reopened.

    Example:
        >>> quote_bash("it's")
        'it'"'"'s'
    """
    arg = str(arg)
    if arg == "":
        return "''"
    if _BASH_SAFE.match(arg):
        return arg
    return "'" + arg.replace("'", "'\"'\"'") + "'"


def quote_powershell(arg: str, force: bool = False) -> str:
    """Quote a single argument for PowerShell using single quotes, doubling embedded ones.

    With ``force`` the argument is quoted even when it is made of safe
    characters, as the right-hand side of an assignment must be.
    """
    arg = str(arg)
    if arg == "":
        return "''"
    if not force and _POWERSHELL_SAFE.match(arg):
        return arg
    return "'" + arg.replace("'", "''") + "'"


_QUOTERS = {
    Shell.BASH: quote_bash,
    Shell.POWERSHELL: quote_powershell,
}


@dataclass(frozen=True)
class Command:
    """A program invocation that is rendered for a shell only when it is run.

    Attributes:
        program: Program name or path.
        args: Arguments, each quoted independently when rendered.
        env: Environment assignments applied to this command only.
    """
    program: str
    args: Tuple[str, ...] = ()
    env: Tuple[Tuple[str, str], ...] = ()

    def __post_init__(self):
        for name, _ in self.env:
            if not _ENV_NAME.match(name):
                raise ValueError(f"Invalid environment variable name: {name!r}")

    @classmethod
    def of(cls, program: str, *args: str, env: Optional[Dict[str, Optional[str]]] = None) -> "Command":
        """Build a Command, dropping environment entries whose value is empty."""
        env_items = tuple((k, str(v)) for k, v in (env or {}).items() if v)
        return cls(program=program, args=tuple(str(a) for a in args), env=env_items)

    def argv(self) -> List[str]:
        return [self.program, *self.args]

    def render(self, shell: Shell = Shell.BASH) -> str:
        quote = _QUOTERS[shell]
        words = " ".join(quote(word) for word in self.argv())
        if not self.env:
            return words
        if shell is Shell.POWERSHELL:
            assignments = "".join(f"$env:{name}={quote_powershell(value, force=True)}; " for name, value in self.env)
            return f"{assignments}{words}"
        assignments = " ".join(f"{name}={quote_bash(value)}" for name, value in self.env)
        return f"{assignments} {words}"

    def __str__(self) -> str:
        return self.render(Shell.BASH)


CommandLike = Union[str, Command, Sequence[str]]


def chain(*parts: Union[Command, str], shell: Shell = Shell.BASH, operator: str = "&&") -> str:
    """Join commands with a shell operator.

    Command parts are rendered and quoted for ``shell``. String parts are
    fixed script fragments written by this package and are inserted as is.
    """
    rendered = [part.render(shell) if isinstance(part, Command) else part for part in parts if part]
    return f" {operator} ".join(rendered)


def _looks_like_utf16le(raw: bytes) -> bool:
    sample = raw[:512]
    odd = sample[1::2]
    even = sample[0::2]
    if not odd:
        return False
    return odd.count(0) > len(odd) / 2 and even.count(0) < len(even) / 2


def _console_encoding() -> str:
    return locale.getpreferredencoding(False) or "utf-8"


def normalize_output(raw: bytes, target: ExecutionTarget = ExecutionTarget.LOCAL) -> str:
    """Decode raw process output into NUL-free, BOM-free text with '\\n' line endings.

    ``wsl.exe`` and redirected PowerShell output are UTF-16LE, so UTF-16LE is
    tried first when the bytes look like it. UTF-8 is the canonical encoding.
    The ELEVATED target additionally falls back to the console code page.

    Raises:
        UnicodeDecodeError: If no applicable encoding can decode ``raw``.
    """
    if not raw:
        return ""

    text = None
    if raw.startswith(codecs.BOM_UTF16_LE) or _looks_like_utf16le(raw):
        try:
            text = raw.decode("utf-16-le")
        except UnicodeDecodeError:
            text = None

    if text is None:
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError:
            if target is not ExecutionTarget.ELEVATED:
                raise
            text = raw.decode(_console_encoding())

    text = text.replace("\ufeff", "").replace("\x00", "")
    return text.replace("\r\n", "\n").replace("\r", "\n")


class CommandExecutor:
    """
    Run commands locally, in the elevated shell or inside the secondary OS.

    Captured runs block until the process exits or the timeout elapses and
    return the full stdout and stderr. Streamed runs copy the output to the
    console as it arrives and return only the exit code.
    """

    TERMINATE_GRACE_SECONDS = 5
    STREAM_CHUNK_SIZE = 4096

    def __init__(self, logger: logging.Logger, distro: str = DEFAULT_WSL_LINUX_DISTRO, debug: bool = False):
        """
        Initialize the CommandExecutor.

        Args:
            logger: Logger used for command tracing.
            distro: WSL distribution used for SECONDARY_OS commands.
            debug: If True, captured output is logged at debug level.
        """
        self.logger = logger
        self.distro = distro
        self.debug = debug

    def build_argv(self, command: CommandLike, target: ExecutionTarget = ExecutionTarget.LOCAL) -> List[str]:
        """Translate a command into the argv that is actually spawned for ``target``."""
        if target is ExecutionTarget.LOCAL:
            if isinstance(command, Command):
                return command.argv()
            if isinstance(command, str):
                return shlex.split(command)
            return list(command)

        if target is ExecutionTarget.ELEVATED:
            script = self._script(command, Shell.POWERSHELL)
            return ["powershell.exe", "-NoProfile", "-NonInteractive",
                    "-ExecutionPolicy", "Bypass", "-Command", script]

        script = self._script(command, Shell.BASH)
        return ["wsl", "-d", self.distro, "-u", "root", "bash", "-c", script]

    @staticmethod
    def _script(command: CommandLike, shell: Shell) -> str:
        if isinstance(command, Command):
            return command.render(shell)
        if isinstance(command, str):
            return command
        quote = _QUOTERS[shell]
        return " ".join(quote(word) for word in command)

    def describe(self, command: CommandLike, target: ExecutionTarget = ExecutionTarget.LOCAL) -> str:
        """Human-readable form of the spawned command line."""
        return subprocess.list2cmdline(self.build_argv(command, target))

    def run(self,
            command: CommandLike,
            timeout: Optional[float] = DEFAULT_COMMAND_TIMEOUT,
            target: ExecutionTarget = ExecutionTarget.LOCAL,
            streamed: bool = False) -> CommandOutcome:
        """
        Execute a command and wait for it to finish.

        Args:
            command: Command object, shell script string, or argv sequence.
            timeout: Seconds before the process tree is terminated. None waits forever.
            target: Where the command runs.
            streamed: If True, output goes straight to the console and is not captured.

        Returns:
            CommandOutcome with the exit code and the decoded output.
        """
        try:
            argv = self.build_argv(command, target)
        except ValueError as e:
            self.logger.debug(f"Unable to build command {command!r}: {e}")
            return CommandOutcome(SyntheticExitCode.SPAWN_FAILURE, "", f"Invalid command: {e}")

        display = subprocess.list2cmdline(argv)
        self.logger.debug(f"Executing [{target.value}] command: {display}")

        try:
            process = subprocess.Popen(
                argv,
                stdin=None if streamed else subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except OSError as e:
            self.logger.debug(f"Failed to start {argv[0]}: {e}")
            return CommandOutcome(SyntheticExitCode.SPAWN_FAILURE, "", f"Failed to start {argv[0]}: {e}")

        try:
            if streamed:
                outcome = self._wait_streamed(process, timeout)
            else:
                outcome = self._wait_captured(process, timeout, target)
        finally:
            if process.poll() is None:
                self._terminate(process)

        self.logger.debug(f"Command exited with code {outcome.exit_code}: {display}")
        if self.debug and outcome.output:
            self.logger.debug(f"Command output:\n{outcome.output}")
        else:
            self.logger.ridiculous(f"Command output:\n{outcome.output}")
        return outcome

    def _wait_captured(self, process: subprocess.Popen, timeout: Optional[float],
                       target: ExecutionTarget) -> CommandOutcome:
        try:
            raw_stdout, raw_stderr = process.communicate(timeout=timeout)
        except subprocess.TimeoutExpired:
            self.logger.warning(f"Command timed out after {timeout} seconds, terminating it")
            self._terminate(process)
            try:
                raw_stdout, raw_stderr = process.communicate(timeout=self.TERMINATE_GRACE_SECONDS)
            except subprocess.TimeoutExpired:
                raw_stdout, raw_stderr = b"", b""
            try:
                partial = normalize_output(raw_stdout or b"", target)
            except UnicodeDecodeError:
                partial = ""
            return CommandOutcome(SyntheticExitCode.TIMEOUT, partial,
                                  f"Command timed out after {timeout} seconds")

        try:
            stdout = normalize_output(raw_stdout, target)
            stderr = normalize_output(raw_stderr, target)
        except UnicodeDecodeError as e:
            self.logger.warning(f"Unable to decode command output: {e}")
            return CommandOutcome(SyntheticExitCode.ENCODING_FAILURE, "", f"Unable to decode command output: {e}")

        return CommandOutcome(process.returncode, stdout, stderr)

    def _wait_streamed(self, process: subprocess.Popen, timeout: Optional[float]) -> CommandOutcome:
        drains = [
            threading.Thread(target=self._drain, args=(process.stdout, sys.stdout), daemon=True),
            threading.Thread(target=self._drain, args=(process.stderr, sys.stderr), daemon=True),
        ]
        for drain in drains:
            drain.start()

        try:
            return_code = process.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            self.logger.warning(f"Command timed out after {timeout} seconds, terminating it")
            self._terminate(process)
            return_code = SyntheticExitCode.TIMEOUT
        finally:
            for drain in drains:
                drain.join(timeout=self.TERMINATE_GRACE_SECONDS)

        return CommandOutcome(int(return_code))

    def _drain(self, pipe, console) -> None:
        """Copy a child pipe to the console until EOF."""
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        fd = pipe.fileno()
        while True:
            chunk = os.read(fd, self.STREAM_CHUNK_SIZE)
            if not chunk:
                break
            console.write(decoder.decode(chunk).replace("\x00", ""))
            console.flush()
        tail = decoder.decode(b"", final=True)
        if tail:
            console.write(tail)
            console.flush()

    def _terminate(self, process: subprocess.Popen) -> None:
        """Terminate the process and its descendants, killing whatever outlives the grace period."""
        try:
            parent = psutil.Process(process.pid)
            procs = parent.children(recursive=True) + [parent]
        except psutil.NoSuchProcess:
            procs = []

        for proc in procs:
            try:
                proc.terminate()
            except (psutil.NoSuchProcess, psutil.AccessDenied):
                continue

        _, alive = psutil.wait_procs(procs, timeout=self.TERMINATE_GRACE_SECONDS)
        for proc in alive:
            try:
                proc.kill()
            except (psutil.NoSuchProcess, psutil.AccessDenied):
                continue

        try:
            process.wait(timeout=self.TERMINATE_GRACE_SECONDS)
        except subprocess.TimeoutExpired:
            process.kill()
