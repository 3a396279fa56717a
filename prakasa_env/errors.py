"""
Exceptions raised by the prakasa-env command line.

Component probes and remediations never raise; they report ``Failed``
results. The classes here cover what happens around the engine: reading
and writing configuration, starting the workload, and refusing to launch
when the machine is not in a usable state.

Every exception wraps an :class:`EnvError` so the message printed to the
user always has the same shape::

    [E302] Distribution 'Ubuntu-24.04' is not available
      Details: Requirement: secondary_os; Distribution: Ubuntu-24.04
      Suggestion: Run 'prakasa-env install' first
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from enum import Enum


class ErrorCode(Enum):
    # 1xx configuration
    CONFIG_UNKNOWN_KEY = "E101"
    CONFIG_INVALID_VALUE = "E102"
    CONFIG_PARSE_ERROR = "E103"
    CONFIG_WRITE_FAILED = "E104"

    # 2xx workload commands
    COMMAND_FAILED = "E201"
    COMMAND_SPAWN_FAILED = "E203"

    # 3xx launch preconditions
    ELEVATION_REQUIRED = "E301"
    SECONDARY_OS_UNAVAILABLE = "E302"

    INTERNAL_ERROR = "E901"


def _clip(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[:limit] + "..."


def _describe(*labelled) -> str:
    """Join ``(label, value)`` pairs whose value is set into one details line."""
    return "; ".join(f"{label}: {value}" for label, value in labelled
                     if value is not None and value != "")


@dataclass
class EnvError:
    """What went wrong, where, and what the user can do about it."""
    code: ErrorCode
    message: str
    details: str = ""
    suggestion: str = ""
    context: dict = field(default_factory=dict)

    def __str__(self) -> str:
        rendered = f"[{self.code.value}] {self.message}"
        for label, text in (("Details", self.details), ("Suggestion", self.suggestion)):
            if text:
                rendered += f"\n  {label}: {text}"
        return rendered


class PrakasaEnvException(Exception):
    """
    Root of the prakasa-env exception tree.

    Subclasses fill in ``suggestions`` with a hint per error code and
    ``fallback_suggestion`` for codes they do not list.
    """

    suggestions: Dict[ErrorCode, str] = {}
    fallback_suggestion = ""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.INTERNAL_ERROR,
                 details: str = "", suggestion: str = "", **context):
        self.error = EnvError(code, message, details, suggestion, context)
        super().__init__(str(self.error))

    @classmethod
    def suggestion_for(cls, code: ErrorCode) -> str:
        return cls.suggestions.get(code, cls.fallback_suggestion)

    @property
    def code(self) -> ErrorCode:
        return self.error.code

    @property
    def suggestion(self) -> str:
        return self.error.suggestion

    @property
    def context(self) -> dict:
        return self.error.context


class ConfigurationError(PrakasaEnvException):
    """The configuration file or a key in it cannot be used."""

    suggestions = {
        ErrorCode.CONFIG_UNKNOWN_KEY: "Run 'prakasa-env config list' to see the supported keys",
        ErrorCode.CONFIG_INVALID_VALUE: "Check the value and set it again",
        ErrorCode.CONFIG_PARSE_ERROR: "Fix the YAML syntax or run 'prakasa-env config reset'",
        ErrorCode.CONFIG_WRITE_FAILED: "Check that the configuration directory is writable",
    }
    fallback_suggestion = "Check the configuration and try again"

    def __init__(self, message: str, key: Optional[str] = None, path: Optional[str] = None,
                 actual: Any = None, suggestion: Optional[str] = None,
                 code: ErrorCode = ErrorCode.CONFIG_INVALID_VALUE):
        super().__init__(
            message,
            code=code,
            details=_describe(("Key", key), ("File", path), ("Actual", actual)),
            suggestion=suggestion or self.suggestion_for(code),
            key=key, path=path, actual=actual,
        )


class CommandExecutionError(PrakasaEnvException):
    """A workload command could not be started or exited non-zero."""

    suggestions = {
        ErrorCode.COMMAND_FAILED: "Look at the workload output above",
        ErrorCode.COMMAND_SPAWN_FAILED: "Make sure the program is installed and on PATH",
    }
    fallback_suggestion = "Check the logs for details"

    # Shell conventions that say more than the error code does
    exit_code_suggestions = {
        127: "Command not found, run 'prakasa-env install' to set up the workload",
        137: "Process was killed (OOM?), check the memory given to the secondary OS",
    }

    def __init__(self, message: str, command: Optional[str] = None,
                 exit_code: Optional[int] = None, stderr: Optional[str] = None,
                 suggestion: Optional[str] = None,
                 code: ErrorCode = ErrorCode.COMMAND_FAILED):
        details = _describe(
            ("Command", _clip(command, 200) if command else None),
            ("Exit code", exit_code),
            ("Error output", _clip(stderr, 500) if stderr else None),
        )
        if not suggestion:
            suggestion = self.exit_code_suggestions.get(exit_code) or self.suggestion_for(code)
        super().__init__(
            message,
            code=code,
            details=details,
            suggestion=suggestion,
            command=command, exit_code=exit_code, stderr=stderr,
        )


class EnvironmentRequirementError(PrakasaEnvException):
    """The machine is not in a state where the requested command can run."""

    suggestions = {
        ErrorCode.ELEVATION_REQUIRED: "Re-run the command from an Administrator terminal",
        ErrorCode.SECONDARY_OS_UNAVAILABLE: "Run 'prakasa-env install' first",
    }
    fallback_suggestion = "Check the environment with 'prakasa-env check'"

    def __init__(self, message: str, requirement: Optional[str] = None,
                 distro: Optional[str] = None, suggestion: Optional[str] = None,
                 code: ErrorCode = ErrorCode.ELEVATION_REQUIRED):
        super().__init__(
            message,
            code=code,
            details=_describe(("Requirement", requirement), ("Distribution", distro)),
            suggestion=suggestion or self.suggestion_for(code),
            requirement=requirement, distro=distro,
        )
