"""
Data model shared by the environment components and the orchestrator.

Public exports:
    ComponentKind: Tag identifying one prerequisite
    InstallationStatus: Outcome of a single check or install
    FailureCode: Diagnostic codes carried by Failed results
    ComponentResult: Immutable per-component outcome
    EnvironmentResult: Aggregate of one orchestrator run
    EnvironmentRequirements: Preconditions a component or command declares
    ExecutionContext: Per-run state shared by every component
"""

import enum
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from prakasa_env.config_store import ConfigStore


class ComponentKind(enum.Enum):
    """Prerequisites in the order the orchestrator visits them."""
    OS_VERSION = "os_version"
    NVIDIA_GPU = "nvidia_gpu"
    NVIDIA_DRIVER = "nvidia_driver"
    BIOS_VIRTUALIZATION = "bios_virtualization"
    SECONDARY_OS_RUNTIME = "secondary_os_runtime"
    PIP_UPGRADE = "pip_upgrade"
    PROJECT = "project"

    @property
    def display_name(self) -> str:
        return COMPONENT_DISPLAY_NAMES[self]


COMPONENT_DISPLAY_NAMES = {
    ComponentKind.OS_VERSION: "OS Version",
    ComponentKind.NVIDIA_GPU: "NVIDIA GPU Hardware",
    ComponentKind.NVIDIA_DRIVER: "NVIDIA Driver",
    ComponentKind.BIOS_VIRTUALIZATION: "BIOS Virtualization",
    ComponentKind.SECONDARY_OS_RUNTIME: "WSL2 Runtime",
    ComponentKind.PIP_UPGRADE: "pip Upgrade",
    ComponentKind.PROJECT: "Prakasa Project",
}


class InstallationStatus(enum.Enum):
    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"
    IN_PROGRESS = "in_progress"
    WARNING = "warning"

    @property
    def is_satisfied(self) -> bool:
        """Success and Skipped both mean the prerequisite is in place."""
        return self in (InstallationStatus.SUCCESS, InstallationStatus.SKIPPED)


class FailureCode(enum.IntEnum):
    GPU_NOT_FOUND = 7
    GPU_BELOW_MINIMUM = 8
    OS_UNSUPPORTED = 10
    DRIVER_MISSING = 20
    VIRTUALIZATION_DISABLED = 21
    SECONDARY_OS_MISSING = 22
    SECONDARY_OS_UNAVAILABLE = 23
    PIP_MISSING = 24
    PROJECT_MISSING = 25
    ELEVATION_REQUIRED = 26
    EXECUTION_ERROR = 99


@dataclass(frozen=True)
class ComponentResult:
    """
    Outcome of one component's check or install.

    Attributes:
        kind: Component that produced the result.
        status: Outcome status.
        message: Human-readable explanation.
        error_code: Diagnostic code, present exactly when status is FAILED.
        reboot_required: The component changed state that only takes effect after a restart.
    """
    kind: ComponentKind
    status: InstallationStatus
    message: str = ""
    error_code: Optional[int] = None
    reboot_required: bool = False

    def __post_init__(self):
        if (self.status is InstallationStatus.FAILED) != (self.error_code is not None):
            raise ValueError(
                f"{self.kind.value}: error_code must be set if and only if status is FAILED "
                f"(status={self.status.value}, error_code={self.error_code})"
            )

    @classmethod
    def success(cls, kind: ComponentKind, message: str = "", reboot_required: bool = False) -> "ComponentResult":
        return cls(kind, InstallationStatus.SUCCESS, message, reboot_required=reboot_required)

    @classmethod
    def skipped(cls, kind: ComponentKind, message: str = "") -> "ComponentResult":
        return cls(kind, InstallationStatus.SKIPPED, message)

    @classmethod
    def warning(cls, kind: ComponentKind, message: str = "") -> "ComponentResult":
        return cls(kind, InstallationStatus.WARNING, message)

    @classmethod
    def in_progress(cls, kind: ComponentKind, message: str = "") -> "ComponentResult":
        return cls(kind, InstallationStatus.IN_PROGRESS, message)

    @classmethod
    def failed(cls, kind: ComponentKind, message: str, error_code: int,
               reboot_required: bool = False) -> "ComponentResult":
        return cls(kind, InstallationStatus.FAILED, message, int(error_code), reboot_required)

    @property
    def is_satisfied(self) -> bool:
        return self.status.is_satisfied

    def __str__(self) -> str:
        text = f"{self.kind.display_name}: {self.status.value}"
        if self.error_code is not None:
            text += f" (code {self.error_code})"
        if self.message:
            text += f" - {self.message}"
        return text


@dataclass
class EnvironmentResult:
    """
    Aggregate over one orchestrator run.

    Results are appended in component order and never replaced. Once any
    appended result requires a reboot, reboot_required stays True.
    """
    component_results: List[ComponentResult] = field(default_factory=list)
    reboot_required: bool = False
    overall_message: str = ""

    def append(self, result: ComponentResult) -> None:
        self.component_results.append(result)
        if result.reboot_required:
            self.reboot_required = True

    @property
    def has_failures(self) -> bool:
        return any(r.status is InstallationStatus.FAILED for r in self.component_results)

    @property
    def has_warnings(self) -> bool:
        return any(r.status is InstallationStatus.WARNING for r in self.component_results)

    def get_result(self, kind: ComponentKind) -> Optional[ComponentResult]:
        for result in self.component_results:
            if result.kind is kind:
                return result
        return None

    def to_dict(self) -> dict:
        return {
            "component_results": [
                {
                    "component": r.kind.value,
                    "status": r.status.value,
                    "message": r.message,
                    "error_code": r.error_code,
                    "reboot_required": r.reboot_required,
                }
                for r in self.component_results
            ],
            "reboot_required": self.reboot_required,
            "overall_message": self.overall_message,
        }


@dataclass(frozen=True)
class EnvironmentRequirements:
    """Preconditions declared by a component or a workload command.

    Attributes:
        need_admin: Administrator privileges are required.
        need_secondary_os: The WSL distribution must be installed and listed.
        sync_proxy: The configured proxy is passed on to the issued commands.
    """
    need_admin: bool = False
    need_secondary_os: bool = False
    sync_proxy: bool = False


@dataclass
class ExecutionContext:
    """
    Per-run state shared by all components.

    Components hold a reference to the same instance. Only the secondary OS
    runtime component updates it, setting secondary_os_available after it
    installs the distribution.

    Attributes:
        distro: WSL distribution name, e.g. 'Ubuntu-24.04'.
        proxy_url: Proxy used for network operations, empty when unset.
        is_admin: Whether the process holds administrator privileges.
        secondary_os_available: Whether the distribution is installed and listed.
        config: Configuration store the context was seeded from.
    """
    distro: str
    proxy_url: str = ""
    is_admin: bool = False
    secondary_os_available: bool = False
    config: Optional["ConfigStore"] = None
