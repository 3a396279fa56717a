"""
Environment provisioning engine for prakasa-env.

This package checks whether the host can run the Prakasa inference
workload, installs the missing pieces inside WSL2, and reduces the
per-component outcomes to a single verdict.

Key features:
- Component model with read-only checks and idempotent installs
- Orchestrator that visits every component in a fixed order
- GPU compatibility policy based on the marketing name
- Verdict fold with reboot and warning semantics

Public exports:
    ComponentKind, InstallationStatus, FailureCode: Result vocabulary
    ComponentResult, EnvironmentResult: Per-component and per-run outcomes
    EnvironmentRequirements, ExecutionContext: Preconditions and shared run state
    EnvironmentOrchestrator: Sequences check and install runs
    build_default_components: The prerequisites in orchestration order
    build_execution_context: Seed the ExecutionContext from the host
    Verdict, RunMode, derive_verdict, verdict_to_command_result: Verdict handling
    is_acceptable_gpu, is_blackwell_gpu: GPU compatibility policy
    OSInfo, detect_os: Host OS detection
"""

from prakasa_env.environment.gpu_policy import is_acceptable_gpu, is_blackwell_gpu
from prakasa_env.environment.host import build_execution_context, is_admin
from prakasa_env.environment.models import (
    ComponentKind,
    ComponentResult,
    EnvironmentRequirements,
    EnvironmentResult,
    ExecutionContext,
    FailureCode,
    InstallationStatus,
)
from prakasa_env.environment.orchestrator import (
    EnvironmentOrchestrator,
    OrchestratorState,
    build_default_components,
)
from prakasa_env.environment.os_detect import OSInfo, detect_os
from prakasa_env.environment.verdict import (
    RunMode,
    Verdict,
    derive_verdict,
    overall_message,
    verdict_to_command_result,
)

__all__ = [
    # Models
    "ComponentKind",
    "InstallationStatus",
    "FailureCode",
    "ComponentResult",
    "EnvironmentResult",
    "EnvironmentRequirements",
    "ExecutionContext",
    # Orchestration
    "EnvironmentOrchestrator",
    "OrchestratorState",
    "build_default_components",
    "build_execution_context",
    "is_admin",
    # Verdict
    "Verdict",
    "RunMode",
    "derive_verdict",
    "overall_message",
    "verdict_to_command_result",
    # GPU policy
    "is_acceptable_gpu",
    "is_blackwell_gpu",
    # OS detection
    "OSInfo",
    "detect_os",
]
