"""
NVIDIA GPU hardware and driver prerequisites.

Both are probe-only: the engine reports what it finds and asks the user to
act when the hardware or the driver is missing.
"""

import re
from typing import List, Optional

from prakasa_env.config import CUDA_BIN_DIR, SUPPORTED_CUDA_VERSIONS
from prakasa_env.environment.components.base import ProbeOnlyComponent
from prakasa_env.environment.gpu_policy import is_acceptable_gpu, is_blackwell_gpu, matched_rule
from prakasa_env.environment.models import ComponentKind, ComponentResult, FailureCode
from prakasa_env.execution import Command, ExecutionTarget

GPU_NAME_QUERY = Command.of("nvidia-smi", "--query-gpu=name", "--format=csv,noheader")
DRIVER_VERSION_QUERY = Command.of("nvidia-smi", "--query-gpu=driver_version", "--format=csv,noheader,nounits")
VIDEO_CONTROLLER_QUERY = "Get-CimInstance Win32_VideoController | Select-Object -ExpandProperty Name"
DRIVER_REGISTRY_QUERY = Command.of(
    "reg", "query", r"HKLM\SOFTWARE\NVIDIA Corporation\Global\Display Driver", "/v", "Version"
)
NVCC_VERSION_QUERY = f"{CUDA_BIN_DIR}/nvcc --version 2>/dev/null || /usr/local/cuda/bin/nvcc --version"

CUDA_RELEASE_PATTERN = re.compile(r"release\s+(\d+\.\d+)")
REGISTRY_VALUE_PATTERN = re.compile(r"Version\s+REG_\w+\s+(\S+)")


def _non_blank_lines(text: str) -> List[str]:
    return [line.strip() for line in text.splitlines() if line.strip()]


class NvidiaGPUComponent(ProbeOnlyComponent):
    """Detects an NVIDIA GPU and applies the compatibility policy to its name."""

    kind = ComponentKind.NVIDIA_GPU
    failure_code = FailureCode.GPU_BELOW_MINIMUM

    def detect_gpu_names(self) -> List[str]:
        """
        Names of the installed NVIDIA GPUs.

        ``nvidia-smi`` is asked first. When it is unavailable (no driver yet),
        the video controllers known to Windows are listed instead.
        """
        outcome = self._run(GPU_NAME_QUERY)
        if outcome.succeeded and outcome.stdout.strip():
            return _non_blank_lines(outcome.stdout)

        self.logger.debug("nvidia-smi unavailable, querying Win32_VideoController")
        outcome = self._run(VIDEO_CONTROLLER_QUERY, target=ExecutionTarget.ELEVATED)
        if not outcome.succeeded:
            return []
        return [name for name in _non_blank_lines(outcome.stdout) if "NVIDIA" in name.upper()]

    def check(self) -> ComponentResult:
        self._log_start("Checking")
        names = self.detect_gpu_names()
        self.logger.debug(f"Detected GPUs: {names}")

        if not names:
            result = self._failed("No NVIDIA GPU detected", FailureCode.GPU_NOT_FOUND)
        else:
            accepted = []
            for name in names:
                ok = is_acceptable_gpu(name)
                self.logger.debug(f"GPU {name}: {matched_rule(name)}, {'accepted' if ok else 'rejected'}")
                if ok:
                    accepted.append(name)
            if not accepted:
                result = self._failed(f"GPU below minimum requirement: {names[0]}")
            else:
                gpu_name = accepted[0]
                if is_blackwell_gpu(gpu_name):
                    image = "Blackwell series - will use blackwell image"
                else:
                    image = "will use hopper image"
                result = self._success(f"Compatible NVIDIA GPU detected: {gpu_name} ({image})")

        self._log_result("Checking", result)
        return result


class NvidiaDriverComponent(ProbeOnlyComponent):
    """Reports the NVIDIA driver version and the CUDA toolkit seen by the secondary OS."""

    kind = ComponentKind.NVIDIA_DRIVER
    failure_code = FailureCode.DRIVER_MISSING

    def detect_driver_version(self) -> Optional[str]:
        outcome = self._run(DRIVER_VERSION_QUERY)
        if outcome.succeeded:
            lines = _non_blank_lines(outcome.stdout)
            if lines:
                return lines[0]
        return None

    def detect_registry_version(self) -> Optional[str]:
        outcome = self._run(DRIVER_REGISTRY_QUERY)
        if not outcome.succeeded:
            return None
        match = REGISTRY_VALUE_PATTERN.search(outcome.stdout)
        return match.group(1) if match else None

    def detect_cuda_version(self) -> Optional[str]:
        """CUDA toolkit version from ``nvcc`` in the secondary OS, None if absent."""
        if not self.context.secondary_os_available:
            return None
        outcome = self._run_secondary(NVCC_VERSION_QUERY)
        if not outcome.succeeded:
            return None
        match = CUDA_RELEASE_PATTERN.search(outcome.stdout)
        return match.group(1) if match else None

    def check(self) -> ComponentResult:
        self._log_start("Checking")
        driver_version = self.detect_driver_version()

        if driver_version:
            cuda_version = self.detect_cuda_version()
            message = f"NVIDIA driver: {driver_version}, CUDA toolkit: {cuda_version or 'Not detected'}"
            if cuda_version and cuda_version not in SUPPORTED_CUDA_VERSIONS:
                expected = " or ".join(f"{v}.x" for v in SUPPORTED_CUDA_VERSIONS)
                result = self._warning(f"{message} (WARNING: CUDA version should be {expected})")
            else:
                result = self._success(message)
        else:
            registry_version = self.detect_registry_version()
            if registry_version:
                result = self._success(f"NVIDIA driver installed (registry version: {registry_version})")
            else:
                result = self._failed("NVIDIA driver not found. Please install NVIDIA graphics driver first.")

        self._log_result("Checking", result)
        return result
