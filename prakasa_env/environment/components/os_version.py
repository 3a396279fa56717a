"""Host operating system version prerequisite."""

from typing import Callable

from prakasa_env.config import WINDOWS10_MIN_BUILD, WINDOWS10_MIN_BUILD_X64
from prakasa_env.environment.components.base import ProbeOnlyComponent
from prakasa_env.environment.models import ComponentKind, ComponentResult, FailureCode
from prakasa_env.environment.os_detect import OSInfo, detect_os

UNSUPPORTED_SUFFIX = "(unsupported - requires Windows 10 build 18362+ or Windows 11)"


def is_supported_os(info: OSInfo) -> bool:
    """
    Whether WSL2 can run on this host.

    Windows 11 and later always qualify. Windows 10 needs build 19041, or
    build 18362 on x64 machines.
    """
    if not info.is_windows or info.major is None:
        return False
    if info.major >= 11:
        return True
    if info.major == 10 and info.build is not None:
        if info.build >= WINDOWS10_MIN_BUILD:
            return True
        return info.is_x64 and info.build >= WINDOWS10_MIN_BUILD_X64
    return False


class OSVersionComponent(ProbeOnlyComponent):
    kind = ComponentKind.OS_VERSION
    failure_code = FailureCode.OS_UNSUPPORTED

    def __init__(self, context, executor, logger, os_info_provider: Callable[[], OSInfo] = detect_os):
        super().__init__(context, executor, logger)
        self.os_info_provider = os_info_provider

    def check(self) -> ComponentResult:
        self._log_start("Checking")
        info = self.os_info_provider()
        self.logger.debug(f"Detected OS: {info}")

        if is_supported_os(info):
            result = self._success(f"{info.describe()} (supported)")
        else:
            result = self._failed(f"{info.describe()} {UNSUPPORTED_SUFFIX}")

        self._log_result("Checking", result)
        return result
