"""
Concrete environment components.

Public exports:
    EnvironmentComponent: Interface the orchestrator depends on
    BaseComponent, ProbeOnlyComponent, InstallStep: Building blocks for components
    OSVersionComponent, NvidiaGPUComponent, NvidiaDriverComponent,
    BIOSVirtualizationComponent, WSLRuntimeComponent, PipComponent,
    ProjectComponent: The prerequisites, in orchestration order
"""

from prakasa_env.environment.components.base import (
    BaseComponent,
    EnvironmentComponent,
    InstallStep,
    ProbeOnlyComponent,
    apt_proxy_args,
)
from prakasa_env.environment.components.gpu import NvidiaDriverComponent, NvidiaGPUComponent
from prakasa_env.environment.components.os_version import OSVersionComponent, is_supported_os
from prakasa_env.environment.components.pip import PipComponent
from prakasa_env.environment.components.project import CheckoutState, ProjectComponent
from prakasa_env.environment.components.secondary_os import WSLRuntimeComponent
from prakasa_env.environment.components.virtualization import BIOSVirtualizationComponent

DEFAULT_COMPONENT_CLASSES = (
    OSVersionComponent,
    NvidiaGPUComponent,
    NvidiaDriverComponent,
    BIOSVirtualizationComponent,
    WSLRuntimeComponent,
    PipComponent,
    ProjectComponent,
)

__all__ = [
    'EnvironmentComponent',
    'BaseComponent',
    'ProbeOnlyComponent',
    'InstallStep',
    'apt_proxy_args',
    'OSVersionComponent',
    'is_supported_os',
    'NvidiaGPUComponent',
    'NvidiaDriverComponent',
    'BIOSVirtualizationComponent',
    'WSLRuntimeComponent',
    'PipComponent',
    'ProjectComponent',
    'CheckoutState',
    'DEFAULT_COMPONENT_CLASSES',
]
