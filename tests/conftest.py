"""
Shared pytest fixtures for prakasa_env tests.

These fixtures provide loggers, configuration stores, execution contexts
and a recording command executor, so that no test runs wsl, powershell or
any other real command unless it explicitly asks for a subprocess.
"""

import pytest

from prakasa_env.config import DEFAULT_WSL_LINUX_DISTRO
from prakasa_env.config_store import ConfigStore
from prakasa_env.environment.models import (
    ComponentKind,
    ComponentResult,
    EnvironmentRequirements,
    ExecutionContext,
)
from tests.fixtures import MockCommandExecutor, MockLogger


# =============================================================================
# Logger Fixtures
# =============================================================================

@pytest.fixture
def capturing_logger():
    """
    Create a MockLogger that records messages per level.

    Usage:
        def test_something(capturing_logger):
            some_function(logger=capturing_logger)
            assert capturing_logger.has_message('status', 'expected')
    """
    return MockLogger()


# =============================================================================
# Configuration Fixtures
# =============================================================================

@pytest.fixture
def config_path(tmp_path):
    """Path to a configuration file that does not exist yet."""
    return str(tmp_path / "prakasa_env" / "config.yaml")


@pytest.fixture
def config_store(config_path, capturing_logger):
    """A loaded ConfigStore backed by a temporary file."""
    store = ConfigStore(config_path, logger=capturing_logger)
    store.load()
    return store


# =============================================================================
# Execution Fixtures
# =============================================================================

@pytest.fixture
def mock_executor():
    """A MockCommandExecutor whose commands all succeed with empty output."""
    return MockCommandExecutor()


@pytest.fixture
def execution_context(config_store):
    """ExecutionContext for an elevated host with the distribution installed."""
    return ExecutionContext(
        distro=DEFAULT_WSL_LINUX_DISTRO,
        proxy_url="",
        is_admin=True,
        secondary_os_available=True,
        config=config_store,
    )


@pytest.fixture
def proxy_context(config_store):
    """ExecutionContext with a proxy configured."""
    return ExecutionContext(
        distro=DEFAULT_WSL_LINUX_DISTRO,
        proxy_url="http://proxy.local:3128",
        is_admin=True,
        secondary_os_available=True,
        config=config_store,
    )


# =============================================================================
# Component Fixtures
# =============================================================================

class StubComponent:
    """
    Component returning fixed results, for orchestrator tests.

    Records how often check() and install() were called.
    """

    def __init__(self, kind, check_result=None, install_result=None, requirements=None, error=None):
        self.kind = kind
        self.requirements = requirements or EnvironmentRequirements()
        self.check_result = check_result or ComponentResult.success(kind, "ok")
        self.install_result = install_result or self.check_result
        self.error = error
        self.check_calls = 0
        self.install_calls = 0

    @property
    def name(self):
        return self.kind.display_name

    def check(self):
        self.check_calls += 1
        if self.error is not None:
            raise self.error
        return self.check_result

    def install(self):
        self.install_calls += 1
        if self.error is not None:
            raise self.error
        return self.install_result


@pytest.fixture
def stub_component_factory():
    """Factory building StubComponent instances."""
    return StubComponent


# =============================================================================
# Model Fixtures
# =============================================================================

@pytest.fixture
def all_component_kinds():
    return list(ComponentKind)
