"""
Tests for host probes in prakasa_env.environment.host.

Tests cover:
- is_admin on POSIX and Windows
- resolve_proxy_url precedence between configuration and environment
- Distribution listing through 'wsl --list --quiet'
- build_execution_context wiring
"""

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from prakasa_env.config import KEY_PROXY_URL, KEY_WSL_LINUX_DISTRO
from prakasa_env.environment.host import (
    PROXY_ENV_VARS,
    build_execution_context,
    check_secondary_os_available,
    is_admin,
    list_secondary_os_distros,
    resolve_proxy_url,
)
from prakasa_env.execution import ExecutionTarget
from tests.fixtures import MockCommandExecutor


@pytest.fixture
def no_proxy_env(monkeypatch):
    for name in PROXY_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestIsAdmin:
    """Tests for is_admin."""

    def test_posix_root(self):
        """Should be True for uid 0."""
        with patch('prakasa_env.environment.host.os', SimpleNamespace(name='posix', geteuid=lambda: 0)):
            assert is_admin() is True

    def test_posix_user(self):
        """Should be False for other users."""
        with patch('prakasa_env.environment.host.os', SimpleNamespace(name='posix', geteuid=lambda: 1000)):
            assert is_admin() is False

    def test_windows_elevated(self):
        """Should ask shell32 on Windows."""
        fake_ctypes = MagicMock()
        fake_ctypes.windll.shell32.IsUserAnAdmin.return_value = 1
        with patch('prakasa_env.environment.host.os', SimpleNamespace(name='nt')):
            with patch('prakasa_env.environment.host.ctypes', fake_ctypes):
                assert is_admin() is True

    def test_windows_query_error(self):
        """Should be False when shell32 cannot be queried."""
        fake_ctypes = MagicMock()
        fake_ctypes.windll.shell32.IsUserAnAdmin.side_effect = OSError("denied")
        with patch('prakasa_env.environment.host.os', SimpleNamespace(name='nt')):
            with patch('prakasa_env.environment.host.ctypes', fake_ctypes):
                assert is_admin() is False


class TestResolveProxyUrl:
    """Tests for resolve_proxy_url."""

    def test_configured_value_wins(self, config_store, monkeypatch):
        """Should prefer the configured proxy over the environment."""
        monkeypatch.setenv("HTTPS_PROXY", "http://env-proxy:8080")
        config_store.set_value(KEY_PROXY_URL, " http://proxy.local:3128 ")
        assert resolve_proxy_url(config_store) == "http://proxy.local:3128"

    def test_environment_fallback(self, config_store, no_proxy_env, monkeypatch):
        """Should fall back to the proxy environment variables."""
        monkeypatch.setenv("http_proxy", "http://env-proxy:8080")
        assert resolve_proxy_url(config_store) == "http://env-proxy:8080"

    def test_environment_order(self, no_proxy_env, monkeypatch):
        """Should prefer HTTPS_PROXY over HTTP_PROXY."""
        monkeypatch.setenv("HTTP_PROXY", "http://plain:80")
        monkeypatch.setenv("HTTPS_PROXY", "http://secure:443")
        assert resolve_proxy_url(None) == "http://secure:443"

    def test_nothing_set(self, config_store, no_proxy_env):
        """Should return an empty string without any proxy."""
        assert resolve_proxy_url(config_store) == ""


class TestSecondaryOsProbe:
    """Tests for list_secondary_os_distros and check_secondary_os_available."""

    def test_lists_distros(self):
        """Should return one name per non-blank line."""
        executor = MockCommandExecutor({'wsl --list --quiet': ('Ubuntu-24.04\n\ndocker-desktop \n', '', 0)})

        assert list_secondary_os_distros(executor) == ["Ubuntu-24.04", "docker-desktop"]
        assert executor.executions[0].target is ExecutionTarget.LOCAL

    def test_wsl_failure(self):
        """Should return None when wsl cannot list distributions."""
        executor = MockCommandExecutor({'wsl --list --quiet': ('', 'not recognized', 1)})
        assert list_secondary_os_distros(executor) is None
        assert check_secondary_os_available(executor, "Ubuntu-24.04") is False

    def test_available(self):
        """Should match the distribution name exactly."""
        executor = MockCommandExecutor({'wsl --list --quiet': ('Ubuntu-24.04\n', '', 0)})
        assert check_secondary_os_available(executor, "Ubuntu-24.04") is True
        assert check_secondary_os_available(executor, "Ubuntu") is False


class TestBuildExecutionContext:
    """Tests for build_execution_context."""

    def test_context_fields(self, config_store, capturing_logger, no_proxy_env):
        """Should fill the context from configuration and probes."""
        config_store.set_value(KEY_WSL_LINUX_DISTRO, "Debian")
        executor = MockCommandExecutor({'wsl --list --quiet': ('Debian\n', '', 0)})

        with patch('prakasa_env.environment.host.is_admin', return_value=True):
            context = build_execution_context(config_store, executor, capturing_logger)

        assert context.distro == "Debian"
        assert executor.distro == "Debian"
        assert context.is_admin is True
        assert context.secondary_os_available is True
        assert context.proxy_url == ""
        assert context.config is config_store
        capturing_logger.assert_logged('verbose', "distro=Debian")
        capturing_logger.assert_logged('verbose', "proxy=unset")

    def test_skip_probe(self, config_store, capturing_logger):
        """Should not run wsl when probing is disabled."""
        executor = MockCommandExecutor()

        with patch('prakasa_env.environment.host.is_admin', return_value=False):
            context = build_execution_context(config_store, executor, capturing_logger,
                                              probe_secondary_os=False)

        assert context.secondary_os_available is False
        assert context.is_admin is False
        assert executor.execution_count == 0
