"""
Tests for prakasa_env.environment.models.

Tests cover:
- ComponentResult error_code invariant and factories
- InstallationStatus satisfaction
- EnvironmentResult append order, monotonic reboot flag and to_dict
- ComponentKind display names
"""

import pytest

from prakasa_env.environment.models import (
    ComponentKind,
    ComponentResult,
    EnvironmentRequirements,
    EnvironmentResult,
    FailureCode,
    InstallationStatus,
)


class TestComponentResult:
    """Tests for ComponentResult."""

    def test_failed_requires_error_code(self):
        """Should reject a FAILED result without an error code."""
        with pytest.raises(ValueError):
            ComponentResult(ComponentKind.PIP_UPGRADE, InstallationStatus.FAILED, "no pip")

    @pytest.mark.parametrize("status", [
        InstallationStatus.SUCCESS,
        InstallationStatus.SKIPPED,
        InstallationStatus.WARNING,
        InstallationStatus.IN_PROGRESS,
    ])
    def test_non_failed_rejects_error_code(self, status):
        """Should reject an error code on any status other than FAILED."""
        with pytest.raises(ValueError):
            ComponentResult(ComponentKind.PIP_UPGRADE, status, "msg", error_code=24)

    def test_failed_factory_sets_code(self):
        """Should store the failure code as an int."""
        result = ComponentResult.failed(ComponentKind.NVIDIA_GPU, "No NVIDIA GPU detected",
                                        FailureCode.GPU_NOT_FOUND)
        assert result.status is InstallationStatus.FAILED
        assert result.error_code == 7
        assert not result.reboot_required

    def test_success_factory_with_reboot(self):
        """Should carry the reboot flag on a success."""
        result = ComponentResult.success(ComponentKind.SECONDARY_OS_RUNTIME, "restart", reboot_required=True)
        assert result.reboot_required
        assert result.error_code is None

    def test_is_frozen(self):
        """Should not allow mutation after construction."""
        result = ComponentResult.skipped(ComponentKind.PROJECT, "up to date")
        with pytest.raises(Exception):
            result.message = "changed"

    def test_str_includes_code_and_message(self):
        """Should render kind, status, code and message."""
        result = ComponentResult.failed(ComponentKind.PIP_UPGRADE, "pip is not installed", 24)
        assert str(result) == "pip Upgrade: failed (code 24) - pip is not installed"


class TestInstallationStatus:
    """Tests for InstallationStatus.is_satisfied."""

    def test_satisfied_statuses(self):
        """Should treat SUCCESS and SKIPPED as satisfied."""
        assert InstallationStatus.SUCCESS.is_satisfied
        assert InstallationStatus.SKIPPED.is_satisfied

    def test_unsatisfied_statuses(self):
        """Should treat FAILED, WARNING and IN_PROGRESS as unsatisfied."""
        assert not InstallationStatus.FAILED.is_satisfied
        assert not InstallationStatus.WARNING.is_satisfied
        assert not InstallationStatus.IN_PROGRESS.is_satisfied


class TestEnvironmentResult:
    """Tests for EnvironmentResult."""

    def test_append_keeps_order(self):
        """Should keep results in the order they were appended."""
        env = EnvironmentResult()
        env.append(ComponentResult.success(ComponentKind.OS_VERSION, "ok"))
        env.append(ComponentResult.skipped(ComponentKind.PIP_UPGRADE, "ok"))
        assert [r.kind for r in env.component_results] == [ComponentKind.OS_VERSION, ComponentKind.PIP_UPGRADE]

    def test_reboot_flag_is_monotonic(self):
        """Should keep reboot_required once any result requested it."""
        env = EnvironmentResult()
        env.append(ComponentResult.success(ComponentKind.SECONDARY_OS_RUNTIME, "restart", reboot_required=True))
        env.append(ComponentResult.success(ComponentKind.PIP_UPGRADE, "ok"))
        assert env.reboot_required

    def test_failure_and_warning_flags(self):
        """Should report failures and warnings present in the results."""
        env = EnvironmentResult()
        env.append(ComponentResult.warning(ComponentKind.NVIDIA_DRIVER, "old CUDA"))
        assert env.has_warnings
        assert not env.has_failures
        env.append(ComponentResult.failed(ComponentKind.PROJECT, "missing", 25))
        assert env.has_failures

    def test_get_result(self):
        """Should find a result by kind, or return None."""
        env = EnvironmentResult()
        pip = ComponentResult.skipped(ComponentKind.PIP_UPGRADE, "ok")
        env.append(pip)
        assert env.get_result(ComponentKind.PIP_UPGRADE) is pip
        assert env.get_result(ComponentKind.PROJECT) is None

    def test_to_dict(self):
        """Should serialize results with enum values."""
        env = EnvironmentResult(overall_message="Some environment components failed")
        env.append(ComponentResult.failed(ComponentKind.NVIDIA_GPU, "No NVIDIA GPU detected", 7))

        data = env.to_dict()

        assert data["overall_message"] == "Some environment components failed"
        assert data["reboot_required"] is False
        assert data["component_results"] == [{
            "component": "nvidia_gpu",
            "status": "failed",
            "message": "No NVIDIA GPU detected",
            "error_code": 7,
            "reboot_required": False,
        }]


class TestComponentKind:
    """Tests for ComponentKind."""

    def test_every_kind_has_display_name(self, all_component_kinds):
        """Should provide a display name for every kind."""
        for kind in all_component_kinds:
            assert kind.display_name

    def test_requirements_default_to_none(self):
        """Should default every requirement flag to False."""
        requirements = EnvironmentRequirements()
        assert not requirements.need_admin
        assert not requirements.need_secondary_os
        assert not requirements.sync_proxy
