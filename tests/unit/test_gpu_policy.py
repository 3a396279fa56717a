"""
Tests for prakasa_env.environment.gpu_policy.

Tests cover:
- parse_gpu_name for RTX names with and without suffixes
- is_acceptable_gpu across professional, RTX 20-50 and GTX cards
- is_blackwell_gpu image selection
"""

import pytest

from prakasa_env.environment.gpu_policy import (
    RTXModel,
    is_acceptable_gpu,
    is_blackwell_gpu,
    is_professional_gpu,
    matched_rule,
    parse_gpu_name,
)


class TestParseGpuName:
    """Tests for parse_gpu_name."""

    @pytest.mark.parametrize("name,expected", [
        ("NVIDIA GeForce RTX 3060 Ti", RTXModel(30, 60, "TI")),
        ("NVIDIA GeForce RTX 4090", RTXModel(40, 90, "")),
        ("NVIDIA GeForce RTX 4070 SUPER", RTXModel(40, 70, "SUPER")),
        ("NVIDIA GeForce RTX 5090", RTXModel(50, 90, "")),
        ("nvidia geforce rtx 2080 ti", RTXModel(20, 80, "TI")),
    ])
    def test_parses_rtx_names(self, name, expected):
        """Should split series, model and suffix."""
        assert parse_gpu_name(name) == expected

    @pytest.mark.parametrize("name", [
        "NVIDIA GeForce GTX 1660",
        "Intel(R) UHD Graphics 630",
        "Unknown Card X",
        "",
        None,
    ])
    def test_returns_none_without_rtx_number(self, name):
        """Should return None when no RTX model number is present."""
        assert parse_gpu_name(name) is None


class TestIsAcceptableGpu:
    """Tests for the GPU accept/reject policy."""

    @pytest.mark.parametrize("name", [
        "NVIDIA GeForce RTX 5090",
        "NVIDIA GeForce RTX 5060",
        "NVIDIA GeForce RTX 4090",
        "NVIDIA GeForce RTX 4060",
        "NVIDIA GeForce RTX 4060 Ti",
        "NVIDIA GeForce RTX 3090",
        "NVIDIA GeForce RTX 3070",
        "NVIDIA GeForce RTX 3060 Ti",
        "NVIDIA RTX A6000",
        "NVIDIA A100-SXM4-80GB",
        "NVIDIA H100 PCIe",
        "Tesla V100-PCIE-16GB",
        "Quadro RTX 8000",
    ])
    def test_accepted(self, name):
        """Should accept cards that meet the minimum requirement."""
        assert is_acceptable_gpu(name) is True

    @pytest.mark.parametrize("name", [
        "NVIDIA GeForce RTX 4059",
        "NVIDIA GeForce RTX 4050",
        "NVIDIA GeForce RTX 3060",
        "NVIDIA GeForce RTX 3060 SUPER",
        "NVIDIA GeForce RTX 3050",
        "NVIDIA GeForce RTX 2080 Ti",
        "NVIDIA GeForce GTX 1080 Ti",
        "NVIDIA GeForce GTX 1660",
        "Intel(R) UHD Graphics 630",
        "Unknown Card X",
        "",
    ])
    def test_rejected(self, name):
        """Should reject cards below the minimum requirement."""
        assert is_acceptable_gpu(name) is False

    def test_case_insensitive(self):
        """Should not depend on the case of the name."""
        assert is_acceptable_gpu("nvidia geforce rtx 3060 ti") is True

    def test_professional_detection(self):
        """Should recognize professional and data center families."""
        assert is_professional_gpu("NVIDIA RTX A4000")
        assert not is_professional_gpu("NVIDIA GeForce RTX 4090")


class TestIsBlackwellGpu:
    """Tests for the image selection helper."""

    def test_rtx_50_series_is_blackwell(self):
        """Should select the Blackwell image for RTX 50 series."""
        assert is_blackwell_gpu("NVIDIA GeForce RTX 5080")

    @pytest.mark.parametrize("name", [
        "NVIDIA GeForce RTX 4090",
        "NVIDIA H100 PCIe",
    ])
    def test_other_cards_use_hopper(self, name):
        """Should select the Hopper image for everything else."""
        assert not is_blackwell_gpu(name)


class TestMatchedRule:
    """Tests for the rule description used in diagnostics."""

    @pytest.mark.parametrize("name, rule", [
        ("NVIDIA A100-SXM4-80GB", "professional/data center card"),
        ("NVIDIA GeForce RTX 3060 Ti", "consumer RTX series 30 model 60 TI"),
        ("NVIDIA GeForce RTX 4090", "consumer RTX series 40 model 90"),
        ("NVIDIA GeForce GTX 1660", "GTX series"),
        ("Unknown Card X", "unrecognized"),
    ])
    def test_names_rule(self, name, rule):
        """Should name the rule that decided the GPU."""
        assert matched_rule(name) == rule
