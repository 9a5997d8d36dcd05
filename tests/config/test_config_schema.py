# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for the config schema models themselves, independent of YAML.
"""

import pytest
from pydantic import ValidationError

from archbench.config.schema import (
    ArchBenchConfig,
    BenchConfig,
    GenerationConfig,
    GlobalConfig,
    default_config,
)


class TestGlobalConfig:
    def test_log_level_is_uppercased(self) -> None:
        assert GlobalConfig(config_version="1.0.0", log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self) -> None:
        with pytest.raises(ValidationError, match="log_level"):
            GlobalConfig(config_version="1.0.0", log_level="LOUD")

    def test_config_version_is_required(self) -> None:
        with pytest.raises(ValidationError):
            GlobalConfig()  # type: ignore[call-arg]


class TestBenchConfig:
    def test_count_saturation_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            BenchConfig(count_saturation=0)

    def test_excerpt_cannot_be_negative(self) -> None:
        with pytest.raises(ValidationError):
            BenchConfig(output_excerpt_chars=-1)


class TestGenerationConfig:
    def test_negative_delay_rejected(self) -> None:
        with pytest.raises(ValidationError):
            GenerationConfig(inter_call_delay_seconds=-0.5)

    def test_zero_delay_allowed(self) -> None:
        assert GenerationConfig(inter_call_delay_seconds=0).inter_call_delay_seconds == 0

    def test_timeout_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            GenerationConfig(timeout_seconds=0)


class TestDefaultConfig:
    def test_default_config_is_valid(self) -> None:
        config = default_config()
        assert isinstance(config, ArchBenchConfig)
        assert config.global_config.config_version == "1.0.0"
        assert config.bench.catalog_path is None

    def test_global_section_uses_alias(self) -> None:
        config = ArchBenchConfig.model_validate({"global": {"config_version": "2.0.0"}})
        assert config.global_config.config_version == "2.0.0"
