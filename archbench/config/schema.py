# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Type-safe configuration schemas for archbench.

Each config section gets its own frozen pydantic model. Frozen means the
config cannot change once a run has started; every trial in a run sees the
same model, the same delay and the same scoring parameters.

The models use pydantic v2's ConfigDict with:
  - frozen=True: immutability after construction
  - extra="forbid": unknown fields cause immediate failure
  - validate_default=True: even defaults get type-checked
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class GlobalConfig(BaseModel):
    """Cross-cutting settings: project identity and observability."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    config_version: str = Field(
        description="Schema version for compatibility tracking, e.g. '1.0.0'"
    )
    project_name: str = Field(
        default="archbench", description="Human-readable project identifier"
    )
    log_level: str = Field(
        default="INFO",
        description="One of DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Optional path for file-based log output, relative to the config file",
    )

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        upper = value.upper()
        if upper not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LOG_LEVELS)}")
        return upper


class BenchConfig(BaseModel):
    """
    Where the benchmark inputs come from, where results go, and how text is
    scored.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    catalog_path: Optional[str] = Field(
        default=None,
        description="Task catalog JSON/YAML; None uses the built-in tasks and metrics",
    )
    samples_path: Optional[str] = Field(
        default=None,
        description="Precomputed outputs consumed by the analyze command",
    )
    results_directory: str = Field(
        default="benchmarks/results",
        description="Where report JSON files are written",
    )
    count_saturation: int = Field(
        default=3,
        ge=1,
        description="Occurrences at which a COUNT metric reaches its full weight",
    )
    output_excerpt_chars: int = Field(
        default=500,
        ge=0,
        description="Characters of generated text kept per trial in reports; 0 keeps everything",
    )


class GenerationConfig(BaseModel):
    """Settings for the external text-generation service."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    model: str = Field(default="gpt-5-mini", description="Model identifier sent with every request")
    max_output_tokens: int = Field(
        default=2000,
        ge=1,
        description="Upper bound on generated tokens per response",
    )
    timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        le=600,
        description="Per-request timeout enforced by the client",
    )
    inter_call_delay_seconds: float = Field(
        default=1.0,
        ge=0,
        le=60,
        description="Fixed pause between consecutive calls, keeps us under the rate limit",
    )
    env_file: Optional[str] = Field(
        default=".env",
        description="dotenv file holding OPENAI_API_KEY; missing files are ignored",
    )


class ArchBenchConfig(BaseModel):
    """
    Top-level config container.

    Only `global.config_version` is required. The bench and generation
    sections fall back to their defaults when left out of the YAML.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    global_config: GlobalConfig = Field(alias="global")
    bench: BenchConfig = Field(default_factory=BenchConfig)
    generation: GenerationConfig = Field(default_factory=GenerationConfig)


def default_config() -> ArchBenchConfig:
    """The config used when the CLI is run without --config."""
    return ArchBenchConfig.model_validate({"global": {"config_version": "1.0.0"}})
