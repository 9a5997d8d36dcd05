# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Shared pytest fixtures for archbench tests.

Fixtures here are available to every test file automatically.
The generation service is never called from the test suite: anything that
needs responses gets a FakeGenerator with canned answers.
"""

import json
import textwrap
from collections.abc import Callable
from pathlib import Path
from typing import Optional

import pytest

from archbench.evaluation.exceptions import GenerationError
from archbench.evaluation.metrics.predicates import pattern_predicate
from archbench.evaluation.metrics.registry import Metric, MetricKind, MetricRegistry
from archbench.evaluation.runner.generation import TextGenerator

BASELINE_TEXT = "Here is the code."

ENHANCED_TEXT = textwrap.dedent("""\
    1. First, the tests:
    describe('validateEmail', () => { it('rejects invalid input', () => {}); });

    /** Validates an email address. @param {string} email */
    function validateEmail(email) { if (!email) throw new Error('invalid'); }

    We will not add dependencies; implement only the validation.
""")


class FakeGenerator(TextGenerator):
    """
    Answers prompts from a callable and remembers every prompt it was sent.

    The callable may raise to simulate a transport failure.
    """

    def __init__(self, respond: Callable[[str], str]) -> None:
        self._respond = respond
        self.prompts: list[str] = []

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self._respond(prompt)


def marker_registry() -> MetricRegistry:
    """Four BOOLEAN markers and one COUNT pattern, weight 1 each."""
    return MetricRegistry([
        Metric("goal", "Goal", 1.0, MetricKind.BOOLEAN, pattern_predicate(r"\bgoal\b", MetricKind.BOOLEAN)),
        Metric("tests", "Tests", 1.0, MetricKind.BOOLEAN, pattern_predicate(r"\btests?\b", MetricKind.BOOLEAN)),
        Metric("docs", "Docs", 1.0, MetricKind.BOOLEAN, pattern_predicate(r"@param", MetricKind.BOOLEAN)),
        Metric(
            "interface", "Interface", 1.0, MetricKind.BOOLEAN,
            pattern_predicate(r"\binterface\b", MetricKind.BOOLEAN),
        ),
        Metric(
            "constraints", "Constraints", 1.0, MetricKind.COUNT,
            pattern_predicate(r"\bdo not\b", MetricKind.COUNT),
        ),
    ])


@pytest.fixture()
def registry() -> MetricRegistry:
    return marker_registry()


@pytest.fixture()
def registry_factory() -> Callable[[], MetricRegistry]:
    """For tests that need several independent registries."""
    return marker_registry


@pytest.fixture()
def baseline_text() -> str:
    """Contains none of the markers the test registries look for."""
    return BASELINE_TEXT


@pytest.fixture()
def enhanced_text() -> str:
    """Passes every built-in output heuristic."""
    return ENHANCED_TEXT


@pytest.fixture()
def fake_generator_factory() -> Callable[..., FakeGenerator]:
    """
    Build a FakeGenerator. With no arguments every prompt gets ENHANCED_TEXT;
    `fail_when` makes matching prompts raise GenerationError.
    """

    def _make(
        respond: Optional[Callable[[str], str]] = None,
        fail_when: Optional[Callable[[str], bool]] = None,
    ) -> FakeGenerator:
        base = respond or (lambda prompt: ENHANCED_TEXT)

        def _answer(prompt: str) -> str:
            if fail_when is not None and fail_when(prompt):
                raise GenerationError("connection reset by peer")
            return base(prompt)

        return FakeGenerator(_answer)

    return _make


@pytest.fixture()
def tmp_config_file(tmp_path: Path) -> Path:
    """
    Create a minimal valid config YAML file in a temp directory.

    This is the smallest config that passes schema validation.
    Tests that need specific config values should write their own files.
    """
    config_content = textwrap.dedent("""\
        global:
          config_version: "1.0.0"
          project_name: "archbench-test"
          log_level: "DEBUG"
    """)
    config_file = tmp_path / "test_config.yaml"
    config_file.write_text(config_content, encoding="utf-8")
    return config_file


@pytest.fixture()
def invalid_config_file(tmp_path: Path) -> Path:
    """A config file that's valid YAML but fails schema validation (missing required field)."""
    config_content = textwrap.dedent("""\
        global:
          project_name: "archbench-test"
    """)
    config_file = tmp_path / "invalid_config.yaml"
    config_file.write_text(config_content, encoding="utf-8")
    return config_file


@pytest.fixture()
def broken_yaml_file(tmp_path: Path) -> Path:
    """A file that isn't valid YAML at all."""
    config_file = tmp_path / "broken.yaml"
    config_file.write_text("{{not: yaml: at: all:::", encoding="utf-8")
    return config_file


@pytest.fixture()
def catalog_data() -> dict:
    return {
        "version": "2.1.0",
        "prompts": [
            {"id": "auth", "prompt": "Add authentication", "category": "security", "complexity": "complex"},
            {"id": "export", "prompt": "Add CSV export", "category": "feature"},
        ],
        "metrics": {
            "items": [
                {"id": "goal", "name": "States Goal", "pattern": r"\bgoal\b", "weight": 1, "type": "boolean"},
                {
                    "id": "constraints", "name": "Constraints", "pattern": r"\bdo not\b",
                    "weight": 2, "type": "count",
                },
            ]
        },
    }


@pytest.fixture()
def catalog_file(tmp_path: Path, catalog_data: dict) -> Path:
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps(catalog_data), encoding="utf-8")
    return path


@pytest.fixture()
def samples_file(tmp_path: Path) -> Path:
    data = {
        "tasks": [
            {"id": "email", "task": "Validate email addresses", "without": BASELINE_TEXT, "with": ENHANCED_TEXT},
            {
                "id": "cart", "task": "Calculate cart total", "category": "commerce",
                "without": BASELINE_TEXT, "with": BASELINE_TEXT,
            },
        ]
    }
    path = tmp_path / "samples.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path
