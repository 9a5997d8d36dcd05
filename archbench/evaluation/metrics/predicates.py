# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Text predicates: the detection half of a metric.

Everything here is surface-level pattern matching. None of it parses code,
so a predicate can be fooled by text that merely looks right. That is
accepted: the predicates only need to be deterministic and cheap, and any
of them can be replaced by a stronger classifier with the same signature
(str -> bool | int) without touching the evaluator or the aggregator.

Two sources of predicates:
  - pattern_predicate(): catalog-defined regexes, matched case-insensitive
    and multi-line
  - the built-in output heuristics below, which look at the order and shape
    of what a model produced
"""

import re

from archbench.evaluation.metrics.registry import Metric, MetricKind, MetricRegistry, TextPredicate

_PATTERN_FLAGS = re.IGNORECASE | re.MULTILINE


def pattern_predicate(pattern: str, kind: MetricKind) -> TextPredicate:
    """
    Build a predicate from a regex.

    BOOLEAN predicates report whether the pattern matches anywhere. COUNT
    predicates report the number of non-overlapping matches.

    Raises:
        re.error: If the pattern does not compile.
    """
    regex = re.compile(pattern, _PATTERN_FLAGS)

    if kind is MetricKind.COUNT:
        def count_matches(text: str) -> int:
            return sum(1 for _ in regex.finditer(text))

        return count_matches

    def has_match(text: str) -> bool:
        return regex.search(text) is not None

    return has_match


# ── Built-in output heuristics ──────────────────────────────────────────────

_TEST_RE = re.compile(r"\b(describe|test|it)\s*\(|\bdef\s+test_\w*\s*\(", re.IGNORECASE)
_IMPL_RE = re.compile(
    r"\b(function|const|class)\s+\w+\s*[=(:{]|\bdef\s+(?!test_)\w+\s*\(",
    re.IGNORECASE,
)
_DOC_RES = (
    re.compile(r"/\*\*[\s\S]*?\*/"),
    re.compile(r"@(param|returns|description)\b"),
    re.compile(r'"""[\s\S]*?"""'),
    re.compile(r"'''[\s\S]*?'''"),
)
_NEGATION_RE = re.compile(r"\b(not|don't|won't|avoid|skip|exclude|without)\b", re.IGNORECASE)
_ACTION_RE = re.compile(r"\b(implement|add|include|do)", re.IGNORECASE)
_ERROR_HANDLING_RE = re.compile(
    r"try\s*[{:]|catch\s*\(|\bthrow\s+|\braise\s+\w|\bexcept\b|if\s*\(\s*!|\.catch\(|"
    r"\berror\b|\binvalid\b|\bnull\b|\bundefined\b|\bis\s+None\b",
    re.IGNORECASE,
)
_STRUCTURE_RE = re.compile(
    r"\d+\.\s+|\bstep\s+\d|\bphase\s+\d|\bfirst\b|\bthen\b|\bnext\b|\bfinally\b",
    re.IGNORECASE,
)


def tests_first(text: str) -> bool:
    """
    True when the first test construct appears before the first piece of
    implementation. Text with tests but no implementation counts as a pass;
    text without tests never does.
    """
    test_match = _TEST_RE.search(text)
    if test_match is None:
        return False
    impl_match = _IMPL_RE.search(text)
    if impl_match is None:
        return True
    return test_match.start() < impl_match.start()


def has_documentation(text: str) -> bool:
    """JSDoc blocks, doc tags, or Python docstrings."""
    return any(regex.search(text) for regex in _DOC_RES)


def mentions_constraints(text: str) -> bool:
    """A boundary word ("not", "avoid", ...) together with an action word."""
    return _NEGATION_RE.search(text) is not None and _ACTION_RE.search(text) is not None


def has_error_handling(text: str) -> bool:
    return _ERROR_HANDLING_RE.search(text) is not None


def structured_approach(text: str) -> bool:
    """Numbered items, explicit steps/phases, or sequencing words."""
    return _STRUCTURE_RE.search(text) is not None


def build_output_registry() -> MetricRegistry:
    """
    A fresh registry with the five built-in output-quality metrics.

    Every call returns a new, unsealed registry.
    """
    return MetricRegistry([
        Metric("tests_first", "Tests Written First", 1.0, MetricKind.BOOLEAN, tests_first),
        Metric("has_jsdoc", "Has Documentation", 1.0, MetricKind.BOOLEAN, has_documentation),
        Metric(
            "mentions_constraints", "Acknowledges Constraints", 1.0,
            MetricKind.BOOLEAN, mentions_constraints,
        ),
        Metric("has_error_handling", "Handles Edge Cases", 1.0, MetricKind.BOOLEAN, has_error_handling),
        Metric(
            "structured_approach", "Follows Structured Phases", 1.0,
            MetricKind.BOOLEAN, structured_approach,
        ),
    ])
