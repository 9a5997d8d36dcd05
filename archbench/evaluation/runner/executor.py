# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Trial runner — the heart of the benchmark pipeline.

For each task, in catalog order, the runner:
  1. Builds the baseline prompt and sends it to the generator
  2. Scores the response with the evaluator
  3. Pauses for the fixed inter-call delay
  4. Builds the enhanced prompt, sends it, scores the response
  5. Pauses again before the next task

Everything is sequential. Two calls to the generation service never
overlap, and a fixed delay sits between consecutive calls so a run stays
under the provider's rate limit.

A failed call does not stop the run. The trial is recorded with the error
text, a score of 0 and every metric failed, and the runner moves on. The
report then shows exactly which trials failed, so a low score caused by a
broken call can't be mistaken for a low score caused by the prompt.
"""

import time
from collections.abc import Callable, Sequence

from archbench.evaluation.benchmarks.loader import ensure_unique_ids
from archbench.evaluation.benchmarks.models import Task, TrialPair, TrialResult, Variant
from archbench.evaluation.metrics.evaluator import (
    DEFAULT_COUNT_SATURATION,
    evaluate,
    failed_evaluation,
)
from archbench.evaluation.metrics.registry import MetricRegistry
from archbench.evaluation.runner.generation import TextGenerator
from archbench.evaluation.tasks.builder import build_prompt
from archbench.logging.logger import get_logger
from archbench.utils.hashing import compute_sha256_text

logger = get_logger(__name__)

DEFAULT_INTER_CALL_DELAY_SECONDS = 1.0


class TrialRunner:
    """
    Runs tasks as (baseline, enhanced) trial pairs against one generator.

    Args:
        generator: Where responses come from.
        registry: Metrics to score every response with. Sealed on first use.
        delay_seconds: Fixed pause between consecutive generator calls.
        count_saturation: Passed through to the evaluator.
        sleep: Injected so tests don't actually wait.
    """

    def __init__(
        self,
        generator: TextGenerator,
        registry: MetricRegistry,
        delay_seconds: float = DEFAULT_INTER_CALL_DELAY_SECONDS,
        count_saturation: int = DEFAULT_COUNT_SATURATION,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if delay_seconds < 0:
            raise ValueError(f"delay_seconds must be >= 0, got {delay_seconds}")
        if count_saturation < 1:
            raise ValueError(f"count_saturation must be >= 1, got {count_saturation}")
        self.generator = generator
        self.registry = registry
        self.delay_seconds = delay_seconds
        self.count_saturation = count_saturation
        self._sleep = sleep
        self._calls_made = 0

    def _pace(self) -> None:
        """Sleep before every call except the very first one of this runner."""
        if self._calls_made > 0 and self.delay_seconds > 0:
            self._sleep(self.delay_seconds)
        self._calls_made += 1

    def run_trial(self, task: Task, variant: Variant) -> TrialResult:
        """Generate and score one (task, variant) sample."""
        self.registry.seal()
        prompt = build_prompt(task, variant)
        prompt_sha256 = compute_sha256_text(prompt)

        self._pace()
        gen_start = time.monotonic()
        try:
            text = self.generator.for_task(task).generate(prompt)
        except Exception as exc:
            gen_elapsed = time.monotonic() - gen_start
            message = f"{type(exc).__name__}: {exc}"
            logger.error(
                "Generation failed",
                extra={"task_id": task.id, "variant": variant.value, "error": message},
            )
            evaluation = failed_evaluation(self.registry, message)
            return TrialResult(
                task_id=task.id,
                variant=variant,
                raw_text=f"<error: {message}>",
                outcomes=evaluation.outcomes,
                score=0,
                error=message,
                prompt_sha256=prompt_sha256,
                generation_time_seconds=gen_elapsed,
            )
        gen_elapsed = time.monotonic() - gen_start

        evaluation = evaluate(text, self.registry, count_saturation=self.count_saturation)

        logger.debug(
            "Trial complete",
            extra={
                "task_id": task.id,
                "variant": variant.value,
                "score": evaluation.score,
                "generation_time_seconds": round(gen_elapsed, 3),
            },
        )

        return TrialResult(
            task_id=task.id,
            variant=variant,
            raw_text=text,
            outcomes=evaluation.outcomes,
            score=evaluation.score,
            prompt_sha256=prompt_sha256,
            generation_time_seconds=gen_elapsed,
        )

    def run(self, task: Task) -> TrialPair:
        """Run the baseline trial, then the enhanced trial, for one task."""
        baseline = self.run_trial(task, Variant.BASELINE)
        enhanced = self.run_trial(task, Variant.ENHANCED)
        pair = TrialPair(task=task, baseline=baseline, enhanced=enhanced)

        logger.info(
            "Task complete",
            extra={
                "task_id": task.id,
                "baseline_score": baseline.score,
                "enhanced_score": enhanced.score,
                "improvement": pair.improvement,
                "errors": [t.variant.value for t in (baseline, enhanced) if t.failed],
            },
        )
        return pair

    def run_suite(self, tasks: Sequence[Task]) -> list[TrialPair]:
        """
        Run every task in order and return the pairs in the same order.

        Task ids are checked for uniqueness before the first call goes out.

        Raises:
            CatalogFormatError: If two tasks share an id.
        """
        ensure_unique_ids(tasks)
        self.registry.seal()

        pairs: list[TrialPair] = []
        for task_index, task in enumerate(tasks):
            logger.info(
                "Evaluating task",
                extra={
                    "task_id": task.id,
                    "category": task.category,
                    "complexity": task.complexity.value,
                    "task_index": task_index + 1,
                    "total_tasks": len(tasks),
                },
            )
            pairs.append(self.run(task))

        return pairs
