# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Prompt builder for benchmark tasks.

Each task is sent twice. The baseline prompt is the bare request. The
enhanced prompt wraps that same request in a fixed template that asks for
the structure the metrics look for: a goal, explicit constraints, numbered
phases, tests before code, documented logic, and abstractions at the
extension points.

Prompt construction lives apart from the runner so the template can be
tuned without touching the trial logic.
"""

from archbench.evaluation.benchmarks.models import Task, Variant

ENHANCEMENT_TEMPLATE = """You are a senior software architect. Apply these principles to the task below.

Task: {task}
Context: {context}

Apply these mandatory principles:
1. GOAL: State the goal and the business value it delivers before anything else.
2. CONSTRAINTS: List at least two things you will NOT do (for example "Do NOT add new dependencies").
3. EXECUTION PHASES: Break the work into numbered phases and complete them in order.
4. TESTS FIRST: Write the tests before the implementation. Every function gets a test.
5. DOCUMENTATION: Document every function you produce (JSDoc or docstrings with parameters and return values).
6. EXTENSION POINTS: Depend on interfaces or abstract types rather than concrete classes so behavior can be extended without modification.

Now complete the task following these principles. Show your work step by step."""


def build_baseline_prompt(task: Task) -> str:
    """The task as a user would type it, with no structural guidance."""
    return f"{task.description}. Context: {task.category}. Please implement this."


def build_enhanced_prompt(task: Task) -> str:
    """The task wrapped in ENHANCEMENT_TEMPLATE."""
    return ENHANCEMENT_TEMPLATE.format(task=task.description, context=task.category)


def build_prompt(task: Task, variant: Variant) -> str:
    if variant is Variant.ENHANCED:
        return build_enhanced_prompt(task)
    return build_baseline_prompt(task)
