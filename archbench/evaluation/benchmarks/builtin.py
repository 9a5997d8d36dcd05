# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
The built-in output-quality suite.

Small, self-contained coding tasks that a model can answer completely in
one response. Used when no catalog file is configured.
"""

from archbench.evaluation.benchmarks.models import Complexity, Task


def builtin_tasks() -> tuple[Task, ...]:
    return (
        Task(
            id="validate-email",
            description="Create a function to validate email addresses",
            category="JavaScript/TypeScript",
            complexity=Complexity.SIMPLE,
        ),
        Task(
            id="fetch-users",
            description="Create a function to fetch users from an API",
            category="JavaScript with error handling",
            complexity=Complexity.MEDIUM,
        ),
        Task(
            id="calculate-total",
            description="Create a function to calculate shopping cart total with tax",
            category="TypeScript",
            complexity=Complexity.MEDIUM,
        ),
        Task(
            id="format-date",
            description="Create a utility function to format dates",
            category="JavaScript",
            complexity=Complexity.SIMPLE,
        ),
        Task(
            id="user-class",
            description="Create a User class with validation",
            category="TypeScript with OOP",
            complexity=Complexity.MEDIUM,
        ),
    )
