# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Exceptions for the benchmark pipeline.

Two families live here. Integrity and catalog errors are fatal: they stop
a run before any external call is made. Generation errors are recoverable:
the runner records them on the affected trial and moves on.
"""


class BenchmarkError(Exception):
    """Base for all benchmark pipeline errors."""


class IntegrityError(BenchmarkError):
    """Base for errors that mean the run's configuration is inconsistent."""


class DuplicateMetricError(IntegrityError):
    """Raised when a metric id is registered twice in the same registry."""


class RegistrySealedError(IntegrityError):
    """Raised when something tries to register a metric after the run started."""


class DuplicateSlotError(IntegrityError):
    """
    Raised when an archival result slot is written a second time.
    Archival slots are write-once so that benchmark history can be audited.
    """


class CatalogFormatError(BenchmarkError):
    """
    Raised when a task catalog, metric definition or sample file is malformed.
    This covers missing fields, wrong types, bad enum values, id collisions
    and invalid regex patterns.
    """


class GenerationError(BenchmarkError):
    """Raised by a text generator when it could not produce a response."""
