# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
archbench evaluation and benchmarking package.

This is the part of the system that answers the question the harness
exists for: "Does the enhanced prompt produce text with more of the
engineering signals we care about?"

Subsystems:
  - metrics: the metric registry, text predicates, evaluator, aggregator
  - benchmarks: data models and catalog loading
  - tasks: baseline and enhanced prompt construction
  - runner: generation backends and the paired trial runner
  - reporting: report serialization, text summaries, the result store
"""
