# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
archbench — paired benchmark harness for engineering-quality signals.

Runs every task twice (baseline prompt vs. enhanced prompt), scores the
generated text with a registry of heuristic metrics, and reports how the
two variants compare.
"""

__version__ = "1.0.0"
