# tests/property/__init__.py
"""Property-based tests for lumicheck.

Invariants that must hold for all inputs: lumi deduplication, accumulator
counts and comparator verdicts.
"""
