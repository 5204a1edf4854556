# src/lumicheck/__init__.py
"""
Lumicheck: workflow/dataset metadata consistency checks.

Cross-checks the input and output datasets declared by a workflow against
the dataset catalog, recomputing lumi-section counts from block-level
detail records.
"""

__version__ = "0.1.0"
