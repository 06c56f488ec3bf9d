"""
Shared compute infrastructure for PyDistFit.

Submodules:
    timing: Execution timing utilities
"""

from pydistfit.core.compute.timing import Timer

__all__ = [
    "Timer",
]
