"""
Core infrastructure for PyDistFit.

Shared abstractions used by the domain subpackages (distributions,
fitting, montecarlo).

Key components:
    result: Generic Result[P] envelope
    exceptions: Exception hierarchy
    validation: Input validators
    compute: Timing utilities
"""

from pydistfit.core.result import Result
from pydistfit.core.exceptions import (
    PyDistFitError,
    ValidationError,
    DimensionError,
    NumericalError,
    ConvergenceError,
    FitError,
    GenerationError,
    BootstrapError,
    BootstrapCancelledError,
)

__all__ = [
    # Result
    "Result",
    # Exceptions
    "PyDistFitError",
    "ValidationError",
    "DimensionError",
    "NumericalError",
    "ConvergenceError",
    "FitError",
    "GenerationError",
    "BootstrapError",
    "BootstrapCancelledError",
]
