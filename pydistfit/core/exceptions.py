"""
Exception hierarchy for PyDistFit.

All exceptions inherit from PyDistFitError to allow catching any
library-specific error. Domain-specific exceptions should inherit from
the appropriate base class here.

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages are actionable with actual vs expected values
    - Never catch and re-raise with less information
"""


class PyDistFitError(Exception):
    """Base exception for all PyDistFit errors."""
    pass


class ValidationError(PyDistFitError):
    """
    Input validation failed.

    Raised when user-provided inputs or configuration fail validation
    checks. Always raised before any computation starts.
    """
    pass


class DimensionError(ValidationError):
    """
    Array dimensions are incorrect or inconsistent.
    """
    pass


class NumericalError(PyDistFitError):
    """
    Numerical computation failed.

    Base class for errors arising from numerical issues during computation.
    """
    pass


class ConvergenceError(NumericalError):
    """
    Iterative algorithm failed to converge.

    Raised when an optimizer fails to meet convergence criteria within the
    maximum number of iterations.

    Attributes:
        iterations: Number of iterations completed
        final_change: Final parameter or objective change
        reason: Why convergence failed (e.g., 'max_iterations', 'diverging')
        threshold: The convergence threshold that was not met
    """

    def __init__(
        self,
        message: str,
        iterations: int,
        final_change: float | None = None,
        reason: str | None = None,
        threshold: float | None = None
    ):
        super().__init__(message)
        self.iterations = iterations
        self.final_change = final_change
        self.reason = reason
        self.threshold = threshold


class FitError(NumericalError):
    """
    Parameter estimation produced no usable estimate.

    Raised for non-finite or out-of-bounds estimates and for data the
    estimator cannot handle (e.g. non-positive values for a gamma fit).

    Attributes:
        family: Distribution family being fitted
        method: Estimation method identifier
    """

    def __init__(
        self,
        message: str,
        family: str | None = None,
        method: str | None = None
    ):
        super().__init__(message)
        self.family = family
        self.method = method


class GenerationError(PyDistFitError):
    """
    Random variate generation failed.

    Raised when a distribution cannot produce a usable synthetic sample
    for a given parameter set.
    """
    pass


class BootstrapError(PyDistFitError):
    """
    A bootstrap run produced no usable result.

    Attributes:
        replicate_count: Number of replicates requested
        n_successful: Number of replicates that fitted successfully
    """

    def __init__(
        self,
        message: str,
        replicate_count: int | None = None,
        n_successful: int | None = None
    ):
        super().__init__(message)
        self.replicate_count = replicate_count
        self.n_successful = n_successful


class BootstrapCancelledError(BootstrapError):
    """
    A bootstrap run was interrupted before all iterations completed.

    Outstanding worker tasks are cancelled before this is raised; no
    partial replicate matrix is ever returned.
    """
    pass
