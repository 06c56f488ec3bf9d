"""Backends for bootstrap confidence intervals."""

from pydistfit.montecarlo.backends.cpu import CPUBootstrapBackend

__all__ = ["CPUBootstrapBackend"]
