"""Exceptions raised by the Whittaker-Eilers smoother."""

from __future__ import annotations

import numpy as np


class WhittakerError(Exception):
    """Base class for smoother failures."""


class InvalidOrderError(WhittakerError, ValueError):
    """Difference order is negative or not strictly less than the series length."""


class InvalidLambdaError(WhittakerError, ValueError):
    """Smoothing strength is negative or not finite."""


class FactorizationError(WhittakerError, np.linalg.LinAlgError):
    """Cholesky factorization of the penalized system failed."""
