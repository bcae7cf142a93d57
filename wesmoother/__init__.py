"""Whittaker-Eilers smoothing for equally spaced 1-D series."""

from .algorithms import (
    WhittakerError,
    InvalidOrderError,
    InvalidLambdaError,
    FactorizationError,
    whittaker_smooth,
    smooth,
    WhittakerSmoother,
)

__version__ = "0.1.0"

__all__ = [
    "WhittakerError",
    "InvalidOrderError",
    "InvalidLambdaError",
    "FactorizationError",
    "whittaker_smooth",
    "smooth",
    "WhittakerSmoother",
]
