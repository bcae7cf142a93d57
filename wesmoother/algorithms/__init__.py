"""Signal processing algorithms: Whittaker-Eilers smoothing.

This package hosts the penalized least-squares smoother and its error types.
"""

from .errors import (
    WhittakerError,
    InvalidOrderError,
    InvalidLambdaError,
    FactorizationError,
)
from .whittaker import (
    build_difference_operator,
    assemble,
    solve,
    roughness,
    whittaker_smooth,
    smooth,
    whittaker_from_dataframe,
    WhittakerSmoother,
)

__all__ = [
    "WhittakerError",
    "InvalidOrderError",
    "InvalidLambdaError",
    "FactorizationError",
    "build_difference_operator",
    "assemble",
    "solve",
    "roughness",
    "whittaker_smooth",
    "smooth",
    "whittaker_from_dataframe",
    "WhittakerSmoother",
]
