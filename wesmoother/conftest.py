"""Pytest configuration and fixtures for wesmoother tests."""

import numpy as np
import pytest


@pytest.fixture
def clean_sine_wave():
    """Generate a clean sine wave for testing."""
    x = np.linspace(0, 2 * np.pi, 100)
    y = np.sin(x)
    return x, y


@pytest.fixture
def noisy_sine_wave(clean_sine_wave):
    """Generate a noisy sine wave for testing smoothing algorithms."""
    x, clean_y = clean_sine_wave
    np.random.seed(42)  # Reproducible noise
    noise = 0.1 * np.random.randn(len(clean_y))
    noisy_y = clean_y + noise
    return x, noisy_y, clean_y


@pytest.fixture
def alternating_series():
    """Zig-zag series with maximal second differences."""
    return np.array([1.0, 2.0, 1.0, 2.0, 1.0])


@pytest.fixture
def spectrum_like():
    """Two Lorentzian peaks on a sloped baseline plus noise (NMR-like trace)."""
    x = np.linspace(-10, 10, 400)
    peaks = 1.0 / (1 + (x - 2.0) ** 2 / 0.25) + 0.6 / (1 + (x + 3.0) ** 2 / 0.5)
    baseline = 0.02 * x + 0.1
    np.random.seed(7)
    noise = 0.03 * np.random.randn(x.size)
    return x, peaks + baseline + noise, peaks + baseline


@pytest.fixture(params=[0, 1, 2, 3])
def difference_orders(request):
    """Parametrized difference orders."""
    return request.param


@pytest.fixture(params=['banded', 'dense'])
def solver_methods(request):
    """Parametrized Cholesky storage forms."""
    return request.param


@pytest.fixture
def empty_dataset():
    """Empty dataset for error testing."""
    return np.array([])


@pytest.fixture(autouse=True)
def reset_random_seed():
    """Reset random seed before each test for reproducibility."""
    np.random.seed(42)
