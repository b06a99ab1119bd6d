"""
Pytest configuration and fixtures for spikeODE tests.

Fixture Naming Conventions:
    - *_solver: SolverConfig instances
    - *_params: Parameter dictionaries
    - run_membrane: helper driving a membrane over a stimulus sequence
"""

from typing import Callable, Iterable, List

import pytest

from spikeODE import (
    AdExpIFNeuron,
    ExpIFNeuron,
    IzhikevichIFNeuron,
    LeakyIFNeuron,
    SimpleIFNeuron,
    SolverConfig,
    SpikingMembrane,
)


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


# =============================================================================
# SOLVER FIXTURES
# =============================================================================


@pytest.fixture
def default_solver() -> SolverConfig:
    return SolverConfig()


@pytest.fixture
def fine_solver() -> SolverConfig:
    """RK4 with many sub-steps, close to the exact solution."""
    return SolverConfig(method="rk4", sub_steps=20)


# =============================================================================
# MEMBRANE FIXTURES
# =============================================================================


@pytest.fixture
def lif_params():
    return {
        "time_scale": 8.0,
        "resistance": 10.0,
        "rest_v": -70.0,
        "reset_v": -65.0,
        "firing_threshold_v": -50.0,
        "refractory_periods": 1,
    }


@pytest.fixture
def lif(lif_params) -> LeakyIFNeuron:
    return LeakyIFNeuron(**lif_params)


@pytest.fixture
def exp_if() -> ExpIFNeuron:
    return ExpIFNeuron()


@pytest.fixture
def adexp_if() -> AdExpIFNeuron:
    return AdExpIFNeuron()


@pytest.fixture
def izhikevich() -> IzhikevichIFNeuron:
    return IzhikevichIFNeuron()


@pytest.fixture
def simple_if() -> SimpleIFNeuron:
    return SimpleIFNeuron()


@pytest.fixture(params=["simple_if", "leaky_if", "exp_if", "adexp_if", "izhikevich_if"])
def any_membrane(request) -> SpikingMembrane:
    """Every membrane model with its typical parameters."""
    from spikeODE import create_membrane

    return create_membrane(request.param)


@pytest.fixture
def run_membrane() -> Callable[[SpikingMembrane, Iterable[float]], List[float]]:
    """Returns a function feeding each stimulus to the membrane and collecting outputs."""

    def _run(membrane: SpikingMembrane, stimuli: Iterable[float]) -> List[float]:
        return [membrane.compute(x) for x in stimuli]

    return _run
