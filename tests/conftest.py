"""Pytest fixtures for sysid preprocessing tests."""

import numpy as np
import pytest

from sysid.frame import IdentificationFrame
from tests.data.synthetic import generate_io_frame


@pytest.fixture
def trend_frame():
    """Two outputs and one input with known linear trends."""
    return generate_io_frame(
        n_samples=200,
        n_outputs=2,
        n_inputs=1,
        interval=0.5,
        start=10.0,
        offsets=[5.0, -3.0, 100.0],
        slopes=[0.2, -1.5, 0.05],
        noise_level=0.1,
    )


@pytest.fixture
def missing_frame():
    """Frame with interior gaps in every channel."""
    return generate_io_frame(n_samples=100, n_outputs=2, n_inputs=2, missing_rate=0.1)


@pytest.fixture
def output_only_frame():
    """Frame without input channels."""
    return generate_io_frame(n_samples=50, n_outputs=2, n_inputs=0)


@pytest.fixture
def ramp_frame():
    """One output and one input, values equal to the sample index."""
    values = np.arange(100, dtype=float)
    return IdentificationFrame.from_arrays(
        output=values,
        input=values * 2,
        interval=0.5,
        start=0.0,
        output_names=["level"],
        input_names=["valve"],
    )


@pytest.fixture
def default_config():
    """Get default configuration."""
    from sysid.config import SysIdConfig
    return SysIdConfig()
