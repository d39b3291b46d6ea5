"""Shared fixtures for PHC tests."""

import pytest

from phc.engine.schema import ParameterDescriptor, Schema
from phc.engine.validators import positive_decimal


@pytest.fixture
def mtp_schema():
    """Three required parameters m, t, p followed by an optional keyid."""
    return Schema(
        function_names=("test-fn",),
        descriptors=(
            ParameterDescriptor("m", validator=positive_decimal),
            ParameterDescriptor("t", validator=positive_decimal),
            ParameterDescriptor("p", validator=positive_decimal),
            ParameterDescriptor("keyid", default="none", optional=True),
        ),
    )
