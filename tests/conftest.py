"""Shared fixtures for sipuri tests."""

import pytest

from sipuri import parse, parse_lazy


@pytest.fixture(params=[parse, parse_lazy], ids=["eager", "lazy"])
def parse_func(request):
    """Run a test against both the eager and the lazy parser."""
    return request.param
