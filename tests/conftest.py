"""
Shared fixtures for the reactorsim tests.
"""
import pytest

from reactorsim.gridio import build_reactor


def layout(rows):
    """Flatten rows of two-letter codes into the row-major list the reactor takes."""
    return [code for row in rows for code in row.split()]


def single_cell_with_vents():
    return layout([
        "XX VV XX",
        "VV U1 VV",
        "XX VV XX",
        "XX XX XX",
        "XX XX XX",
        "XX XX XX",
    ])


@pytest.fixture
def make_reactor():
    def _make(rows, **kwargs):
        return build_reactor(layout(rows), **kwargs)
    return _make


@pytest.fixture
def vented_cell():
    reactor = build_reactor(single_cell_with_vents())
    reactor.initialize_simulation()
    return reactor
