"""Shared fixtures for co-benefits tests."""

import pytest

from cobenefits.data import index_from_text
from cobenefits.filters import SelectionState


SCENARIO_TEXT = "small_area;air_quality;sum\nA;2,5;10\nB;1,0;20\n"

# Reference ranking (sum):            A(30) B(20) D(20) C(10)
# Selected ranking (air_quality+noise): B(9)  A(3)  D(3)  C(-0.5)
DIVERGENT_TEXT = (
    "small_area;air_quality;noise;sum\n"
    "A;1;2;30\n"
    "B;5;4;20\n"
    "C;-1;0,5;10\n"
    "D;3;;20\n"
)


@pytest.fixture()
def scenario_text():
    return SCENARIO_TEXT


@pytest.fixture()
def divergent_text():
    return DIVERGENT_TEXT


@pytest.fixture()
def scenario_index():
    return index_from_text(SCENARIO_TEXT)


@pytest.fixture()
def divergent_index():
    return index_from_text(DIVERGENT_TEXT)


@pytest.fixture()
def two_benefits():
    """Selection of air_quality then noise, all regions."""
    return SelectionState(selected_benefits=("air_quality", "noise"), top_n=3)


@pytest.fixture()
def empty_selection():
    return SelectionState(selected_benefits=())
