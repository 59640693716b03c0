"""Shared fixtures for voting system tests."""

import pytest
from tests.conftest import make_ballots


@pytest.fixture
def unanimous():
    """Three identical ballots, 3 entrants.

         V1  V2  V3
    1     1   1   1
    2     2   2   2
    3     3   3   3

    Points (n=3): 1=9, 2=6, 3=3, total 18.
    """
    return make_ballots("7", {
        "V1": {"1": 1, "2": 2, "3": 3},
        "V2": {"1": 1, "2": 2, "3": 3},
        "V3": {"1": 1, "2": 2, "3": 3},
    })


@pytest.fixture
def clear_winner():
    """Clear winner, 3 voters, 4 entrants.

         V1  V2  V3
    A     1   1   2
    B     2   3   1
    C     3   2   3
    D     4   4   4

    Points (n=4): A=11, B=9, C=7, D=3, total 30.
    """
    return make_ballots("7", {
        "V1": {"A": 1, "B": 2, "C": 3, "D": 4},
        "V2": {"A": 1, "B": 3, "C": 2, "D": 4},
        "V3": {"A": 2, "B": 1, "C": 3, "D": 4},
    })


@pytest.fixture
def perfect_cycle():
    """Perfect cycle, 3 voters, 3 entrants.

         V1  V2  V3
    A     1   3   2
    B     2   1   3
    C     3   2   1

    Every entrant scores 6.
    """
    return make_ballots("7", {
        "V1": {"A": 1, "B": 2, "C": 3},
        "V2": {"A": 3, "B": 1, "C": 2},
        "V3": {"A": 2, "B": 3, "C": 1},
    })
