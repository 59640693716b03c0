"""Shared test helpers and ballot export fixtures."""

import json

import pytest

from fanvote.models import AggregateResult, Ballot


def make_ballots(contest_id: str, rankings_table: dict[str, dict[str, int]]) -> list[Ballot]:
    """Build ballots from a compact rankings table.

    Args:
        contest_id: Contest the ballots belong to
        rankings_table: {voter_id: {entrant_id: rank}}

    Returns:
        One Ballot per voter, entries in the table's order.
    """
    return [
        Ballot.from_ranking(
            contest_id,
            voter,
            sorted(ranks, key=lambda entrant: ranks[entrant]),
        )
        for voter, ranks in rankings_table.items()
    ]


def ranking_names(result: AggregateResult) -> list[str]:
    """Entrant ids in final ranked order."""
    return [p.name for p in result.ranking()]


@pytest.fixture
def ranking_documents():
    """Two ballots in the app's document export shape."""
    return [
        {
            "id_ranker": "uid-1",
            "id_contest": 7,
            "rankings": [
                {"id_ensemble": 12, "rank": 1},
                {"id_ensemble": 4, "rank": 2},
                {"id_ensemble": 9, "rank": 3},
            ],
            "timestamp": "2025-07-19T21:04:11.512Z",
        },
        {
            "id_ranker": "uid-2",
            "id_contest": 7,
            "rankings": [
                {"id_ensemble": 4, "rank": 1},
                {"id_ensemble": 12, "rank": 2},
                {"id_ensemble": 9, "rank": 3},
            ],
            "timestamp": "2025-07-19T21:05:00Z",
        },
    ]


@pytest.fixture
def documents_json(ranking_documents):
    return json.dumps(ranking_documents).encode("utf-8")


@pytest.fixture
def ballots_csv():
    return (
        "voter_id,contest_id,entrant_id,rank,submitted_at\n"
        "uid-1,7,12,1,2025-07-19T21:04:11Z\n"
        "uid-1,7,4,2,2025-07-19T21:04:11Z\n"
        "uid-1,7,9,3,2025-07-19T21:04:11Z\n"
        "uid-2,7,4,1,\n"
        "uid-2,7,12,2,\n"
        "uid-2,7,9,3,\n"
    ).encode("utf-8")
