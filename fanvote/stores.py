"""Storage interfaces the core reads and writes through.

The contest store is read-only to the core, the ballot store is append-only,
and the result store holds one slot per contest. The in-memory versions back
the tests, the scripts and the serverless handler.
"""

from collections import defaultdict
from typing import Protocol

from fanvote.models import AggregateResult, Ballot, Contest


def result_key(contest_id: str | int, method: str = "borda") -> str:
    """Key of the result slot for a contest, e.g. ``contest_7_borda``."""
    return f"contest_{contest_id}_{method}"


class ContestStore(Protocol):
    def get_contest(self, contest_id: str) -> Contest | None: ...


class BallotStore(Protocol):
    def add_ballot(self, ballot: Ballot) -> None: ...

    def list_ballots(self, contest_id: str) -> list[Ballot]: ...


class ResultStore(Protocol):
    def get_result(self, key: str) -> AggregateResult | None: ...

    def put_result(self, key: str, result: AggregateResult) -> None: ...


class InMemoryContestStore:
    def __init__(self, contests: list[Contest] | None = None):
        self._contests = {c.contest_id: c for c in contests or []}

    def add_contest(self, contest: Contest) -> None:
        self._contests[contest.contest_id] = contest

    def get_contest(self, contest_id: str) -> Contest | None:
        return self._contests.get(str(contest_id))


class InMemoryBallotStore:
    def __init__(self):
        self._ballots: dict[str, list[Ballot]] = defaultdict(list)

    def add_ballot(self, ballot: Ballot) -> None:
        self._ballots[ballot.contest_id].append(ballot)

    def list_ballots(self, contest_id: str) -> list[Ballot]:
        return list(self._ballots.get(str(contest_id), []))


class InMemoryResultStore:
    def __init__(self):
        self._results: dict[str, AggregateResult] = {}

    def get_result(self, key: str) -> AggregateResult | None:
        return self._results.get(key)

    def put_result(self, key: str, result: AggregateResult) -> None:
        self._results[key] = result

    def list_results(self) -> list[AggregateResult]:
        return list(self._results.values())
