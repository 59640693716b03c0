"""Orchestrator: read a contest's ballots, aggregate them and store the result."""

import logging
from dataclasses import dataclass, field
from typing import Any

# Import voting systems to register them
from fanvote.voting import borda  # noqa: F401
from fanvote.models import AggregateResult, Ballot
from fanvote.stores import BallotStore, ContestStore, ResultStore, result_key
from fanvote.voting import get_voting_system

logger = logging.getLogger(__name__)


class ResultsError(Exception):
    """Error while computing contest results."""
    pass


@dataclass
class BallotReport:
    """Structural check of a batch of ballots against the contest size."""
    entrant_count: int
    problems: list[dict[str, Any]] = field(default_factory=list)

    @property
    def malformed_count(self) -> int:
        return len(self.problems)

    def to_dict(self) -> dict[str, Any]:
        return {
            "entrant_count": self.entrant_count,
            "malformed_ballots": self.malformed_count,
            "problems": self.problems,
        }


def check_ballots(ballots: list[Ballot], entrant_count: int) -> BallotReport:
    """Collect structural problems per ballot without rejecting anything.

    Each malformed ballot gets its own entry, keyed by its position in
    ``ballots``, so a voter with several bad ballots is counted for each.
    """
    report = BallotReport(entrant_count=entrant_count)
    for index, ballot in enumerate(ballots):
        found = ballot.problems(entrant_count)
        if found:
            report.problems.append({
                "ballot": index,
                "voter_id": ballot.voter_id,
                "problems": found,
            })
    return report


def calculate_results(
    contest_id: str,
    ballots: list[Ballot],
    entrant_count: int,
    entrants: list[str] | None = None,
    method: str = "borda",
) -> AggregateResult:
    """Aggregate ballots with the voting system registered under ``method``.

    Raises:
        ResultsError: If no voting system is registered under ``method``
    """
    try:
        system = get_voting_system(method)
    except KeyError:
        raise ResultsError(f"Unknown voting method: {method}")
    return system.aggregate(contest_id, ballots, entrant_count, entrants)


def compute_contest_results(
    contest_id: str | int,
    contest_store: ContestStore,
    ballot_store: BallotStore,
    result_store: ResultStore,
    force: bool = False,
    method: str = "borda",
) -> AggregateResult:
    """Compute and save a contest's result, once.

    An existing result is returned untouched unless ``force`` is set, in which
    case it is recomputed from a full scan of the ballots and overwritten.

    Args:
        contest_id: Contest to compute
        contest_store: Source of the entrant list
        ballot_store: Source of all ballots cast
        result_store: Slot the result is written to
        force: Recompute even when a result exists

    Returns:
        The stored AggregateResult

    Raises:
        ResultsError: If the contest is unknown
    """
    contest_id = str(contest_id)
    key = result_key(contest_id, method)

    if not force:
        existing = result_store.get_result(key)
        if existing is not None:
            logger.debug("Result %s already computed at %s", key, existing.computed_at)
            return existing

    contest = contest_store.get_contest(contest_id)
    if contest is None:
        raise ResultsError(f"Contest not found: {contest_id}")

    ballots = ballot_store.list_ballots(contest_id)
    report = check_ballots(ballots, contest.entrant_count)
    if report.malformed_count:
        logger.warning(
            "Contest %s: %d of %d ballots are malformed",
            contest_id, report.malformed_count, len(ballots),
        )

    result = calculate_results(
        contest_id, ballots, contest.entrant_count, contest.entrants, method
    )
    result_store.put_result(key, result)
    logger.info(
        "Saved %s: %d ballots, %d points", key, result.ballot_count, result.total_points
    )
    return result
