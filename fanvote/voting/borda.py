"""Modified Borda count voting system."""

from collections.abc import Iterable
from datetime import UTC, datetime

from fanvote.models import AggregateResult, Ballot
from fanvote.voting import register_voting_system
from fanvote.voting.base import VotingSystem

SHARE_SCALE = 10


@register_voting_system
class ModifiedBordaCount(VotingSystem):
    """Modified Borda count voting system.

    Each rank position awards points:
    - 1st place = n points
    - 2nd place = n-1 points
    - ...
    - Last place = 1 point

    Where n is the number of entrants. Points are summed across all ballots
    and each entrant's share of the total is scaled to 10.0 (the "GE score").

    No tiebreaker is applied: entrants with equal points keep the order in
    which they were first seen, and the ranked table flags them as tied.
    Ballots are taken as-is; checking that each one is a dense 1..n ranking
    is the submitter's job.
    """

    key = "borda"

    @property
    def name(self) -> str:
        return "Modified Borda Count"

    @property
    def description(self) -> str:
        return "Points-based system: 1st = n pts, 2nd = n-1 pts, ..., last = 1 pt"

    @staticmethod
    def points_for_rank(rank: int, entrant_count: int) -> int:
        return entrant_count - rank + 1

    @staticmethod
    def compute_shares(points: dict[str, int], total: int) -> dict[str, float]:
        """Scale point totals so they sum to 10.0, rounded to 2 places."""
        if total == 0:
            return {entrant: 0.0 for entrant in points}
        return {
            entrant: round(score / total * SHARE_SCALE, 2)
            for entrant, score in points.items()
        }

    def aggregate(
        self,
        contest_id: str,
        ballots: Iterable[Ballot],
        entrant_count: int,
        entrants: list[str] | None = None,
    ) -> AggregateResult:
        points: dict[str, int] = {entrant: 0 for entrant in entrants or []}
        total = 0
        ballot_count = 0

        for ballot in ballots:
            ballot_count += 1
            for entry in ballot.entries:
                awarded = self.points_for_rank(entry.rank, entrant_count)
                points[entry.entrant_id] = points.get(entry.entrant_id, 0) + awarded
                total += awarded

        return AggregateResult(
            contest_id=str(contest_id),
            points_by_entrant=points,
            share_by_entrant=self.compute_shares(points, total),
            total_points=total,
            ballot_count=ballot_count,
            computed_at=datetime.now(UTC),
            method=self.key,
            details={
                "entrant_count": entrant_count,
                "max_possible": entrant_count * ballot_count,
            },
        )


def aggregate(
    contest_id: str,
    ballots: Iterable[Ballot],
    entrant_count: int,
    entrants: list[str] | None = None,
) -> AggregateResult:
    """Aggregate ballots with the modified Borda count."""
    return ModifiedBordaCount().aggregate(contest_id, ballots, entrant_count, entrants)
