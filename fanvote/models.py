"""Core data models for contests, ballots and aggregate results."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Self

from fanvote.venue import DEFAULT_RADIUS_YARDS, Coordinate, PresenceResult, verify_presence


@dataclass(frozen=True)
class RankEntry:
    """One (entrant, rank) pair on a ballot. Rank 1 is the voter's favourite."""
    entrant_id: str
    rank: int


@dataclass(frozen=True)
class Ballot:
    """One submitted ranking.

    Attributes:
        contest_id: Contest the ballot was cast in
        voter_id: Opaque anonymous id, unique per device/session
        entries: Ranked entries in submission order
        submitted_at: When the ballot was submitted, if known

    Example:
        >>> ballot = Ballot.from_ranking("7", "voter-1", ["12", "4", "9"])
        >>> [(e.entrant_id, e.rank) for e in ballot.entries]
        [('12', 1), ('4', 2), ('9', 3)]
    """
    contest_id: str
    voter_id: str
    entries: tuple[RankEntry, ...]
    submitted_at: datetime | None = None

    @classmethod
    def from_ranking(
        cls,
        contest_id: str,
        voter_id: str,
        ordered: list[str],
        submitted_at: datetime | None = None,
    ) -> Self:
        """Build a ballot from entrant ids listed 1st to last."""
        entries = tuple(
            RankEntry(entrant_id=entrant, rank=position)
            for position, entrant in enumerate(ordered, start=1)
        )
        return cls(contest_id, voter_id, entries, submitted_at)

    @property
    def ranks(self) -> dict[str, int]:
        return {entry.entrant_id: entry.rank for entry in self.entries}

    def problems(self, entrant_count: int) -> list[str]:
        """List structural defects of this ballot.

        A well-formed ballot ranks each entrant once, with ranks forming the
        dense sequence 1..entrant_count. Nothing is raised; an empty list
        means the ballot is well formed.
        """
        found = []
        entrant_ids = [entry.entrant_id for entry in self.entries]
        duplicates = sorted({e for e in entrant_ids if entrant_ids.count(e) > 1})
        if duplicates:
            found.append(f"entrant ranked more than once: {', '.join(duplicates)}")

        ranks = sorted(entry.rank for entry in self.entries)
        if len(self.entries) != entrant_count:
            found.append(
                f"expected {entrant_count} entries, got {len(self.entries)}"
            )
        if ranks != list(range(1, len(ranks) + 1)):
            found.append(f"ranks are not a dense 1..{len(ranks)} sequence: {ranks}")
        return found

    def is_well_formed(self, entrant_count: int) -> bool:
        return not self.problems(entrant_count)


@dataclass
class Contest:
    """A contest as held by the contest store.

    Attributes:
        contest_id: Contest identifier
        entrants: Entrant ids in programme order
        venue: Venue location, when the contest has one on record
    """
    contest_id: str
    entrants: list[str]
    venue: Coordinate | None = None

    @property
    def entrant_count(self) -> int:
        return len(self.entrants)

    def check_presence(
        self, current: Coordinate, radius_yards: float = DEFAULT_RADIUS_YARDS
    ) -> PresenceResult:
        """Whether ``current`` is at this contest's venue.

        A contest with no venue on record never verifies (reason ``error``).
        """
        return verify_presence(current, self.venue, radius_yards)


@dataclass
class Placement:
    """An entrant's row in a ranked results table.

    Attributes:
        name: Entrant identifier
        rank: 1-indexed position in the table
        tied: Whether this entrant shares its point total with a neighbour
        points: Borda points
        share: Points normalized to the 10.0 scale
    """
    name: str
    rank: int
    tied: bool
    points: int = 0
    share: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "rank": self.rank,
            "tied": self.tied,
            "points": self.points,
            "share": self.share,
        }

    @classmethod
    def build_ranking(
        cls, points: dict[str, int], shares: dict[str, float] | None = None
    ) -> list[Self]:
        """Build the ranked table from a points mapping.

        Entrants are ordered by descending points. Entrants with equal points
        keep the mapping's insertion order; no secondary key is invented.

        Args:
            points: Entrant id -> points, in insertion order
            shares: Optional entrant id -> share

        Returns:
            List of Placement objects, one per entrant.
        """
        shares = shares or {}
        ordered = sorted(points, key=lambda e: points[e], reverse=True)

        placements = []
        for index, entrant in enumerate(ordered):
            score = points[entrant]
            tied = (
                (index > 0 and points[ordered[index - 1]] == score)
                or (index + 1 < len(ordered) and points[ordered[index + 1]] == score)
            )
            placements.append(cls(
                name=entrant,
                rank=index + 1,
                tied=tied,
                points=score,
                share=shares.get(entrant, 0.0),
            ))

        return placements


@dataclass
class AggregateResult:
    """The computed outcome for one contest.

    Attributes:
        contest_id: Contest the ballots belong to
        points_by_entrant: Entrant id -> integer points, in first-seen order
        share_by_entrant: Entrant id -> points scaled so all shares sum to 10.0
        total_points: Sum of all awarded points
        ballot_count: Number of ballots aggregated
        computed_at: When the aggregation ran
        method: Key of the voting system that produced the result
    """
    contest_id: str
    points_by_entrant: dict[str, int]
    share_by_entrant: dict[str, float]
    total_points: int
    ballot_count: int
    computed_at: datetime
    method: str = "borda"
    details: dict[str, Any] = field(default_factory=dict)

    def ranking(self) -> list[Placement]:
        return Placement.build_ranking(self.points_by_entrant, self.share_by_entrant)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the stored results document shape."""
        return {
            "id_contest": self.contest_id,
            "method": self.method,
            "borda_count_scores": dict(self.points_by_entrant),
            "general_effect_scores": dict(self.share_by_entrant),
            "total_borda_points": self.total_points,
            "vote_count": self.ballot_count,
            "calculated_at": self.computed_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Read a stored results document back."""
        return cls(
            contest_id=str(data["id_contest"]),
            points_by_entrant={
                str(k): int(v) for k, v in data.get("borda_count_scores", {}).items()
            },
            share_by_entrant={
                str(k): float(v) for k, v in data.get("general_effect_scores", {}).items()
            },
            total_points=int(data.get("total_borda_points", 0)),
            ballot_count=int(data.get("vote_count", 0)),
            computed_at=datetime.fromisoformat(data["calculated_at"]),
            method=data.get("method", "borda"),
        )
