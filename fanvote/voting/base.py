"""Abstract base class for voting systems."""

from abc import ABC, abstractmethod
from collections.abc import Iterable

from fanvote.models import AggregateResult, Ballot


class VotingSystem(ABC):
    """Abstract base class for voting systems.

    Each voting system aggregates a batch of ranked ballots into an
    AggregateResult using its own algorithm. Systems are registered via the
    @register_voting_system decorator in fanvote/voting/__init__.py, keyed by
    ``key``, which also names the stored result (``contest_<id>_<key>``).
    """

    key: str = ""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name of this voting system."""
        pass

    @property
    def description(self) -> str:
        """Optional description of how this voting system works."""
        return ""

    @abstractmethod
    def aggregate(
        self,
        contest_id: str,
        ballots: Iterable[Ballot],
        entrant_count: int,
        entrants: list[str] | None = None,
    ) -> AggregateResult:
        """Aggregate ballots using this voting system.

        Args:
            contest_id: Contest the ballots belong to
            ballots: All ballots cast in the contest
            entrant_count: Number of entrants N in the contest
            entrants: Optional entrant ids in contest order; these appear in
                the result even when no ballot mentions them

        Returns:
            AggregateResult with point totals and normalized shares
        """
        pass
