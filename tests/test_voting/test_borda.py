"""Tests for the modified Borda count voting system."""

import random

from tests.conftest import make_ballots, ranking_names

from fanvote.models import Ballot, RankEntry
from fanvote.voting import get_all_voting_systems, get_voting_system
from fanvote.voting.borda import ModifiedBordaCount, aggregate


class TestModifiedBordaCount:
    def setup_method(self):
        self.system = ModifiedBordaCount()

    def test_name(self):
        assert self.system.name == "Modified Borda Count"

    def test_registered_under_key(self):
        assert isinstance(get_voting_system("borda"), ModifiedBordaCount)

    def test_listed_with_all_systems(self):
        assert "borda" in [s.key for s in get_all_voting_systems()]

    def test_points_for_rank(self):
        assert self.system.points_for_rank(1, 3) == 3
        assert self.system.points_for_rank(3, 3) == 1

    def test_unanimous_scores(self, unanimous):
        """Three identical ballots: 1=9, 2=6, 3=3 out of 18."""
        result = self.system.aggregate("7", unanimous, 3)
        assert result.points_by_entrant == {"1": 9, "2": 6, "3": 3}
        assert result.total_points == 18
        assert result.ballot_count == 3

    def test_unanimous_shares(self, unanimous):
        result = self.system.aggregate("7", unanimous, 3)
        assert result.share_by_entrant == {"1": 5.0, "2": 3.33, "3": 1.67}

    def test_clear_winner(self, clear_winner):
        """A=11, B=9, C=7, D=3 → A, B, C, D."""
        result = self.system.aggregate("7", clear_winner, 4)
        assert result.points_by_entrant == {"A": 11, "B": 9, "C": 7, "D": 3}
        assert ranking_names(result) == ["A", "B", "C", "D"]

    def test_total_matches_sum_of_points(self, clear_winner):
        result = self.system.aggregate("7", clear_winner, 4)
        assert sum(result.points_by_entrant.values()) == result.total_points == 30

    def test_shares_sum_to_ten(self, clear_winner):
        result = self.system.aggregate("7", clear_winner, 4)
        assert abs(sum(result.share_by_entrant.values()) - 10.0) <= 0.05

    def test_share_is_points_over_total(self, clear_winner):
        result = self.system.aggregate("7", clear_winner, 4)
        for entrant, points in result.points_by_entrant.items():
            expected = round(points / result.total_points * 10, 2)
            assert result.share_by_entrant[entrant] == expected

    def test_no_ballots(self):
        """Zero ballots give a zero-valued result, not an error."""
        result = self.system.aggregate("7", [], 3)
        assert result.total_points == 0
        assert result.ballot_count == 0
        assert result.points_by_entrant == {}
        assert result.share_by_entrant == {}

    def test_no_ballots_with_entrants(self):
        result = self.system.aggregate("7", [], 3, entrants=["1", "2", "3"])
        assert result.points_by_entrant == {"1": 0, "2": 0, "3": 0}
        assert result.share_by_entrant == {"1": 0.0, "2": 0.0, "3": 0.0}

    def test_entrants_seed_key_order(self, unanimous):
        result = self.system.aggregate("7", unanimous, 3, entrants=["3", "2", "1"])
        assert list(result.points_by_entrant) == ["3", "2", "1"]
        assert ranking_names(result) == ["1", "2", "3"]

    def test_perfect_cycle_keeps_insertion_order(self, perfect_cycle):
        """All entrants score 6; ties stay in first-seen order and are flagged."""
        result = self.system.aggregate("7", perfect_cycle, 3)
        assert set(result.points_by_entrant.values()) == {6}
        ranking = result.ranking()
        assert [p.name for p in ranking] == ["A", "B", "C"]
        assert [p.rank for p in ranking] == [1, 2, 3]
        assert all(p.tied for p in ranking)

    def test_order_invariant(self, clear_winner):
        """Shuffling the ballots never changes the totals."""
        expected = self.system.aggregate("7", clear_winner, 4)
        rng = random.Random(42)
        for _ in range(10):
            shuffled = clear_winner[:]
            rng.shuffle(shuffled)
            result = self.system.aggregate("7", shuffled, 4)
            assert result.points_by_entrant == expected.points_by_entrant
            assert result.total_points == expected.total_points

    def test_share_sum_with_many_entrants(self):
        entrants = [f"E{i}" for i in range(20)]
        rng = random.Random(7)
        ballots = []
        for voter in range(40):
            order = entrants[:]
            rng.shuffle(order)
            ballots.append(Ballot.from_ranking("7", f"V{voter}", order))
        result = self.system.aggregate("7", ballots, 20)
        assert abs(sum(result.share_by_entrant.values()) - 10.0) <= 0.05

    def test_malformed_ballot_is_taken_as_is(self):
        """No validation: a duplicated rank still earns points."""
        ballot = Ballot("7", "V1", (RankEntry("A", 1), RankEntry("B", 1)))
        result = self.system.aggregate("7", [ballot], 2)
        assert result.points_by_entrant == {"A": 2, "B": 2}

    def test_details_has_expected_keys(self, clear_winner):
        result = self.system.aggregate("7", clear_winner, 4)
        assert result.details["entrant_count"] == 4
        assert result.details["max_possible"] == 12

    def test_accepts_generator(self, unanimous):
        result = self.system.aggregate("7", (b for b in unanimous), 3)
        assert result.ballot_count == 3
        assert result.total_points == 18


class TestAggregateFunction:
    def test_matches_system(self):
        ballots = make_ballots("9", {
            "V1": {"X": 1, "Y": 2},
            "V2": {"X": 2, "Y": 1},
            "V3": {"X": 1, "Y": 2},
        })
        result = aggregate("9", ballots, 2)
        assert result.contest_id == "9"
        assert result.method == "borda"
        assert result.points_by_entrant == {"X": 5, "Y": 4}
        assert ranking_names(result) == ["X", "Y"]
