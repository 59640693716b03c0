"""Tests for the JSON ranking document importer."""

from datetime import UTC, datetime

import pytest

from fanvote.importers.base import BallotFormatError
from fanvote.importers.documents import (
    DocumentExportImporter,
    ballot_from_document,
    ballots_from_documents,
)


class TestBallotFromDocument:
    def test_app_document_shape(self, ranking_documents):
        ballot = ballot_from_document(ranking_documents[0])
        assert ballot.contest_id == "7"
        assert ballot.voter_id == "uid-1"
        assert ballot.ranks == {"12": 1, "4": 2, "9": 3}
        assert ballot.submitted_at == datetime(2025, 7, 19, 21, 4, 11, 512000, tzinfo=UTC)

    def test_normalized_shape(self):
        ballot = ballot_from_document({
            "voter_id": "v",
            "contest_id": "7",
            "entries": [{"entrant_id": "a", "rank": 2}, {"entrant_id": "b", "rank": 1}],
        })
        assert [(e.entrant_id, e.rank) for e in ballot.entries] == [("a", 2), ("b", 1)]
        assert ballot.submitted_at is None

    def test_missing_voter(self):
        with pytest.raises(BallotFormatError, match="voter"):
            ballot_from_document({"id_contest": 7, "rankings": []})

    def test_entry_without_rank(self):
        with pytest.raises(BallotFormatError, match="rank"):
            ballot_from_document({
                "id_ranker": "u", "id_contest": 7, "rankings": [{"id_ensemble": 1}],
            })

    def test_non_integer_rank(self):
        with pytest.raises(BallotFormatError, match="not an integer"):
            ballot_from_document({
                "id_ranker": "u", "id_contest": 7,
                "rankings": [{"id_ensemble": 1, "rank": "first"}],
            })

    def test_bad_timestamp(self):
        with pytest.raises(BallotFormatError, match="timestamp"):
            ballot_from_document({
                "id_ranker": "u", "id_contest": 7, "rankings": [], "timestamp": "yesterday",
            })

    def test_not_an_object(self):
        with pytest.raises(BallotFormatError):
            ballot_from_document(["u", 7])

    def test_entry_not_an_object(self):
        with pytest.raises(BallotFormatError, match="should be an object"):
            ballot_from_document({"id_ranker": "u", "id_contest": 7, "rankings": [12]})

    def test_entries_not_a_list(self):
        with pytest.raises(BallotFormatError, match="should be a list"):
            ballot_from_document({"id_ranker": "u", "id_contest": 7, "rankings": "12,4,9"})

    def test_documents_not_a_list(self):
        with pytest.raises(BallotFormatError, match="list of ranking documents"):
            ballots_from_documents(None)

    def test_error_names_ballot_position(self, ranking_documents):
        ranking_documents.append({"id_contest": 7})
        with pytest.raises(BallotFormatError, match="Ballot #3"):
            ballots_from_documents(ranking_documents)


class TestDocumentExportImporter:
    def setup_method(self):
        self.importer = DocumentExportImporter()

    def test_can_parse_json_url(self):
        assert self.importer.can_parse("https://example.com/exports/rankings.json")
        assert self.importer.can_parse("rankings.JSON?token=abc")

    def test_cannot_parse_csv(self):
        assert not self.importer.can_parse("rankings.csv")

    def test_can_parse_content(self, documents_json):
        assert self.importer.can_parse_content(documents_json, "export")
        assert self.importer.can_parse_content(b'  {"rankings": []}', "export")
        assert not self.importer.can_parse_content(b"voter_id,contest_id", "export")

    def test_parse_list(self, documents_json):
        ballots = self.importer.parse("rankings.json", documents_json)
        assert [b.voter_id for b in ballots] == ["uid-1", "uid-2"]

    def test_parse_wrapped(self):
        content = b'{"ballots": [{"voter_id": "v", "contest_id": "1", "entries": []}]}'
        ballots = self.importer.parse("export.json", content)
        assert len(ballots) == 1

    def test_invalid_json(self):
        with pytest.raises(BallotFormatError, match="not valid JSON"):
            self.importer.parse("export.json", b"[{")

    def test_wrong_top_level(self):
        with pytest.raises(BallotFormatError, match="list of ranking documents"):
            self.importer.parse("export.json", b'{"results": {}}')
