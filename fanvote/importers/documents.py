"""Importer for JSON exports of ranking documents.

Each document is one submitted ballot, as written by the voting app::

    {
        "id_ranker": "<anonymous uid>",
        "id_contest": 7,
        "rankings": [{"id_ensemble": 12, "rank": 1}, ...],
        "timestamp": "2025-07-19T21:04:11.512Z"
    }

Already-normalized documents (``voter_id``, ``contest_id``, ``entries`` of
``entrant_id``/``rank`` and ``submitted_at``) are accepted too. The export is
either a list of documents or an object with a ``rankings`` or ``ballots``
list.
"""

import json
from typing import Any

from fanvote.importers import register_importer
from fanvote.importers.base import BallotFormatError, BallotImporter, parse_timestamp
from fanvote.models import Ballot, RankEntry


def ballot_from_document(document: dict[str, Any]) -> Ballot:
    """Build a Ballot from one ranking document.

    Raises:
        BallotFormatError: If a required field is missing or malformed
    """
    if not isinstance(document, dict):
        raise BallotFormatError(f"Expected an object, got {type(document).__name__}")

    voter_id = document.get("voter_id", document.get("id_ranker"))
    contest_id = document.get("contest_id", document.get("id_contest"))
    items = document.get("entries", document.get("rankings"))
    if voter_id is None or contest_id is None or items is None:
        raise BallotFormatError(
            "Ballot needs a voter (voter_id/id_ranker), a contest "
            "(contest_id/id_contest) and entries (entries/rankings)"
        )

    if not isinstance(items, list):
        raise BallotFormatError(f"Entries should be a list, got {type(items).__name__}")

    entries = []
    for item in items:
        if not isinstance(item, dict):
            raise BallotFormatError(f"Ranking entry should be an object: {item!r}")
        entrant = item.get("entrant_id", item.get("id_ensemble"))
        rank = item.get("rank")
        if entrant is None or rank is None:
            raise BallotFormatError(f"Ranking entry needs an entrant and a rank: {item!r}")
        try:
            entries.append(RankEntry(entrant_id=str(entrant), rank=int(rank)))
        except (TypeError, ValueError) as e:
            raise BallotFormatError(f"Rank is not an integer: {rank!r}") from e

    return Ballot(
        contest_id=str(contest_id),
        voter_id=str(voter_id),
        entries=tuple(entries),
        submitted_at=parse_timestamp(document.get("submitted_at", document.get("timestamp"))),
    )


def ballots_from_documents(documents: list[dict[str, Any]]) -> list[Ballot]:
    if not isinstance(documents, list):
        raise BallotFormatError(
            f"Ballots should be a list of ranking documents, got {type(documents).__name__}"
        )
    ballots = []
    for index, document in enumerate(documents):
        try:
            ballots.append(ballot_from_document(document))
        except BallotFormatError as e:
            raise BallotFormatError(f"Ballot #{index + 1}: {e}") from e
    return ballots


@register_importer
class DocumentExportImporter(BallotImporter):
    """Reads JSON exports of ranking documents."""

    def can_parse(self, source: str) -> bool:
        return source.lower().split("?")[0].endswith(".json")

    def can_parse_content(self, content: bytes, filename: str) -> bool:
        head = content.lstrip()[:1]
        return head in (b"[", b"{")

    def parse(self, source: str, content: bytes) -> list[Ballot]:
        try:
            data = json.loads(content.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise BallotFormatError(f"{source} is not valid JSON: {e}") from e

        if isinstance(data, dict):
            data = data.get("rankings", data.get("ballots"))
        if not isinstance(data, list):
            raise BallotFormatError(
                f"{source} should hold a list of ranking documents"
            )
        return ballots_from_documents(data)
