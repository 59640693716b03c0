"""Importer for flat CSV exports, one row per ballot entry.

Columns: ``voter_id``, ``contest_id``, ``entrant_id``, ``rank`` and an
optional ``submitted_at``. Rows sharing a voter and contest form one ballot.
"""

import csv
import io

from fanvote.importers import register_importer
from fanvote.importers.base import BallotFormatError, BallotImporter, parse_timestamp
from fanvote.models import Ballot, RankEntry

REQUIRED_COLUMNS = {"voter_id", "contest_id", "entrant_id", "rank"}


@register_importer
class CsvExportImporter(BallotImporter):
    """Reads one-row-per-entry CSV exports."""

    def can_parse(self, source: str) -> bool:
        return source.lower().split("?")[0].endswith(".csv")

    def can_parse_content(self, content: bytes, filename: str) -> bool:
        first_line = content.lstrip().split(b"\n", 1)[0].decode("utf-8-sig", errors="ignore")
        columns = {c.strip() for c in first_line.split(",")}
        return REQUIRED_COLUMNS <= columns

    def parse(self, source: str, content: bytes) -> list[Ballot]:
        try:
            text = content.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise BallotFormatError(f"{source} is not UTF-8 text: {e}") from e

        reader = csv.DictReader(io.StringIO(text))
        missing = REQUIRED_COLUMNS - set(reader.fieldnames or [])
        if missing:
            raise BallotFormatError(
                f"{source} is missing columns: {', '.join(sorted(missing))}"
            )

        # (contest_id, voter_id) -> [entries, submitted_at], in first-seen order
        grouped: dict[tuple[str, str], list] = {}
        for line_number, row in enumerate(reader, start=2):
            # Short rows leave trailing cells as None
            empty = sorted(c for c in REQUIRED_COLUMNS if not (row[c] or "").strip())
            if empty:
                raise BallotFormatError(
                    f"Line {line_number}: missing values for {', '.join(empty)}"
                )
            key = (row["contest_id"].strip(), row["voter_id"].strip())
            try:
                entry = RankEntry(row["entrant_id"].strip(), int(row["rank"]))
            except (TypeError, ValueError) as e:
                raise BallotFormatError(
                    f"Line {line_number}: rank is not an integer: {row['rank']!r}"
                ) from e
            if key not in grouped:
                grouped[key] = [[], parse_timestamp(row.get("submitted_at"))]
            grouped[key][0].append(entry)

        return [
            Ballot(contest_id, voter_id, tuple(entries), submitted_at)
            for (contest_id, voter_id), (entries, submitted_at) in grouped.items()
        ]
