"""Tabular, CSV and JSON views of an aggregate result."""

import csv
import io
import json
from typing import Any

from fanvote.models import AggregateResult

CSV_HEADERS = ["Rank", "Entrant ID", "Borda Points", "% of Total", "GE Score"]


def format_results_for_table(result: AggregateResult | None) -> list[dict[str, Any]]:
    """Rows for a results table, best entrant first.

    Returns an empty list when there is no result.
    """
    if result is None:
        return []

    rows = []
    for placement in result.ranking():
        percentage = (
            round(placement.points / result.total_points * 100, 2)
            if result.total_points > 0
            else 0.0
        )
        rows.append({
            "rank": placement.rank,
            "entrant_id": placement.name,
            "borda_points": placement.points,
            "percentage": percentage,
            "ge_score": f"{placement.share:.2f}",
            "tied": placement.tied,
        })
    return rows


def export_to_csv(result: AggregateResult) -> str:
    """Render the results table as CSV, preceded by a short metadata block."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")

    writer.writerow(["Contest ID", result.contest_id])
    writer.writerow(["Calculated At", result.computed_at.isoformat()])
    writer.writerow(["Total Borda Points", result.total_points])
    writer.writerow(["Ballots", result.ballot_count])
    writer.writerow([])

    writer.writerow(CSV_HEADERS)
    for row in format_results_for_table(result):
        writer.writerow([
            row["rank"],
            row["entrant_id"],
            row["borda_points"],
            row["percentage"],
            row["ge_score"],
        ])
    return buffer.getvalue()


def export_to_json(result: AggregateResult) -> str:
    return json.dumps(result.to_dict(), indent=2)
