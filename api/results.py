"""Vercel serverless function for computing contest results."""

import json
import sys
from pathlib import Path
from urllib.parse import urlparse

import httpx

# Add the project root to the path so we can import fanvote modules
sys.path.insert(0, str(Path(__file__).parent.parent))

# Import importers to register them
from fanvote.importers import csv_rows  # noqa: F401
from fanvote.importers import documents  # noqa: F401

from fanvote.export import export_to_csv, format_results_for_table
from fanvote.importers import detect_importer, detect_importer_by_content
from fanvote.importers.base import BallotFormatError
from fanvote.importers.documents import ballots_from_documents
from fanvote.log import configure_logging
from fanvote.results import ResultsError, calculate_results, check_ballots

logger = configure_logging()


def handler(request):
    """Handle incoming requests to compute contest results.

    Accepts POST with JSON body:
        {
            "contest_id": "7",
            "entrants": ["12", "4", "9"],        (optional)
            "entrant_count": 3,                  (optional)
            "ballots": [<ranking documents>],    (or "url")
            "url": "https://.../rankings.json",  (JSON or CSV export)
            "format": "json" | "csv",            (default json)
            "strict": false
        }

    Returns the aggregate result as JSON (with a ranked table) or CSV.
    """
    # Handle CORS preflight
    if request.method == "OPTIONS":
        return create_response(
            "",
            status=204,
            headers={
                "Access-Control-Allow-Origin": "*",
                "Access-Control-Allow-Methods": "POST, OPTIONS",
                "Access-Control-Allow-Headers": "Content-Type",
            },
        )

    if request.method != "POST":
        return create_response(
            {"error": "Method not allowed. Use POST."},
            status=405,
        )

    try:
        data = json.loads(request.body.decode("utf-8"))
        if not isinstance(data, dict):
            return create_response({"error": "Request body must be a JSON object"}, status=400)

        contest_id = data.get("contest_id")
        if contest_id is None:
            return create_response({"error": "Missing 'contest_id' in request body"}, status=400)
        contest_id = str(contest_id)

        if "ballots" in data:
            ballots = ballots_from_documents(data["ballots"])
        elif data.get("url"):
            source, content = fetch_url(data["url"])
            ballots = import_ballots(source, content)
        else:
            return create_response(
                {"error": "Provide either 'ballots' or 'url' in request body"},
                status=400,
            )

        ballots = [b for b in ballots if b.contest_id == contest_id]
        entrants = [str(e) for e in data.get("entrants") or []] or None
        entrant_count = resolve_entrant_count(data, entrants, ballots)

        report = check_ballots(ballots, entrant_count)
        if data.get("strict") and report.malformed_count:
            return create_response(
                {"error": "Malformed ballots", **report.to_dict()},
                status=400,
            )

        result = calculate_results(contest_id, ballots, entrant_count, entrants)

        if data.get("format") == "csv":
            return create_response(
                export_to_csv(result),
                headers={"Content-Type": "text/csv"},
            )

        body = result.to_dict()
        body["table"] = format_results_for_table(result)
        body["warnings"] = report.to_dict()
        return create_response(body)

    except (BallotFormatError, ResultsError) as e:
        return create_response(
            {"error": str(e)},
            status=400,
        )
    except json.JSONDecodeError as e:
        return create_response(
            {"error": f"Invalid JSON: {e}"},
            status=400,
        )
    except Exception as e:
        logger.exception("Unhandled error computing results")
        return create_response(
            {"error": f"Internal error: {e}"},
            status=500,
        )


def resolve_entrant_count(data: dict, entrants: list[str] | None, ballots) -> int:
    """Number of entrants N: explicit, else the entrant list, else the largest rank."""
    if data.get("entrant_count") is not None:
        try:
            return int(data["entrant_count"])
        except (TypeError, ValueError):
            raise ResultsError(f"Invalid entrant_count: {data['entrant_count']!r}")
    if entrants:
        return len(entrants)
    return max((entry.rank for b in ballots for entry in b.entries), default=0)


def import_ballots(source: str, content: bytes):
    """Parse a ballot export, picking the importer by name then by content."""
    importer = detect_importer(source)
    if importer is None:
        importer = detect_importer_by_content(content, source)
    if importer is None:
        raise BallotFormatError(
            "We couldn't determine the ballot export format. "
            "We currently support JSON ranking documents and CSV exports."
        )
    return importer.parse(source, content)


def fetch_url(url: str) -> tuple[str, bytes]:
    """Fetch content from a URL.

    Returns (source_identifier, content_bytes).
    """
    # Validate URL
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https"):
        raise ResultsError(f"Invalid URL scheme: {parsed.scheme}")

    try:
        with httpx.Client(follow_redirects=True, timeout=30.0) as client:
            response = client.get(url)
            response.raise_for_status()
            return url, response.content
    except httpx.HTTPStatusError as e:
        raise ResultsError(f"HTTP error fetching URL: {e.response.status_code}")
    except httpx.RequestError as e:
        raise ResultsError(f"Error fetching URL: {e}")


def create_response(body, status: int = 200, headers: dict = None):
    """Create a response object for Vercel."""
    response_headers = {
        "Content-Type": "application/json",
        "Access-Control-Allow-Origin": "*",
    }
    if headers:
        response_headers.update(headers)

    if isinstance(body, dict):
        body = json.dumps(body)

    # Return in format expected by Vercel Python runtime
    return {
        "statusCode": status,
        "headers": response_headers,
        "body": body,
    }
