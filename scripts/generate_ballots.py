"""Generate a synthetic ballot export for a contest.

Voter ids and submission times are produced with faker using a fixed seed,
so the same arguments always give the same export. Rankings are drawn with
a bias towards a hidden "true" order, which makes the aggregate look like a
real audience rather than noise.

Usage:
    python scripts/generate_ballots.py 7 --entrants 12 4 9 21 --voters 250
    python scripts/generate_ballots.py 7 --entrants 12 4 9 --format csv -o ballots.csv
"""

import argparse
import csv
import io
import json
import random
from datetime import timedelta
from pathlib import Path

from faker import Faker

SEED = 20250719


def generate_documents(
    contest_id: str, entrants: list[str], voters: int, seed: int = SEED
) -> list[dict]:
    """Build ranking documents in the app's export shape."""
    fake = Faker()
    fake.seed_instance(seed)
    rng = random.Random(seed)

    start = fake.date_time_this_year()
    documents = []
    for _ in range(voters):
        # Perturb the entrant order: a noisy sort around the programme order
        noisy = sorted(
            entrants,
            key=lambda e: entrants.index(e) + rng.gauss(0, len(entrants) / 2),
        )
        submitted = start + timedelta(seconds=rng.randint(0, 1800))
        documents.append({
            "id_ranker": fake.uuid4(),
            "id_contest": contest_id,
            "rankings": [
                {"id_ensemble": entrant, "rank": rank}
                for rank, entrant in enumerate(noisy, start=1)
            ],
            "timestamp": submitted.isoformat() + "Z",
        })
    return documents


def documents_to_csv(documents: list[dict]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(["voter_id", "contest_id", "entrant_id", "rank", "submitted_at"])
    for document in documents:
        for item in document["rankings"]:
            writer.writerow([
                document["id_ranker"],
                document["id_contest"],
                item["id_ensemble"],
                item["rank"],
                document["timestamp"],
            ])
    return buffer.getvalue()


def main():
    parser = argparse.ArgumentParser(
        description="Generate a synthetic ballot export")
    parser.add_argument("contest_id", help="Contest identifier")
    parser.add_argument("--entrants", nargs="+", required=True,
                        help="Entrant ids in programme order")
    parser.add_argument("--voters", type=int, default=100,
                        help="Number of ballots (default: 100)")
    parser.add_argument("--seed", type=int, default=SEED,
                        help=f"Random seed (default: {SEED})")
    parser.add_argument("--format", choices=["json", "csv"], default="json")
    parser.add_argument("-o", "--output", help="Output path (default: stdout)")
    args = parser.parse_args()

    documents = generate_documents(args.contest_id, args.entrants, args.voters, args.seed)
    if args.format == "csv":
        text = documents_to_csv(documents)
    else:
        text = json.dumps(documents, indent=2)

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(text, encoding="utf-8")
        print(f"Written {len(documents)} ballots to {output_path}")
    else:
        print(text)


if __name__ == "__main__":
    main()
