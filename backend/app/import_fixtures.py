"""
Import match fixtures from a JSON file.

The file holds a list of objects:
    [{"id": "epl-2025-001", "homeTeam": "Arsenal", "awayTeam": "Chelsea",
      "date": "2025-08-16T14:00:00Z", "competition": "Premier League"}, ...]

Usage:
    python -m app.import_fixtures --fixtures fixtures/matches.json [--dry-run]

Fixtures already present (same id) are skipped, so re-running is safe.
"""
from __future__ import annotations

import argparse
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import List

from app.core.database import Base, SessionLocal, engine
from app.models.prediction import Prediction  # noqa: F401  (registers all tables)
from app.services.match_registry import Fixture, MatchRegistry

logger = logging.getLogger(__name__)


def read_fixtures(path: Path) -> List[Fixture]:
    """Parse a fixtures JSON file into Fixture records."""
    try:
        raw = json.loads(path.read_text())
    except json.JSONDecodeError as e:
        raise ValueError(f"Failed to parse {path}: {e}") from e

    if not isinstance(raw, list):
        raise ValueError(f"{path} must contain a JSON list of fixtures")

    fixtures = []
    for item in raw:
        try:
            fixtures.append(
                Fixture(
                    external_id=str(item["id"]),
                    home_team=item["homeTeam"],
                    away_team=item["awayTeam"],
                    competition=item["competition"],
                    kickoff=datetime.fromisoformat(item["date"].replace("Z", "+00:00")),
                )
            )
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            raise ValueError(f"Invalid fixture {item!r}: {e}") from e
    return fixtures


def run_import(path: Path, dry_run: bool = False) -> int:
    fixtures = read_fixtures(path)
    logger.info("Found %d fixtures to import", len(fixtures))

    if dry_run:
        logger.info("Dry run mode - showing what would be imported:")
        for f in fixtures:
            logger.info(
                "- %s vs %s (%s) on %s",
                f.home_team, f.away_team, f.competition, f.kickoff.strftime("%Y-%m-%d %H:%M"),
            )
        return 0

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        created, skipped = MatchRegistry(db).import_fixtures(fixtures)
    finally:
        db.close()

    logger.info("Import complete: %d imported, %d skipped", len(created), skipped)
    return len(created)


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    )
    parser = argparse.ArgumentParser(description="Import match fixtures into the tipping database.")
    parser.add_argument(
        "--fixtures",
        type=Path,
        default=Path("fixtures/matches.json"),
        help="Path to fixtures JSON file.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print what would be imported without writing to the database.",
    )
    args = parser.parse_args()
    run_import(args.fixtures, dry_run=args.dry_run)


if __name__ == "__main__":
    main()
