from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from scorekeeper.config import settings
from scorekeeper.db import get_async_session
from scorekeeper.logging_config import configure_logging
from scorekeeper.services.schedule import ImportSummary, import_schedule

logger = logging.getLogger(__name__)


def load_records(path: Path) -> list[dict]:
    """Read a schedule file: a JSON list of games, or ``{"games": [...]}``."""
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("games", [])
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a list of games")
    return data


async def _run(records: list[dict]) -> ImportSummary:
    async with get_async_session() as session:
        return await import_schedule(session, records)


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Import a season schedule from JSON.")
    parser.add_argument("path", type=Path, help="Schedule JSON file.")
    return parser.parse_args()


def main() -> None:
    configure_logging(
        service="scorekeeper-cli",
        environment=settings.environment,
        log_level=settings.log_level,
    )
    args = _parse_args()

    logger.info("schedule_import_cli_started", extra={"path": str(args.path)})
    try:
        records = load_records(args.path)
        summary = asyncio.run(_run(records))
    except (OSError, ValueError) as exc:
        logger.error("schedule_import_cli_failed", extra={"path": str(args.path), "error": str(exc)})
        raise SystemExit(1) from exc
    except Exception:
        logger.exception("schedule_import_cli_failed", extra={"path": str(args.path)})
        raise SystemExit(1)

    for problem in summary.invalid:
        logger.warning("schedule_import_invalid_record", extra={"detail": problem})
    logger.info(
        "schedule_import_cli_completed",
        extra={
            "path": str(args.path),
            "created": len(summary.created),
            "skipped": len(summary.skipped),
            "invalid": len(summary.invalid),
        },
    )
    if summary.invalid:
        raise SystemExit(2)


if __name__ == "__main__":
    main()
