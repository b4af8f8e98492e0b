"""Command-line entry points for autodown.

`autodown tick` is what the external periodic trigger (cron, a scheduler job,
a systemd timer) runs once per interval. Exit code 0 means the tick ran, even
if some items failed (those are visible in the audit log). Exit code 1 means
the tick itself failed, e.g. the database was unreachable.
"""

import argparse
import logging
import os
import sys
from datetime import timedelta
from typing import List, Optional

from autodown.clock import utcnow
from autodown.database.database import SessionLocal, init_db
from autodown.engine.factory import build_audit_log_service, build_executor, build_scheduling_service
from autodown.models.constants import DEFAULT_AUDIT_RETENTION_DAYS, DEFAULT_SCHEDULE_RETENTION_DAYS

logger = logging.getLogger("autodown")


def setup_logging() -> None:
    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring non-integer {name}={raw!r}; using {default}")
        return default


def cmd_tick(args: argparse.Namespace, session_factory) -> int:
    db = session_factory()
    try:
        result = build_executor(db).tick()
    except Exception as e:
        print(f"Auto take-down tick failed: {str(e)}", file=sys.stderr)
        logger.exception("Auto take-down tick failed")
        return 1
    finally:
        db.close()

    print(f"Took down {result.executed_count} products this tick; {result.active_count} active schedules remain")
    logger.info(
        f"Auto take-down tick complete: executed_count={result.executed_count} active_count={result.active_count}"
    )
    return 0


def cmd_cleanup(args: argparse.Namespace, session_factory) -> int:
    schedule_days = args.days if args.days is not None else _env_int(
        "AUTODOWN_SCHEDULE_RETENTION_DAYS", DEFAULT_SCHEDULE_RETENTION_DAYS
    )
    audit_days = args.audit_days if args.audit_days is not None else _env_int(
        "AUTODOWN_AUDIT_RETENTION_DAYS", DEFAULT_AUDIT_RETENTION_DAYS
    )
    db = session_factory()
    try:
        now = utcnow()
        schedules_deleted = build_scheduling_service(db).cleanup_old_schedules(schedule_days, now=now)
        entries_deleted = 0
        if audit_days > 0:
            entries_deleted = build_audit_log_service(db).cleanup_old_entries(now - timedelta(days=audit_days))
    except Exception as e:
        print(f"Cleanup failed: {str(e)}", file=sys.stderr)
        logger.exception("Auto take-down cleanup failed")
        return 1
    finally:
        db.close()

    print(f"Removed {schedules_deleted} canceled schedules and {entries_deleted} audit entries")
    return 0


def cmd_init_db(args: argparse.Namespace, session_factory) -> int:
    try:
        init_db()
    except Exception:
        logger.exception("Database initialization failed")
        return 1
    print("Database schema is up to date")
    return 0


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="autodown",
        description="Scheduled product take-down: run due take-downs and maintain history.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("tick", help="Execute all due take-downs once")

    cleanup_parser = subparsers.add_parser("cleanup", help="Delete old canceled schedules and audit entries")
    cleanup_parser.add_argument(
        "--days",
        type=int,
        default=None,
        help=f"Canceled-schedule retention in days (default: {DEFAULT_SCHEDULE_RETENTION_DAYS})",
    )
    cleanup_parser.add_argument(
        "--audit-days",
        type=int,
        default=None,
        help=f"Audit entry retention in days, 0 to keep all (default: {DEFAULT_AUDIT_RETENTION_DAYS})",
    )

    subparsers.add_parser("init-db", help="Create or migrate the database schema")
    return parser.parse_args(argv)


COMMANDS = {
    "tick": cmd_tick,
    "cleanup": cmd_cleanup,
    "init-db": cmd_init_db,
}


def main(argv: Optional[List[str]] = None, session_factory=SessionLocal) -> int:
    args = parse_args(argv)
    setup_logging()
    return COMMANDS[args.command](args, session_factory)


if __name__ == "__main__":
    sys.exit(main())
