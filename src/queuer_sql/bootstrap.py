import argparse
import asyncio
import logging
import sys
from typing import Optional, Sequence

import asyncpg

from queuer_sql.config import load_settings
from queuer_sql.errors import InstallError
from queuer_sql.groups import GROUPS, get_group
from queuer_sql.installer import DRIVER_ERRORS, install_group

logger = logging.getLogger(__name__)

LOCK_PREFIX = "queuer_sql:"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


async def install_queuer_sql(
    dsn: str,
    groups: Sequence[str] = tuple(GROUPS),
    force: bool = False,
    lock: bool = True,
) -> None:
    """Install queuer SQL functions into a PostgreSQL database.

    Args:
        dsn: Database connection string
        groups: Names of the groups to install, in order
        force: Execute the SQL even if the functions already exist
        lock: Hold a per-group advisory lock while installing
    """
    selected = [get_group(name) for name in groups]
    conn = await asyncpg.connect(dsn)

    try:
        for group in selected:
            if not lock:
                await install_group(conn, group, force=force)
                continue

            key = LOCK_PREFIX + group.name
            await conn.execute('SELECT pg_advisory_lock(hashtext($1))', key)
            try:
                await install_group(conn, group, force=force)
            except InstallError:
                # the session ending releases the lock if the unlock fails too
                try:
                    await conn.execute('SELECT pg_advisory_unlock(hashtext($1))', key)
                except DRIVER_ERRORS as exc:
                    logger.warning("Could not release advisory lock %s: %s", key, exc)
                raise
            await conn.execute('SELECT pg_advisory_unlock(hashtext($1))', key)

    finally:
        await conn.close()


def install(
    dsn: str,
    groups: Sequence[str] = tuple(GROUPS),
    force: bool = False,
    lock: bool = True,
) -> None:
    """Synchronous wrapper to install queuer SQL functions"""
    asyncio.run(install_queuer_sql(dsn, groups=groups, force=force, lock=lock))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="queuer-sql",
        description="Install the queuer SQL functions into PostgreSQL.",
    )
    parser.add_argument(
        "groups",
        nargs="*",
        metavar="group",
        help=f"groups to install ({', '.join(GROUPS)}); all when omitted",
    )
    parser.add_argument("--dsn", help="database connection string (default: $DATABASE_URL)")
    parser.add_argument(
        "--force",
        action="store_true",
        default=None,
        help="execute the SQL even if the functions already exist (default: $QUEUER_SQL_FORCE)",
    )
    parser.add_argument(
        "--no-lock",
        dest="lock",
        action="store_false",
        help="do not take an advisory lock per group",
    )
    parser.add_argument("--log-level", help="log level (default: $QUEUER_SQL_LOG_LEVEL or INFO)")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    settings = load_settings()
    parser = build_parser()
    args = parser.parse_args(argv)

    for name in args.groups:
        if name not in GROUPS:
            parser.error(f"unknown group {name!r}, choose from {', '.join(GROUPS)}")

    log_level = (args.log_level or settings.log_level).upper()
    if log_level not in LOG_LEVELS:
        parser.error(f"invalid log level {log_level!r}, choose from {', '.join(LOG_LEVELS)}")

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )

    dsn = args.dsn or settings.database_url
    if not dsn:
        logger.error("No database given, pass --dsn or set DATABASE_URL")
        return 2

    force = settings.force if args.force is None else args.force
    groups = args.groups or list(GROUPS)

    logger.info("Installing queuer SQL groups %s", ", ".join(groups))
    try:
        install(dsn, groups=groups, force=force, lock=args.lock)
    except InstallError as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
