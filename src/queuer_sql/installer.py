import asyncio
import logging
from typing import Optional, Sequence

import asyncpg

from queuer_sql.errors import DatabaseError, IncompleteInstallError
from queuer_sql.groups import JOB, MASTER, NOTIFY, WORKER, Group

logger = logging.getLogger(__name__)

# command_timeout on the connection surfaces as asyncio.TimeoutError
DRIVER_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, asyncio.TimeoutError)

FUNCTION_EXISTS_QUERY = 'SELECT EXISTS(SELECT 1 FROM pg_proc WHERE proname = $1)'

FUNCTION_EXISTS_IN_SCHEMA_QUERY = '''
    SELECT EXISTS(
        SELECT 1
        FROM pg_proc p
        JOIN pg_namespace n ON n.oid = p.pronamespace
        WHERE p.proname = $1 AND n.nspname = $2
    )
'''


def _describe(exc: BaseException) -> str:
    # asyncio.TimeoutError carries no message
    return str(exc) or type(exc).__name__


async def check_functions(
    conn,
    names: Sequence[str],
    schema: Optional[str] = None,
    logger=logger,
) -> bool:
    """Check that every function in ``names`` exists in ``pg_proc``.

    Names are checked one at a time, in order, and the check stops at the
    first missing function. An empty list is never satisfied.

    Args:
        conn: asyncpg connection (anything with an awaitable ``fetchval``)
        names: Function names exactly as the SQL creates them
        schema: Only count functions defined in this schema; any schema when None
        logger: Receives a warning naming the first missing function

    Returns:
        True if all functions exist
    """
    exists = False
    for name in names:
        try:
            if schema is None:
                exists = await conn.fetchval(FUNCTION_EXISTS_QUERY, name)
            else:
                exists = await conn.fetchval(FUNCTION_EXISTS_IN_SCHEMA_QUERY, name, schema)
        except DRIVER_ERRORS as exc:
            raise DatabaseError(
                f"error checking existence of function {name}: {_describe(exc)}", phase="checking"
            ) from exc

        if not exists:
            logger.warning("Function %s does not exist", name)
            return False
    return bool(exists)


async def install_group(conn, group: Group, force: bool = False, logger=logger) -> None:
    """
    Make sure every function of ``group`` exists in the database.

    Unless ``force`` is set, the payload is skipped when all functions are
    already present. After executing the payload the catalog is checked
    again, also when forced.

    Args:
        conn: asyncpg connection; it is not closed
        group: Group to install
        force: Execute the payload even if the functions exist
        logger: Logger with ``info`` and ``warning`` methods

    Raises:
        DatabaseError: The driver failed while checking or executing
        IncompleteInstallError: Functions are missing after executing the payload
    """
    if not force:
        try:
            exists = await check_functions(conn, group.functions, logger=logger)
        except DatabaseError as exc:
            raise DatabaseError(
                f"error checking existing {group.name} functions: {exc}",
                group=group.name,
                phase="checking",
            ) from exc
        if exists:
            return

    try:
        await conn.execute(group.payload)
    except DRIVER_ERRORS as exc:
        raise DatabaseError(
            f"error executing {group.name} SQL: {_describe(exc)}",
            group=group.name,
            phase="executing",
        ) from exc

    try:
        exists = await check_functions(conn, group.functions, logger=logger)
    except DatabaseError as exc:
        raise DatabaseError(
            f"error verifying {group.name} functions: {exc}",
            group=group.name,
            phase="verifying",
        ) from exc
    if not exists:
        raise IncompleteInstallError(
            f"not all required SQL {group.name} functions were created",
            group=group.name,
            phase="verifying",
        )

    logger.info("SQL %s functions loaded successfully", group.name)


async def install_job(conn, force: bool = False, logger=logger) -> None:
    """Install the job functions"""
    await install_group(conn, JOB, force=force, logger=logger)


async def install_worker(conn, force: bool = False, logger=logger) -> None:
    """Install the worker functions"""
    await install_group(conn, WORKER, force=force, logger=logger)


async def install_master(conn, force: bool = False, logger=logger) -> None:
    """Install the master functions"""
    await install_group(conn, MASTER, force=force, logger=logger)


async def install_notify(conn, force: bool = False, logger=logger) -> None:
    """Install the notify_event trigger function"""
    await install_group(conn, NOTIFY, force=force, logger=logger)
