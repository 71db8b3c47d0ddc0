import os
import uuid

import asyncpg
import pytest

from queuer_sql.groups import GROUPS, Group


class FakeConnection:
    """In-memory stand-in for an asyncpg connection.

    ``functions`` is the simulated pg_proc. Executing a known payload adds the
    functions of its group, ``creates`` can map other payloads to the
    functions they create.
    """

    def __init__(
        self,
        functions=(),
        creates=None,
        fail_on=None,
        probe_error=None,
        execute_error=None,
        statement_error=None,
    ):
        self.functions = set(functions)
        self.creates = {group.payload: set(group.functions) for group in GROUPS.values()}
        self.creates.update(creates or {})
        self.fail_on = fail_on
        self.probe_error = probe_error
        self.execute_error = execute_error
        self.statement_error = statement_error
        self.probed = []
        self.payloads = []
        self.statements = []
        self.closed = False

    async def fetchval(self, query, *args):
        assert "pg_proc" in query
        name = args[0]
        self.probed.append(name)
        if name == self.fail_on:
            raise self.probe_error or asyncpg.InterfaceError("connection is closed")
        return name in self.functions

    async def execute(self, query, *args):
        if args:
            self.statements.append((query, args))
            if self.statement_error is not None and "unlock" in query:
                raise self.statement_error
            return "SELECT 1"
        self.payloads.append(query)
        if self.execute_error is not None:
            raise self.execute_error
        self.functions.update(self.creates.get(query, ()))
        return "CREATE FUNCTION"

    async def close(self):
        self.closed = True


class RecordingLogger:
    def __init__(self):
        self.infos = []
        self.warnings = []

    def info(self, msg, *args):
        self.infos.append(msg % args)

    def warning(self, msg, *args):
        self.warnings.append(msg % args)


@pytest.fixture
def demo_group() -> Group:
    return Group("demo", "CREATE FUNCTION demo_a() ...; CREATE FUNCTION demo_b() ...;", ("demo_a", "demo_b"))


@pytest.fixture
def recording_logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
async def db():
    """Connection to a freshly created, empty PostgreSQL database.

    Needs QUEUER_SQL_TEST_DSN pointing at a server where the user may create databases.
    """
    dsn = os.getenv("QUEUER_SQL_TEST_DSN")
    if not dsn:
        pytest.skip("QUEUER_SQL_TEST_DSN is not set")

    admin = await asyncpg.connect(dsn)
    name = f"queuer_sql_test_{uuid.uuid4().hex[:12]}"
    await admin.execute(f'CREATE DATABASE "{name}"')
    conn = await asyncpg.connect(dsn, database=name)
    try:
        yield conn
    finally:
        await conn.close()
        await admin.execute(f'DROP DATABASE IF EXISTS "{name}"')
        await admin.close()
