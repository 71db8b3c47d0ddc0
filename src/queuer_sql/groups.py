"""SQL function groups shipped with queuer-sql.

Each group pairs an SQL script with the functions it is expected to create.
The scripts are read once, when this module is imported, from the ``sql``
directory packaged next to it.
"""

import pathlib
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Tuple

SQL_DIR = pathlib.Path(__file__).parent / "sql"

JOB_FUNCTIONS: Tuple[str, ...] = (
    "init_job",
    "insert_job",
    "update_job_initial",
    "update_job_final",
    "update_job_final_encrypted",
    "update_stale_jobs",
    "delete_job",
    "select_job",
    "select_all_jobs",
    "select_all_jobs_by_worker_rid",
    "select_all_jobs_by_search",
    "add_retention_archive",
    "remove_retention_archive",
    "delete_stale_jobs",
    "select_job_from_archive",
    "select_all_jobs_from_archive",
    "select_all_jobs_from_archive_by_search",
)

WORKER_FUNCTIONS: Tuple[str, ...] = (
    "init_worker",
    "insert_worker",
    "update_worker",
    "delete_worker",
    "delete_stale_workers",
    "select_worker",
    "select_all_workers",
    "select_all_workers_by_search",
    "select_all_connections",
)

MASTER_FUNCTIONS: Tuple[str, ...] = (
    "init_master",
    "update_master",
    "select_master",
)

NOTIFY_FUNCTIONS: Tuple[str, ...] = (
    "notify_event",
)


@dataclass(frozen=True)
class Group:
    name: str
    payload: str
    functions: Tuple[str, ...]

    def __post_init__(self):
        # Lists are accepted for convenience but stored as tuples.
        object.__setattr__(self, "functions", tuple(self.functions))
        if not self.functions:
            raise ValueError(f"Group {self.name!r} must expect at least one function")
        if len(set(self.functions)) != len(self.functions):
            raise ValueError(f"Group {self.name!r} lists a function more than once")


def _read_sql(name: str) -> str:
    with open(SQL_DIR / f"{name}.sql", encoding="utf-8") as f:
        return f.read()


JOB = Group("job", _read_sql("job"), JOB_FUNCTIONS)
WORKER = Group("worker", _read_sql("worker"), WORKER_FUNCTIONS)
MASTER = Group("master", _read_sql("master"), MASTER_FUNCTIONS)
NOTIFY = Group("notify", _read_sql("notify"), NOTIFY_FUNCTIONS)

# Insertion order is the default install order.
GROUPS: Mapping[str, Group] = MappingProxyType({
    group.name: group for group in (JOB, WORKER, MASTER, NOTIFY)
})


def get_group(name: str) -> Group:
    """Return the built-in group called ``name``."""
    try:
        return GROUPS[name]
    except KeyError:
        raise ValueError(
            f"Unknown SQL group {name!r}, expected one of: {', '.join(GROUPS)}"
        ) from None
