"""
queuer-sql - installs the queuer job queue SQL functions into PostgreSQL
"""

__version__ = "0.1.0"

from .errors import DatabaseError, IncompleteInstallError, InstallError
from .groups import (
    GROUPS,
    JOB,
    JOB_FUNCTIONS,
    MASTER,
    MASTER_FUNCTIONS,
    NOTIFY,
    NOTIFY_FUNCTIONS,
    WORKER,
    WORKER_FUNCTIONS,
    Group,
)
from .installer import (
    check_functions,
    install_group,
    install_job,
    install_master,
    install_notify,
    install_worker,
)

__all__ = [
    "GROUPS",
    "JOB",
    "JOB_FUNCTIONS",
    "MASTER",
    "MASTER_FUNCTIONS",
    "NOTIFY",
    "NOTIFY_FUNCTIONS",
    "WORKER",
    "WORKER_FUNCTIONS",
    "DatabaseError",
    "Group",
    "IncompleteInstallError",
    "InstallError",
    "check_functions",
    "install_group",
    "install_job",
    "install_master",
    "install_notify",
    "install_worker",
]
