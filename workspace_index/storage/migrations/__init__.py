"""Versioned schema for the SQLite chunk store.

Revisions are alembic revision modules applied in order through an
``Operations`` proxy. The applied version is kept in ``PRAGMA user_version``.
"""

from __future__ import annotations

import importlib
import logging
from typing import List

from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

REVISIONS: List[str] = [
    "001_initial",
]

SCHEMA_VERSION = len(REVISIONS)


def current_version(engine: Engine) -> int:
    with engine.connect() as conn:
        return int(conn.exec_driver_sql("PRAGMA user_version").scalar() or 0)


def upgrade_schema(engine: Engine) -> int:
    """Apply pending revisions and return the resulting schema version."""
    with engine.begin() as conn:
        version = int(conn.exec_driver_sql("PRAGMA user_version").scalar() or 0)
        if version > SCHEMA_VERSION:
            raise RuntimeError(
                f"Index schema version {version} is newer than supported version {SCHEMA_VERSION}"
            )

        ctx = MigrationContext.configure(conn)
        with Operations.context(ctx):
            for number, name in enumerate(REVISIONS[version:], start=version + 1):
                module = importlib.import_module(f"{__name__}.versions.{name}")
                logger.info(f"Applying index schema revision {name}")
                module.upgrade()
                conn.exec_driver_sql(f"PRAGMA user_version = {number}")

    return SCHEMA_VERSION
