# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Alembic environment – runs the migrations in versions/ against the same
database the application talks to.

The URL comes from Settings (DATABASE_URL or etc/app.conf), never from
alembic.ini, so the connection string lives in exactly one place.
"""

import sys
import os

# ---------------------------------------------------------------------------
# Path setup – ``backend/`` must be importable for ``core`` and ``models``
# ---------------------------------------------------------------------------
_BACKEND_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if _BACKEND_DIR not in sys.path:
    sys.path.insert(0, _BACKEND_DIR)

from alembic import context  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402

from core.config import settings  # noqa: E402
from database import Base  # noqa: E402

# Registers every table on Base.metadata for --autogenerate
import models  # noqa: F401, E402

target_metadata = Base.metadata


def _configure_kwargs(dialect_name: str) -> dict:
    return {
        "target_metadata": target_metadata,
        "compare_type": True,
        # SQLite cannot ALTER most constraints in place
        "render_as_batch": dialect_name == "sqlite",
    }


# ---------------------------------------------------------------------------
# Online mode (the default – uses a live DB connection)
# ---------------------------------------------------------------------------
def run_migrations_online():
    connectable = create_engine(settings.database_url)
    with connectable.connect() as conn:
        context.configure(connection=conn, **_configure_kwargs(conn.dialect.name))
        with context.begin_transaction():
            context.run_migrations()
    connectable.dispose()


# ---------------------------------------------------------------------------
# Offline mode (emits SQL without a live connection)
# ---------------------------------------------------------------------------
def run_migrations_offline():
    dialect_name = settings.database_url.split(":", 1)[0].split("+", 1)[0]
    context.configure(
        url=settings.database_url,
        literal_binds=True,
        **_configure_kwargs(dialect_name),
    )
    with context.begin_transaction():
        context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
