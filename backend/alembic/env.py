"""Alembic environment: sigep's Base and database_url; SQLite and PostgreSQL.
Migrations run synchronously, so async driver URLs are mapped to sync ones."""
from pathlib import Path
import sys

from logging.config import fileConfig

from alembic import context

# backend/ on sys.path so `sigep` imports regardless of cwd
_script_dir = Path(__file__).resolve().parent
_project_root = _script_dir.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from sigep.config import settings  # noqa: E402
from sigep.database import Base, normalize_database_url  # noqa: E402
from sigep import models  # noqa: E402,F401  registers every table on Base.metadata

config = context.config
if config.config_file_name is not None:
    config_path = Path(config.config_file_name).resolve()
    if config_path.exists():
        fileConfig(str(config_path))


def sync_database_url(url: str) -> str:
    """aiosqlite -> sqlite (relative paths anchored at backend/), asyncpg -> psycopg2."""
    db_url = normalize_database_url(url)
    if db_url.startswith("sqlite+aiosqlite"):
        db_url = db_url.replace("sqlite+aiosqlite", "sqlite", 1)
    if db_url.startswith("sqlite:///./"):
        rel = db_url.replace("sqlite:///./", "", 1).strip()
        return "sqlite:///" + (_project_root / rel).resolve().as_posix()
    return db_url.replace("postgresql+asyncpg", "postgresql+psycopg2", 1)


target_metadata = Base.metadata
config.set_main_option("sqlalchemy.url", sync_database_url(settings.database_url))


def run_migrations_offline() -> None:
    """Offline: emit SQL only."""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    from sqlalchemy import create_engine
    url = config.get_main_option("sqlalchemy.url")
    connectable = create_engine(url)
    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
