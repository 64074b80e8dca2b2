# src/quillpost/scripts/migrate.py
"""Apply Alembic migrations to the SQL document store."""
from __future__ import annotations

from pathlib import Path

from alembic import command
from alembic.config import Config

from quillpost.core.settings import settings

MIGRATIONS_DIR = Path(__file__).resolve().parents[3] / "migrations"


def build_config(url: str | None = None) -> Config:
    cfg = Config()
    cfg.set_main_option("script_location", str(MIGRATIONS_DIR))
    cfg.set_main_option("sqlalchemy.url", url or settings.database_url_sync)
    return cfg


def run_upgrade_head() -> None:
    if settings.storage_backend != "sql":
        raise SystemExit("[migrate] migrations only apply to the sql storage backend")
    command.upgrade(build_config(), "head")


if __name__ == "__main__":
    run_upgrade_head()
