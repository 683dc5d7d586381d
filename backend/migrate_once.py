"""
Upgrade the stats database to the latest Alembic revision.

Usage:
    python migrate_once.py

Reads DATABASE_URL the same way the application does.
"""

from pathlib import Path

from alembic import command
from alembic.config import Config

ALEMBIC_INI = Path(__file__).parent / "alembic.ini"


def main(revision: str = "head") -> None:
    """Upgrade the schema to ``revision``."""
    command.upgrade(Config(str(ALEMBIC_INI)), revision)


if __name__ == "__main__":
    main()
