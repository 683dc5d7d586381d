# statsgames/cli.py
import os
from pathlib import Path

import uvicorn
from alembic.config import main as alembic_main

_ALEMBIC_INI = str(Path(__file__).resolve().parent.parent / "alembic.ini")


def dev() -> None:
    uvicorn.run("statsgames.main:app", host="0.0.0.0", port=8000, reload=True)


def start() -> None:
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run("statsgames.main:app", host="0.0.0.0", port=port)


def migrate() -> None:
    alembic_main(["-c", _ALEMBIC_INI, "upgrade", "head"])
