"""
config.py
Runtime configuration (env / .env) and logging setup.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent
INSTANCE_DIR = BASE_DIR / "instance"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class Config:
    DB_PATH = Path(os.getenv("CREWLEDGER_DB") or INSTANCE_DIR / "crewledger.db")
    REPORTS_DIR = Path(os.getenv("CREWLEDGER_REPORTS_DIR") or INSTANCE_DIR / "reports")
    LOG_LEVEL = os.getenv("CREWLEDGER_LOG_LEVEL", "INFO").upper()
    REPORT_WORKERS = int(os.getenv("CREWLEDGER_REPORT_WORKERS", "2"))


def ensure_instance(config=Config) -> None:
    config.DB_PATH.parent.mkdir(parents=True, exist_ok=True)
    config.REPORTS_DIR.mkdir(parents=True, exist_ok=True)


def setup_logging(level: str | None = None) -> None:
    logging.basicConfig(level=level or Config.LOG_LEVEL, format=LOG_FORMAT)
