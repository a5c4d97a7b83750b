"""Environment-driven settings for the settlement engine."""

from __future__ import annotations

import os
from decimal import Decimal
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .db.utils import resolve_sqlite_url

load_dotenv()

# Project root directory (repo root)
ROOT_DIR = Path(__file__).resolve().parents[1]


def _optional(name: str) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


class Settings:
    DB_URL = resolve_sqlite_url(os.getenv("DB_URL", "sqlite:///./dev.db"), ROOT_DIR)

    DRAW_DIGITS = int(os.getenv("DRAW_DIGITS", "3"))

    # "always", "never" or "threshold"
    CLAIM_APPROVAL_MODE = os.getenv("CLAIM_APPROVAL_MODE", "always").strip().lower()
    CLAIM_APPROVAL_THRESHOLD = Decimal(os.getenv("CLAIM_APPROVAL_THRESHOLD", "0"))

    LEDGER_BASE_URL = _optional("LEDGER_BASE_URL")
    LEDGER_API_TOKEN = _optional("LEDGER_API_TOKEN")
    LEDGER_TIMEOUT = int(os.getenv("LEDGER_TIMEOUT", "15"))


settings = Settings()
