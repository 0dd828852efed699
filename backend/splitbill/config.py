from __future__ import annotations

import os


class Config:
    DATABASE_URL = os.getenv("DATABASE_URL", "").strip()
    RECORD_OWNER_ID = os.getenv("RECORD_OWNER_ID", "mvp-owner")
    CURRENCY_SYMBOL = os.getenv("CURRENCY_SYMBOL", "Rp")
