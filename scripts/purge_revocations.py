#!/usr/bin/env python3
"""
Remove revoked-token rows whose token has already expired (SQL ledger only).

Redis expires its entries on its own; run this from cron when REDIS_URL is unset.
"""
from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from contacts_api.core.config import get_settings
from contacts_api.repositories.sql_repository import SQLRepository


def main() -> None:
    if get_settings().redis_url:
        print("REDIS_URL configurado; nada a fazer.")
        return
    removed = SQLRepository().purge_expired()
    print(f"OK: {removed} revogacao(oes) expirada(s) removida(s)")


if __name__ == "__main__":
    main()
