from __future__ import annotations
from typing import Optional
from sqlalchemy import text as sql_text
from sqlalchemy.engine import Engine

from core.db import init_db

class ClientStorage:
    """Durable key/value store for one console profile.

    Plays the part a browser's local storage plays for a web front-end:
    string values under fixed keys, surviving restarts until removed.
    """

    def __init__(self, engine: Engine, profile: str = "default"):
        self.engine = engine
        self.profile = profile
        init_db(engine)

    def get(self, key: str) -> Optional[str]:
        with self.engine.begin() as conn:
            row = conn.execute(sql_text(
                "SELECT value FROM client_storage WHERE profile=:p AND key=:k"
            ), dict(p=self.profile, k=key)).fetchone()
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        with self.engine.begin() as conn:
            conn.execute(sql_text("""
                INSERT INTO client_storage (profile, key, value)
                VALUES (:p, :k, :v)
                ON CONFLICT(profile, key) DO UPDATE
                SET value=excluded.value, updated_at=CURRENT_TIMESTAMP
            """), dict(p=self.profile, k=key, v=value))

    def remove(self, *keys: str) -> None:
        if not keys:
            return
        with self.engine.begin() as conn:
            for key in keys:
                conn.execute(sql_text(
                    "DELETE FROM client_storage WHERE profile=:p AND key=:k"
                ), dict(p=self.profile, k=key))

    def clear(self) -> None:
        with self.engine.begin() as conn:
            conn.execute(sql_text("DELETE FROM client_storage WHERE profile=:p"), dict(p=self.profile))
