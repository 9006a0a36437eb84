# app/core/db.py
from __future__ import annotations
from pathlib import Path
from sqlalchemy import create_engine, text as sa_text
from sqlalchemy.engine import Engine

def get_engine(db_url: str) -> Engine:
    if db_url.startswith("sqlite:///") and db_url != "sqlite:///:memory:":
        db_file = db_url.replace("sqlite:///", "")
        Path(db_file).parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(db_url, future=True)
    return engine

def init_db(engine: Engine) -> None:
    # Durable client-side state only; domain data lives behind the REST API
    with engine.begin() as conn:
        conn.execute(sa_text("""
        CREATE TABLE IF NOT EXISTS client_storage (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            profile TEXT NOT NULL DEFAULT 'default',
            key TEXT NOT NULL,
            value TEXT NOT NULL,
            updated_at DATETIME DEFAULT CURRENT_TIMESTAMP,
            UNIQUE(profile, key)
        )"""))
