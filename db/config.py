"""
db/config.py

Environment-driven database configuration for the finance ledger store.

URL resolution order:

    DATABASE_URL                         always wins when set
    CLOUD_DATABASE_URL                   when ENVIRONMENT is prod/production/staging/cloud
    LOCAL_DATABASE_URL                   otherwise

Only PostgreSQL is supported; the ledger upsert relies on ON CONFLICT.
"""

from __future__ import annotations

import os
from pathlib import Path
from urllib.parse import urlsplit, urlunsplit

_ENV_FILENAMES: tuple[str, ...] = (".env", ".env.local")
_CLOUD_LIKE_ENVIRONMENTS = {"prod", "production", "staging", "cloud"}
_POSTGRES_PREFIXES: tuple[tuple[str, str], ...] = (
    ("postgres://", "postgresql+psycopg://"),
    ("postgresql://", "postgresql+psycopg://"),
)


def _parse_env_line(raw_line: str) -> tuple[str, str] | None:
    line = raw_line.strip()
    if not line or line.startswith("#") or "=" not in line:
        return None
    if line.startswith("export "):
        line = line[len("export "):]
    key, value = line.split("=", 1)
    key = key.strip()
    if not key:
        return None
    return key, value.strip().strip('"').strip("'")


def load_env_files() -> None:
    """
    Load KEY=VALUE pairs from `.env` and `.env.local` at the project root.

    Variables already present in the process environment are kept.
    """

    project_root = Path(__file__).resolve().parents[1]
    for filename in _ENV_FILENAMES:
        env_path = project_root / filename
        if not env_path.exists():
            continue
        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            parsed = _parse_env_line(raw_line)
            if parsed is not None:
                os.environ.setdefault(*parsed)


def normalize_postgres_url(url: str) -> str:
    """
    Rewrite postgres URLs (Supabase-style included) to the psycopg driver form.
    """

    for prefix, replacement in _POSTGRES_PREFIXES:
        if url.startswith(prefix):
            return replacement + url[len(prefix):]
    return url


def redact_database_url(url: str) -> str:
    """
    Same URL with the password masked, for log lines.
    """

    parts = urlsplit(url)
    if not parts.password:
        return url
    netloc = parts.netloc.replace(f":{parts.password}@", ":***@", 1)
    return urlunsplit(parts._replace(netloc=netloc))


def resolve_database_url() -> str:
    load_env_files()

    direct_url = os.getenv("DATABASE_URL", "").strip()
    if direct_url:
        return normalize_postgres_url(direct_url)

    environment = os.getenv("ENVIRONMENT", "local").strip().lower()
    if environment in _CLOUD_LIKE_ENVIRONMENTS:
        candidates = ("CLOUD_DATABASE_URL", "LOCAL_DATABASE_URL")
    else:
        candidates = ("LOCAL_DATABASE_URL",)

    for name in candidates:
        value = os.getenv(name, "").strip()
        if value:
            return normalize_postgres_url(value)

    raise RuntimeError(
        "No database URL configured. Set DATABASE_URL, or configure "
        "LOCAL_DATABASE_URL / CLOUD_DATABASE_URL."
    )
