"""Access to the bundled SpiceDB schema."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

SCHEMA_PATH = Path(__file__).parent / "schema.zed"


@lru_cache
def load_schema() -> str:
    """Read the authorization schema shipped with the package."""
    return SCHEMA_PATH.read_text(encoding="utf-8")
