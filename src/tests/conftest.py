from __future__ import annotations

"""Shared pytest fixtures and test environment defaults."""

import os
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

os.environ.pop("OPENAI_API_KEY", None)
os.environ.pop("SUPABASE_URL", None)
os.environ.pop("SUPABASE_SERVICE_ROLE_KEY", None)
os.environ.setdefault("RAG_SEARCH_BACKEND", "memory")
os.environ.setdefault("EMBEDDING_PROVIDER", "hash")
os.environ.setdefault("EMBEDDING_DIMENSION", "256")
os.environ.setdefault("RAG_METRICS_ENABLED", "true")


import pytest


@pytest.fixture
def anyio_backend():
    # The pipeline offloads work with asyncio.to_thread, so tests run on asyncio.
    return "asyncio"
