from __future__ import annotations

import os
import sys
from pathlib import Path


ROOT_DIR = Path(__file__).resolve().parent
BACKEND_DIR = ROOT_DIR / "backend"

if BACKEND_DIR.exists():
    backend_path = str(BACKEND_DIR)
    if backend_path not in sys.path:
        sys.path.insert(0, backend_path)


def _ensure_test_env() -> None:
    # Settings must not pick up a developer's .env during tests
    os.environ.setdefault("DOCKER_CONTAINER", "false")
    os.environ.setdefault("ENVIRONMENT", "test")


_ensure_test_env()
