import os
import sys


# Ensure `src/backend` is on sys.path so imports like `import pipelines...` work when running this folder alone.
BACKEND_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "../.."))
if BACKEND_DIR not in sys.path:
    sys.path.insert(0, BACKEND_DIR)

from pathlib import Path

import pytest

NEXUS_ENV_VARS = (
    "NEXUS_ACCOUNTING_BASIS",
    "NEXUS_RANGE_PRESET",
    "NEXUS_RULES_PATH",
    "NEXUS_FIXTURES_ROOT",
    "NEXUS_MEDIUM_PROXIMITY_RATIO",
)


@pytest.fixture
def fixtures_root() -> Path:
    return Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True)
def clean_nexus_env(monkeypatch):
    for name in NEXUS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
