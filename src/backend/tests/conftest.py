import os
import sys


# `common`, `adapters`, `pipelines` and `scripts` are imported by top-level name from `src/backend`,
# including when pytest is started from the repository root without an editable install.
BACKEND_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if BACKEND_DIR not in sys.path:
    sys.path.insert(0, BACKEND_DIR)

import pytest
import structlog


@pytest.fixture(autouse=True)
def reset_structlog():
    # CLI tests call configure_logging(); later tests must not inherit that setup.
    yield
    structlog.reset_defaults()
