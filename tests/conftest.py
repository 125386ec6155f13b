from __future__ import annotations

import sys
from pathlib import Path

import matplotlib

REPOSITORY_ROOT = Path(__file__).resolve().parent.parent


def pytest_configure(config):
    """Make the top-level packages importable and keep plotting headless.

    The packages live at the repository root (flat layout), so tests run
    against a plain checkout as well as an editable install.
    """
    if str(REPOSITORY_ROOT) not in sys.path:
        sys.path.insert(0, str(REPOSITORY_ROOT))
    matplotlib.use('Agg')
