"""
Root conftest.py for the order management service.

Makes the ``order_management`` package importable when the tests run from a
source checkout without an editable install.
"""

import sys
from pathlib import Path


def pytest_configure(config):
    """Add the project root to sys.path."""
    root_dir = str(Path(__file__).parent)
    if root_dir not in sys.path:
        sys.path.insert(0, root_dir)
