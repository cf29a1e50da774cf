"""
Process-wide settings for genesis-kit.

Values are read from the environment once at import time. Everything
else is passed explicitly to the functions that need it.
"""

import os
from pathlib import Path

OUTPUT_DIR = Path(os.environ.get("GENESIS_KIT_OUTPUT_DIR", "out"))
"""Root directory for the filesystem output target."""

SERVICE_ACCOUNT_DIR = Path(
    os.environ.get(
        "GENESIS_KIT_SERVICE_ACCOUNT_DIR",
        "/var/run/secrets/kubernetes.io/serviceaccount",
    )
)
"""Directory holding the in-cluster token, CA bundle and namespace files."""
