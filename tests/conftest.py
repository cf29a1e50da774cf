"""Pytest configuration and shared fixtures."""

import os

from hypothesis import settings

# Keep filesystem output of tests out of the working tree.
os.environ.setdefault("GENESIS_KIT_OUTPUT_DIR", os.path.join(os.getcwd(), ".pytest-out"))

# Create a profile named "no_deadline" with deadline disabled.
settings.register_profile("no_deadline", deadline=None)
settings.load_profile("no_deadline")
