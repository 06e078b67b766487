#!/usr/bin/env python3
"""Script to archive inactive repositories of a GitHub organization."""

import sys
import os

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from repo_archiver.application.action_runner import main


if __name__ == "__main__":
    sys.exit(main())
