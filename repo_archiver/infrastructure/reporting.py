"""Reporting of the run result back to the Actions runner."""

import logging
import os
import sys
from typing import Optional, TextIO

logger = logging.getLogger(__name__)


class ActionReporter:
    """Writes workflow commands and step outputs."""

    def __init__(self, output_file: Optional[str] = None, stream: Optional[TextIO] = None):
        """
        Args:
            output_file: Path of the step output file. If None, uses GITHUB_OUTPUT env var.
            stream: Where workflow commands go. Defaults to stdout.
        """
        if output_file is None:
            output_file = os.getenv("GITHUB_OUTPUT")
        self.output_file = output_file
        self.stream = stream or sys.stdout
        self.failed = False

    def set_output(self, name: str, value: str):
        """Record a step output."""
        if not self.output_file:
            logger.info(f"Output {name}={value}")
            return
        with open(self.output_file, "a", encoding="utf-8") as f:
            f.write(f"{name}={value}\n")

    def set_failed(self, message: str):
        """Mark the step as failed with the given message."""
        self.failed = True
        logger.error(message)
        self.stream.write(f"::error::{message}\n")
        self.stream.flush()
