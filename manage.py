#!/usr/bin/env python
"""Command-line utility for running the webhook service."""

import os
import sys
from pathlib import Path

from dotenv import load_dotenv

# Load .env file from project root
env_path = Path(__file__).resolve().parent / ".env"
load_dotenv(env_path)

from django.core.management import execute_from_command_line


def main() -> None:
    """Run administrative tasks."""
    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "core.settings.development")
    execute_from_command_line(sys.argv)


if __name__ == "__main__":
    main()
