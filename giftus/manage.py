#!/usr/bin/env python
"""Django's command-line utility for administrative tasks."""
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent


def _ensure_env_file():
    """
    Находит .env для manage-команд (import_matrix, migrate) на сервере,
    чтобы не делать `export` руками.

    Порядок: DJANGO_ENV_FILE, затем .env.production и .env рядом с проектом
    или уровнем выше.
    """
    explicit = os.environ.get('DJANGO_ENV_FILE')
    if explicit:
        if Path(explicit).exists():
            load_dotenv(explicit)
        return

    for name in ('.env.production', '.env'):
        for directory in (BASE_DIR, BASE_DIR.parent):
            candidate = directory / name
            if candidate.exists():
                os.environ['DJANGO_ENV_FILE'] = str(candidate)
                load_dotenv(candidate)
                return


def main():
    _ensure_env_file()
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'giftus.settings')
    from django.core.management import execute_from_command_line

    execute_from_command_line(sys.argv)


if __name__ == '__main__':
    main()
