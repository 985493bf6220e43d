#!/usr/bin/env python3
"""Create the help desk tables on the configured database."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent / "src"))

from repositories.connections import get_db_engine  # noqa: E402
from repositories.schema import metadata  # noqa: E402
from utils.error_handling import DataServiceError  # noqa: E402


def main():
    try:
        engine = get_db_engine()
    except DataServiceError as e:
        print(f"Error: {e.message}. Set DATABASE_URL or APP_SECRET_ARN.")
        sys.exit(1)

    print(f"Creating tables on: {engine.url.render_as_string(hide_password=True)}")
    metadata.create_all(engine)
    for table in metadata.sorted_tables:
        print(f"  - {table.name}")
    print("Done. Existing tables were left untouched.")


if __name__ == "__main__":
    main()
