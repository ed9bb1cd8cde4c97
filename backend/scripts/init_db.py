"""Create the registration tables in the configured database.

Useful when the service runs with `SCHEMA_AUTO_CREATE=false`. Reads the
same environment variables as the API process.
"""

import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from app.config import settings
from app.database import build_engine, create_db_and_tables, wait_for_database


def run():
    engine = build_engine(settings)
    print("Using database:", settings.database_url.render_as_string(hide_password=True))
    wait_for_database(engine, settings.DB_CONNECT_RETRIES, settings.DB_CONNECT_BACKOFF_SECONDS)
    create_db_and_tables(engine)
    print("Tables created.")


if __name__ == '__main__':
    run()
