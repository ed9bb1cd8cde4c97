"""Run a quick registration round-trip against the app in-process.

Builds the app on a throwaway in-memory SQLite database, registers one
student and lists the table. Nothing touches the configured database.
"""

import sys
import os

# Ensure backend folder is on sys.path so `app` package can be imported
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from fastapi.testclient import TestClient
from app.config import Settings
from app.main import create_app


def run():
    settings = Settings(environ={'DB_URL': 'sqlite://'})
    client = TestClient(create_app(settings=settings))
    created = client.post('/api/users', json={'name': 'Smoke Test', 'course': 'QA'})
    print('POST /api/users:', created.status_code, created.json())
    listed = client.get('/api/users')
    print('GET /api/users:', listed.status_code, listed.json())


if __name__ == '__main__':
    run()
