"""
Shared test scaffolding: a throwaway SQLite file per test case, wired into
the FastAPI app through a get_db override.
"""
import os
import tempfile

from sqlalchemy import create_engine
from sqlalchemy.pool import NullPool

import models  # noqa: F401  (registers tables)
from config import settings
from database import Base, build_engine, build_sessionmaker, get_db, session_scope

ADMIN_HEADERS = {"Authorization": f"Bearer {settings.admin_api_token}"}


def application_payload(**overrides):
    payload = {
        "full_name": "Maria Aparecida Souza",
        "cpf": "123.456.789-09",
        "email": "maria@example.com",
        "loan_type": "personal",
    }
    payload.update(overrides)
    return payload


class TempDatabase:
    def __init__(self):
        fd, self.path = tempfile.mkstemp(suffix=".db")
        os.close(fd)
        sync_engine = create_engine(f"sqlite:///{self.path}")
        Base.metadata.create_all(sync_engine)
        sync_engine.dispose()
        # NullPool: every session opens its own connection, so no connection
        # outlives the event loop that created it
        self.engine = build_engine(f"sqlite+aiosqlite:///{self.path}", poolclass=NullPool)
        self.sessionmaker = build_sessionmaker(self.engine)

    async def get_db(self):
        async with session_scope(self.sessionmaker) as session:
            yield session

    def install(self, app) -> None:
        app.dependency_overrides[get_db] = self.get_db

    def uninstall(self, app) -> None:
        app.dependency_overrides.pop(get_db, None)

    def close(self) -> None:
        if os.path.exists(self.path):
            os.remove(self.path)
