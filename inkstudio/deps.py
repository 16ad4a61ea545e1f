# inkstudio/deps.py

from fastapi import HTTPException

from inkstudio.auth import AuthContext
from inkstudio.db import engine
from inkstudio.store import RecordStore, SqlRecordStore


def require_role(user: AuthContext, *roles: str):
    if not user.has_role(*roles):
        raise HTTPException(status_code=403, detail="Forbidden")


def get_record_store() -> RecordStore:
    return SqlRecordStore(engine)
