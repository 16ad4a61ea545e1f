from datetime import time

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, select

from inkstudio.auth import create_access_token, hash_password
from inkstudio.db import get_session, init_db, make_engine
from inkstudio.deps import get_record_store
from inkstudio.main import app
from inkstudio.models import ArtistService, User, UserRole, WeeklyAvailability
from inkstudio.store import SqlRecordStore


@pytest.fixture
def engine(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'studio.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(engine):
    def _session_override():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = _session_override
    app.dependency_overrides[get_record_store] = lambda: SqlRecordStore(engine)
    # not used as a context manager: the lifespan would create tables on the default database
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session):
    def _make(email, roles=("user",), password="secret-pass", is_active=True):
        user = User(
            email=email,
            password_hash=hash_password(password),
            display_name=email.split("@")[0],
            is_active=is_active,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        for role in roles:
            session.add(UserRole(user_id=user.id, role=role))
        session.commit()
        session.refresh(user)
        return user

    return _make


@pytest.fixture
def headers_for():
    def _headers(user):
        token = create_access_token({"sub": str(user.id)})
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def artist(session, make_user):
    """A staff member open 09:00-13:00 every day with one 60 minute service."""
    user = make_user("artist@example.com", roles=("staff",))
    for weekday in range(7):
        session.add(WeeklyAvailability(artist_id=user.id, weekday=weekday, start_time=time(9), end_time=time(13)))
    session.add(ArtistService(artist_id=user.id, name="Small flash", duration_minutes=60, price=80))
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def service(session, artist):
    return session.exec(select(ArtistService).where(ArtistService.artist_id == artist.id)).one()
