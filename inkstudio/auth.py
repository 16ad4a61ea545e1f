# inkstudio/auth.py

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import FrozenSet

from fastapi import Depends, HTTPException
from fastapi.security import OAuth2PasswordBearer
from jose import jwt, JWTError
from passlib.context import CryptContext
from sqlmodel import Session, select

from inkstudio.config import settings
from inkstudio.db import get_session
from inkstudio.models import User, UserRole

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login")


@dataclass(frozen=True)
class AuthContext:
    """The authenticated caller and the roles they held when the request started."""

    user_id: int
    email: str
    display_name: str
    roles: FrozenSet[str]

    def has_role(self, *roles: str) -> bool:
        return any(role in self.roles for role in roles)


def create_access_token(data: dict, expires_minutes: int = settings.ACCESS_TOKEN_EXPIRE_MINUTES) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)
    to_encode["exp"] = expire
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def roles_for(session: Session, user_id: int) -> FrozenSet[str]:
    rows = session.exec(select(UserRole.role).where(UserRole.user_id == user_id)).all()
    return frozenset(rows)


def user_has_role(session: Session, user_id: int, role: str) -> bool:
    row = session.exec(
        select(UserRole)
        .where(UserRole.user_id == user_id)
        .where(UserRole.role == role)
    ).first()
    return row is not None


def _credentials_error(detail: str) -> HTTPException:
    return HTTPException(
        status_code=401,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def context_for_token(token: str, session: Session) -> AuthContext:
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
        user_id = int(payload.get("sub"))
    except (JWTError, TypeError, ValueError):
        raise _credentials_error("Invalid token")

    user = session.get(User, user_id)
    if user is None:
        raise _credentials_error("User not found")
    if not user.is_active:
        raise HTTPException(status_code=403, detail="Inactive user")

    return AuthContext(
        user_id=user.id,
        email=user.email,
        display_name=user.display_name,
        roles=roles_for(session, user.id),
    )


def get_current_user(
    token: str = Depends(oauth2_scheme),
    session: Session = Depends(get_session),
) -> AuthContext:
    return context_for_token(token, session)
