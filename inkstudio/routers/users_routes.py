# inkstudio/routers/users_routes.py

import logging
from typing import Iterable, List

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from inkstudio.db import get_session
from inkstudio.models import User, UserRole
from inkstudio.schemas import (
    AdminUserCreate,
    PasswordReset,
    Role,
    UserCreate,
    UserPublic,
    UserUpdate,
)
from inkstudio.auth import AuthContext, get_current_user, hash_password, roles_for
from inkstudio.deps import require_role

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["users"],
)


def _public(user: User, roles) -> dict:
    return {
        "id": user.id,
        "email": user.email,
        "display_name": user.display_name,
        "is_active": user.is_active,
        "is_visible": user.is_visible,
        "order_index": user.order_index,
        "roles": sorted(roles),
    }


def _get_user_or_404(session: Session, user_id: int) -> User:
    user = session.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def _ensure_email_free(session: Session, email: str, user_id=None):
    existing = session.exec(
        select(User).where(User.email == email)
    ).first()
    if existing is not None and existing.id != user_id:
        raise HTTPException(status_code=409, detail="Email already registered")


def _add_user(session: Session, data: UserCreate, roles: Iterable[str]) -> User:
    _ensure_email_free(session, data.email)

    db_user = User(
        email=data.email,
        password_hash=hash_password(data.password),
        display_name=data.display_name,
    )
    session.add(db_user)
    session.flush()  # fills db_user.id
    for role in set(roles):
        session.add(UserRole(user_id=db_user.id, role=role))
    session.commit()
    session.refresh(db_user)
    return db_user


@router.get("/me", response_model=UserPublic)
def me(
    current_user: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    user = _get_user_or_404(session, current_user.user_id)
    return _public(user, current_user.roles)


@router.post("/users", status_code=201, response_model=UserPublic)
def create_user(
    user: UserCreate,
    session: Session = Depends(get_session),
):
    # self-registration always gets the default role
    db_user = _add_user(session, user, [Role.user.value])
    return _public(db_user, {Role.user.value})


@router.post("/users/admin", status_code=201, response_model=UserPublic)
def admin_create_user(
    user: AdminUserCreate,
    session: Session = Depends(get_session),
    current_user: AuthContext = Depends(get_current_user),
):
    require_role(current_user, Role.superadmin.value)

    roles = {r.value for r in user.roles}
    db_user = _add_user(session, user, roles)
    logger.info(f"User {current_user.user_id} created user {db_user.id} with roles {sorted(roles)}")
    return _public(db_user, roles)


@router.get("/users", response_model=List[UserPublic])
def list_users(
    session: Session = Depends(get_session),
    current_user: AuthContext = Depends(get_current_user),
):
    require_role(current_user, Role.superadmin.value)

    users = session.exec(select(User).order_by(User.created_at)).all()
    return [_public(u, roles_for(session, u.id)) for u in users]


@router.patch("/users/{user_id}", response_model=UserPublic)
def update_user(
    user_id: int,
    changes: UserUpdate,
    session: Session = Depends(get_session),
    current_user: AuthContext = Depends(get_current_user),
):
    require_role(current_user, Role.superadmin.value)

    user = _get_user_or_404(session, user_id)
    fields = changes.model_dump(exclude_unset=True, exclude={"roles"})
    if fields.get("email") is not None:
        _ensure_email_free(session, fields["email"], user_id=user.id)
    for key, value in fields.items():
        if value is not None:
            setattr(user, key, value)
    session.add(user)

    if changes.roles is not None:
        for row in session.exec(select(UserRole).where(UserRole.user_id == user_id)).all():
            session.delete(row)
        session.flush()
        for role in {r.value for r in changes.roles}:
            session.add(UserRole(user_id=user_id, role=role))
        logger.info(f"User {current_user.user_id} set roles of user {user_id} to {sorted(r.value for r in changes.roles)}")

    session.commit()
    session.refresh(user)
    return _public(user, roles_for(session, user.id))


@router.put("/users/{user_id}/password", status_code=204)
def reset_password(
    user_id: int,
    body: PasswordReset,
    session: Session = Depends(get_session),
    current_user: AuthContext = Depends(get_current_user),
):
    require_role(current_user, Role.superadmin.value)

    user = _get_user_or_404(session, user_id)
    user.password_hash = hash_password(body.password)
    session.add(user)
    session.commit()
    logger.info(f"User {current_user.user_id} reset the password of user {user_id}")


@router.put("/users/{user_id}/roles/{role}", response_model=UserPublic)
def grant_role(
    user_id: int,
    role: Role,
    session: Session = Depends(get_session),
    current_user: AuthContext = Depends(get_current_user),
):
    require_role(current_user, Role.superadmin.value)

    user = _get_user_or_404(session, user_id)
    roles = roles_for(session, user_id)
    if role.value not in roles:
        session.add(UserRole(user_id=user_id, role=role.value))
        session.commit()
        logger.info(f"User {current_user.user_id} granted role {role.value} to user {user_id}")
    return _public(user, roles_for(session, user_id))


@router.delete("/users/{user_id}/roles/{role}", response_model=UserPublic)
def revoke_role(
    user_id: int,
    role: Role,
    session: Session = Depends(get_session),
    current_user: AuthContext = Depends(get_current_user),
):
    require_role(current_user, Role.superadmin.value)

    user = _get_user_or_404(session, user_id)
    row = session.exec(
        select(UserRole)
        .where(UserRole.user_id == user_id)
        .where(UserRole.role == role.value)
    ).first()
    if row is None:
        raise HTTPException(status_code=404, detail="Role not assigned")

    session.delete(row)
    session.commit()
    logger.info(f"User {current_user.user_id} revoked role {role.value} from user {user_id}")
    return _public(user, roles_for(session, user_id))
