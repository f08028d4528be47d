import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from study_planner.api import deps
from study_planner.core.security import (
    create_access_token,
    get_password_hash,
    verify_password,
)
from study_planner.db.session import get_db
from study_planner.models.user import User
from study_planner.schemas import auth as auth_schema

logger = logging.getLogger(__name__)

router = APIRouter()


def _auth_response(user: User) -> auth_schema.AuthResponse:
    return auth_schema.AuthResponse(
        token=create_access_token(user.id, email=user.email),
        user=auth_schema.UserPublic.model_validate(user),
    )


@router.post(
    "/register",
    response_model=auth_schema.AuthResponse,
    status_code=status.HTTP_201_CREATED,
)
def register_user(
    payload: auth_schema.RegisterRequest,
    db: Session = Depends(get_db),
) -> auth_schema.AuthResponse:
    existing = db.query(User).filter(User.email == payload.email).first()
    if existing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="User already exists"
        )
    user = User(
        email=payload.email,
        display_name=payload.display_name,
        hashed_password=get_password_hash(payload.password),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered user %s", user.id)
    return _auth_response(user)


@router.post("/login", response_model=auth_schema.AuthResponse)
def login_user(
    payload: auth_schema.LoginRequest,
    db: Session = Depends(get_db),
) -> auth_schema.AuthResponse:
    user = db.query(User).filter(User.email == payload.email).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    if not user.hashed_password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="This account was created with Google. Please use Google Sign-In.",
        )
    if not verify_password(payload.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    return _auth_response(user)


@router.get("/profile", response_model=auth_schema.UserPublic)
def read_profile(
    current_user: User = Depends(deps.get_current_user),  # noqa: B008
) -> auth_schema.UserPublic:
    return current_user


@router.post("/logout")
def logout() -> dict[str, str]:
    """Tokens are stateless; the client discards its copy."""
    return {"message": "Logged out successfully"}
