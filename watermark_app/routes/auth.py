import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from watermark_app.config import Settings
from watermark_app.deps import (
    create_access_token,
    get_current_user,
    get_db,
    get_settings,
    hash_password,
    verify_password,
)
from watermark_app.errors import Unauthenticated, ValidationError
from watermark_app.models import User

logger = logging.getLogger(__name__)

router = APIRouter()

MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_BYTES = 72  # bcrypt limit


class SignupIn(BaseModel):
    name: str
    email: str
    password: str


class LoginIn(BaseModel):
    email: str
    password: str


def create_user(db: Session, name: str, email: str, password: str) -> User:
    """Validate and insert a new account"""
    name = name.strip()
    email = email.strip().lower()
    if not name:
        raise ValidationError("Name is required")
    if "@" not in email:
        raise ValidationError("A valid email is required")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError("Password is too long")
    if db.query(User).filter(User.email == email).first():
        raise ValidationError("An account with this email already exists")

    user = User(name=name, email=email, password_hash=hash_password(password))
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Created user %s", user.id)
    return user


@router.post("/signup", status_code=201)
async def signup(
    body: SignupIn,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Create an account and sign it in"""
    user = create_user(db, body.name, body.email, body.password)
    return {"token": create_access_token(user.id, settings), "user": user.to_dict()}


@router.post("/login")
async def login(
    body: LoginIn,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    user = db.query(User).filter(User.email == body.email.strip().lower()).first()
    if not user or not verify_password(body.password, user.password_hash):
        raise Unauthenticated("Invalid email or password")

    return {"token": create_access_token(user.id, settings), "user": user.to_dict()}


@router.get("/me")
async def me(user: User = Depends(get_current_user)):
    return user.to_dict()
