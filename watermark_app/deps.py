import logging
from datetime import datetime, timedelta
from pathlib import Path
from typing import Generator, Optional

import bcrypt
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from watermark_app.config import Settings
from watermark_app.errors import Unauthenticated

logger = logging.getLogger(__name__)

Base = declarative_base()

security = HTTPBearer(auto_error=False)


def make_engine(database_url: str) -> Engine:
    """Create the engine, preparing the SQLite file location when needed"""
    url = make_url(database_url)
    is_sqlite = url.get_backend_name() == "sqlite"

    if is_sqlite and url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)

    engine = create_engine(
        database_url,
        connect_args={"check_same_thread": False} if is_sqlite else {},
    )

    if is_sqlite:
        @event.listens_for(engine, "connect")
        def _set_wal(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.close()

    return engine


def init_store(settings: Settings):
    """Build the engine and session factory once and create all tables"""
    # Register the mapped classes on Base before create_all
    from watermark_app import models  # noqa: F401

    engine = make_engine(settings.database_url)
    Base.metadata.create_all(bind=engine)
    session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    logger.info("Store initialized at %s", engine.url.render_as_string(hide_password=True))
    return engine, session_factory


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_db(request: Request) -> Generator[Session, None, None]:
    """Get a database session"""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


# Password functions
def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


# JWT functions
def create_access_token(user_id: str, settings: Settings, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token"""
    if expires_delta is None:
        expires_delta = timedelta(hours=settings.jwt_expiration_hours)

    to_encode = {
        "sub": user_id,
        "exp": datetime.utcnow() + expires_delta,
    }

    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str, settings: Settings) -> dict:
    """Decode a JWT token"""
    return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Get current user from the bearer token"""
    from watermark_app.models import User

    if credentials is None:
        raise Unauthenticated("Unauthorized")

    try:
        payload = decode_token(credentials.credentials, settings)
    except JWTError:
        raise Unauthenticated("Invalid authentication token")

    user_id = payload.get("sub")
    if user_id is None:
        raise Unauthenticated("Invalid authentication credentials")

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise Unauthenticated("User not found")

    return user
