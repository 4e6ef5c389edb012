import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class Settings:
    """Application settings, read from the environment"""
    database_url: str = "sqlite:///./data/app.db"
    jwt_secret: str = "your-secret-key"  # Change in production!
    jwt_algorithm: str = "HS256"
    jwt_expiration_hours: int = 24 * 7
    max_file_size_mb: int = 10
    backup_secret: Optional[str] = None
    default_text_suffix: str = "architecte"

    @property
    def max_file_size(self) -> int:
        return self.max_file_size_mb * 1024 * 1024

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            database_url=os.getenv("DATABASE_URL", cls.database_url),
            jwt_secret=os.getenv("JWT_SECRET", cls.jwt_secret),
            jwt_expiration_hours=int(os.getenv("JWT_EXPIRATION_HOURS", str(cls.jwt_expiration_hours))),
            max_file_size_mb=int(os.getenv("MAX_FILE_SIZE_MB", str(cls.max_file_size_mb))),
            backup_secret=os.getenv("BACKUP_SECRET") or None,
            default_text_suffix=os.getenv("DEFAULT_TEXT_SUFFIX", cls.default_text_suffix),
        )
