import hmac
import logging
import tempfile
from datetime import date
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import Response

from watermark_app.config import Settings
from watermark_app.deps import get_settings
from watermark_app.errors import Unauthenticated, WatermarkAppError

logger = logging.getLogger(__name__)

router = APIRouter()


def secret_matches(token: str, secret: str) -> bool:
    """Constant-time comparison, rejecting length mismatches first"""
    if not token or len(token) != len(secret):
        return False
    return hmac.compare_digest(token.encode("utf-8"), secret.encode("utf-8"))


@router.get("/backup")
def download_backup(
    request: Request,
    authorization: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings),
):
    """Download a consistent copy of the SQLite database"""
    secret = settings.backup_secret
    if not secret:
        raise WatermarkAppError("Backup not configured")

    token = authorization[7:] if authorization and authorization.startswith("Bearer ") else ""
    if not secret_matches(token, secret):
        raise Unauthenticated("Unauthorized")

    engine = request.app.state.engine
    if engine.dialect.name != "sqlite":
        raise WatermarkAppError("Backup is only supported for SQLite databases")

    with tempfile.TemporaryDirectory() as temp_dir:
        backup_path = Path(temp_dir) / "backup.db"
        with engine.connect().execution_options(isolation_level="AUTOCOMMIT") as conn:
            conn.exec_driver_sql("VACUUM INTO ?", (str(backup_path),))
        data = backup_path.read_bytes()

    logger.info("Database backup created (%d bytes)", len(data))
    filename = f"backup-{date.today().isoformat()}.db"
    return Response(
        content=data,
        media_type="application/octet-stream",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
