import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from watermark_app.errors import NotFoundError, ValidationError
from watermark_app.models import User, WatermarkText

logger = logging.getLogger(__name__)


def list_texts(db: Session, owner_id: str) -> List[WatermarkText]:
    """All texts owned by ``owner_id``, newest first"""
    return (
        db.query(WatermarkText)
        .filter(WatermarkText.owner_id == owner_id)
        .order_by(WatermarkText.created_at.desc())
        .all()
    )


def get_text(db: Session, text_id: str, owner_id: str) -> Optional[WatermarkText]:
    return (
        db.query(WatermarkText)
        .filter(WatermarkText.id == text_id, WatermarkText.owner_id == owner_id)
        .first()
    )


def create_text(db: Session, owner_id: str, text) -> WatermarkText:
    text = text.strip() if isinstance(text, str) else ""
    if not text:
        raise ValidationError("Text is required")

    row = WatermarkText(owner_id=owner_id, text=text)
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info("Created watermark text %s for user %s", row.id, owner_id)
    return row


def delete_text(db: Session, text_id: str, owner_id: str) -> None:
    deleted = (
        db.query(WatermarkText)
        .filter(WatermarkText.id == text_id, WatermarkText.owner_id == owner_id)
        .delete(synchronize_session=False)
    )
    if deleted == 0:
        db.rollback()
        raise NotFoundError("Not found")

    db.commit()
    logger.info("Deleted watermark text %s for user %s", text_id, owner_id)


def resolve_text(db: Session, user: User, text_id: Optional[str], suffix: str = "architecte") -> str:
    """Pick the watermark text for a request.

    Without an id the default ``"<name> <suffix>"`` is used. With an id the
    row must belong to ``user``; otherwise NotFoundError, never the default.
    """
    if not text_id:
        return f"{user.name} {suffix}"

    row = get_text(db, text_id, user.id)
    if row is None:
        raise NotFoundError("Watermark text not found")
    return row.text
