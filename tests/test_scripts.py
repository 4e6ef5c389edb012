import sys
from pathlib import Path

sys.path.append(str(Path(__file__).parent.parent / "scripts"))

import admin_utils  # noqa: E402
import init_db  # noqa: E402
from watermark_app.config import Settings  # noqa: E402


def test_init_db_creates_database_file(settings, tmp_path):
    init_db.init_db(settings)
    assert (tmp_path / "data" / "app.db").exists()


def test_admin_utils(db, capsys):
    assert admin_utils.list_users(db) == []

    user = admin_utils.add_user(db, "Ada", "ada@example.com", "password123")
    assert user is not None
    assert admin_utils.add_user(db, "Ada", "ada@example.com", "password123") is None

    assert [u.email for u in admin_utils.list_users(db)] == ["ada@example.com"]
    assert admin_utils.list_texts(db, "ada@example.com") == []
    assert admin_utils.list_texts(db, "nobody@example.com") is None

    output = capsys.readouterr().out
    assert "already exists" in output
    assert "Ada architecte" in output


def test_list_texts_uses_configured_suffix(db, capsys):
    admin_utils.add_user(db, "Ada", "ada@example.com", "password123")
    admin_utils.list_texts(db, "ada@example.com", Settings(default_text_suffix="studio"))
    assert "default: Ada studio" in capsys.readouterr().out
