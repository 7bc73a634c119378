"""Tests for history and preferences storage."""
from unittest.mock import MagicMock

from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.database import SessionLocal
from app.schemas.voice import VoicePreferences, VoicePreferencesUpdate
from app.services import history


def test_save_interaction_swallows_storage_errors():
    mock_session = MagicMock(spec=Session)
    mock_session.commit.side_effect = SQLAlchemyError("database is locked")

    history.save_interaction(
        mock_session, "user-1", input_text="order two burgers", output_text="...", intent="order", language="en-US"
    )

    mock_session.add.assert_called_once()
    mock_session.rollback.assert_called_once()


def test_get_preferences_defaults_on_read_error():
    mock_session = MagicMock(spec=Session)
    mock_session.query.side_effect = OperationalError("SELECT", {}, Exception("no such table"))

    assert history.get_preferences(mock_session, "user-1") == VoicePreferences()


def test_update_preferences_resets_omitted_fields():
    db = SessionLocal()
    try:
        history.update_preferences(db, VoicePreferencesUpdate(
            user_id="reset-user", language="hi-IN", voice_gender="MALE", pitch=5.0
        ))
        updated = history.update_preferences(db, VoicePreferencesUpdate(user_id="reset-user", speaking_rate=2.0))

        assert updated == VoicePreferences(speaking_rate=2.0)
        assert history.get_preferences(db, "reset-user") == VoicePreferences(speaking_rate=2.0)
    finally:
        db.close()


def test_history_pages_newest_first():
    db = SessionLocal()
    try:
        for i in range(3):
            history.save_interaction(db, "pager", f"command {i}", "reply", "order", "en-US")

        items, total = history.get_history(db, "pager", page=2, limit=2)

        assert total == 3
        assert [item.input_text for item in items] == ["command 0"]
        assert history.clear_history(db, "pager") == 3
    finally:
        db.close()
