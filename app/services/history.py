"""Voice interaction history and voice preferences storage."""
import logging
from typing import List, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.voice import VoiceInteraction, VoicePreference
from app.schemas.voice import VoicePreferences, VoicePreferencesUpdate

logger = logging.getLogger(__name__)


def save_interaction(
    db: Session,
    user_id: str,
    input_text: str,
    output_text: str,
    intent: str,
    language: str,
) -> None:
    """Record an interaction. Storage failures are logged, never raised."""
    try:
        db.add(VoiceInteraction(
            user_id=user_id,
            input_text=input_text,
            output_text=output_text,
            intent=intent,
            language=language,
        ))
        db.commit()
        logger.info(f"Voice interaction saved to history for user {user_id}")
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error saving voice history: {e}")


def get_history(db: Session, user_id: str, page: int = 1, limit: int = 20) -> Tuple[List[VoiceInteraction], int]:
    """Newest-first page of a user's interactions, plus the user's total count."""
    query = db.query(VoiceInteraction).filter(VoiceInteraction.user_id == user_id)
    total = query.count()
    items = (
        query.order_by(VoiceInteraction.created_at.desc(), VoiceInteraction.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return items, total


def clear_history(db: Session, user_id: str) -> int:
    """Delete all of a user's interactions; returns how many were removed."""
    deleted = db.query(VoiceInteraction).filter(VoiceInteraction.user_id == user_id).delete()
    db.commit()
    logger.info(f"Voice history cleared for user {user_id} ({deleted} rows)")
    return deleted


def get_preferences(db: Session, user_id: str) -> VoicePreferences:
    """Stored preferences, or defaults when none are stored or the read fails."""
    try:
        record = db.query(VoicePreference).filter(VoicePreference.user_id == user_id).first()
    except SQLAlchemyError as e:
        logger.error(f"Error fetching voice preferences: {e}")
        return VoicePreferences()
    if record is None:
        return VoicePreferences()
    return VoicePreferences(
        language=record.language,
        voice_gender=record.voice_gender,
        speaking_rate=record.speaking_rate,
        pitch=record.pitch,
    )


def update_preferences(db: Session, update: VoicePreferencesUpdate) -> VoicePreferences:
    """Upsert a user's preferences; unspecified fields reset to defaults."""
    defaults = VoicePreferences()
    preferences = VoicePreferences(
        language=update.language or defaults.language,
        voice_gender=update.voice_gender or defaults.voice_gender,
        speaking_rate=update.speaking_rate if update.speaking_rate is not None else defaults.speaking_rate,
        pitch=update.pitch if update.pitch is not None else defaults.pitch,
    )

    record = db.query(VoicePreference).filter(VoicePreference.user_id == update.user_id).first()
    if record is None:
        record = VoicePreference(user_id=update.user_id)
        db.add(record)
    record.language = preferences.language
    record.voice_gender = preferences.voice_gender
    record.speaking_rate = preferences.speaking_rate
    record.pitch = preferences.pitch
    db.commit()

    logger.info(f"Voice preferences updated for user {update.user_id}: {preferences.model_dump()}")
    return preferences
