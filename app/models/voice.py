"""Database models for voice interaction history and voice preferences."""
from sqlalchemy import Column, String, Integer, Float, DateTime, Text
from sqlalchemy.orm import declarative_base
from datetime import datetime

Base = declarative_base()


class VoiceInteraction(Base):
    """One processed voice command and the reply given."""
    __tablename__ = "voice_interactions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, nullable=False, index=True)
    input_text = Column(Text, nullable=False)
    output_text = Column(Text, nullable=False)
    intent = Column(String, nullable=False)
    language = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)


class VoicePreference(Base):
    """Per-user voice settings (one row per user)."""
    __tablename__ = "voice_preferences"

    user_id = Column(String, primary_key=True, index=True)
    language = Column(String, nullable=False, default="en-US")
    voice_gender = Column(String, nullable=False, default="NEUTRAL")
    speaking_rate = Column(Float, nullable=False, default=1.0)
    pitch = Column(Float, nullable=False, default=0.0)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
