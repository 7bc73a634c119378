"""Request and response schemas for voice endpoints."""
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.schemas.intent import Intent
from app.utils.language import SUPPORTED_LANGUAGES, LanguageLabel

VoiceGender = Literal["MALE", "FEMALE", "NEUTRAL"]


def _check_language(value: Optional[str]) -> Optional[str]:
    if value is not None and value not in SUPPORTED_LANGUAGES:
        raise ValueError(f"Invalid language code: {value}")
    return value


class VoicePreferences(BaseModel):
    """Per-user voice settings. Accepts and emits camelCase keys."""
    model_config = ConfigDict(populate_by_name=True)

    language: str = "en-US"
    voice_gender: VoiceGender = Field("NEUTRAL", alias="voiceGender")
    speaking_rate: float = Field(1.0, ge=0.25, le=4.0, alias="speakingRate")
    pitch: float = Field(0.0, ge=-20.0, le=20.0)

    @field_validator("language")
    @classmethod
    def supported_language(cls, value):
        return _check_language(value)


class VoicePreferencesUpdate(BaseModel):
    """Partial preferences update; omitted fields keep their defaults."""
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., description="User identifier")
    language: Optional[str] = None
    voice_gender: Optional[VoiceGender] = Field(None, alias="voiceGender")
    speaking_rate: Optional[float] = Field(None, ge=0.25, le=4.0, alias="speakingRate")
    pitch: Optional[float] = Field(None, ge=-20.0, le=20.0)

    @field_validator("language")
    @classmethod
    def supported_language(cls, value):
        return _check_language(value)


class DetectLanguageRequest(BaseModel):
    text: str = Field(..., max_length=1000, description="Text to classify (may be empty)")


class DetectLanguageResponse(BaseModel):
    language: LanguageLabel


class VoiceCommandRequest(BaseModel):
    """Request schema for the text voice-command endpoint."""
    text: str = Field(..., min_length=1, max_length=1000, description="Voice command text")
    language: Optional[str] = Field(None, description="Language hint; defaults to the user's preference or en-US")
    user_id: Optional[str] = Field(None, description="When set, preferences apply and the interaction is saved")

    @field_validator("language")
    @classmethod
    def supported_language(cls, value):
        return _check_language(value)


class SpeechToTextResponse(BaseModel):
    text: str
    language: str
    detected_language: str
    intent: Intent
    confidence: float
    localized_response: str


class TTSRequest(BaseModel):
    text: str = Field(..., min_length=1, max_length=1000, description="Text to synthesize")
    language: str = Field(default="en-US", description="Language code (en-US, ur-PK, hi-IN, es-ES)")

    @field_validator("language")
    @classmethod
    def supported_language(cls, value):
        return _check_language(value)


class TTSResponse(BaseModel):
    audio: str = Field(..., description="Base64 MP3")


class VoiceHistoryItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    input_text: str
    output_text: str
    intent: str
    language: str
    created_at: datetime


class Pagination(BaseModel):
    page: int
    limit: int
    total: int


class VoiceHistoryResponse(BaseModel):
    history: List[VoiceHistoryItem]
    pagination: Pagination


class SupportedLanguage(BaseModel):
    code: str
    name: str
    flag: str
