"""Intent model produced by the intent extractor."""
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.utils.language import LanguageLabel


class IntentType(str, Enum):
    ORDER = "order"
    QUESTION = "question"
    GREETING = "greeting"
    MENU = "menu"
    COMPLAINT = "complaint"
    SEARCH_RESTAURANT = "search_restaurant"
    CHECK_STATUS = "check_status"
    OTHER = "other"


class Confidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Entities(BaseModel):
    """
    Slot values extracted with the intent.

    food_items and quantities are independent lists; callers must not
    assume quantities[i] belongs to food_items[i].
    """
    model_config = ConfigDict(frozen=True)

    restaurant: Optional[str] = None
    food_items: List[str] = Field(default_factory=list)
    quantities: List[str] = Field(default_factory=list)
    special_instructions: Optional[str] = None

    @field_validator("food_items", "quantities", mode="before")
    @classmethod
    def coerce_list(cls, value):
        # Models return null for "nothing mentioned" and numbers for quantities
        if value is None:
            return []
        if isinstance(value, (str, int, float)):
            value = [value]
        if not isinstance(value, (list, tuple)):
            raise ValueError(f"Expected a list, got {type(value).__name__}")
        items = []
        for v in value:
            if v is None:
                continue
            # e.g. {"name": "burger", "qty": 2}
            if isinstance(v, dict) and isinstance(v.get("name"), str):
                v = v["name"]
            if not isinstance(v, (str, int, float)):
                raise ValueError(f"Expected text items, got {type(v).__name__}")
            items.append(str(v))
        return items

    @field_validator("restaurant", "special_instructions", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        if isinstance(value, str) and value.strip().lower() in ("", "null", "none"):
            return None
        return value


class Intent(BaseModel):
    """Closed-set intent for one utterance. Immutable once built."""
    model_config = ConfigDict(frozen=True)

    intent: IntentType
    entities: Entities = Field(default_factory=Entities)
    confidence: Confidence
    detected_language: LanguageLabel

    @field_validator("intent", "confidence", mode="before")
    @classmethod
    def normalise_case(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("entities", mode="before")
    @classmethod
    def null_entities(cls, value):
        return {} if value is None else value
