"""Reply templates keyed by detected language and intent."""
import logging

from app.schemas.intent import Intent
from app.utils.language import LanguageLabel

logger = logging.getLogger(__name__)

DEFAULT_KEY = "default"

RESPONSE_TEMPLATES = {
    LanguageLabel.ENGLISH: {
        "order": "I'd be happy to help you with your order. What would you like to order?",
        "question": "That's a great question. Let me help you with that.",
        "greeting": "Hello! Welcome to our service. How can I assist you today?",
        "menu": "Let me show you our menu. What type of food are you interested in?",
        "complaint": "I'm sorry to hear about your concern. Let me help resolve this for you.",
        "search_restaurant": "I'll help you find restaurants. What type of cuisine are you looking for?",
        "check_status": "Let me check the status of your order for you.",
        "other": "I'm here to help. What would you like to do?",
        DEFAULT_KEY: "I understand your request. How can I help you further?",
    },
    LanguageLabel.URDU: {
        "order": "G bilkul, main aap ka order kar sakta hun. Aap kya lena chahte hain?",
        "question": "Bahut acha sawal hai. Main aap ki madad kar sakta hun.",
        "greeting": "Assalam o Alaikum! Hamari service mein khush amdeed. Main aap ki kya madad kar sakta hun?",
        "menu": "Main aap ko menu dikhata hun. Aap kya khaana pasand karenge?",
        "complaint": "Maaf karna, main aap ki pareshani samajh gaya hun. Main iska hal kar deta hun.",
        "search_restaurant": "Main aap ke liye restaurant dhundta hun. Aap kaun sa cuisine chahte hain?",
        "check_status": "Main aap ke order ka status check kar deta hun.",
        "other": "Main yahan hun aap ki madad ke liye. Aap kya karna chahte hain?",
        DEFAULT_KEY: "Main aap ki baat samajh gaya hun. Aur kya madad kar sakta hun?",
    },
}

RESTAURANT_CLAUSES = {
    LanguageLabel.ENGLISH: " I see you mentioned {restaurant}.",
    LanguageLabel.URDU: " Main dekh raha hun aap ne {restaurant} ka naam kaha hai.",
}

FOOD_ITEMS_CLAUSES = {
    LanguageLabel.ENGLISH: " I noticed you're interested in {items}.",
    LanguageLabel.URDU: " Main dekh raha hun aap {items} chahte hain.",
}


def compose_response(intent: Intent, original_text: str) -> str:
    """
    Build the reply for an intent in its detected language.

    A mentioned restaurant is echoed back; otherwise any food items are.
    original_text is accepted for logging only.
    """
    language = intent.detected_language
    templates = RESPONSE_TEMPLATES[language]
    response = templates.get(intent.intent.value, templates[DEFAULT_KEY])
    logger.debug(f"Composing {language.value} response for intent {intent.intent.value} ({original_text[:50]!r})")

    entities = intent.entities
    if entities.restaurant:
        return response + RESTAURANT_CLAUSES[language].format(restaurant=entities.restaurant)
    if entities.food_items:
        return response + FOOD_ITEMS_CLAUSES[language].format(items=", ".join(entities.food_items))
    return response
