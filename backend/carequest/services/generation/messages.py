"""Caregiver-facing texts for generation failures."""
from __future__ import annotations

from typing import Dict, Tuple

from carequest.services.generation.errors import GenerationErrorKind

DEFAULT_LOCALE = "en"

# (title, message) per locale and failure kind
USER_MESSAGES: Dict[str, Dict[GenerationErrorKind, Tuple[str, str]]] = {
    "en": {
        GenerationErrorKind.MALFORMED_IMAGE: (
            "Photo problem",
            "The photo could not be read. Please upload it again.",
        ),
        GenerationErrorKind.SAFETY_BLOCKED: (
            "Generation error",
            "The description was flagged as inappropriate. Please try different words.",
        ),
        GenerationErrorKind.NO_IMAGE_RETURNED: (
            "Generation error",
            "No picture could be made. The model responded unexpectedly. Please try a different activity.",
        ),
        GenerationErrorKind.TRANSIENT_TRANSPORT: (
            "Generation error",
            "A technical error occurred while making the picture. Check your internet connection and try again later.",
        ),
        GenerationErrorKind.TRANSPORT_FAILED: (
            "Generation error",
            "A technical error occurred while making the picture. Check your internet connection and try again later.",
        ),
        GenerationErrorKind.FALLBACK_EXHAUSTED: (
            "Generation error",
            "A technical error occurred while making the picture. Check your internet connection and try again later.",
        ),
    },
    "nl": {
        GenerationErrorKind.MALFORMED_IMAGE: (
            "Fout met de foto",
            "De foto kon niet worden gelezen. Upload de foto opnieuw.",
        ),
        GenerationErrorKind.SAFETY_BLOCKED: (
            "Generatie Fout",
            "De beschrijving werd als ongepast gemarkeerd. Probeer het met andere woorden.",
        ),
        GenerationErrorKind.NO_IMAGE_RETURNED: (
            "Generatie Fout",
            "Het is niet gelukt een afbeelding te maken. De AI gaf een onverwacht antwoord. Probeer een andere activiteit.",
        ),
        GenerationErrorKind.TRANSIENT_TRANSPORT: (
            "Generatie Fout",
            "Er is een technische fout opgetreden bij het maken van de afbeelding. "
            "Controleer uw internetverbinding en probeer het later opnieuw.",
        ),
        GenerationErrorKind.TRANSPORT_FAILED: (
            "Generatie Fout",
            "Er is een technische fout opgetreden bij het maken van de afbeelding. "
            "Controleer uw internetverbinding en probeer het later opnieuw.",
        ),
        GenerationErrorKind.FALLBACK_EXHAUSTED: (
            "Generatie Fout",
            "Er is een technische fout opgetreden bij het maken van de afbeelding. "
            "Controleer uw internetverbinding en probeer het later opnieuw.",
        ),
    },
}


def user_message_for(kind: GenerationErrorKind, locale: str = DEFAULT_LOCALE) -> Tuple[str, str]:
    """Return (title, message) for ``kind``, falling back to English."""
    messages = USER_MESSAGES.get(locale.lower(), USER_MESSAGES[DEFAULT_LOCALE])
    return messages[kind]
