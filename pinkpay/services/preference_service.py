"""PinkPay Offramp - Account preferences."""

from pinkpay.core.exceptions import ValidationError
from pinkpay.db.store import EntityKind, PersistenceStore

# language code -> display name
SUPPORTED_LANGUAGES: dict[str, str] = {
    "en": "English",
    "sw": "Kiswahili",
    "ha": "Hausa",
    "yo": "Yorùbá",
}

DEFAULT_LANGUAGE = "en"


class PreferenceService:
    def __init__(self, store: PersistenceStore) -> None:
        self.store = store

    def get_language(self, account_id: str) -> str:
        return self.store.load(EntityKind.LANGUAGE, account_id, default=DEFAULT_LANGUAGE)

    def set_language(self, account_id: str, language: str) -> str:
        language = language.lower()
        if language not in SUPPORTED_LANGUAGES:
            raise ValidationError(
                f"Unsupported language: {language}",
                {"language": language, "supported": list(SUPPORTED_LANGUAGES)},
            )
        self.store.save(EntityKind.LANGUAGE, account_id, language)
        return language
