"""PinkPay Offramp - Account preference endpoints."""

from fastapi import APIRouter

from pinkpay.api.deps import AccountId, Preferences
from pinkpay.schemas.preferences import LanguagePreference

router = APIRouter(prefix="/preferences", tags=["Preferences"])


@router.get("/language", response_model=LanguagePreference)
def get_language(account_id: AccountId, preferences: Preferences) -> LanguagePreference:
    return LanguagePreference(language=preferences.get_language(account_id))


@router.put("/language", response_model=LanguagePreference)
def set_language(
    data: LanguagePreference,
    account_id: AccountId,
    preferences: Preferences,
) -> LanguagePreference:
    return LanguagePreference(language=preferences.set_language(account_id, data.language))
