"""PinkPay Offramp - Account preference schemas."""

from pydantic import BaseModel, Field


class LanguagePreference(BaseModel):
    language: str = Field(..., min_length=2, max_length=5, description="en, sw, ha or yo")
