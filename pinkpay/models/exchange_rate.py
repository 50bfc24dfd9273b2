"""PinkPay Offramp - Exchange rate and payout method reference data.

This module defines:
- ExchangeRate: one observed (crypto -> fiat) rate
- PayoutMethod: a fiat payout channel with its fee percentage
- The default reference tables the app ships with
"""

from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field


class ExchangeRate(BaseModel):
    """Observed exchange rate for a crypto asset into a fiat currency.

    Attributes:
        from_asset: Crypto symbol (uppercase), e.g. 'USDC'
        to_currency: Fiat code (uppercase), e.g. 'KSH'
        rate: Fiat units per one unit of the asset
        observed_at: When the rate was fetched
    """

    from_asset: str = Field(max_length=20)
    to_currency: str = Field(max_length=20)
    rate: Decimal = Field(ge=0)
    observed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def pair(self) -> tuple[str, str]:
        return (self.from_asset, self.to_currency)


class PayoutMethodKind(str, Enum):
    """Payout channel kind."""

    MPESA = "mpesa"
    BANK = "bank"
    MOBILE_MONEY = "mobile_money"


class PayoutMethod(BaseModel):
    """Fiat payout channel.

    Fee calculation: fiat_amount * fee_percent / 100
    """

    id: str
    name: str
    kind: PayoutMethodKind
    currency: str
    country: str = Field(max_length=2, description="ISO country code, e.g. 'KE'")
    fee_percent: Decimal = Field(ge=0, le=100)
    processing_time: str = ""
    available: bool = True


CRYPTOCURRENCIES: dict[str, str] = {
    "USDC": "USD Coin",
    "USDT": "Tether USD",
    "ETH": "Ethereum",
    "BTC": "Bitcoin",
}

FIAT_CURRENCIES: dict[str, str] = {
    "KSH": "Kenyan Shilling",
    "TZS": "Tanzanian Shilling",
    "NGN": "Nigerian Naira",
}

# (asset, currency) -> rate
DEFAULT_RATES: dict[tuple[str, str], Decimal] = {
    ("USDC", "KSH"): Decimal("129.50"),
    ("USDT", "KSH"): Decimal("129.45"),
    ("ETH", "KSH"): Decimal("324500.00"),
    ("BTC", "KSH"): Decimal("6820000.00"),
    ("USDC", "TZS"): Decimal("2650.00"),
    ("USDT", "TZS"): Decimal("2649.50"),
    ("ETH", "TZS"): Decimal("6634000.00"),
    ("BTC", "TZS"): Decimal("139500000.00"),
    ("USDC", "NGN"): Decimal("1650.00"),
    ("USDT", "NGN"): Decimal("1649.50"),
    ("ETH", "NGN"): Decimal("4125000.00"),
    ("BTC", "NGN"): Decimal("86700000.00"),
}

PAYOUT_METHODS: list[PayoutMethod] = [
    PayoutMethod(
        id="mpesa_ke",
        name="M-Pesa Kenya",
        kind=PayoutMethodKind.MPESA,
        currency="KSH",
        country="KE",
        fee_percent=Decimal("2.5"),
        processing_time="1-5 minutes",
    ),
    PayoutMethod(
        id="mpesa_tz",
        name="M-Pesa Tanzania",
        kind=PayoutMethodKind.MPESA,
        currency="TZS",
        country="TZ",
        fee_percent=Decimal("3.0"),
        processing_time="1-5 minutes",
    ),
    PayoutMethod(
        id="bank_ng",
        name="Nigerian Bank Transfer",
        kind=PayoutMethodKind.BANK,
        currency="NGN",
        country="NG",
        fee_percent=Decimal("1.5"),
        processing_time="5-30 minutes",
    ),
]
