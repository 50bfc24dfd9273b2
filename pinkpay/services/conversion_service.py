"""PinkPay Offramp - Conversion Service.

Fee calculation:
    fiat_amount = round2(crypto_amount * rate)
    fee         = round2(fiat_amount * fee_percent / 100)
    net_amount  = fiat_amount - fee
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any

from pinkpay.core.exceptions import (
    InvalidAmountError,
    RateUnavailableError,
    UnknownPayoutMethodError,
)
from pinkpay.models.exchange_rate import PAYOUT_METHODS, PayoutMethod
from pinkpay.services.rate_service import RateProvider
from pinkpay.utils.helpers import require_positive, round_fiat, to_decimal


@dataclass(frozen=True)
class ConversionResult:
    fiat_amount: Decimal
    fee: Decimal
    net_amount: Decimal


@dataclass(frozen=True)
class Quote:
    """Conversion preview for a concrete asset pair and payout method."""

    from_asset: str
    to_currency: str
    crypto_amount: Decimal
    exchange_rate: Decimal
    rate_observed_at: datetime
    payout_method: PayoutMethod
    fiat_amount: Decimal
    fee: Decimal
    net_amount: Decimal


def convert(crypto_amount: Any, rate: Any, fee_percent: Any) -> ConversionResult:
    """Convert a crypto amount to fiat and apply a percentage fee.

    Args:
        crypto_amount: Amount of crypto, must be > 0
        rate: Fiat per unit of crypto, must be >= 0
        fee_percent: Fee percentage in [0, 100]

    Raises:
        InvalidAmountError: If any input is non-numeric or out of range
    """
    amount = require_positive(crypto_amount, "crypto_amount")
    rate = to_decimal(rate, "rate")
    if rate < 0:
        raise InvalidAmountError("rate must not be negative", {"rate": str(rate)})
    fee_percent = to_decimal(fee_percent, "fee_percent")
    if not Decimal("0") <= fee_percent <= Decimal("100"):
        raise InvalidAmountError(
            "fee_percent must be between 0 and 100", {"fee_percent": str(fee_percent)}
        )

    fiat_amount = round_fiat(amount * rate)
    fee = round_fiat(fiat_amount * fee_percent / Decimal("100"))
    return ConversionResult(fiat_amount=fiat_amount, fee=fee, net_amount=fiat_amount - fee)


class ConversionService:
    """Resolves rates and payout methods into quotes."""

    def __init__(self, rates: RateProvider, payout_methods: list[PayoutMethod] | None = None):
        self.rates = rates
        self.payout_methods = PAYOUT_METHODS if payout_methods is None else payout_methods

    def available_payout_methods(self, currency: str) -> list[PayoutMethod]:
        currency = currency.upper()
        return [m for m in self.payout_methods if m.currency == currency and m.available]

    def get_payout_method(self, payout_method_id: str, currency: str | None = None) -> PayoutMethod:
        """Get a usable payout method.

        Raises:
            UnknownPayoutMethodError: If missing, unavailable, or not paying out in ``currency``
        """
        method = next((m for m in self.payout_methods if m.id == payout_method_id), None)
        if method is None or not method.available:
            raise UnknownPayoutMethodError(
                f"Payout method {payout_method_id} is not available",
                {"payout_method_id": payout_method_id},
            )
        if currency and method.currency != currency.upper():
            raise UnknownPayoutMethodError(
                f"Payout method {payout_method_id} does not pay out in {currency.upper()}",
                {"payout_method_id": payout_method_id, "currency": currency.upper()},
            )
        return method

    def quote(
        self,
        from_asset: str,
        to_currency: str,
        crypto_amount: Any,
        payout_method_id: str,
    ) -> Quote:
        """Build a conversion quote.

        Raises:
            InvalidAmountError: If crypto_amount is not a positive number
            RateUnavailableError: If the pair has no current rate
            UnknownPayoutMethodError: If the payout method cannot be used
        """
        from_asset = from_asset.upper()
        to_currency = to_currency.upper()
        amount = require_positive(crypto_amount, "crypto_amount")
        method = self.get_payout_method(payout_method_id, to_currency)

        rate = self.rates.get_rate(from_asset, to_currency)
        if rate is None:
            raise RateUnavailableError(from_asset, to_currency)

        result = convert(amount, rate.rate, method.fee_percent)
        return Quote(
            from_asset=from_asset,
            to_currency=to_currency,
            crypto_amount=amount,
            exchange_rate=rate.rate,
            rate_observed_at=rate.observed_at,
            payout_method=method,
            fiat_amount=result.fiat_amount,
            fee=result.fee,
            net_amount=result.net_amount,
        )
