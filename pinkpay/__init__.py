"""PinkPay Offramp - crypto to fiat payout engine and API."""

__version__ = "0.1.0"
