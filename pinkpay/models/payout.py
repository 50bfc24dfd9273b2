"""PinkPay Offramp - Payout destinations and source chains.

Reference data:
- SUPPORTED_CHAINS: networks a payout can be funded from
- MOBILE_CHANNELS: ways to receive a KSH mobile payout (M-Pesa, Till, Paybill, Pochi)
- BANKS: banks per country for bank transfer payouts
"""

from pydantic import BaseModel, Field


class Chain(BaseModel):
    id: str
    name: str
    symbol: str
    gas_token: str
    rpc_url: str


SUPPORTED_CHAINS: list[Chain] = [
    Chain(id="base", name="Base", symbol="BASE", gas_token="ETH", rpc_url="https://mainnet.base.org"),
    Chain(id="celo", name="Celo", symbol="CELO", gas_token="CELO", rpc_url="https://forno.celo.org"),
    Chain(
        id="optimism",
        name="Optimism",
        symbol="OP",
        gas_token="ETH",
        rpc_url="https://mainnet.optimism.io",
    ),
    Chain(
        id="arbitrum",
        name="Arbitrum",
        symbol="ARB",
        gas_token="ETH",
        rpc_url="https://arb1.arbitrum.io/rpc",
    ),
    Chain(
        id="gnosis",
        name="Gnosis Chain",
        symbol="GNO",
        gas_token="xDAI",
        rpc_url="https://rpc.gnosischain.com",
    ),
]


class MobileChannel(BaseModel):
    """How an M-Pesa payout is received.

    Attributes:
        requires: PayoutDestination fields that must be filled for this channel
        countries: Countries where the channel exists
    """

    id: str
    name: str
    description: str
    countries: list[str]
    requires: list[str]


MOBILE_CHANNELS: list[MobileChannel] = [
    MobileChannel(
        id="mpesa",
        name="M-Pesa",
        description="Direct to M-Pesa wallet",
        countries=["KE", "TZ"],
        requires=["phone_number"],
    ),
    MobileChannel(
        id="till",
        name="Till Number",
        description="Pay to business till number",
        countries=["KE"],
        requires=["recipient"],
    ),
    MobileChannel(
        id="paybill",
        name="Paybill",
        description="Corporate paybill payment",
        countries=["KE"],
        requires=["recipient", "account_number"],
    ),
    MobileChannel(
        id="pochi",
        name="Pochi la Biashara",
        description="Business wallet payment",
        countries=["KE"],
        requires=["recipient"],
    ),
]

# country -> bank code -> bank name
BANKS: dict[str, dict[str, str]] = {
    "NG": {
        "access": "Access Bank",
        "gtb": "Guaranty Trust Bank",
        "zenith": "Zenith Bank",
        "firstbank": "First Bank",
        "uba": "United Bank for Africa",
    },
}


class PayoutDestination(BaseModel):
    """Where the fiat goes. Which fields are needed depends on the payout method.

    - mpesa methods: ``channel`` (default 'mpesa') plus that channel's fields
    - bank methods: ``bank_code`` and ``account_number``
    - mobile money methods: ``phone_number``
    """

    channel: str | None = Field(default=None, max_length=20)
    phone_number: str | None = Field(default=None, max_length=20)
    recipient: str | None = Field(
        default=None, max_length=100, description="Till/paybill number or business name"
    )
    account_number: str | None = Field(default=None, max_length=34)
    bank_code: str | None = Field(default=None, max_length=20)


def get_chain(chain_id: str) -> Chain | None:
    return next((c for c in SUPPORTED_CHAINS if c.id == chain_id), None)


def get_mobile_channel(channel_id: str) -> MobileChannel | None:
    return next((c for c in MOBILE_CHANNELS if c.id == channel_id), None)
