from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import AnyHttpUrl, BaseModel, ConfigDict, Field, field_validator

ADDRESS_PATTERN = r"^0x[0-9a-fA-F]{40}$"
TX_HASH_PATTERN = r"^0x[0-9a-fA-F]{64}$"


class RaffleStatus(str, Enum):
    active = "active"
    drawing = "drawing"
    completed = "completed"
    cancelled = "cancelled"
    refunding = "Refunding"


class HealthResponse(BaseModel):
    status: str
    time: datetime


class WinnerUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    raffle_id: int = Field(..., alias="raffleId", gt=0, strict=True)
    winner_address: str = Field(..., alias="winnerAddress", pattern=ADDRESS_PATTERN)
    draw_tx_hash: str = Field(..., alias="drawTxHash", pattern=TX_HASH_PATTERN)
    status: Optional[RaffleStatus] = None


class RaffleData(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    prize_description: str = Field(..., min_length=1, max_length=500)
    ticket_price: Decimal = Field(..., gt=0, le=1_000_000)
    max_tickets: int = Field(..., gt=0, le=1_000_000)
    nft_collection_address: str = Field(..., pattern=ADDRESS_PATTERN)
    draw_date: Optional[datetime] = None
    image_url: Optional[AnyHttpUrl] = None
    detailed_description: Optional[str] = Field(None, max_length=5000)
    rules: Optional[str] = Field(None, max_length=5000)
    gallery_images: Optional[list[AnyHttpUrl]] = None

    @field_validator("image_url")
    @classmethod
    def _image_url_length(cls, value: Optional[AnyHttpUrl]) -> Optional[AnyHttpUrl]:
        if value is not None and len(str(value)) > 500:
            raise ValueError("image_url must be at most 500 characters")
        return value


class RaffleCreateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    raffle_data: RaffleData = Field(..., alias="raffleData")
    contract_raffle_id: Optional[int] = Field(None, alias="contractRaffleId", ge=0)


class RaffleStatusCheckRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    threshold_percent: float = Field(99.0, alias="thresholdPercent", gt=0, le=100)


class TicketSyncRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    raffle_id: int = Field(..., alias="raffleId", gt=0, strict=True)


class ReferralTrackRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    referral_code: Optional[str] = Field(None, alias="referralCode", max_length=64)
    user_id: Optional[UUID] = Field(None, alias="userId")


class ReferralTrackResponse(BaseModel):
    success: bool
    message: str


class ClaimCreate(BaseModel):
    delivery_info: str = Field(..., max_length=2000)

    @field_validator("delivery_info")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Please provide your delivery information")
        return value


class ClaimOut(BaseModel):
    id: str
    raffle_id: int
    user_id: str
    delivery_info: str
    status: str
    created_at: datetime


class ClaimResponse(BaseModel):
    message: str
    claim: ClaimOut


class TicketRaffle(BaseModel):
    id: int
    name: str
    status: str
    prize_description: str
    contract_raffle_id: Optional[int] = None
    winner_address: Optional[str] = None


class TicketCard(BaseModel):
    id: str
    ticket_number: int
    quantity: int
    purchase_price: Decimal
    purchased_at: datetime
    tx_hash: Optional[str]
    tx_url: Optional[str]
    source: str = "database"
    raffle: TicketRaffle


class TicketGroup(BaseModel):
    raffle: TicketRaffle
    ticket_ids: list[str]
    total_tickets: int
    total_spent: Decimal
    is_winner: bool


class TicketListResponse(BaseModel):
    user_id: str
    empty: bool
    message: Optional[str]
    tickets: list[TicketCard]
    groups: list[TicketGroup]


class ReferralTierOut(BaseModel):
    tier_name: str
    tier_level: int
    required_points: float
    icon: str
    benefits: str


class TierRungOut(BaseModel):
    tier: ReferralTierOut
    unlocked: bool


class TierProgressResponse(BaseModel):
    current_points: float
    current_tier: ReferralTierOut
    next_tier: Optional[ReferralTierOut]
    progress_percent: float
    max_tier_reached: bool
    ladder: list[TierRungOut]


class NativeCurrencyOut(BaseModel):
    name: str
    symbol: str
    decimals: int


class NetworkOut(BaseModel):
    chain_id: int
    key: str
    name: str
    rpc_url: str
    block_explorer: str
    native_currency: NativeCurrencyOut
    contracts: dict[str, Optional[str]]
    vrf: dict[str, str]
    raffle_deployed: bool
