"""MarketRecord, EventRecord, PricePoint - immutable catalog snapshots."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class PricePoint(BaseModel):
    """Single price sample. Series order is not guaranteed by the source."""

    model_config = ConfigDict(frozen=True)

    timestamp: int  # epoch seconds
    price: float = Field(..., ge=0, le=1, description="Probability/price in [0, 1]")


PriceSeries = list[PricePoint]


class MarketRecord(BaseModel):
    """Binary market as seen by the dependency engine."""

    model_config = ConfigDict(frozen=True)

    id: str
    event_id: str | None = None
    question: str = ""
    slug: str | None = None
    volume: float = 0.0
    volume_24h: float = 0.0
    liquidity: float = 0.0
    outcome_prob: float = Field(0.0, ge=0, le=1, description="Probability of 'Yes'")
    end_date: str | None = None  # ISO string, parsed lazily
    tokens: list[str] = Field(default_factory=list)  # CLOB token ids, "Yes" first
    category_id: str = "other"

    @property
    def history_key(self) -> str | None:
        """Price-series key used by the history provider (the 'Yes' token)."""
        return self.tokens[0] if self.tokens else None


class EventRecord(BaseModel):
    """Event grouping one or more markets."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    slug: str | None = None
    end_date: str | None = None
    category_id: str = "other"
    volume: float = 0.0
    markets: list[MarketRecord] = Field(default_factory=list)
