"""
Instrument Models

An Instrument is the synthetic trader embedded in a trader-rating question:
a name, a capital figure (crores) and exactly 12 monthly % returns.
The profile is derived from the returns on demand and never persisted.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

MONTHS = 12

# 1 crore = 10,000,000
CRORE = 10_000_000


class Instrument(BaseModel):
    """Trader payload after validation."""
    name: str
    capital: float = Field(ge=0, description="Capital in crores")
    monthly_returns: List[float] = Field(
        min_length=MONTHS,
        max_length=MONTHS,
        description="Exactly 12 monthly percentage returns, oldest first",
    )
    advisory_mean: Optional[float] = Field(
        default=None, description="Mean as stored in the payload (not trusted)"
    )
    advisory_std_dev: Optional[float] = Field(
        default=None, description="Std dev as stored in the payload (not trusted)"
    )

    class Config:
        extra = "forbid"


class InstrumentRiskProfile(BaseModel):
    """Objective risk/return metrics of an instrument."""
    mean: float
    std_dev: float = Field(description="Population standard deviation (n = 12)")
    risk_adjusted_return: Optional[float] = Field(
        description="mean / std_dev; null when std_dev == 0"
    )
    worst_month: float
    best_month: float
    total_return: float = Field(description="Sum of the monthly % returns")
    max_drawdown: float = Field(
        ge=0, description="Largest single-month loss as a positive %"
    )
    monthly_pnl: List[float] = Field(
        description="Capital-denominated P&L per month"
    )
    advisory_mismatch: bool = Field(
        default=False,
        description="Stored mean/stdDev disagree with the recomputed values"
    )

    class Config:
        extra = "forbid"


class InstrumentSummary(BaseModel):
    """Instrument identity + profile, as attached to reports."""
    question_id: str
    name: str
    capital: float
    profile: InstrumentRiskProfile

    class Config:
        extra = "forbid"
