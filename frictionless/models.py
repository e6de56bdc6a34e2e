from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class MatchStatus(str, Enum):
    PENDING = "pending"
    CONNECTED = "connected"
    REJECTED = "rejected"


class StartupProfile(BaseModel):
    user_id: str
    company_name: str | None = None
    industry: str | None = None
    stage: str | None = None
    headquarters: str | None = None
    funding_ask: str | None = None
    readiness_score: float | None = None
    website: str | None = None
    pitch_deck_url: str | None = None
    description: str | None = None
    business_model: str | None = None
    value_proposition: str | None = None
    target_market: str | None = None
    traction: str | None = None
    ai_analyzed_at: datetime | None = None


class InvestorProfile(BaseModel):
    user_id: str
    organization_name: str | None = None
    focus_sectors: list[str] | None = None
    focus_stages: list[str] | None = None
    geography_focus: list[str] | None = None
    ticket_size_min: float | None = None
    ticket_size_max: float | None = None
    website: str | None = None
    investor_deck_url: str | None = None
    headquarters: str | None = None
    fund_size: str | None = None
    average_ticket: str | None = None
    investment_thesis: str | None = None
    ai_analyzed_at: datetime | None = None


class Match(BaseModel):
    startup_id: str
    investor_id: str
    match_percentage: int = Field(ge=0, le=100)
    status: MatchStatus = MatchStatus.PENDING
    created_at: datetime | None = None
    updated_at: datetime | None = None


class RecalculationResult(BaseModel):
    startup_id: str
    matches_created: int
    matches: list[Match]


class BatchItemResult(BaseModel):
    startup_id: str
    success: bool
    matches_created: int | None = None
    error: str | None = None


class BatchReport(BaseModel):
    success: bool = True
    startups_processed: int
    successes: int
    failures: int
    results: list[BatchItemResult]
    message: str | None = None
