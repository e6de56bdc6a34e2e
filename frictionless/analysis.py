"""Deck analysis: PDF text extraction, LLM field extraction, and mapping the
result onto profile records."""
import io
import re
import time
import logging
from datetime import datetime, timezone

from pydantic import BaseModel, Field
from pypdf import PdfReader
from pypdf.errors import PyPdfError

from frictionless.backends.base import LLMBackend
from frictionless.config import MAX_DECK_BYTES, MIN_DECK_TEXT_CHARS
from frictionless.errors import AnalysisError, MatchingError, PayloadTooLargeError, ValidationError
from frictionless.models import InvestorProfile, StartupProfile
from frictionless.prompts import INVESTOR_DECK_SYSTEM_PROMPT, PITCH_DECK_SYSTEM_PROMPT
from frictionless.scoring import parse_funding_amount

logger = logging.getLogger(__name__)


# --- Pydantic schemas for structured output ---

class TeamMember(BaseModel):
    name: str
    role: str = ""
    background: str = ""


class Recommendation(BaseModel):
    action: str
    area: str = ""
    impact: str = ""


class ReadinessAssessment(BaseModel):
    overall_score: float | None = Field(default=None, ge=0, le=100)
    foundational_setup: float | None = None
    team_readiness: float | None = None
    funding_strategy: float | None = None
    financial_health: float | None = None
    product_readiness: float | None = None
    tech_maturity: float | None = None
    go_to_market_readiness: float | None = None
    storytelling_communication: float | None = None
    market_positioning: float | None = None


class PitchDeckAnalysis(BaseModel):
    company_name: str | None = None
    industry: str | None = None
    stage: str | None = None
    headquarters: str | None = None
    funding_ask: str | None = None
    business_model: str | None = None
    value_proposition: str | None = None
    target_market: str | None = None
    competitive_landscape: list[str] = []
    key_differentiators: list[str] = []
    key_challenges: list[str] = []
    team_size: int | None = None
    team_members: list[TeamMember] = []
    mrr: float | None = None
    revenue: float | None = None
    burn_rate: float | None = None
    runway_months: float | None = None
    total_raised: float | None = None
    valuation: float | None = None
    traction: str | None = None
    product_status: str | None = None
    geography_focus: list[str] = []
    use_of_funds: str | None = None
    market_size: str | None = None
    market_growth: str | None = None
    recommendations: list[Recommendation] = []
    strategic_insights: list[str] = []
    readiness_assessment: ReadinessAssessment | None = None


class InvestmentCriteria(BaseModel):
    minimum_revenue: str | None = None
    team_requirements: str = ""
    other_requirements: str = ""


class InvestorDeckAnalysis(BaseModel):
    fund_name: str | None = None
    investor_name: str | None = None
    headquarters: str | None = None
    fund_size: str | None = None
    average_ticket: str | None = None
    stage_focus: list[str] = []
    sector_focus: list[str] = []
    geography_focus: list[str] = []
    investment_thesis: str | None = None
    portfolio_highlights: list[str] = []
    investment_criteria: InvestmentCriteria | None = None
    value_add: str | None = None
    decision_process: str | None = None
    timeline: str | None = None


def _sanitize_prompt_input(text: str) -> str:
    """Escape angle brackets so deck text cannot close the prompt's XML tags."""
    return text.replace("<", "&lt;").replace(">", "&gt;")


def extract_pdf_text(data: bytes) -> str:
    """Extract the text of every page of a PDF, one page per line block."""
    try:
        reader = PdfReader(io.BytesIO(data))
        pages = [page.extract_text() or "" for page in reader.pages]
    except (PyPdfError, ValueError) as exc:
        raise AnalysisError(f"Failed to parse PDF: {exc}") from exc
    logger.info("[ANALYZE] PDF has %d pages", len(pages))
    return "\n".join(pages).strip()


def _run_backend(call, kind: str, file_name: str) -> dict:
    t0 = time.time()
    try:
        analysis = call()
    except MatchingError:
        raise
    except Exception as exc:
        logger.exception("[ANALYZE] %s analysis failed for %s", kind, file_name)
        raise AnalysisError(str(exc)) from exc
    logger.info("[ANALYZE] %s analysis done for %s (%.1fs)", kind, file_name, time.time() - t0)
    return analysis


def analyze_pitch_deck(backend: LLMBackend, file_name: str, data: bytes) -> dict:
    """Validate an uploaded pitch deck PDF and extract its structured profile."""
    if not data:
        raise ValidationError("No file provided")
    if len(data) > MAX_DECK_BYTES:
        raise PayloadTooLargeError("File size exceeds 4.5MB limit. Please upload a smaller file.")
    if not file_name.lower().endswith(".pdf"):
        raise ValidationError("Only PDF files are supported for AI analysis")

    content = extract_pdf_text(data)
    if len(content) < MIN_DECK_TEXT_CHARS:
        raise ValidationError("Could not extract enough text from PDF")
    logger.info("[ANALYZE] Extracted %d chars from %s", len(content), file_name)

    return _run_backend(
        lambda: backend.analyze_pitch_deck(
            _sanitize_prompt_input(content), _sanitize_prompt_input(file_name),
            PITCH_DECK_SYSTEM_PROMPT, PitchDeckAnalysis,
        ),
        "pitch deck", file_name,
    )


def analyze_investor_deck(backend: LLMBackend, content: str, file_name: str = "") -> dict:
    """Extract a structured investor profile from already-extracted deck text."""
    if not content:
        raise ValidationError("No content provided")
    if len(content.encode("utf-8")) > MAX_DECK_BYTES:
        raise PayloadTooLargeError("File content exceeds 4.5MB limit. Please upload a smaller file.")

    return _run_backend(
        lambda: backend.analyze_investor_deck(
            _sanitize_prompt_input(content), _sanitize_prompt_input(file_name),
            INVESTOR_DECK_SYSTEM_PROMPT, InvestorDeckAnalysis,
        ),
        "investor deck", file_name,
    )


_RANGE_SPLIT = re.compile(r"\s*(?:-|–|\bto\b)\s*")
_SUFFIX = re.compile(r"[kmb]", re.IGNORECASE)


def parse_ticket_range(average_ticket: str | None) -> tuple[float | None, float | None]:
    """Parse "$25K-$150K" style text into (min, max) dollars.

    A single amount gives the same value for both bounds. A low end with no
    suffix borrows the high end's, so "$1-3M" reads as 1M to 3M.
    """
    if not average_ticket:
        return None, None
    parts = _RANGE_SPLIT.split(average_ticket.strip(), maxsplit=1)
    if len(parts) == 1:
        amount = parse_funding_amount(parts[0])
        return amount, amount

    low_text, high_text = parts
    high_suffix = _SUFFIX.search(high_text)
    if high_suffix and not _SUFFIX.search(low_text):
        low_text += high_suffix.group()
    return parse_funding_amount(low_text), parse_funding_amount(high_text)


def startup_profile_from_analysis(
    user_id: str,
    analysis: dict | None,
    company_name: str | None = None,
    website: str | None = None,
    pitch_deck_url: str | None = None,
) -> StartupProfile:
    """Build the startup profile upsert from onboarding form values and an optional analysis.

    Analysis values win over form values where both exist.
    """
    fields = {"user_id": user_id}
    if company_name is not None:
        fields["company_name"] = company_name
    if website is not None:
        fields["website"] = website
    if pitch_deck_url is not None:
        fields["pitch_deck_url"] = pitch_deck_url
    if not analysis:
        return StartupProfile(**fields)

    parsed = PitchDeckAnalysis.model_validate(analysis)
    readiness = parsed.readiness_assessment
    fields.update(
        company_name=parsed.company_name or company_name,
        industry=parsed.industry or None,
        stage=parsed.stage or None,
        headquarters=parsed.headquarters or None,
        funding_ask=parsed.funding_ask or None,
        readiness_score=(readiness.overall_score or None) if readiness else None,
        description=parsed.value_proposition or parsed.business_model or None,
        business_model=parsed.business_model,
        value_proposition=parsed.value_proposition,
        target_market=parsed.target_market,
        traction=parsed.traction,
        ai_analyzed_at=datetime.now(timezone.utc),
    )
    return StartupProfile(**fields)


def investor_profile_from_analysis(
    user_id: str,
    analysis: dict | None,
    organization_name: str | None = None,
    website: str | None = None,
    investor_deck_url: str | None = None,
    focus_sectors: list[str] | None = None,
    focus_stages: list[str] | None = None,
    ticket_size_min: float | None = None,
    ticket_size_max: float | None = None,
) -> InvestorProfile:
    """Build the investor profile upsert from onboarding form values and an optional analysis.

    Non-empty analysis lists replace the form's sectors and stages. Ticket
    bounds come from the form, falling back to the analysed average ticket.
    """
    fields = {
        "user_id": user_id,
        "focus_sectors": focus_sectors or [],
        "focus_stages": focus_stages or [],
        "ticket_size_min": ticket_size_min,
        "ticket_size_max": ticket_size_max,
    }
    if organization_name is not None:
        fields["organization_name"] = organization_name
    if website is not None:
        fields["website"] = website
    if investor_deck_url is not None:
        fields["investor_deck_url"] = investor_deck_url
    if not analysis:
        return InvestorProfile(**fields)

    parsed = InvestorDeckAnalysis.model_validate(analysis)
    if ticket_size_min is None and ticket_size_max is None:
        fields["ticket_size_min"], fields["ticket_size_max"] = parse_ticket_range(parsed.average_ticket)
    fields.update(
        organization_name=parsed.fund_name or organization_name,
        focus_sectors=parsed.sector_focus or fields["focus_sectors"],
        focus_stages=parsed.stage_focus or fields["focus_stages"],
        geography_focus=parsed.geography_focus or None,
        headquarters=parsed.headquarters,
        fund_size=parsed.fund_size,
        average_ticket=parsed.average_ticket,
        investment_thesis=parsed.investment_thesis,
        ai_analyzed_at=datetime.now(timezone.utc),
    )
    return InvestorProfile(**fields)
