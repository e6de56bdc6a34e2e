import hmac
import time
import logging
from typing import Optional

from fastapi import FastAPI, File, Header, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from pydantic import ValidationError as SchemaValidationError
from starlette.concurrency import run_in_threadpool

from frictionless.analysis import (
    analyze_investor_deck,
    analyze_pitch_deck,
    investor_profile_from_analysis,
    startup_profile_from_analysis,
)
from frictionless.backends import LLMBackend, get_backend
from frictionless.config import CORS_ORIGINS, CRON_SECRET, LLM_PROVIDER, MAX_DECK_BYTES
from frictionless.db import ProfileStore
from frictionless.errors import (
    ConfigurationError,
    MatchingError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from frictionless.matching import recalculate_all_matches, recalculate_matches
from frictionless.models import InvestorProfile, MatchStatus, StartupProfile
from frictionless.run_log import log_run
from frictionless.scoring import score_breakdown

logger = logging.getLogger(__name__)


class CalculateMatchesRequest(BaseModel):
    startup_id: Optional[str] = None


class MatchStatusUpdate(BaseModel):
    status: MatchStatus


class InvestorDeckRequest(BaseModel):
    content: Optional[str] = None
    file_name: str = Field(default="", alias="fileName")


class StartupProfileUpdate(BaseModel):
    company_name: Optional[str] = None
    industry: Optional[str] = None
    stage: Optional[str] = None
    headquarters: Optional[str] = None
    funding_ask: Optional[str] = None
    readiness_score: Optional[float] = Field(default=None, ge=0, le=100)
    website: Optional[str] = None
    pitch_deck_url: Optional[str] = None
    description: Optional[str] = None
    business_model: Optional[str] = None
    value_proposition: Optional[str] = None
    target_market: Optional[str] = None
    traction: Optional[str] = None


class InvestorProfileUpdate(BaseModel):
    organization_name: Optional[str] = None
    focus_sectors: Optional[list[str]] = None
    focus_stages: Optional[list[str]] = None
    geography_focus: Optional[list[str]] = None
    ticket_size_min: Optional[float] = Field(default=None, ge=0)
    ticket_size_max: Optional[float] = Field(default=None, ge=0)
    website: Optional[str] = None
    investor_deck_url: Optional[str] = None
    headquarters: Optional[str] = None
    fund_size: Optional[str] = None
    average_ticket: Optional[str] = None
    investment_thesis: Optional[str] = None


class StartupOnboarding(BaseModel):
    company_name: Optional[str] = None
    website: Optional[str] = None
    pitch_deck_url: Optional[str] = None
    analysis: Optional[dict] = None


class InvestorOnboarding(BaseModel):
    organization_name: Optional[str] = None
    website: Optional[str] = None
    investor_deck_url: Optional[str] = None
    focus_sectors: Optional[list[str]] = None
    focus_stages: Optional[list[str]] = None
    ticket_size_min: Optional[float] = Field(default=None, ge=0)
    ticket_size_max: Optional[float] = Field(default=None, ge=0)
    analysis: Optional[dict] = None


def _check_ticket_range(low: Optional[float], high: Optional[float]):
    if low is not None and high is not None and low > high:
        raise ValidationError("ticket_size_min must not exceed ticket_size_max")


def check_cron_authorization(authorization: Optional[str], expected_secret: Optional[str]):
    """Gate for the batch trigger. Runs before any store access.

    A missing server secret is an operator problem (ConfigurationError), a
    missing or wrong bearer token is the caller's (UnauthorizedError).
    """
    if not expected_secret:
        logger.error("CRON_SECRET environment variable not set")
        raise ConfigurationError("CRON_SECRET environment variable not set")
    expected = f"Bearer {expected_secret}"
    if not authorization or not hmac.compare_digest(authorization.encode(), expected.encode()):
        logger.error("Unauthorized recalculate-all-matches request")
        raise UnauthorizedError()


def create_app(
    store: ProfileStore,
    backend: Optional[LLMBackend] = None,
    cron_secret: Optional[str] = CRON_SECRET,
) -> FastAPI:
    """Build the API around an already constructed store.

    The LLM backend is created on first use when not given, so the matching
    endpoints work without any LLM credentials.
    """
    app = FastAPI(title="Frictionless Match")
    app.state.store = store
    app.state.backend = backend
    app.state.cron_secret = cron_secret

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def _backend() -> LLMBackend:
        if app.state.backend is None:
            app.state.backend = get_backend(LLM_PROVIDER)
        return app.state.backend

    @app.exception_handler(MatchingError)
    async def handle_matching_error(request: Request, exc: MatchingError):
        if exc.status_code >= 500:
            logger.error("%s %s -> %d %s", request.method, request.url.path, exc.status_code, exc)
        else:
            logger.info("%s %s -> %d %s", request.method, request.url.path, exc.status_code, exc)
        return JSONResponse(status_code=exc.status_code, content=exc.to_body())

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request", "details": str(exc.errors())},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "details": str(exc)},
        )

    @app.post("/api/calculate-matches")
    def calculate_matches(body: CalculateMatchesRequest):
        """Recompute and store all matches for one startup."""
        if not body.startup_id:
            raise ValidationError("startup_id is required")

        t0 = time.time()
        try:
            result = recalculate_matches(store, body.startup_id)
        except MatchingError as exc:
            log_run(store.db_path, "single", startup_id=body.startup_id, error=str(exc),
                    total_secs=time.time() - t0)
            raise
        log_run(store.db_path, "single", startup_id=body.startup_id,
                matches_created=result.matches_created, total_secs=time.time() - t0)
        return {
            "success": True,
            "matches_created": result.matches_created,
            "matches": [m.model_dump(mode="json") for m in result.matches],
        }

    @app.post("/api/recalculate-all-matches")
    def recalculate_all(authorization: Optional[str] = Header(None)):
        """Recompute matches for every startup. Requires the cron bearer token."""
        check_cron_authorization(authorization, app.state.cron_secret)
        logger.info("Starting batch match recalculation for all startups...")
        report = recalculate_all_matches(store)
        return report.model_dump(mode="json", exclude_none=True)

    @app.get("/api/matches/{startup_id}")
    def list_matches(startup_id: str):
        """Stored matches, best first, each with its current per-factor breakdown."""
        matches = store.get_matches(startup_id)
        startup = store.get_startup(startup_id)
        investors = {inv.user_id: inv for inv in store.list_investors()} if matches else {}
        rows = []
        for match in matches:
            row = match.model_dump(mode="json")
            investor = investors.get(match.investor_id)
            row["breakdown"] = score_breakdown(startup, investor) if startup and investor else None
            rows.append(row)
        return {"startup_id": startup_id, "matches": rows}

    @app.patch("/api/matches/{startup_id}/{investor_id}")
    def update_match_status(startup_id: str, investor_id: str, body: MatchStatusUpdate):
        match = store.update_match_status(startup_id, investor_id, body.status)
        if match is None:
            raise NotFoundError("Match not found")
        return match.model_dump(mode="json")

    @app.put("/api/startups/{user_id}")
    def upsert_startup(user_id: str, body: StartupProfileUpdate):
        profile = StartupProfile(user_id=user_id, **body.model_dump(exclude_unset=True))
        return store.upsert_startup(profile).model_dump(mode="json")

    @app.put("/api/investors/{user_id}")
    def upsert_investor(user_id: str, body: InvestorProfileUpdate):
        fields = body.model_dump(exclude_unset=True)
        current = store.get_investor(user_id)
        merged = current.model_dump() if current else {}
        merged.update(fields)
        _check_ticket_range(merged.get("ticket_size_min"), merged.get("ticket_size_max"))
        profile = InvestorProfile(user_id=user_id, **fields)
        return store.upsert_investor(profile).model_dump(mode="json")

    @app.delete("/api/investors/{user_id}")
    def delete_investor(user_id: str):
        removed = store.delete_investor(user_id)
        if removed is None:
            raise NotFoundError("Investor profile not found")
        return {"success": True, "matches_removed": removed}

    @app.post("/api/onboarding/startups/{user_id}")
    def onboard_startup(user_id: str, body: StartupOnboarding):
        """Store the onboarding profile, then score it against the current investors."""
        try:
            profile = startup_profile_from_analysis(
                user_id, body.analysis,
                company_name=body.company_name,
                website=body.website,
                pitch_deck_url=body.pitch_deck_url,
            )
        except SchemaValidationError as exc:
            raise ValidationError("Invalid analysis", str(exc)) from exc
        stored = store.upsert_startup(profile)
        logger.info("[ONBOARD] Startup %s saved (analyzed=%s)", user_id, bool(body.analysis))

        matches_created = 0
        if store.list_investors(limit=1):
            t0 = time.time()
            result = recalculate_matches(store, user_id)
            matches_created = result.matches_created
            log_run(store.db_path, "single", startup_id=user_id,
                    matches_created=matches_created, total_secs=time.time() - t0)
        return {"success": True, "profile": stored.model_dump(mode="json"), "matches_created": matches_created}

    @app.post("/api/onboarding/investors/{user_id}")
    def onboard_investor(user_id: str, body: InvestorOnboarding):
        _check_ticket_range(body.ticket_size_min, body.ticket_size_max)
        try:
            profile = investor_profile_from_analysis(
                user_id, body.analysis,
                organization_name=body.organization_name,
                website=body.website,
                investor_deck_url=body.investor_deck_url,
                focus_sectors=body.focus_sectors,
                focus_stages=body.focus_stages,
                ticket_size_min=body.ticket_size_min,
                ticket_size_max=body.ticket_size_max,
            )
        except SchemaValidationError as exc:
            raise ValidationError("Invalid analysis", str(exc)) from exc
        _check_ticket_range(profile.ticket_size_min, profile.ticket_size_max)
        stored = store.upsert_investor(profile)
        logger.info("[ONBOARD] Investor %s saved (analyzed=%s)", user_id, bool(body.analysis))
        return {"success": True, "profile": stored.model_dump(mode="json")}

    @app.post("/api/analyze-pitch-deck")
    async def analyze_pitch_deck_endpoint(file: Optional[UploadFile] = File(None)):
        if file is None:
            raise ValidationError("No file provided")
        # one byte past the limit is enough to reject an oversize deck
        data = await file.read(MAX_DECK_BYTES + 1)
        analysis = await run_in_threadpool(analyze_pitch_deck, _backend(), file.filename or "", data)
        return {"success": True, "analysis": analysis}

    @app.post("/api/analyze-investor-deck")
    async def analyze_investor_deck_endpoint(body: InvestorDeckRequest):
        analysis = await run_in_threadpool(
            analyze_investor_deck, _backend(), body.content or "", body.file_name
        )
        return {"success": True, "analysis": analysis}

    return app
