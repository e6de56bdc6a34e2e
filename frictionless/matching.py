import time
import logging
from concurrent.futures import ThreadPoolExecutor

from frictionless.config import RECALC_MAX_WORKERS, RECALC_TIME_BUDGET_SECS
from frictionless.db import ProfileStore
from frictionless.errors import MatchingError, NotFoundError
from frictionless.models import (
    BatchItemResult,
    BatchReport,
    Match,
    MatchStatus,
    RecalculationResult,
)
from frictionless.run_log import log_run
from frictionless.scoring import DEFAULT_WEIGHTS, ScoringWeights, combine, score_breakdown

logger = logging.getLogger(__name__)

TIME_BUDGET_EXCEEDED = "Skipped: batch time budget exceeded"


def recalculate_matches(
    store: ProfileStore,
    startup_id: str,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> RecalculationResult:
    """Score one startup against every investor and replace its match rows.

    Raises NotFoundError when the startup has no profile or there are no
    investors at all, PersistenceError when the store fails. Running it twice
    on unchanged data leaves the same rows behind.
    """
    t0 = time.time()
    startup = store.get_startup(startup_id)
    if startup is None:
        raise NotFoundError("Startup profile not found", details=f"startup_id={startup_id}")

    investors = store.list_investors()
    if not investors:
        raise NotFoundError("No investors found")

    logger.info("[RECALC] Scoring startup=%s against %d investors", startup_id, len(investors))
    candidates = []
    for investor in investors:
        breakdown = score_breakdown(startup, investor)
        percentage = combine(breakdown, weights)
        logger.debug("[RECALC] %s x %s -> %d %s", startup_id, investor.user_id, percentage, breakdown)
        candidates.append(Match(
            startup_id=startup_id,
            investor_id=investor.user_id,
            match_percentage=percentage,
            status=MatchStatus.PENDING,
        ))

    inserted = store.replace_matches(startup_id, candidates)
    logger.info("[RECALC] Done startup=%s -> %d matches (%.2fs)", startup_id, len(inserted), time.time() - t0)
    return RecalculationResult(startup_id=startup_id, matches_created=len(inserted), matches=inserted)


def _recalculate_item(store, startup_id, weights, deadline) -> BatchItemResult:
    if deadline is not None and time.monotonic() > deadline:
        logger.warning("[BATCH] Skipping startup=%s: time budget exceeded", startup_id)
        return BatchItemResult(startup_id=startup_id, success=False, error=TIME_BUDGET_EXCEEDED)
    try:
        result = recalculate_matches(store, startup_id, weights)
    except MatchingError as exc:
        logger.error("[BATCH] Failed startup=%s: %s", startup_id, exc)
        return BatchItemResult(startup_id=startup_id, success=False, error=str(exc))
    except Exception as exc:
        logger.exception("[BATCH] Unexpected error for startup=%s", startup_id)
        return BatchItemResult(startup_id=startup_id, success=False, error=str(exc) or type(exc).__name__)
    return BatchItemResult(startup_id=startup_id, success=True, matches_created=result.matches_created)


def recalculate_all_matches(
    store: ProfileStore,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
    max_workers: int = RECALC_MAX_WORKERS,
    time_budget_secs: float | None = RECALC_TIME_BUDGET_SECS,
    trigger: str = "batch",
) -> BatchReport:
    """Refresh the match set of every startup.

    Per-startup failures are recorded in the report instead of raised; only a
    failure to list the startups propagates. Startups still waiting when the
    time budget runs out are reported as failures, and re-running the batch
    picks them up since each refresh is a full replace.
    """
    t0 = time.time()
    startup_ids = store.list_startup_ids()
    if not startup_ids:
        logger.info("[BATCH] No startups found to recalculate matches for")
        log_run(store.db_path, trigger, startups_processed=0, successes=0, failures=0,
                total_secs=time.time() - t0)
        return BatchReport(startups_processed=0, successes=0, failures=0, results=[],
                           message="No startups found")

    logger.info("[BATCH] Starting recalculation for %d startups (workers=%d)", len(startup_ids), max_workers)
    deadline = time.monotonic() + time_budget_secs if time_budget_secs else None

    if max_workers > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            results = list(pool.map(
                lambda sid: _recalculate_item(store, sid, weights, deadline), startup_ids
            ))
    else:
        results = [_recalculate_item(store, sid, weights, deadline) for sid in startup_ids]

    successes = sum(1 for r in results if r.success)
    failures = len(results) - successes
    total = time.time() - t0
    logger.info("[BATCH] Complete: %d succeeded, %d failed (%.1fs)", successes, failures, total)

    log_run(
        store.db_path, trigger,
        startups_processed=len(startup_ids), successes=successes, failures=failures,
        matches_created=sum(r.matches_created or 0 for r in results),
        failed_startup_ids=[r.startup_id for r in results if not r.success],
        total_secs=total,
    )
    return BatchReport(
        startups_processed=len(startup_ids),
        successes=successes,
        failures=failures,
        results=results,
    )
