import os
import logging
from pathlib import Path
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).parent.parent
load_dotenv(PROJECT_ROOT / ".env", override=True)
# Database path: use data/ dir if it exists (Docker), otherwise project root (local dev)
_data_dir = PROJECT_ROOT / "data"
if _data_dir.is_dir():
    DB_PATH = str(_data_dir / "frictionless.db")
else:
    DB_PATH = os.getenv("FRICTIONLESS_DB_PATH", str(PROJECT_ROOT / "frictionless.db"))

# --- GCP Secret Manager integration ---
GCP_PROJECT_ID = os.getenv("GCP_PROJECT_ID", "")

_SECRET_NAMES = {
    "ANTHROPIC_API_KEY": "anthropic-api-key",
    "GEMINI_API_KEY": "gemini-api-key",
    "CRON_SECRET": "cron-secret",
}


def _get_secret(env_var: str) -> str:
    """Try env var first, then GCP Secret Manager, return empty string on failure."""
    val = os.getenv(env_var, "")
    if val:
        return val

    if not GCP_PROJECT_ID:
        return ""

    secret_id = _SECRET_NAMES.get(env_var)
    if not secret_id:
        return ""

    try:
        from google.cloud import secretmanager
        client = secretmanager.SecretManagerServiceClient()
        name = f"projects/{GCP_PROJECT_ID}/secrets/{secret_id}/versions/latest"
        response = client.access_secret_version(request={"name": name})
        val = response.payload.data.decode("UTF-8").strip()
        logger.info("Loaded %s from Secret Manager", env_var)
        return val
    except Exception as exc:
        logger.warning("Failed to load %s from Secret Manager: %s", env_var, exc)
        return ""


def _get_int(env_var: str, default: int) -> int:
    raw = os.getenv(env_var, "")
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r, using %d", env_var, raw, default)
        return default


# API keys
ANTHROPIC_API_KEY = _get_secret("ANTHROPIC_API_KEY")
GEMINI_API_KEY = _get_secret("GEMINI_API_KEY")

# Shared secret for the batch recalculation trigger (scheduler -> API)
CRON_SECRET = _get_secret("CRON_SECRET")

# Backend selection
LLM_PROVIDER = os.getenv("LLM_PROVIDER", "claude").lower()

# Claude model config
ANALYSIS_MODEL = os.getenv("ANALYSIS_MODEL", "claude-sonnet-4-5-20250929")

# Gemini model config
GEMINI_ANALYSIS_MODEL = os.getenv("GEMINI_ANALYSIS_MODEL", "gemini-2.5-pro")

# Deck analysis limits
ANALYSIS_TIMEOUT_SECS = 60
MAX_DECK_BYTES = int(4.5 * 1024 * 1024)
MIN_DECK_TEXT_CHARS = 100
MAX_ANALYSIS_TOKENS = 4096

# Batch recalculation
RECALC_MAX_WORKERS = _get_int("RECALC_MAX_WORKERS", 1)
RECALC_TIME_BUDGET_SECS = _get_int("RECALC_TIME_BUDGET_SECS", 60)

# API
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = _get_int("API_PORT", 8000)
