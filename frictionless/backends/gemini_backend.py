import time
import logging

from frictionless.backends.base import LLMBackend
from frictionless.config import (
    ANALYSIS_TIMEOUT_SECS,
    GEMINI_API_KEY,
    GEMINI_ANALYSIS_MODEL,
    MAX_ANALYSIS_TOKENS,
)

logger = logging.getLogger(__name__)


class GeminiBackend(LLMBackend):
    """Gemini backend using Google GenAI API with native response schemas."""

    def __init__(self):
        from google import genai
        self.client = genai.Client(
            api_key=GEMINI_API_KEY,
            http_options={"timeout": ANALYSIS_TIMEOUT_SECS * 1000},
        )

    def _generate_with_retry(self, model, contents, config, max_retries=1):
        """Call Gemini API with retry logic."""
        last_err = None
        for attempt in range(1 + max_retries):
            try:
                start = time.time()
                response = self.client.models.generate_content(
                    model=model,
                    contents=contents,
                    config=config,
                )
                elapsed = time.time() - start

                if hasattr(response, "usage_metadata") and response.usage_metadata:
                    usage = response.usage_metadata
                    logger.info(
                        "Gemini call: model=%s elapsed=%.1fs input=%s output=%s",
                        model, elapsed,
                        getattr(usage, 'prompt_token_count', '?'),
                        getattr(usage, 'candidates_token_count', '?'),
                    )
                else:
                    logger.info("Gemini call: model=%s elapsed=%.1fs", model, elapsed)

                return response
            except (ConnectionError, TimeoutError, RuntimeError) as exc:
                last_err = exc
                if attempt < max_retries:
                    wait = 2 ** attempt
                    logger.warning("Gemini call failed (attempt %d), retrying in %ds: %s", attempt + 1, wait, exc)
                    time.sleep(wait)
                else:
                    raise
        raise last_err

    def _extract(self, deck_text, file_name, system_prompt, response_schema):
        from google.genai.types import GenerateContentConfig

        user_msg = f"<file_name>{file_name}</file_name>\n\n<deck>\n{deck_text}\n</deck>"
        response = self._generate_with_retry(
            model=GEMINI_ANALYSIS_MODEL,
            contents=[{"role": "user", "parts": [{"text": user_msg}]}],
            config=GenerateContentConfig(
                system_instruction=system_prompt,
                response_mime_type="application/json",
                response_schema=response_schema,
                max_output_tokens=MAX_ANALYSIS_TOKENS,
                temperature=0.3,
            ),
        )
        return response_schema.model_validate_json(response.text).model_dump()

    def analyze_pitch_deck(self, deck_text, file_name, system_prompt, response_schema):
        return self._extract(deck_text, file_name, system_prompt, response_schema)

    def analyze_investor_deck(self, deck_text, file_name, system_prompt, response_schema):
        return self._extract(deck_text, file_name, system_prompt, response_schema)
