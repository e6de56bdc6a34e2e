import time
import logging
import anthropic

from frictionless.backends.base import LLMBackend
from frictionless.config import (
    ANTHROPIC_API_KEY,
    ANALYSIS_MODEL,
    ANALYSIS_TIMEOUT_SECS,
    MAX_ANALYSIS_TOKENS,
)

logger = logging.getLogger(__name__)


def _deck_message(deck_text: str, file_name: str) -> list[dict]:
    return [{
        "role": "user",
        "content": f"<file_name>{file_name}</file_name>\n\n<deck>\n{deck_text}\n</deck>",
    }]


class ClaudeBackend(LLMBackend):
    """Claude backend using the Anthropic API with tool-use for structured output."""

    def __init__(self):
        self.client = anthropic.Anthropic(api_key=ANTHROPIC_API_KEY, timeout=ANALYSIS_TIMEOUT_SECS)

    def _tool_use_call(self, model, system, messages, schema_class, tool_name, retries=1, **kwargs):
        """Make an API call using tool-use for structured output, with retry on failure."""
        tools = [{
            "name": tool_name,
            "description": f"Report the {tool_name} results",
            "input_schema": schema_class.model_json_schema(),
        }]
        last_err = None
        for attempt in range(1 + retries):
            try:
                start = time.time()
                message = self.client.messages.create(
                    model=model,
                    max_tokens=MAX_ANALYSIS_TOKENS,
                    system=system,
                    messages=messages,
                    tools=tools,
                    tool_choice={"type": "tool", "name": tool_name},
                    **kwargs,
                )
                elapsed = time.time() - start

                usage = getattr(message, "usage", None)
                logger.info(
                    "API call %s: model=%s elapsed=%.1fs stop=%s input=%s output=%s",
                    tool_name, model, elapsed,
                    message.stop_reason,
                    getattr(usage, "input_tokens", "?"),
                    getattr(usage, "output_tokens", "?"),
                )

                for block in message.content:
                    if block.type == "tool_use":
                        return schema_class.model_validate(block.input)
                raise ValueError(f"No tool_use block in response for {tool_name}")
            except (anthropic.APITimeoutError, anthropic.APIConnectionError, anthropic.RateLimitError) as e:
                last_err = e
                if attempt < retries:
                    wait = 2 ** attempt
                    logger.warning("Retrying %s after %s (attempt %d): %s", tool_name, wait, attempt + 1, e)
                    time.sleep(wait)
                else:
                    raise
        raise last_err  # unreachable but satisfies type checker

    def analyze_pitch_deck(self, deck_text, file_name, system_prompt, response_schema):
        result = self._tool_use_call(
            model=ANALYSIS_MODEL,
            system=[{"type": "text", "text": system_prompt}],
            messages=_deck_message(deck_text, file_name),
            schema_class=response_schema,
            tool_name="report_pitch_deck",
            temperature=0.3,
        )
        return result.model_dump()

    def analyze_investor_deck(self, deck_text, file_name, system_prompt, response_schema):
        result = self._tool_use_call(
            model=ANALYSIS_MODEL,
            system=[{"type": "text", "text": system_prompt}],
            messages=_deck_message(deck_text, file_name),
            schema_class=response_schema,
            tool_name="report_investor_deck",
            temperature=0.3,
        )
        return result.model_dump()
