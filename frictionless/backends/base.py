from abc import ABC, abstractmethod
from typing import Type
from pydantic import BaseModel


class LLMBackend(ABC):
    """Abstract base class for LLM provider backends."""

    @abstractmethod
    def analyze_pitch_deck(
        self, deck_text: str, file_name: str,
        system_prompt: str, response_schema: Type[BaseModel]
    ) -> dict:
        """Extract a structured startup profile from pitch deck text."""
        pass

    @abstractmethod
    def analyze_investor_deck(
        self, deck_text: str, file_name: str,
        system_prompt: str, response_schema: Type[BaseModel]
    ) -> dict:
        """Extract a structured investor profile from investor deck text."""
        pass
