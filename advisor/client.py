"""Anbindung an Google Gemini (google-generativeai)."""

import logging
import os
from typing import Optional, Protocol

from advisor.response import AdvisorError
from config.schema import AdvisorConfig

logger = logging.getLogger(__name__)


class TextClient(Protocol):
    """Alles mit generate(prompt) → str kann als Modell dienen."""

    def generate(self, prompt: str) -> str:
        ...


class GeminiClient:
    """Einfacher Text-Aufruf an ein Gemini-Modell."""

    def __init__(self, model: str, api_key: Optional[str]) -> None:
        self.model_name = model
        self.api_key = api_key
        self._model = None

    @classmethod
    def from_config(cls, config: AdvisorConfig) -> "GeminiClient":
        return cls(config.model, os.getenv(config.api_key_env))

    def _get_model(self):
        if self._model is not None:
            return self._model
        if not self.api_key:
            raise AdvisorError(
                "Kein API-Schlüssel gesetzt. Bitte Umgebungsvariable für Gemini setzen."
            )
        try:
            import google.generativeai as genai
        except ImportError:
            raise AdvisorError(
                "google-generativeai nicht installiert. Bitte: pip install google-generativeai"
            )
        genai.configure(api_key=self.api_key)
        self._model = genai.GenerativeModel(self.model_name)
        logger.info(f"Gemini-Modell initialisiert: {self.model_name}")
        return self._model

    def generate(self, prompt: str) -> str:
        model = self._get_model()
        try:
            resp = model.generate_content(prompt)
        except Exception as e:
            logger.warning(f"Gemini-Aufruf fehlgeschlagen: {e}")
            raise AdvisorError(f"KI-Anfrage fehlgeschlagen: {e}") from e
        return getattr(resp, "text", "") or ""
