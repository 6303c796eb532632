"""KI-Beratung (Gemini) für Analyse und Zuteilungsvorschläge."""

from advisor.response import AdvisorError, AdvisorResponseError
from advisor.usage import UsageLimitExceeded, UsagePurpose, UsageTracker
from advisor.client import GeminiClient
from advisor.service import Advisor

__all__ = [
    "Advisor",
    "AdvisorError",
    "AdvisorResponseError",
    "GeminiClient",
    "UsageLimitExceeded",
    "UsagePurpose",
    "UsageTracker",
]
