"""
AI Account Auditor

DESIGN DECISION: The auditor is a narrow text generator.
It receives the account collection, and returns a short audit
paragraph for the admin sidebar.

CRITICAL BOUNDARIES:
- CAN: Summarize what is in the account book
- CANNOT: Change accounts, statuses or history
- CANNOT: Invent accounts or payments - the prompt contains every
  fact it is allowed to use

Failures are raised as SummaryGenerationFailedError; the summary cache
decides what to show instead.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional, Sequence

import google.generativeai as genai

from ea_manager.config import GeminiSettings, get_settings
from ea_manager.models.account import Account


class SummaryGenerationFailedError(Exception):
    """The audit text could not be generated."""
    pass


class AuditSummaryGenerator(ABC):
    """
    Anything that can turn the account collection into audit text.
    """

    @abstractmethod
    async def generate_audit(self, accounts: Sequence[Account]) -> str:
        """
        Produce a short natural-language audit of `accounts`.

        Raises:
            SummaryGenerationFailedError: If no text could be produced
        """
        pass


def build_audit_context(accounts: Sequence[Account], today: date) -> str:
    """
    Render the accounts as plain lines for the prompt.

    This is DETERMINISTIC - the model only ever sees these lines.
    """
    lines = []
    for account in accounts:
        lines.append(
            f"{account.account} | expires {account.expire.isoformat()} | "
            f"{account.status.value} | package {account.package} | "
            f"{account.renewal_count} purchases"
        )
    header = f"Today: {today.isoformat()}\nAccounts ({len(accounts)}):"
    return "\n".join([header] + lines)


class GeminiAuditAgent(AuditSummaryGenerator):
    """
    Audit generator backed by Google Gemini.
    """

    def __init__(self, settings: Optional[GeminiSettings] = None):
        self._settings = settings or get_settings().gemini
        self._configure_genai()

    def _configure_genai(self):
        """Configure Google Generative AI."""
        genai.configure(api_key=self._settings.api_key)
        self._model = genai.GenerativeModel(
            model_name=self._settings.model_name,
            generation_config={
                "temperature": self._settings.temperature,
                "max_output_tokens": self._settings.max_tokens,
            }
        )

    async def generate_audit(
        self,
        accounts: Sequence[Account],
        today: Optional[date] = None,
    ) -> str:
        """
        Generate a short audit of the account book.
        """
        context = build_audit_context(accounts, today or date.today())

        prompt = f"""You are auditing the account book of a small EA (expert advisor) subscription business.

{context}

Write a brief audit for the owner in at most 3 sentences:
- How healthy the book is (active vs expired accounts)
- Which accounts expire soon or have lapsed and should be contacted
- Anything unusual in the packages or purchase counts

IMPORTANT: Use ONLY the data above. Do NOT invent accounts, amounts or dates.
Respond with plain text, no markdown."""

        try:
            response = await self._model.generate_content_async(prompt)
            text = response.text.strip()
        except Exception as e:
            raise SummaryGenerationFailedError(f"Gemini request failed: {e}")

        if not text:
            raise SummaryGenerationFailedError("Gemini returned an empty audit")
        return text
