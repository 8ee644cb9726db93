"""
Audit Summary Cache

DESIGN DECISION: The AI audit is cached against a generation token
instead of a nullable "is there a summary" flag.

- Every mutation of the account book calls invalidate(), which bumps
  the generation.
- A summary is tagged with the generation it was computed for; it is
  stale as soon as the generation moves on.
- A second refresh for a generation that is already being generated
  is suppressed (a duplicate call only wastes an API request).
- A failed refresh keeps the previous text and is not retried for the
  same generation unless asked to; the next invalidation tries again.
"""

from typing import Optional, Sequence

import structlog

from ea_manager.agents.audit_agent import (
    AuditSummaryGenerator,
    SummaryGenerationFailedError,
)
from ea_manager.models.account import Account, AuditSummary


logger = structlog.get_logger(__name__)


class AuditSummaryCache:
    """
    Cached audit text with a generation counter.
    """

    def __init__(self):
        self._generation = 0
        self._summary: Optional[AuditSummary] = None
        self._in_flight: set[int] = set()
        self._failed_generation: Optional[int] = None
        self.last_error: Optional[str] = None

    @property
    def generation(self) -> int:
        """Current generation of the account book."""
        return self._generation

    @property
    def summary(self) -> Optional[AuditSummary]:
        """Latest summary, possibly for an older generation."""
        return self._summary

    @property
    def text(self) -> Optional[str]:
        return self._summary.text if self._summary else None

    @property
    def is_stale(self) -> bool:
        """True if there is text, but it describes an older generation."""
        return self._summary is not None and self._summary.generation < self._generation

    @property
    def needs_refresh(self) -> bool:
        """True if no summary is tagged with the current generation."""
        return self._summary is None or self._summary.generation != self._generation

    @property
    def is_generating(self) -> bool:
        """True while a refresh for the current generation is running."""
        return self._generation in self._in_flight

    @property
    def has_failed(self) -> bool:
        """True if the last attempt for the current generation failed."""
        return self._failed_generation == self._generation

    def invalidate(self) -> int:
        """
        Mark the cached summary as stale.

        Returns:
            The new generation
        """
        self._generation += 1
        return self._generation

    async def refresh(
        self,
        accounts: Sequence[Account],
        generator: AuditSummaryGenerator,
        retry_failed: bool = False,
    ) -> Optional[AuditSummary]:
        """
        Generate a summary for the current generation if needed.

        Args:
            accounts: Snapshot of the account book to audit
            generator: Produces the text
            retry_failed: Try again even if this generation already failed

        Returns:
            The latest summary (fresh, or the previous one if generation
            was skipped or failed)
        """
        generation = self._generation

        if not self.needs_refresh:
            return self._summary
        if generation in self._in_flight:
            logger.debug("summary_refresh_suppressed", generation=generation)
            return self._summary
        if self.has_failed and not retry_failed:
            return self._summary

        self._in_flight.add(generation)
        try:
            text = await generator.generate_audit(list(accounts))
        except SummaryGenerationFailedError as e:
            self.last_error = str(e)
            self._failed_generation = generation
            logger.warning(
                "summary_generation_failed",
                generation=generation,
                error=str(e),
            )
            return self._summary
        finally:
            self._in_flight.discard(generation)

        # An older request finishing late must not replace a newer summary
        if self._summary is None or generation >= self._summary.generation:
            self._summary = AuditSummary(text=text, generation=generation)
            self.last_error = None
            self._failed_generation = None
        return self._summary
