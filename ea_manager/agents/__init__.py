"""AI Agents package."""

from ea_manager.agents.audit_agent import (
    AuditSummaryGenerator,
    GeminiAuditAgent,
    SummaryGenerationFailedError,
    build_audit_context,
)
from ea_manager.agents.summary_cache import AuditSummaryCache

__all__ = [
    "AuditSummaryCache",
    "AuditSummaryGenerator",
    "GeminiAuditAgent",
    "SummaryGenerationFailedError",
    "build_audit_context",
]
