"""
ScanBrief MCP Context: shared, read-only state for MCP tools.

Holds the summary service. Initialised once during MCP server lifespan and
injected into every tool via FastMCP's Context.
"""
from dataclasses import dataclass

from .services.ai_analyzer import SecurityAnalyzer, SummaryService


@dataclass
class ScanBriefContext:
    """Shared context for all MCP tools."""

    service: SummaryService

    @property
    def analyzer(self) -> SecurityAnalyzer:
        return self.service.analyzer
