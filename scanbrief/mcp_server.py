"""
ScanBrief MCP Server: Model Context Protocol server for ScanBrief.

Exposes host-scan security summarization as MCP tools and prompts for use
with LLM clients (Claude Desktop, VS Code, etc.).

Usage:
    scanbrief-mcp                       # stdio transport (default)
    python3 -m scanbrief.mcp_server     # same as above
"""
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from mcp.server.fastmcp import FastMCP

from .mcp_context import ScanBriefContext
from .services.ai import model_table
from .services.ai.settings import AISettings
from .services.ai_analyzer import SecurityAnalyzer, SummaryService
from .utils.config_loader import ConfigLoader
from .utils.logger import get_logger, setup_logging

logger = get_logger("scanbrief.mcp")


# ── Lifespan ───────────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(server: FastMCP):
    """Initialise logging and ScanBriefContext on server startup."""
    load_dotenv()
    setup_logging(
        style="server",
        secrets=ConfigLoader.get_credentials(model_table.credential_envs()),
    )
    settings = AISettings.from_config(ConfigLoader.load_config_json(), ConfigLoader.load_ai_prompts())
    ctx = ScanBriefContext(service=SummaryService(SecurityAnalyzer(settings=settings)))

    logger.info("ScanBrief MCP server started, default model=%s", settings.default_model)

    yield {"scanbrief_ctx": ctx}


# ── Server Instance ────────────────────────────────────────────────────────

mcp = FastMCP(
    "scanbrief",
    lifespan=lifespan,
    instructions=(
        "ScanBrief summarizes host scan datasets (for example Censys host "
        "exports) into security assessments using a hosted AI model. Use "
        "list_models to see available model keys, then summarize_hosts with "
        "the dataset."
    ),
)


# ── Helper to extract ScanBriefContext from MCP Context ────────────────────

def get_scanbrief_ctx(ctx) -> ScanBriefContext:
    """Extract ScanBriefContext from a FastMCP Context object.

    Args:
        ctx: FastMCP Context passed to tool functions.

    Returns:
        The ScanBriefContext initialised during lifespan.
    """
    return ctx.request_context.lifespan_context["scanbrief_ctx"]


# ── Register Tools ─────────────────────────────────────────────────────────

from .mcp_tools.ai_tools import register_ai_tools  # noqa: E402

register_ai_tools(mcp)


# ── Entry Point ────────────────────────────────────────────────────────────

def main():
    """Entry point for the scanbrief-mcp console script."""
    mcp.run()


if __name__ == "__main__":
    main()
