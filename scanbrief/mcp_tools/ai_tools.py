"""MCP tools for AI-powered analysis: summarize_hosts, list_models."""
from typing import Any, Optional

from mcp.server.fastmcp import Context

from ..services.ai import model_table


def register_ai_tools(mcp):
    """Register all AI analysis tools with the MCP server."""

    @mcp.tool()
    async def summarize_hosts(
        ctx: Context,
        data: Any,
        model: Optional[str] = None,
    ) -> dict:
        """Generate a security assessment of a host scan dataset.

        Sends the dataset to the AI model selected by logical key. This is a
        long-running operation (reasoning models may take several minutes).

        Args:
            data: Host dataset as a JSON value or raw text.
            model: Logical model key (empty = configured default).

        Returns:
            Dict with the summary and metadata.
        """
        from ..mcp_server import get_scanbrief_ctx

        sctx = get_scanbrief_ctx(ctx)
        status, payload = await sctx.service.summarize({"data": data, "model": model or None})

        if status != 200:
            raise RuntimeError(payload.get("details") or payload.get("error"))

        return payload

    @mcp.tool()
    def list_models(ctx: Context) -> dict:
        """List the logical model keys and their capability flags.

        Returns:
            Dict with the default key and one entry per model.
        """
        from ..mcp_server import get_scanbrief_ctx

        analyzer = get_scanbrief_ctx(ctx).analyzer
        return {
            "default": analyzer.settings.default_model,
            "models": [m.to_dict() for m in model_table.list_models(analyzer.table)],
        }

    # ── MCP Prompts ────────────────────────────────────────────────────

    @mcp.prompt()
    def security_analysis() -> str:
        """AI prompt template used for host dataset analysis.

        Returns the analysis template; ``{data}`` marks where the
        serialized dataset is inserted.
        """
        from ..utils.config_loader import ConfigLoader

        return ConfigLoader.load_ai_prompts()["analysis_template"]
