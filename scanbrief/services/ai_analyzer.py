"""
AI-powered security analysis of host scan datasets
"""
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from ..models.analysis import AnalysisRequest, AnalysisResult
from ..utils.config_loader import ConfigLoader
from ..utils.logger import get_logger
from .ai import model_table, prompt_builder
from .ai.errors import AnalysisError, ErrorKind
from .ai.invoker import ProviderInvoker
from .ai.model_table import LogicalModel
from .ai.request_normalizer import RequestNormalizer
from .ai.settings import AISettings

log = get_logger(__name__)


class SecurityAnalyzer:
    """
    Runs a scan dataset through the model-request adapter.

    Pipeline: resolve model -> build prompt -> normalize payload ->
    look up credential -> invoke provider. Every stage before the invoker
    fails fast, so no partial payload is ever sent.

    Attributes:
        settings: Immutable AISettings
        table: Model capability table
        normalizer: RequestNormalizer bound to the settings
        invoker: ProviderInvoker performing the outbound call
    """

    def __init__(
        self,
        settings: Optional[AISettings] = None,
        invoker: Optional[ProviderInvoker] = None,
        table: Mapping[str, LogicalModel] = model_table.MODEL_TABLE,
        env: Optional[Mapping[str, str]] = None
    ):
        """
        Initialize the analyzer.

        Args:
            settings: AISettings (default: loaded from config and environment)
            invoker: ProviderInvoker (default: real AsyncOpenAI-backed invoker)
            table: Capability table to resolve model keys against
            env: Environment mapping for credential lookup (default: os.environ)
        """
        self.settings = settings or AISettings.load()
        self.table = table
        self.normalizer = RequestNormalizer(self.settings)
        self.invoker = invoker or ProviderInvoker()
        self.env = env

    async def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        """
        Analyze a dataset.

        Args:
            request: AnalysisRequest with raw data and optional model key

        Returns:
            AnalysisResult carrying the model key and truncation flag
        """
        model_key = request.model_key
        try:
            model = model_table.resolve(request.model_key, self.settings.default_model, self.table)
            model_key = model.key
            log.info("Using %s model: %s", model.provider.display_name, model.wire_name)

            prompt = prompt_builder.build(
                request.raw_data,
                self.settings.analysis_template,
                model.provider.max_input_chars,
            )
            if prompt.truncated:
                log.warning(
                    "Input truncated from %d to %d characters for %s",
                    prompt.original_length, model.provider.max_input_chars,
                    model.provider.display_name,
                )
            log.info("Processing data for analysis (%d characters)", len(prompt.data))

            payload = self.normalizer.normalize(prompt, model)
            credential = self._get_credential(model)
        except AnalysisError as e:
            log.error("Analysis rejected (%s): %s", e.kind.value, e.message)
            return AnalysisResult.from_error(e, model_key=model_key)

        result = await self.invoker.invoke(payload, credential)
        if result.ok:
            log.info("Analysis completed successfully")

        return result.with_context(
            model_key=model.key,
            truncated=prompt.truncated,
            original_length=prompt.original_length,
        )

    def _get_credential(self, model: LogicalModel) -> str:
        provider = model.provider
        credential = ConfigLoader.get_credential(provider.credential_env, self.env)
        if not credential:
            kind = ErrorKind.MISSING_CREDENTIAL
        elif not credential.isascii():
            kind = ErrorKind.INVALID_CREDENTIAL
        else:
            return credential

        raise AnalysisError(
            kind,
            provider=provider.display_name,
            credential_env=provider.credential_env,
            model=model.key,
        )


# Failure kinds -> HTTP status for the inbound operation
_HTTP_STATUS = {
    ErrorKind.INVALID_INPUT: 400,
    ErrorKind.UNSUPPORTED_MODEL: 400,
    ErrorKind.UNAUTHORIZED: 502,
    ErrorKind.FORBIDDEN: 502,
    ErrorKind.MODEL_NOT_FOUND: 502,
    ErrorKind.RATE_LIMITED: 429,
    ErrorKind.QUOTA_EXCEEDED: 429,
    ErrorKind.TIMEOUT: 504,
    ErrorKind.NETWORK_ERROR: 502,
    ErrorKind.PROVIDER_ERROR: 502,
    ErrorKind.MALFORMED_RESPONSE: 502,
}


def describe_data_type(data: Any) -> str:
    """Name the data type the way a JSON client would (typeof semantics)."""
    if isinstance(data, str):
        return "string"
    if isinstance(data, bool):
        return "boolean"
    if isinstance(data, (int, float)):
        return "number"
    return "object"


def count_records(data: Any) -> int:
    """Number of records: list length for arrays, otherwise 1."""
    if isinstance(data, list):
        return len(data)
    return 1


class SummaryService:
    """
    Inbound summarize operation shared by the HTTP, CLI and MCP surfaces.

    Validates the caller's body, runs the analyzer, and maps the result to
    a ``(status, response_dict)`` pair.
    """

    def __init__(self, analyzer: Optional[SecurityAnalyzer] = None):
        self.analyzer = analyzer or SecurityAnalyzer()

    async def summarize(self, body: Any, processed_at: Optional[str] = None) -> tuple:
        """
        Handle a ``{data, model}`` request.

        Args:
            body: Parsed request body
            processed_at: ISO timestamp override (default: now, UTC)

        Returns:
            Tuple of (http_status: int, response: dict)
        """
        if not isinstance(body, dict):
            body = {}

        data = body.get("data")
        # Empty arrays and objects are datasets; other falsy values are not
        if data is None or (not data and not isinstance(data, (list, dict))):
            error = AnalysisError(
                ErrorKind.INVALID_INPUT,
                detail="No data provided. Please include data in the request body.",
            )
            return 400, {"error": error.message, "kind": error.kind.value}

        model = body.get("model")
        if model is not None and not isinstance(model, str):
            model = str(model)

        log.info("Received %s data for analysis (%d record(s))",
                 describe_data_type(data), count_records(data))

        result = await self.analyzer.analyze(AnalysisRequest(raw_data=data, model_key=model))

        if not result.ok:
            response: Dict[str, Any] = {
                "error": "Failed to generate analysis",
                "kind": result.kind.value,
                "details": result.message,
            }
            if result.detail:
                response["providerDetail"] = result.detail
            if result.provider_status is not None:
                response["providerStatus"] = result.provider_status
            if result.kind is ErrorKind.UNSUPPORTED_MODEL:
                response["availableModels"] = model_table.known_keys(self.analyzer.table)
            return _HTTP_STATUS.get(result.kind, 500), response

        return 200, {
            "success": True,
            "summary": result.text,
            "metadata": {
                "dataType": describe_data_type(data),
                "recordCount": count_records(data),
                "processedAt": processed_at or _utc_now_iso(),
                "model": result.model_key,
                "truncated": result.truncated,
                "originalLength": result.original_length,
            },
        }


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
