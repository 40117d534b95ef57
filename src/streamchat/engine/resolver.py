"""Credential validation and model catalog resolution.

Hides how a draft API key is checked (one model-listing round trip), how the
catalog is narrowed to chat models and how the default model is picked.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from ..llm.base import LLMProvider
from ..llm.errors import CredentialInvalid, LLMError, RemoteRejection
from .classifier import classify_rejection
from .state import ChatState

DEFAULT_MODEL_PREFIX = "gpt-"
DEFAULT_MODEL = "gpt-3.5-turbo"

ProviderFactory = Callable[[str], LLMProvider]


def filter_models(model_ids: Iterable[str], prefix: str = DEFAULT_MODEL_PREFIX) -> list[str]:
    """Keep identifiers containing the family prefix, in their original order."""
    return [model_id for model_id in model_ids if prefix in model_id]


def select_default_model(models: list[str], preferred: str = DEFAULT_MODEL) -> str:
    """Pick the default model.

    The preferred identifier wins if present; otherwise the
    lexicographically last entry; otherwise the empty string.
    """
    if preferred in models:
        return preferred
    return max(models) if models else ""


def mask_api_key(api_key: str) -> str:
    """Mask an API key for display: first 3 and last 4 characters."""
    if len(api_key) <= 7:
        return "*" * len(api_key)
    return f"{api_key[:3]}...{api_key[-4:]}"


@dataclass
class ValidationResult:
    """Outcome of a successful credential validation."""

    models: list[str]
    default_model: str
    provider: LLMProvider = field(repr=False, compare=False)


class CredentialResolver:
    """Validate draft credentials and resolve the model catalog.

    No retries and no caching: every ``validate`` call is one fresh round
    trip to the model-listing endpoint.
    """

    def __init__(
        self,
        state: ChatState,
        provider_factory: ProviderFactory,
        model_prefix: str = DEFAULT_MODEL_PREFIX,
        default_model: str = DEFAULT_MODEL,
    ) -> None:
        self._state = state
        self._provider_factory = provider_factory
        self._model_prefix = model_prefix
        self._default_model = default_model
        self._debug_callback: Any = None

    def set_debug_callback(self, callback: Any) -> None:
        """Set the debug callback for detailed logging.

        Args:
            callback: Callable(level: str, component: str, message: str)
        """
        self._debug_callback = callback

    def _debug(self, level: str, message: str) -> None:
        if self._debug_callback is not None:
            self._debug_callback(level, "Resolver", message)

    async def validate(self, draft: str) -> ValidationResult:
        """Validate a draft credential and promote it on success.

        On success the draft becomes the active credential, the filtered
        catalog replaces the previous one and the default model is selected.
        On failure nothing but the draft slot changes.

        Args:
            draft: API key to validate

        Returns:
            ValidationResult carrying a provider bound to the new credential

        Raises:
            CredentialInvalid: If the listing request fails for any reason
        """
        self._state.credentials.draft = draft
        self._debug("info", f"Validating API key {mask_api_key(draft)}")

        provider = self._provider_factory(draft)
        try:
            model_ids = await provider.list_models()
        except LLMError as exc:
            await provider.close()
            if isinstance(exc, RemoteRejection):
                message = classify_rejection(exc.status_code, exc.body).message
            else:
                message = str(exc)
            self._debug("warning", f"API key rejected: {message}")
            raise CredentialInvalid(f"API key validation failed: {message}") from exc

        models = filter_models(model_ids, self._model_prefix)
        default_model = select_default_model(models, self._default_model)

        self._state.credentials.active = draft
        self._state.catalog.available = models
        self._state.catalog.selected = default_model
        self._debug(
            "info",
            f"API key accepted: {len(models)} of {len(model_ids)} models match "
            f"'{self._model_prefix}', default '{default_model or '-'}'"
        )
        return ValidationResult(models=models, default_model=default_model, provider=provider)
