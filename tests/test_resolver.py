"""Unit tests for credential validation and model selection."""
import pytest
from hypothesis import given
from hypothesis import strategies as st

from streamchat.engine import ChatState, CredentialResolver, filter_models, mask_api_key, select_default_model
from streamchat.llm import CredentialInvalid

from conftest import VALID_KEY


class TestModelHelpers:
    """Tests for filter_models and select_default_model."""

    def test_filter_keeps_order(self):
        ids = ["gpt-4", "whisper-1", "gpt-3.5-turbo", "text-davinci-003"]
        assert filter_models(ids) == ["gpt-4", "gpt-3.5-turbo"]

    def test_filter_needs_family_dash(self):
        assert filter_models(["gpt4all-j", "gpt", "gpt-4o-mini"]) == ["gpt-4o-mini"]

    def test_filter_custom_prefix(self):
        assert filter_models(["llama-3", "gpt-4"], "llama") == ["llama-3"]

    def test_preferred_default(self):
        assert select_default_model(["gpt-4", "gpt-3.5-turbo"]) == "gpt-3.5-turbo"

    def test_fallback_to_lexicographic_last(self):
        assert select_default_model(["gpt-4", "gpt-4o", "gpt-3.5"]) == "gpt-4o"

    def test_empty_catalog(self):
        assert select_default_model([]) == ""

    @given(st.lists(st.text(min_size=1), min_size=1))
    def test_default_is_member(self, models):
        """Property: a non-empty list always yields one of its members."""
        assert select_default_model(models) in models

    @given(st.lists(st.text(min_size=1)))
    def test_default_rule(self, models):
        """Property: preferred if present, else max, else empty."""
        chosen = select_default_model(models, "gpt-3.5-turbo")
        if "gpt-3.5-turbo" in models:
            assert chosen == "gpt-3.5-turbo"
        elif models:
            assert chosen == max(models)
        else:
            assert chosen == ""


class TestMaskApiKey:
    def test_long_key(self):
        assert mask_api_key("sk-abcdefghijklmnop1234") == "sk-...1234"

    def test_short_key_fully_masked(self):
        assert mask_api_key("sk-1234") == "*******"


class TestCredentialResolver:
    """Tests for CredentialResolver.validate against the mock endpoint."""

    @pytest.mark.asyncio
    async def test_valid_key(self, api):
        """Listing succeeds: filtered catalog, default selected, key promoted."""
        state = ChatState()
        resolver = CredentialResolver(state, api.provider)

        result = await resolver.validate(VALID_KEY)
        try:
            assert result.models == ["gpt-4", "gpt-3.5-turbo"]
            assert result.default_model == "gpt-3.5-turbo"
            assert state.credentials.active == VALID_KEY
            assert state.catalog.available == ["gpt-4", "gpt-3.5-turbo"]
            assert state.catalog.selected == "gpt-3.5-turbo"
        finally:
            await result.provider.close()

    @pytest.mark.asyncio
    async def test_one_request_per_validation(self, api):
        state = ChatState()
        resolver = CredentialResolver(state, api.provider)
        for _ in range(2):
            result = await resolver.validate(VALID_KEY)
            await result.provider.close()
        assert len(api.requests) == 2
        assert all(r.url.path.endswith("/models") for r in api.requests)

    @pytest.mark.asyncio
    async def test_invalid_key_keeps_previous_state(self, api):
        """A rejected key changes only the draft slot."""
        state = ChatState()
        resolver = CredentialResolver(state, api.provider)
        first = await resolver.validate(VALID_KEY)
        await first.provider.close()

        with pytest.raises(CredentialInvalid, match="Incorrect API key"):
            await resolver.validate("sk-wrong-key-9999")

        assert state.credentials.active == VALID_KEY
        assert state.credentials.draft == "sk-wrong-key-9999"
        assert state.catalog.available == ["gpt-4", "gpt-3.5-turbo"]
        assert state.catalog.selected == "gpt-3.5-turbo"

    @pytest.mark.asyncio
    async def test_unreachable_endpoint(self, api):
        api.connect_error = True
        state = ChatState()
        resolver = CredentialResolver(state, api.provider)
        with pytest.raises(CredentialInvalid, match="API key validation failed"):
            await resolver.validate(VALID_KEY)
        assert state.credentials.active == ""
        assert state.catalog.selected == ""

    @pytest.mark.asyncio
    async def test_no_matching_models(self, api):
        api.models = ["whisper-1", "dall-e-3"]
        state = ChatState()
        resolver = CredentialResolver(state, api.provider)
        result = await resolver.validate(VALID_KEY)
        await result.provider.close()
        assert result.models == []
        assert state.catalog.selected == ""

    @pytest.mark.asyncio
    async def test_logs_masked_key(self, api):
        """The debug log never carries the raw key."""
        entries = []
        resolver = CredentialResolver(ChatState(), api.provider)
        resolver.set_debug_callback(lambda level, component, message: entries.append((level, component, message)))
        result = await resolver.validate(VALID_KEY)
        await result.provider.close()

        assert entries
        assert all(component == "Resolver" for _, component, _ in entries)
        assert not any(VALID_KEY in message for _, _, message in entries)
        assert any(mask_api_key(VALID_KEY) in message for _, _, message in entries)
