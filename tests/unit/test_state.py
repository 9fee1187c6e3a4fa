"""Unit tests for UI state management."""

import asyncio
from unittest.mock import patch

import pytest

from addirector.core.adapters import GeminiProvider
from addirector.core.errors import CredentialError
from addirector.core.model_creator import ModelCreator
from addirector.core.pipeline import AdPipeline
from addirector.ui.models import UIState
from addirector.ui.state import (
    SessionCredentialManager,
    create_model_creator,
    create_pipeline,
    create_provider,
    initialize_ui_state,
    require_credential,
    resolve_api_key,
    select_api_key,
)


@pytest.fixture
def no_key_config(test_config):
    config = test_config.model_copy(update={"api_key": None})
    with patch("addirector.ui.state.config", config):
        yield config


@pytest.fixture
def key_config(test_config):
    with patch("addirector.ui.state.config", test_config):
        yield test_config


class TestInitializeUIState:
    def test_none_creates_state(self, key_config):
        state = initialize_ui_state(None)
        assert isinstance(state, UIState)
        assert state.credential_available is True

    def test_without_key(self, no_key_config):
        assert initialize_ui_state(UIState()).credential_available is False

    def test_existing_flag_kept(self, no_key_config):
        state = UIState(credential_available=True)
        assert initialize_ui_state(state).credential_available is True

    def test_repr_hides_key(self):
        assert "secret" not in repr(UIState(api_key="secret"))


class TestResolveApiKey:
    def test_entered_key_wins(self, key_config):
        assert resolve_api_key(UIState(api_key=" typed ")) == "typed"

    def test_falls_back_to_config(self, key_config):
        assert resolve_api_key(UIState()) == "test-key"

    def test_none_when_missing(self, no_key_config):
        assert resolve_api_key(UIState()) is None


class TestSelectApiKey:
    def test_sets_key_and_flag(self, no_key_config):
        state = select_api_key(UIState(credential_available=False), "new-key")
        assert state.api_key == "new-key"
        assert state.credential_available is True

    def test_blank_key_without_config(self, no_key_config):
        state = select_api_key(UIState(), "  ")
        assert state.credential_available is False


class TestSessionCredentialManager:
    def test_active_with_key(self, key_config):
        manager = SessionCredentialManager(UIState())
        assert asyncio.run(manager.has_active_credential()) is True

    def test_prompt_flags_session_and_fails(self, no_key_config):
        state = UIState()
        manager = SessionCredentialManager(state)

        assert asyncio.run(manager.has_active_credential()) is False
        with pytest.raises(CredentialError):
            asyncio.run(manager.prompt_for_credential())
        assert state.credential_available is False


class TestRequireCredential:
    def test_returns_manager_when_key_available(self, key_config):
        state = UIState()
        manager = asyncio.run(require_credential(state))
        assert isinstance(manager, SessionCredentialManager)
        assert manager.state is state

    def test_prompts_without_key(self, no_key_config):
        state = UIState()
        with pytest.raises(CredentialError):
            asyncio.run(require_credential(state))
        assert state.credential_available is False

    def test_entered_key_satisfies_check(self, no_key_config):
        state = UIState(api_key="typed")
        asyncio.run(require_credential(state))
        assert state.credential_available is not False


class TestFactories:
    def test_create_provider_uses_entered_key(self, key_config):
        provider = create_provider(UIState(api_key="typed"))
        assert isinstance(provider, GeminiProvider)
        assert provider._api_key == "typed"

    def test_create_provider_without_key(self, no_key_config):
        state = UIState()
        with pytest.raises(CredentialError):
            create_provider(state)
        assert state.credential_available is False

    def test_create_pipeline(self, key_config, provider):
        state = UIState()
        pipeline = create_pipeline(state, provider=provider)

        assert isinstance(pipeline, AdPipeline)
        assert pipeline.provider is provider
        assert pipeline.store.root == key_config.outputs_dir
        assert isinstance(pipeline.credential_manager, SessionCredentialManager)

    def test_pipeline_uses_given_manager(self, key_config, provider):
        manager = SessionCredentialManager(UIState())
        pipeline = create_pipeline(UIState(), provider=provider, credential_manager=manager)
        assert pipeline.credential_manager is manager

    def test_create_model_creator(self, key_config, provider):
        creator = create_model_creator(UIState(), provider=provider)
        assert isinstance(creator, ModelCreator)
        assert creator.provider is provider
