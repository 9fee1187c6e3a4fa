"""State management utilities for the UGC Ad Director UI.

This module owns the per-session collaborators: the API key resolution,
the credential manager handed to the pipeline, and factories that build a
fresh provider, pipeline or Model Creator for each request so the latest
key is always used.
"""

import logging

from addirector.core.adapters import GeminiProvider
from addirector.core.artifacts import ArtifactStore
from addirector.core.config import config
from addirector.core.errors import CredentialError
from addirector.core.model_creator import ModelCreator
from addirector.core.pipeline import AdPipeline
from addirector.core.provider import CapabilityProvider

from .models import UIState

logger = logging.getLogger(__name__)


def initialize_ui_state(state: UIState | None = None) -> UIState:
    """Create the session state if needed and record whether a key is available.

    Args:
        state: Existing UIState or None

    Returns:
        Initialized UIState instance
    """
    if state is None:
        logger.info("Creating new UIState")
        state = UIState()

    if state.credential_available is None:
        state.credential_available = resolve_api_key(state) is not None
        logger.info(f"Credential available: {state.credential_available}")

    return state


def resolve_api_key(state: UIState) -> str | None:
    """Return the key entered in the UI, falling back to the configured one."""
    entered = (state.api_key or "").strip()
    if entered:
        return entered
    return config.get_api_key()


def select_api_key(state: UIState, api_key: str | None) -> UIState:
    """Store a key entered in the UI and mark the credential as available."""
    state = initialize_ui_state(state)
    state.api_key = (api_key or "").strip()
    state.credential_available = resolve_api_key(state) is not None
    logger.info(f"API key updated from UI (available={state.credential_available})")
    return state


class SessionCredentialManager:
    """Credential manager backed by the session state.

    A Gradio page cannot open a key picker in the middle of a request, so
    :meth:`prompt_for_credential` flags the session and fails the run with a
    :class:`CredentialError`. The UI then shows the key banner.
    """

    def __init__(self, state: UIState) -> None:
        self.state = state

    async def has_active_credential(self) -> bool:
        return resolve_api_key(self.state) is not None

    async def prompt_for_credential(self) -> None:
        self.state.credential_available = False
        raise CredentialError()


async def require_credential(state: UIState) -> SessionCredentialManager:
    """Return the session's credential manager, prompting when no key is available.

    Raises:
        CredentialError: If the session has no key to run with
    """
    manager = SessionCredentialManager(state)
    if not await manager.has_active_credential():
        await manager.prompt_for_credential()
    return manager


def create_provider(state: UIState) -> CapabilityProvider:
    """Build a provider with the session's current API key.

    Raises:
        CredentialError: If no key is available at all
    """
    api_key = resolve_api_key(state)
    if api_key is None:
        state.credential_available = False
        raise CredentialError()
    return GeminiProvider(api_key=api_key, config=config)


def create_pipeline(
    state: UIState,
    provider: CapabilityProvider | None = None,
    credential_manager: SessionCredentialManager | None = None,
) -> AdPipeline:
    """Build a pipeline for the session; each run writes into a fresh run directory."""
    return AdPipeline(
        provider=provider or create_provider(state),
        store=ArtifactStore(config.outputs_dir),
        config=config,
        credential_manager=credential_manager or SessionCredentialManager(state),
    )


def create_model_creator(
    state: UIState,
    provider: CapabilityProvider | None = None,
    run_id: str | None = None,
) -> ModelCreator:
    """Build a Model Creator.

    Pass the run id of an existing session so edits land next to its
    earlier images; omit it to start a fresh run directory.
    """
    return ModelCreator(
        provider=provider or create_provider(state),
        store=ArtifactStore(config.outputs_dir, run_id=run_id),
    )
