"""Virtual Model Creator handlers."""

import logging
from pathlib import Path

import gradio as gr

from addirector.core.errors import (
    CREDENTIAL_ERROR_MESSAGE,
    AdDirectorError,
    CredentialError,
    is_credential_error,
)
from addirector.core.model_creator import ModelSession

from ..models import UIState
from ..state import create_model_creator, initialize_ui_state
from ..validation import ValidationError, load_image

logger = logging.getLogger(__name__)


def format_history(session: ModelSession | None) -> str:
    """Render the prompt history as a markdown list.

    The first entry is the generation prompt, every later one an edit.
    """
    if session is None or not session.history:
        return ""
    lines = [f"- **Initial:** {session.history[0]}"]
    lines.extend(f"- **Edit:** {instruction}" for instruction in session.history[1:])
    return "\n".join(lines)


def _error_message(e: Exception, state: UIState) -> str:
    if isinstance(e, ValidationError):
        return f"❌ **Validation Error**\n\n{e}"
    if isinstance(e, CredentialError) or is_credential_error(e):
        state.credential_available = False
        return f"❌ **Error**\n\n{CREDENTIAL_ERROR_MESSAGE}"
    if isinstance(e, AdDirectorError):
        return f"❌ **Error**\n\n{e}"
    logger.error(f"Model Creator error: {e}", exc_info=True)
    return f"❌ **Error**\n\nAn unexpected error occurred. Check logs for details.\n\n`{e}`"


async def create_model(
    style_photo: str | None, headshot: str | None, state: UIState
) -> tuple[str | None, str, dict, UIState]:
    """Generate the initial model image.

    Returns:
        Tuple of (image_path, history_md, error_update, updated_state)
    """
    state = initialize_ui_state(state)

    try:
        style = load_image(style_photo, "fashion photo")
        face = load_image(headshot, "headshot")
        if style is None or face is None:
            raise ValidationError("Please upload both a fashion photo and a headshot.")

        creator = create_model_creator(state)
        session = await creator.create(style, face)
    except Exception as e:
        logger.warning(f"Model generation failed: {e}")
        current = state.model_session
        return (
            current.image_url if current else None,
            format_history(current),
            gr.update(value=_error_message(e, state), visible=True),
            state,
        )

    state.model_session = session
    logger.info(f"Model image created: {session.image_url}")
    return session.image_url, format_history(session), gr.update(value="", visible=False), state


async def edit_model(
    instruction: str, state: UIState
) -> tuple[str | None, str, dict, str, UIState]:
    """Apply one edit to the current model image.

    The instruction box is cleared only when the edit succeeds.

    Returns:
        Tuple of (image_path, history_md, error_update, instruction_value, updated_state)
    """
    state = initialize_ui_state(state)
    session = state.model_session

    if session is None:
        return (
            None,
            "",
            gr.update(value="❌ **Error**\n\nGenerate a model image first.", visible=True),
            instruction,
            state,
        )

    try:
        creator = create_model_creator(state, run_id=Path(session.image_url).parent.name)
        await creator.edit(session, instruction or "")
    except Exception as e:
        logger.warning(f"Model edit failed: {e}")
        return (
            session.image_url,
            format_history(session),
            gr.update(value=_error_message(e, state), visible=True),
            instruction,
            state,
        )

    return session.image_url, format_history(session), gr.update(value="", visible=False), "", state
