"""Ad generation handlers."""

import asyncio
import logging
from collections.abc import AsyncIterator

import gradio as gr

from addirector.core.errors import AdDirectorError, CredentialError
from addirector.core.models import TOTAL_STEPS, FinalOutput, ProgressUpdate

from ..models import UIState
from ..state import create_pipeline, initialize_ui_state, require_credential, select_api_key
from ..validation import ValidationError, build_user_input

logger = logging.getLogger(__name__)

# Seconds between checks of the running pipeline while no progress arrives
PROGRESS_WAIT = 0.5

GenerationView = tuple[str, dict, str, str | None, str | None, str | None, dict, UIState]


def format_progress(update: ProgressUpdate) -> str:
    """Render a progress update as markdown with a text progress bar."""
    if update.is_idle:
        return ""
    filled = round(update.step / TOTAL_STEPS * 20)
    bar = "█" * filled + "░" * (20 - filled)
    return f"**Step {update.step}/{TOTAL_STEPS}:** {update.message}\n\n`{bar}`"


def format_hashtags(hashtags: tuple[str, ...] | list[str]) -> str:
    """Join hashtags for display, each prefixed with ``#``."""
    return " ".join(f"#{tag}" for tag in hashtags)


def format_result(output: FinalOutput) -> str:
    """Render the ad package as markdown."""
    copy_lines = "\n".join(
        f"{i}. {variation}" for i, variation in enumerate(output.ad_copy_variations, start=1)
    )
    return f"""
## {output.ad_title}

{output.ad_description}

**Platform:** {output.platform} · **Aspect ratio:** {output.aspect_ratio} · **Tone:** {output.tone}
**Call to action:** {output.cta_line}

### Ad Idea
{output.ad_idea}

### Quality Control
{output.qc_notes}

### Opening Frame Prompt
{output.opening_frame_prompt}

### Video Script
{output.video_script}

### Ad Copy
{copy_lines}

### Hashtags
{format_hashtags(output.hashtags)}
    """.strip()


def _error_banner(message: str) -> dict:
    return gr.update(value=f"❌ **Error**\n\n{message}", visible=True)


def _credential_banner(state: UIState) -> dict:
    return gr.update(visible=state.credential_available is False)


def _view(
    state: UIState,
    progress: str = "",
    error: dict | None = None,
    output: FinalOutput | None = None,
) -> GenerationView:
    """Build the output tuple shared by every yield of :func:`generate_ad`.

    Returns:
        Tuple of (progress_md, error_update, result_md, frame_path, video_path,
        audio_path, credential_banner_update, updated_state)
    """
    return (
        progress,
        error if error is not None else gr.update(value="", visible=False),
        format_result(output) if output else "",
        output.opening_frame_image_url if output else None,
        output.video_url if output else None,
        output.voiceover_audio_url if output else None,
        _credential_banner(state),
        state,
    )


async def generate_ad(
    product_image: str | None,
    actor_image: str | None,
    product_description: str,
    cta: str,
    platform: str,
    aspect_ratio: str,
    video_length: float,
    tone: str,
    generate_voiceover: bool,
    state: UIState,
) -> AsyncIterator[GenerationView]:
    """Run the ad pipeline and stream progress to the UI.

    The pipeline runs as a task. Its progress callback feeds a queue that
    this generator drains, so each progress update reaches the browser as
    soon as the stage starts.

    Yields:
        Tuple of (progress_md, error_update, result_md, frame_path, video_path,
        audio_path, credential_banner_update, updated_state)
    """
    state = initialize_ui_state(state)

    try:
        user_input = build_user_input(
            product_image,
            actor_image,
            product_description,
            cta,
            platform,
            aspect_ratio,
            video_length,
            tone,
            generate_voiceover,
        )
        manager = await require_credential(state)
        pipeline = create_pipeline(state, credential_manager=manager)
    except ValidationError as e:
        logger.warning(f"Validation error: {e}")
        yield _view(state, error=gr.update(value=f"❌ **Validation Error**\n\n{e}", visible=True))
        return
    except CredentialError as e:
        logger.warning(f"No usable API key: {e}")
        yield _view(state, error=_error_banner(str(e)))
        return

    queue: asyncio.Queue[ProgressUpdate] = asyncio.Queue()
    task = asyncio.create_task(pipeline.run(user_input, queue.put_nowait))

    while not task.done() or not queue.empty():
        try:
            update = await asyncio.wait_for(queue.get(), timeout=PROGRESS_WAIT)
        except asyncio.TimeoutError:
            continue
        yield _view(state, progress=format_progress(update))

    try:
        output = task.result()
    except CredentialError as e:
        state.credential_available = False
        yield _view(state, error=_error_banner(str(e)))
        return
    except AdDirectorError as e:
        logger.warning(f"Ad generation failed: {e}")
        yield _view(state, error=_error_banner(str(e)))
        return
    except Exception as e:
        logger.error(f"Error generating ad: {e}", exc_info=True)
        yield _view(
            state,
            error=gr.update(
                value=(
                    "❌ **Error**\n\nAn unexpected error occurred. "
                    f"Check logs for details.\n\n`{e}`"
                ),
                visible=True,
            ),
        )
        return

    state.last_output = output
    state.credential_available = True
    yield _view(state, output=output)


def use_api_key(api_key: str, state: UIState) -> tuple[str, dict, UIState]:
    """Store the key typed into the UI for this session.

    Returns:
        Tuple of (status_message, credential_banner_update, updated_state)
    """
    state = select_api_key(state, api_key)
    if state.credential_available:
        status = "✅ API key set for this session"
    else:
        status = "⚠️ No API key entered and none configured"
    return status, _credential_banner(state), state


def credential_banner_on_load(state: UIState) -> tuple[dict, UIState]:
    """Show the credential warning on page load if no key is configured."""
    state = initialize_ui_state(state)
    return _credential_banner(state), state
