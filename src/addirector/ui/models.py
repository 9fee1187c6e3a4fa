"""Session state and constants for the UGC Ad Director UI."""

import logging
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class UIState:
    """Session state for the Gradio UI.

    Each browser session gets its own UIState instance. Nothing in it
    outlives the session.

    Attributes
    ----------
    api_key : str
        Key entered in the UI (overrides the configured key when set)
    credential_available : bool | None
        None until checked; False after the provider rejected the key
    model_session : Any | None
        Current Model Creator session (ModelSession)
    last_output : Any | None
        FinalOutput of the most recent successful run
    """

    api_key: str = ""
    credential_available: bool | None = None
    model_session: Any | None = None  # ModelSession instance
    last_output: Any | None = None  # FinalOutput instance

    def __repr__(self) -> str:
        """String representation for debugging (never shows the key)."""
        return (
            f"UIState(credential_available={self.credential_available}, "
            f"api_key_set={bool(self.api_key)}, "
            f"model_session={'yes' if self.model_session else 'no'})"
        )


# Form choices
PLATFORMS = ["TikTok", "Reels", "YouTube Shorts", "Meta"]
ASPECT_RATIOS = ["9:16", "16:9"]

# Form defaults
DEFAULT_PLATFORM = "TikTok"
DEFAULT_ASPECT_RATIO = "9:16"
DEFAULT_VIDEO_LENGTH = 8
MIN_VIDEO_LENGTH = 3
MAX_VIDEO_LENGTH = 15
DEFAULT_TONE = "cinematic, luxury"

CREDENTIAL_WARNING = (
    "⚠️ A Google AI Studio API key is required to generate videos. "
    "Enter a key above and press **Use Key**. "
    "[Learn about billing](https://ai.google.dev/gemini-api/docs/billing)."
)
