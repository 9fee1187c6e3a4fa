"""Configuration management for UGC Ad Director.

Model names, polling behaviour, output location and the Gradio server are all
read from ADDIRECTOR_* environment variables through Pydantic Settings.

Sources
-------
Later sources only fill fields the earlier ones leave unset:
1. Process environment (ADDIRECTOR_* prefix)
2. A .env file in the working directory
3. The defaults below

The API key is also picked up from ``GEMINI_API_KEY`` or ``GOOGLE_API_KEY``
so an existing Gemini setup works unchanged.

Example .env file:
    ADDIRECTOR_API_KEY=your-gemini-key
    ADDIRECTOR_VIDEO_MODEL=veo-3.1-fast-generate-preview
    ADDIRECTOR_VIDEO_POLL_INTERVAL=10
    ADDIRECTOR_OUTPUTS_DIR=outputs

Shared Instance
---------------
Importing this module builds `config`, which the UI and the default
pipeline construction use.

Usage Example
-------------
    from addirector.core.config import config

    print(config.video_model)
    print(config.outputs_dir)

Model Selection
---------------
Each pipeline stage has its own model field so a stage can be pointed at a
newer model without touching code:

- analysis_model / validation_model / assets_model: fast multimodal model
- concept_model / script_model: reasoning model with a thinking budget
- image_model: text-to-image (Imagen)
- image_edit_model: image composition and editing with a reference image
- video_model: image-to-video (Veo), polled as a long-running operation
- speech_model: text-to-speech, returns raw 24 kHz PCM

See Also
--------
- .env.example: every setting with its default
"""

from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class AdDirectorConfig(BaseSettings):
    """Main configuration for UGC Ad Director.

    Values are loaded from environment variables with the ADDIRECTOR_ prefix,
    with fallback to defaults defined here. ``outputs_dir`` is created on
    initialization.

    Attributes
    ----------
    Credentials:
        api_key : SecretStr | None
            Gemini API key. May be left empty and entered in the UI instead.

    Model Settings:
        analysis_model, concept_model, image_model, image_edit_model,
        validation_model, script_model, video_model, speech_model,
        assets_model : str
            Model identifier used by each pipeline stage
        concept_thinking_budget, script_thinking_budget : int
            Thinking token budget for the reasoning stages (0 keeps the model default)
        video_resolution : Literal["720p", "1080p"]
            Output resolution requested from the video model
        speech_voice : str
            Prebuilt voice name for the voiceover

    Polling:
        video_poll_interval : float
            Seconds between video job status checks
        video_poll_timeout : float | None
            Optional ceiling in seconds; None polls until the job finishes

    Paths:
        outputs_dir : Path
            Directory under which each run stores its media files

    UI Settings:
        gradio_server_name : str
            Server bind address
        gradio_server_port : int
            Server port (1024-65535)
        gradio_share : bool
            Create public gradio.live link (keep False for local-only)

    Examples
    --------
        >>> custom_config = AdDirectorConfig(
        ...     video_poll_interval=5,
        ...     outputs_dir="/tmp/ads",
        ... )
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="ADDIRECTOR_",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    # Credentials
    api_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("api_key", "ADDIRECTOR_API_KEY", "GEMINI_API_KEY", "GOOGLE_API_KEY"),
        description="Gemini API key (can also be entered in the UI)",
    )

    # Stage models
    analysis_model: str = Field(default="gemini-2.5-flash", description="Image analysis model")
    concept_model: str = Field(default="gemini-2.5-pro", description="Ad concept model")
    concept_thinking_budget: int = Field(default=32768, ge=0)
    image_model: str = Field(
        default="imagen-4.0-generate-001",
        description="Text-to-image model for the opening frame",
    )
    image_edit_model: str = Field(
        default="gemini-2.5-flash-image",
        description="Image model used for compositing and editing with a reference image",
    )
    validation_model: str = Field(default="gemini-2.5-flash", description="Frame QC model")
    script_model: str = Field(default="gemini-2.5-pro", description="Video script model")
    script_thinking_budget: int = Field(default=0, ge=0)
    video_model: str = Field(default="veo-3.1-fast-generate-preview", description="Video model")
    video_resolution: Literal["720p", "1080p"] = Field(default="720p")
    speech_model: str = Field(default="gemini-2.5-flash-preview-tts", description="TTS model")
    speech_voice: str = Field(default="Kore", description="Prebuilt TTS voice")
    assets_model: str = Field(default="gemini-2.5-flash", description="Ad copy model")

    # Video polling
    video_poll_interval: float = Field(
        default=10.0,
        description="Seconds between video job status checks",
        gt=0,
    )
    video_poll_timeout: float | None = Field(
        default=None,
        description="Give up on the video job after this many seconds (None waits forever)",
        gt=0,
    )
    download_timeout: float = Field(
        default=300.0,
        description="Timeout in seconds for downloading the finished video",
        gt=0,
    )

    # Paths
    outputs_dir: Path = Field(
        default=Path("outputs"),
        description="Directory to save generated media",
    )

    # UI settings
    gradio_server_name: str = Field(
        default="127.0.0.1",
        description="Server bind address (0.0.0.0 for local network)",
    )
    gradio_server_port: int = Field(
        default=7860,
        description="Server port",
        ge=1024,
        le=65535,
    )
    gradio_share: bool = Field(
        default=False,
        description="Create public gradio.live link (keep False for local-only)",
    )

    def __init__(self, **kwargs):
        """Initialize configuration and create the outputs directory.

        Args:
            **kwargs: Configuration overrides (typically from environment variables)
        """
        super().__init__(**kwargs)
        self.outputs_dir.mkdir(parents=True, exist_ok=True)

    def get_api_key(self) -> str | None:
        """Return the plain API key, or None when none is configured."""
        if self.api_key is None:
            return None
        return self.api_key.get_secret_value() or None


# Global configuration instance
# Loads values from environment variables (ADDIRECTOR_* prefix) and .env file.
config = AdDirectorConfig()
