"""Domain models for the ad generation pipeline.

All models are Pydantic v2 models. Three of them (:class:`AdConcept`,
:class:`ValidationResult` and :class:`AdAssets`) double as the response
schemas declared to the capability provider for structured calls, so a
provider reply that does not match them is rejected as a whole rather than
parsed on a best-effort basis.

Models
------
EncodedImage
    An image as base64 text plus its media type.
UserInput
    The campaign brief collected by the form.
AdConcept
    Creative brief produced by the concept stage.
ValidationResult
    QC verdict on a candidate opening frame.
AdAssets
    Ad copy variations and hashtags.
VideoJob
    Handle and status of the asynchronous video render.
FinalOutput
    The delivered ad package, immutable once built.
ProgressUpdate
    One progress notification (step 0 means idle).
"""

from __future__ import annotations

import base64
import binascii
import re
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

Platform = Literal["TikTok", "Reels", "YouTube Shorts", "Meta"]
AspectRatio = Literal["9:16", "16:9"]

TOTAL_STEPS = 8
AD_COPY_COUNT = 3
HASHTAG_COUNT = 5

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[^;,]+)?(?:;[^,]*)?,(?P<data>.*)$", re.DOTALL)


class EncodedImage(BaseModel):
    """An image as transport-ready base64 text.

    Attributes:
        payload: Base64-encoded image bytes (never empty).
        media_type: MIME type matching the encoded bytes, e.g. ``image/png``.
    """

    model_config = ConfigDict(frozen=True)

    payload: str = Field(min_length=1)
    media_type: str = Field(default="image/png", pattern=r"^image/[\w.+-]+$")

    @classmethod
    def from_bytes(cls, data: bytes, media_type: str) -> EncodedImage:
        """Build an EncodedImage from raw bytes."""
        if not data:
            raise ValueError("Image data is empty")
        return cls(payload=base64.b64encode(data).decode("ascii"), media_type=media_type)

    @classmethod
    def from_data_url(cls, url: str, default_media_type: str = "image/png") -> EncodedImage:
        """Parse a ``data:<mime>;base64,<payload>`` URL.

        Raises:
            ValueError: If the string is not a data URL or has no payload.
        """
        match = _DATA_URL_RE.match(url.strip())
        if match is None:
            raise ValueError("Not a data URL")
        return cls(
            payload=match.group("data"),
            media_type=match.group("mime") or default_media_type,
        )

    def to_bytes(self) -> bytes:
        """Decode the payload back to raw bytes."""
        try:
            return base64.b64decode(self.payload, validate=True)
        except binascii.Error as e:
            raise ValueError(f"Invalid base64 image payload: {e}") from e

    def to_data_url(self) -> str:
        """Return the image as an inline ``data:`` URL."""
        return f"data:{self.media_type};base64,{self.payload}"

    @property
    def extension(self) -> str:
        """File extension matching the media type."""
        subtype = self.media_type.split("/", 1)[1]
        return {"jpeg": "jpg", "svg+xml": "svg"}.get(subtype, subtype)


class UserInput(BaseModel):
    """The campaign brief for one pipeline run.

    The product image is optional at the model level so an incomplete form can
    be represented. :meth:`AdPipeline.run` rejects a missing product image
    before any stage starts.
    """

    product_image: EncodedImage | None = None
    actor_image: EncodedImage | None = None
    product_description: str = ""
    cta: str = ""
    platform: Platform = "TikTok"
    aspect_ratio: AspectRatio = "9:16"
    video_length: int = Field(default=8, ge=3, le=15)
    tone: str = "cinematic, luxury"
    generate_voiceover: bool = False


class AdConcept(BaseModel):
    """Creative brief derived from the image analysis.

    ``opening_frame_prompt`` accumulates QC fixes during the frame retry loop.
    Use :meth:`append_fix` rather than assigning to it.
    """

    ad_title: str = Field(description="A strong ad title.")
    ad_idea: str = Field(description="A clear ad idea (1-2 paragraphs).")
    ad_description: str = Field(
        description="A short, punchy ad description for social media (1-2 sentences)."
    )
    opening_frame_prompt: str = Field(
        description="A detailed, photorealistic opening frame prompt for an image model."
    )

    @field_validator("ad_title", "ad_idea", "ad_description", "opening_frame_prompt")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value

    def append_fix(self, suggestion: str) -> None:
        """Append a QC suggestion to the opening frame prompt."""
        self.opening_frame_prompt += f". IMPORTANT FIX: {suggestion}"


class ValidationResult(BaseModel):
    """QC verdict on a candidate opening frame."""

    is_valid: bool
    suggestion: str = Field(
        default="",
        description="A short explanation of what is wrong and how to fix the prompt.",
    )


class AdAssets(BaseModel):
    """Ad copy variations and hashtags for the post."""

    ad_copy_variations: list[str]
    hashtags: list[str]

    @field_validator("hashtags")
    @classmethod
    def _strip_hash_marker(cls, tags: list[str]) -> list[str]:
        return [tag.strip().lstrip("#").strip() for tag in tags]

    @model_validator(mode="after")
    def _check_counts(self) -> AdAssets:
        if len(self.ad_copy_variations) != AD_COPY_COUNT:
            raise ValueError(
                f"Expected {AD_COPY_COUNT} ad copy variations, got {len(self.ad_copy_variations)}"
            )
        if len(self.hashtags) != HASHTAG_COUNT:
            raise ValueError(f"Expected {HASHTAG_COUNT} hashtags, got {len(self.hashtags)}")
        if any(not tag for tag in self.hashtags):
            raise ValueError("Hashtags must not be empty")
        return self


class VideoJob(BaseModel):
    """Handle to an asynchronous video render.

    Terminal states are ``done`` with ``uri`` set (completed) or ``done`` with
    ``error`` set (failed). A done job with neither is reported as a failure
    by the pipeline.
    """

    handle: str
    done: bool = False
    uri: str | None = None
    error: str | None = None


class FinalOutput(BaseModel):
    """The delivered ad package. One instance per successful run."""

    model_config = ConfigDict(frozen=True)

    ad_title: str
    ad_idea: str
    ad_description: str
    platform: Platform
    aspect_ratio: AspectRatio
    cta_line: str
    tone: str
    opening_frame_prompt: str
    opening_frame_image_url: str
    video_script: str
    video_url: str
    qc_notes: str
    ad_copy_variations: tuple[str, ...]
    hashtags: tuple[str, ...]
    voiceover_audio_url: str | None = None


class ProgressUpdate(BaseModel):
    """One progress notification. Step 0 with an empty message means idle."""

    model_config = ConfigDict(frozen=True)

    step: int = Field(ge=0, le=TOTAL_STEPS)
    message: str = ""

    @classmethod
    def idle(cls) -> ProgressUpdate:
        return cls(step=0, message="")

    @property
    def is_idle(self) -> bool:
        return self.step == 0
