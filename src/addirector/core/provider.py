"""Abstract capability provider and credential collaborator.

The pipeline never talks to an SDK directly. It calls a
:class:`CapabilityProvider`, an abstract async interface covering every kind
of call the ad pipeline and the Model Creator need. The production binding
lives in :mod:`addirector.core.adapters.gemini`. Tests use an in-memory fake.

Capabilities
------------
- **analyze_image**: image + instruction → free text
- **generate_text**: prompt → free text
- **generate_structured**: prompt (+ images) → instance of a declared schema
- **generate_image**: prompt + aspect ratio → image (text-to-image)
- **compose_image**: prompt + reference image → image (put the referenced person in a scene)
- **edit_image**: image + instruction → image
- **submit_video_job / poll_video_job**: long-running image-to-video render
- **download_video**: finished video URI → bytes
- **synthesize_speech**: text → raw 16-bit 24 kHz mono PCM

Every method may raise. The pipeline decides which errors are fatal.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Protocol, TypeVar, runtime_checkable

from pydantic import BaseModel

from .models import AspectRatio, EncodedImage, VideoJob

logger = logging.getLogger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)


class CapabilityProvider(ABC):
    """Async interface to the remote generative-AI service.

    Attributes
    ----------
    name : str
        Human-readable provider name used in logs
    """

    name: str = "Base Provider"

    @abstractmethod
    async def analyze_image(self, image: EncodedImage, instruction: str) -> str:
        """Describe an image following the instruction."""

    @abstractmethod
    async def generate_text(
        self, prompt: str, *, model: str | None = None, thinking_budget: int | None = None
    ) -> str:
        """Generate free text from a prompt."""

    @abstractmethod
    async def generate_structured(
        self,
        prompt: str,
        schema: type[SchemaT],
        *,
        images: tuple[EncodedImage, ...] = (),
        model: str | None = None,
        thinking_budget: int | None = None,
    ) -> SchemaT:
        """Generate JSON matching ``schema`` and return it validated.

        Raises
        ------
        ProviderError
            If the reply is empty or does not validate against the schema
        """

    @abstractmethod
    async def generate_image(self, prompt: str, aspect_ratio: AspectRatio) -> EncodedImage:
        """Generate an image from text alone."""

    @abstractmethod
    async def compose_image(self, prompt: str, reference: EncodedImage) -> EncodedImage:
        """Generate an image featuring the person in ``reference``."""

    @abstractmethod
    async def edit_image(self, image: EncodedImage, instruction: str) -> EncodedImage:
        """Apply a free-text edit instruction to an image."""

    @abstractmethod
    async def submit_video_job(
        self, prompt: str, image: EncodedImage, aspect_ratio: AspectRatio
    ) -> VideoJob:
        """Start an image-to-video render and return its handle."""

    @abstractmethod
    async def poll_video_job(self, job: VideoJob) -> VideoJob:
        """Fetch the current status of a video render."""

    @abstractmethod
    async def download_video(self, uri: str) -> bytes:
        """Download a finished video."""

    @abstractmethod
    async def synthesize_speech(self, text: str) -> bytes:
        """Speak the text and return raw PCM samples."""


@runtime_checkable
class CredentialManager(Protocol):
    """Host-side manager of the API credential.

    The pipeline receives an optional instance of this instead of probing the
    environment for a key selector.
    """

    async def has_active_credential(self) -> bool: ...

    async def prompt_for_credential(self) -> None: ...
