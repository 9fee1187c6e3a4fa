"""Gemini capability provider.

This module binds :class:`~addirector.core.provider.CapabilityProvider` to the
Google Gen AI SDK (``google-genai``). Every call goes through the SDK's async
surface (``client.aio``) so the Gradio event loop is never blocked.

Model Usage
-----------
=====================  ===============================  ==========================
Capability             SDK call                         Config field
=====================  ===============================  ==========================
analyze_image          models.generate_content          analysis_model
generate_text          models.generate_content          script_model (default)
generate_structured    models.generate_content (JSON)   per call
generate_image         models.generate_images           image_model
compose_image          models.generate_content (IMAGE)  image_edit_model
edit_image             models.generate_content (IMAGE)  image_edit_model
submit_video_job       models.generate_videos           video_model
poll_video_job         operations.get                   -
download_video         httpx GET with API key header    -
synthesize_speech      models.generate_content (AUDIO)  speech_model / speech_voice
=====================  ===============================  ==========================

Usage Example
-------------
    >>> from addirector.core.adapters.gemini import GeminiProvider
    >>> from addirector.core.config import config
    >>>
    >>> provider = GeminiProvider(api_key="...", config=config)
    >>> text = await provider.analyze_image(image, "Describe this product.")
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from google import genai
from google.genai import types
from pydantic import ValidationError

from ..config import AdDirectorConfig
from ..config import config as default_config
from ..errors import ProviderError
from ..models import AspectRatio, EncodedImage, VideoJob
from ..provider import CapabilityProvider, SchemaT

logger = logging.getLogger(__name__)


def _image_part(image: EncodedImage) -> types.Part:
    return types.Part.from_bytes(data=image.to_bytes(), mime_type=image.media_type)


def _first_parts(response: Any) -> tuple[list[Any] | None, Any]:
    """Return (parts, finish_reason) of the first candidate."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return None, None
    candidate = candidates[0]
    content = getattr(candidate, "content", None)
    parts = getattr(content, "parts", None) if content is not None else None
    return parts or None, getattr(candidate, "finish_reason", None)


def _finish_reason_name(reason: Any) -> str:
    if reason is None:
        return "Not specified"
    return getattr(reason, "name", None) or str(reason)


class GeminiProvider(CapabilityProvider):
    """Capability provider backed by Gemini, Imagen and Veo.

    A new provider should be created per run so the most recently entered
    API key is used.

    Attributes
    ----------
    config : AdDirectorConfig
        Source of model names, voice and timeouts
    client : genai.Client
        SDK client (injectable for tests)
    """

    name = "Gemini"

    def __init__(
        self,
        api_key: str,
        config: AdDirectorConfig | None = None,
        client: genai.Client | None = None,
    ) -> None:
        """Initialize the provider.

        Args:
            api_key: Gemini API key
            config: Configuration (defaults to the global instance)
            client: Pre-built SDK client; created from ``api_key`` when omitted
        """
        if not api_key:
            raise ValueError("A Gemini API key is required")
        self.config = config or default_config
        self._api_key = api_key
        self.client = client or genai.Client(api_key=api_key)

    # ------------------------------------------------------------------
    # Text
    # ------------------------------------------------------------------

    async def analyze_image(self, image: EncodedImage, instruction: str) -> str:
        response = await self.client.aio.models.generate_content(
            model=self.config.analysis_model,
            contents=[_image_part(image), instruction],
        )
        text = response.text
        if not text:
            raise ProviderError("Image analysis returned no text.")
        return text

    async def generate_text(
        self, prompt: str, *, model: str | None = None, thinking_budget: int | None = None
    ) -> str:
        response = await self.client.aio.models.generate_content(
            model=model or self.config.script_model,
            contents=prompt,
            config=self._content_config(thinking_budget=thinking_budget),
        )
        text = response.text
        if not text:
            raise ProviderError("Text generation returned no text.")
        return text

    async def generate_structured(
        self,
        prompt: str,
        schema: type[SchemaT],
        *,
        images: tuple[EncodedImage, ...] = (),
        model: str | None = None,
        thinking_budget: int | None = None,
    ) -> SchemaT:
        contents: list[Any] = [_image_part(image) for image in images]
        contents.append(prompt)

        response = await self.client.aio.models.generate_content(
            model=model or self.config.analysis_model,
            contents=contents,
            config=self._content_config(
                thinking_budget=thinking_budget,
                response_mime_type="application/json",
                response_schema=schema,
            ),
        )
        text = response.text
        if not text:
            raise ProviderError(f"{schema.__name__} response was empty.")
        try:
            return schema.model_validate_json(text)
        except ValidationError as e:
            logger.error(f"{schema.__name__} response failed schema validation: {text!r}")
            raise ProviderError(f"Malformed {schema.__name__} response: {e}") from e

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------

    async def generate_image(self, prompt: str, aspect_ratio: AspectRatio) -> EncodedImage:
        response = await self.client.aio.models.generate_images(
            model=self.config.image_model,
            prompt=prompt,
            config=types.GenerateImagesConfig(
                number_of_images=1,
                output_mime_type="image/jpeg",
                aspect_ratio=aspect_ratio,
            ),
        )
        generated = getattr(response, "generated_images", None) or []
        image = generated[0].image if generated else None
        if image is None or not image.image_bytes:
            raise ProviderError("Image generation failed to produce an image.")
        return EncodedImage.from_bytes(image.image_bytes, image.mime_type or "image/jpeg")

    async def compose_image(self, prompt: str, reference: EncodedImage) -> EncodedImage:
        return await self._image_from_parts(
            [prompt, _image_part(reference)],
            failure="Image generation with reference person failed",
        )

    async def edit_image(self, image: EncodedImage, instruction: str) -> EncodedImage:
        return await self._image_from_parts(
            [_image_part(image), instruction],
            failure="Image editing failed",
        )

    async def _image_from_parts(self, contents: list[Any], failure: str) -> EncodedImage:
        response = await self.client.aio.models.generate_content(
            model=self.config.image_edit_model,
            contents=contents,
            config=types.GenerateContentConfig(response_modalities=["IMAGE"]),
        )
        parts, finish_reason = _first_parts(response)
        if parts is None:
            reason = _finish_reason_name(finish_reason)
            logger.error(f"{failure}; finish reason: {reason}")
            raise ProviderError(
                f"{failure}. The request may have been blocked due to safety settings "
                f"(Finish Reason: {reason}). Please try a different image or prompt."
            )

        for part in parts:
            inline = getattr(part, "inline_data", None)
            if inline is not None and inline.data:
                return EncodedImage.from_bytes(inline.data, inline.mime_type or "image/png")

        raise ProviderError(f"{failure}: No image data found in the response.")

    # ------------------------------------------------------------------
    # Video
    # ------------------------------------------------------------------

    async def submit_video_job(
        self, prompt: str, image: EncodedImage, aspect_ratio: AspectRatio
    ) -> VideoJob:
        operation = await self.client.aio.models.generate_videos(
            model=self.config.video_model,
            prompt=prompt,
            image=types.Image(image_bytes=image.to_bytes(), mime_type=image.media_type),
            config=types.GenerateVideosConfig(
                number_of_videos=1,
                resolution=self.config.video_resolution,
                aspect_ratio=aspect_ratio,
            ),
        )
        logger.info(f"Submitted video job {operation.name}")
        return self._to_video_job(operation)

    async def poll_video_job(self, job: VideoJob) -> VideoJob:
        operation = await self.client.aio.operations.get(
            types.GenerateVideosOperation(name=job.handle)
        )
        return self._to_video_job(operation)

    async def download_video(self, uri: str) -> bytes:
        async with httpx.AsyncClient(
            timeout=self.config.download_timeout, follow_redirects=True
        ) as http:
            response = await http.get(uri, headers={"x-goog-api-key": self._api_key})
        if response.is_error:
            raise ProviderError(
                f"Failed to download video. Status: {response.status_code} {response.reason_phrase}"
            )
        return response.content

    @staticmethod
    def _to_video_job(operation: Any) -> VideoJob:
        error = getattr(operation, "error", None)
        error_message = None
        if error:
            error_message = (
                error.get("message") if isinstance(error, dict) else str(error)
            ) or "Unknown error"

        uri = None
        response = getattr(operation, "response", None)
        videos = getattr(response, "generated_videos", None) or []
        if videos and videos[0].video is not None:
            uri = videos[0].video.uri

        return VideoJob(
            handle=operation.name or "",
            done=bool(operation.done),
            uri=uri,
            error=error_message,
        )

    # ------------------------------------------------------------------
    # Speech
    # ------------------------------------------------------------------

    async def synthesize_speech(self, text: str) -> bytes:
        response = await self.client.aio.models.generate_content(
            model=self.config.speech_model,
            contents=text,
            config=types.GenerateContentConfig(
                response_modalities=["AUDIO"],
                speech_config=types.SpeechConfig(
                    voice_config=types.VoiceConfig(
                        prebuilt_voice_config=types.PrebuiltVoiceConfig(
                            voice_name=self.config.speech_voice,
                        )
                    )
                ),
            ),
        )
        parts, _ = _first_parts(response)
        inline = getattr(parts[0], "inline_data", None) if parts else None
        if inline is None or not inline.data:
            raise ProviderError("TTS generation failed.")
        return inline.data

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _content_config(
        thinking_budget: int | None = None, **kwargs: Any
    ) -> types.GenerateContentConfig | None:
        """Build a GenerateContentConfig, omitting the thinking config when unset."""
        if thinking_budget:
            kwargs["thinking_config"] = types.ThinkingConfig(thinking_budget=thinking_budget)
        if not kwargs:
            return None
        return types.GenerateContentConfig(**kwargs)
