"""Shared pytest fixtures for UGC Ad Director tests."""

import shutil
import tempfile
from io import BytesIO
from pathlib import Path
from typing import Any, Generator

import pytest
from PIL import Image

from addirector.core.artifacts import ArtifactStore
from addirector.core.config import AdDirectorConfig
from addirector.core.models import (
    AdAssets,
    AdConcept,
    EncodedImage,
    ProgressUpdate,
    UserInput,
    ValidationResult,
    VideoJob,
)
from addirector.core.provider import CapabilityProvider
from addirector.ui.models import UIState

VIDEO_URI = "https://generativelanguage.googleapis.com/v1beta/files/video-1:download"


def make_png(color: str = "red", size: tuple[int, int] = (8, 8)) -> bytes:
    """Create a tiny PNG in memory."""
    buffer = BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


def make_jpeg(color: str = "blue", size: tuple[int, int] = (8, 8)) -> bytes:
    """Create a tiny JPEG in memory."""
    buffer = BytesIO()
    Image.new("RGB", size, color).save(buffer, format="JPEG")
    return buffer.getvalue()


class FakeProvider(CapabilityProvider):
    """In-memory capability provider with scripted replies.

    Every call is recorded in ``calls`` as ``(method, details)``. Set an
    entry in ``failures`` (method name -> exception) to make that method raise.
    """

    def __init__(
        self,
        *,
        product_analysis: str = "A glass bottle of amber perfume.",
        actor_analysis: str = "A woman in her thirties with short dark hair.",
        concept: AdConcept | None = None,
        verdicts: list[ValidationResult] | None = None,
        script: str = "0.0-2.0s: Close-up of the bottle. 6.0-8.0s: CTA on screen.",
        video_states: list[VideoJob] | None = None,
        video_bytes: bytes = b"\x00\x00\x00\x18ftypmp42",
        speech: bytes = b"\x01\x00\x02\x00\x03\x00",
        assets: AdAssets | None = None,
        failures: dict[str, Exception] | None = None,
    ) -> None:
        self.product_analysis = product_analysis
        self.actor_analysis = actor_analysis
        self.concept = concept or AdConcept(
            ad_title="Golden Hour",
            ad_idea="A sunset rooftop moment built around the bottle.",
            ad_description="Bottle the glow.",
            opening_frame_prompt="Full-body shot of a woman on a rooftop at sunset holding the bottle",
        )
        self.verdicts = list(verdicts or [])
        self.script = script
        self.video_states = list(
            video_states
            if video_states is not None
            else [VideoJob(handle="operations/video-1", done=True, uri=VIDEO_URI)]
        )
        self.video_bytes = video_bytes
        self.speech = speech
        self.assets = assets or AdAssets(
            ad_copy_variations=["Glow up.", "Sunset in a bottle.", "Your signature hour."],
            hashtags=["perfume", "#goldenhour", "fragrance", "luxury", "ugc"],
        )
        self.failures = failures or {}
        self.calls: list[tuple[str, Any]] = []
        self.frame_prompts: list[str] = []
        self.frame_count = 0

    def _record(self, method: str, details: Any = None) -> None:
        self.calls.append((method, details))
        if method in self.failures:
            raise self.failures[method]

    def called(self, method: str) -> list[Any]:
        return [details for name, details in self.calls if name == method]

    def _next_frame(self) -> EncodedImage:
        self.frame_count += 1
        return EncodedImage.from_bytes(make_jpeg(), "image/jpeg")

    async def analyze_image(self, image, instruction):
        self._record("analyze_image", image)
        if len(self.called("analyze_image")) == 1:
            return self.product_analysis
        return self.actor_analysis

    async def generate_text(self, prompt, *, model=None, thinking_budget=None):
        self._record("generate_text", prompt)
        return self.script

    async def generate_structured(
        self, prompt, schema, *, images=(), model=None, thinking_budget=None
    ):
        self._record(f"generate_structured:{schema.__name__}", prompt)
        if schema is AdConcept:
            return self.concept.model_copy()
        if schema is ValidationResult:
            if self.verdicts:
                return self.verdicts.pop(0)
            return ValidationResult(is_valid=True)
        if schema is AdAssets:
            return self.assets
        raise AssertionError(f"Unexpected schema {schema}")

    async def generate_image(self, prompt, aspect_ratio):
        self._record("generate_image", (prompt, aspect_ratio))
        self.frame_prompts.append(prompt)
        return self._next_frame()

    async def compose_image(self, prompt, reference):
        self._record("compose_image", (prompt, reference))
        self.frame_prompts.append(prompt)
        return self._next_frame()

    async def edit_image(self, image, instruction):
        self._record("edit_image", (image, instruction))
        return EncodedImage.from_bytes(make_png("green"), "image/png")

    async def submit_video_job(self, prompt, image, aspect_ratio):
        self._record("submit_video_job", (prompt, aspect_ratio))
        return VideoJob(handle="operations/video-1")

    async def poll_video_job(self, job):
        self._record("poll_video_job", job.handle)
        if len(self.video_states) > 1:
            return self.video_states.pop(0)
        return self.video_states[0]

    async def download_video(self, uri):
        self._record("download_video", uri)
        return self.video_bytes

    async def synthesize_speech(self, text):
        self._record("synthesize_speech", text)
        return self.speech


class ProgressRecorder:
    """Progress callback that keeps every update."""

    def __init__(self) -> None:
        self.updates: list[ProgressUpdate] = []

    def __call__(self, update: ProgressUpdate) -> None:
        self.updates.append(update)

    @property
    def steps(self) -> list[int]:
        return [update.step for update in self.updates]

    @property
    def messages(self) -> list[str]:
        return [update.message for update in self.updates]


class SleepRecorder:
    """Async sleep replacement that returns immediately."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory

    Cleanup:
        Directory is removed after test completes
    """
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def test_config(temp_dir: Path) -> AdDirectorConfig:
    """Create a test configuration writing into a temporary directory.

    Args:
        temp_dir: Temporary directory from fixture

    Returns:
        AdDirectorConfig instance for testing
    """
    return AdDirectorConfig(
        _env_file=None,
        api_key="test-key",
        outputs_dir=temp_dir / "outputs",
        video_poll_interval=10.0,
    )


@pytest.fixture
def store(test_config: AdDirectorConfig) -> ArtifactStore:
    """Artifact store with a fixed run id."""
    return ArtifactStore(test_config.outputs_dir, run_id="test-run")


@pytest.fixture
def provider() -> FakeProvider:
    """Fake provider where every stage succeeds."""
    return FakeProvider()


@pytest.fixture
def product_image() -> EncodedImage:
    """Encoded PNG product photo."""
    return EncodedImage.from_bytes(make_png("red"), "image/png")


@pytest.fixture
def actor_image() -> EncodedImage:
    """Encoded PNG actor headshot."""
    return EncodedImage.from_bytes(make_png("white"), "image/png")


@pytest.fixture
def user_input(product_image: EncodedImage) -> UserInput:
    """Complete brief without actor or voiceover."""
    return UserInput(
        product_image=product_image,
        product_description="Amber eau de parfum with notes of vanilla",
        cta="Shop the scent today",
        platform="TikTok",
        aspect_ratio="9:16",
        video_length=8,
        tone="cinematic, luxury",
        generate_voiceover=False,
    )


@pytest.fixture
def image_file(temp_dir: Path) -> Path:
    """PNG file on disk, as Gradio hands it to handlers."""
    path = temp_dir / "product.png"
    path.write_bytes(make_png("red"))
    return path


@pytest.fixture
def ui_state() -> UIState:
    """Create empty UI state for testing.

    Returns:
        UIState instance
    """
    return UIState()
