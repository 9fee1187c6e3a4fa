"""Ad generation pipeline.

:class:`AdPipeline` turns a :class:`~addirector.core.models.UserInput` into a
:class:`~addirector.core.models.FinalOutput` by running eight stages in strict
order against a :class:`~addirector.core.provider.CapabilityProvider`:

1. Image analysis (product, then actor if supplied)
2. Concept generation (structured)
3. Opening frame generation  ┐ up to 3 attempts; failed QC suggestions
4. Opening frame validation  ┘ are appended to the frame prompt
5. Video script
6. Video render (submitted, then polled at a fixed interval)
7. Voiceover (only when requested)
8. Ad copy and hashtags (structured)

Failure Semantics
-----------------
A run is all-or-nothing. The first failing stage aborts the run and its
message is raised as a :class:`~addirector.core.errors.StageError`, except
that credential rejections become
:class:`~addirector.core.errors.CredentialError`. The only tolerated failure
is QC: after three rejected frames the last one is used and the QC notes say
so.

Progress
--------
``on_progress`` is called synchronously with a :class:`ProgressUpdate` for
every stage and every video poll tick. Step numbers never decrease within a
run, and the last update of every run (success or failure) is the idle
update ``ProgressUpdate(step=0, message="")``.

Usage Example
-------------
    >>> pipeline = AdPipeline(provider, ArtifactStore(config.outputs_dir))
    >>> output = await pipeline.run(user_input, on_progress=print)
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from .artifacts import ArtifactStore
from .config import AdDirectorConfig
from .config import config as default_config
from .errors import InputValidationError, StageError, VideoJobError, classify_provider_error
from .media import pcm_to_wav
from .models import (
    TOTAL_STEPS,
    AdAssets,
    AdConcept,
    EncodedImage,
    FinalOutput,
    ProgressUpdate,
    UserInput,
    ValidationResult,
    VideoJob,
)
from .prompt_builder import (
    FRAME_VALIDATION_PROMPT,
    IMAGE_ANALYSIS_PROMPT,
    build_actor_frame_prompt,
    build_ad_assets_prompt,
    build_concept_prompt,
    build_video_script_prompt,
    build_voiceover_text,
    combine_analyses,
)
from .provider import CapabilityProvider, CredentialManager

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ProgressUpdate], None]
SleepFunction = Callable[[float], Awaitable[None]]

MAX_FRAME_ATTEMPTS = 3

QC_FIRST_ATTEMPT_NOTE = "QC passed on first attempt."


def validate_user_input(user_input: UserInput) -> EncodedImage:
    """Reject input that cannot start a run.

    Returns:
        The product image

    Raises:
        InputValidationError: If the product image is missing
    """
    if user_input.product_image is None:
        raise InputValidationError("Please upload a product image.")
    return user_input.product_image


class ProgressReporter:
    """Forwards progress to the caller while keeping step numbers non-decreasing.

    The frame retry loop alternates between generation (3) and validation (4).
    A retry is reported at the current step instead of going back to 3.
    """

    def __init__(self, callback: ProgressCallback | None) -> None:
        self._callback = callback
        self.step = 0

    def __call__(self, step: int, message: str) -> None:
        self.step = max(self.step, step)
        logger.info(f"[{self.step}/{TOTAL_STEPS}] {message}")
        if self._callback is not None:
            self._callback(ProgressUpdate(step=self.step, message=message))

    def reset(self) -> None:
        self.step = 0
        if self._callback is not None:
            self._callback(ProgressUpdate.idle())


@dataclass
class FrameResult:
    """Outcome of the opening frame retry loop."""

    image: EncodedImage
    qc_notes: str
    attempts: int
    passed: bool


class AdPipeline:
    """Runs the eight-stage ad generation pipeline.

    A pipeline object holds only collaborators and can run any number of
    times. All per-run state lives in local variables of :meth:`run`, and
    every run writes into its own directory obtained from
    :meth:`ArtifactStore.for_run`.

    Attributes
    ----------
    provider : CapabilityProvider
        Remote capability provider
    store : ArtifactStore
        Output location; each run writes under ``store.root``
    config : AdDirectorConfig
        Model names and polling settings
    credential_manager : CredentialManager | None
        Optional host credential collaborator
    """

    def __init__(
        self,
        provider: CapabilityProvider,
        store: ArtifactStore,
        config: AdDirectorConfig | None = None,
        credential_manager: CredentialManager | None = None,
        sleep: SleepFunction = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.provider = provider
        self.store = store
        self.config = config or default_config
        self.credential_manager = credential_manager
        self._sleep = sleep
        self._clock = clock

    async def run(
        self, user_input: UserInput, on_progress: ProgressCallback | None = None
    ) -> FinalOutput:
        """Execute every stage and assemble the final ad package.

        Args:
            user_input: Campaign brief
            on_progress: Synchronous progress callback

        Returns:
            The finished FinalOutput

        Raises:
            InputValidationError: Before any stage, if the input is incomplete
            CredentialError: If the provider rejects the API credential
            StageError: If any stage fails
        """
        product_image = validate_user_input(user_input)
        store = self.store.for_run()
        report = ProgressReporter(on_progress)
        logger.info(
            f"Starting ad run ({user_input.platform}, {user_input.aspect_ratio}, "
            f"{user_input.video_length}s, actor={'yes' if user_input.actor_image else 'no'}, "
            f"voiceover={'yes' if user_input.generate_voiceover else 'no'})"
        )

        try:
            await self._ensure_credential()
            output = await self._run_stages(user_input, product_image, store, report)
        except Exception as e:
            logger.error(f"Ad run failed: {e}")
            raise
        finally:
            report.reset()

        logger.info(f"Ad run complete: {output.ad_title!r} ({store.run_dir})")
        return output

    async def _run_stages(
        self,
        user_input: UserInput,
        product_image: EncodedImage,
        store: ArtifactStore,
        report: ProgressReporter,
    ) -> FinalOutput:
        # Stage 1
        report(1, "Analyzing images...")
        with self._stage("image_analysis"):
            analysis = await self._analyze_images(product_image, user_input.actor_image)

        # Stage 2
        report(2, "Generating ad concept...")
        with self._stage("concept"):
            concept = await self.provider.generate_structured(
                build_concept_prompt(analysis, user_input.product_description, user_input.tone),
                AdConcept,
                model=self.config.concept_model,
                thinking_budget=self.config.concept_thinking_budget,
            )

        # Stages 3 and 4
        frame = await self._generate_opening_frame(concept, user_input, report)
        frame_url = store.save_image(frame.image, "opening_frame")

        # Stage 5
        report(5, "Writing video script...")
        with self._stage("script"):
            script = await self.provider.generate_text(
                build_video_script_prompt(concept, user_input),
                model=self.config.script_model,
                thinking_budget=self.config.script_thinking_budget,
            )

        # Stage 6
        report(6, "Generating video (this may take a few minutes)...")
        with self._stage("video"):
            video_url = await self._render_video(script, frame.image, user_input, store, report)

        # Stage 7
        voiceover_url = None
        if user_input.generate_voiceover:
            report(7, "Generating voiceover...")
            with self._stage("voiceover"):
                samples = await self.provider.synthesize_speech(
                    build_voiceover_text(user_input.tone, user_input.cta)
                )
                voiceover_url = store.save_bytes(pcm_to_wav(samples), "voiceover.wav")

        # Stage 8
        report(8, "Generating ad assets...")
        with self._stage("ad_assets"):
            assets = await self.provider.generate_structured(
                build_ad_assets_prompt(
                    user_input.product_description, user_input.cta, user_input.tone
                ),
                AdAssets,
                model=self.config.assets_model,
            )

        output = FinalOutput(
            ad_title=concept.ad_title,
            ad_idea=concept.ad_idea,
            ad_description=concept.ad_description,
            platform=user_input.platform,
            aspect_ratio=user_input.aspect_ratio,
            cta_line=user_input.cta,
            tone=user_input.tone,
            opening_frame_prompt=concept.opening_frame_prompt,
            opening_frame_image_url=frame_url,
            video_script=script,
            video_url=video_url,
            qc_notes=frame.qc_notes,
            ad_copy_variations=tuple(assets.ad_copy_variations),
            hashtags=tuple(assets.hashtags),
            voiceover_audio_url=voiceover_url,
        )
        store.save_metadata(output)
        return output

    async def _ensure_credential(self) -> None:
        if self.credential_manager is None:
            return
        if not await self.credential_manager.has_active_credential():
            logger.info("No active credential, asking the host to provide one")
            await self.credential_manager.prompt_for_credential()

    async def _analyze_images(
        self, product_image: EncodedImage, actor_image: EncodedImage | None
    ) -> str:
        product_analysis = await self.provider.analyze_image(product_image, IMAGE_ANALYSIS_PROMPT)
        actor_analysis = None
        if actor_image is not None:
            actor_analysis = await self.provider.analyze_image(actor_image, IMAGE_ANALYSIS_PROMPT)
        return combine_analyses(product_analysis, actor_analysis)

    async def _generate_opening_frame(
        self, concept: AdConcept, user_input: UserInput, report: ProgressReporter
    ) -> FrameResult:
        """Generate and validate the opening frame, retrying on failed QC.

        Each rejected attempt appends the QC suggestion to
        ``concept.opening_frame_prompt`` before the next attempt. After the
        last attempt the frame is kept even if it failed QC.
        """
        image: EncodedImage | None = None
        qc_notes = QC_FIRST_ATTEMPT_NOTE
        passed = False
        attempt = 0

        for attempt in range(1, MAX_FRAME_ATTEMPTS + 1):
            report(3, f"Generating opening frame (Attempt {attempt}/{MAX_FRAME_ATTEMPTS})...")
            with self._stage("opening_frame"):
                if user_input.actor_image is not None:
                    image = await self.provider.compose_image(
                        build_actor_frame_prompt(concept.opening_frame_prompt),
                        user_input.actor_image,
                    )
                else:
                    image = await self.provider.generate_image(
                        concept.opening_frame_prompt, user_input.aspect_ratio
                    )

            report(4, f"Validating frame (Attempt {attempt}/{MAX_FRAME_ATTEMPTS})...")
            with self._stage("frame_validation"):
                verdict = await self.provider.generate_structured(
                    FRAME_VALIDATION_PROMPT,
                    ValidationResult,
                    images=(image,),
                    model=self.config.validation_model,
                )

            if verdict.is_valid:
                passed = True
                if attempt > 1:
                    qc_notes = f"QC passed on attempt {attempt}."
                logger.info(f"Opening frame passed QC on attempt {attempt}")
                break

            logger.warning(f"Opening frame failed QC on attempt {attempt}: {verdict.suggestion}")
            if attempt == MAX_FRAME_ATTEMPTS:
                qc_notes = (
                    f"QC failed after {MAX_FRAME_ATTEMPTS} attempts. Using best available image. "
                    f"Final issue: {verdict.suggestion}"
                )
            else:
                qc_notes = f"Attempt {attempt} failed QC: {verdict.suggestion}. Refining prompt."
                concept.append_fix(verdict.suggestion)

        if image is None:
            raise StageError("opening_frame", "Failed to generate a valid opening frame.")
        return FrameResult(image=image, qc_notes=qc_notes, attempts=attempt, passed=passed)

    async def _render_video(
        self,
        script: str,
        opening_frame: EncodedImage,
        user_input: UserInput,
        store: ArtifactStore,
        report: ProgressReporter,
    ) -> str:
        report(6, "Starting video generation with Veo...")
        job = await self.provider.submit_video_job(script, opening_frame, user_input.aspect_ratio)

        report(6, "Video processing initiated. This can take several minutes. Polling for status...")
        job = await self._wait_for_video(job, report)

        if job.error:
            raise VideoJobError(f"Video generation failed: {job.error}")
        if not job.uri:
            raise VideoJobError("Video generation completed, but no video URI was found.")

        report(6, "Video generated successfully! Fetching video data...")
        data = await self.provider.download_video(job.uri)
        return store.save_bytes(data, "video.mp4")

    async def _wait_for_video(self, job: VideoJob, report: ProgressReporter) -> VideoJob:
        """Poll the video job at a fixed interval until it reports done."""
        interval = self.config.video_poll_interval
        timeout = self.config.video_poll_timeout
        started = self._clock()
        poll_count = 0

        while not job.done:
            if timeout is not None and self._clock() - started >= timeout:
                raise VideoJobError(f"Video generation timed out after {timeout:g} seconds.")
            await self._sleep(interval)
            poll_count += 1
            report(6, f"Polling for video status (Attempt #{poll_count})...")
            job = await self.provider.poll_video_job(job)

        logger.info(f"Video job {job.handle} finished after {poll_count} polls")
        return job

    @contextmanager
    def _stage(self, name: str) -> Iterator[None]:
        """Convert any failure inside a stage into the error the run reports."""
        try:
            yield
        except Exception as e:
            raise classify_provider_error(e, name) from e
