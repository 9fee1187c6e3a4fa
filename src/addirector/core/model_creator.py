"""Virtual Model Creator.

A small two-step flow that runs independently of the ad pipeline:

1. Describe a reference "style" photo (outfit, pose, environment, lighting),
   explicitly leaving out the depicted person's face and physical traits.
2. Generate a new full-body photograph of the user, taken from their
   headshot, placed into that described scene.

The result can then be refined with free-text edit instructions. Each edit
takes the current image as its base and replaces it with the result. The
prompt history (initial generation prompt, then every successful edit
instruction) is never truncated. A failed edit leaves the session untouched.

Usage Example
-------------
    >>> creator = ModelCreator(provider, ArtifactStore(config.outputs_dir))
    >>> session = await creator.create(style_photo, headshot)
    >>> await creator.edit(session, "add sunglasses")
    >>> session.history
    ['Create a new, full-body, ...', 'add sunglasses']
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .artifacts import ArtifactStore
from .errors import InputValidationError
from .models import EncodedImage
from .prompt_builder import STYLE_ANALYSIS_PROMPT, build_model_generation_prompt
from .provider import CapabilityProvider

logger = logging.getLogger(__name__)


@dataclass
class ModelSession:
    """State of one Model Creator session.

    Attributes:
        image: The current image (base for the next edit)
        image_url: Local file path of the current image
        history: Generation prompt followed by each applied edit instruction
    """

    image: EncodedImage
    image_url: str
    history: list[str] = field(default_factory=list)

    @property
    def edit_count(self) -> int:
        return max(len(self.history) - 1, 0)


class ModelCreator:
    """Generates and iteratively edits virtual model photos.

    Args:
        provider: Capability provider used for analysis, composition and edits
        store: Artifact store that receives every produced image
    """

    def __init__(self, provider: CapabilityProvider, store: ArtifactStore) -> None:
        self.provider = provider
        self.store = store

    async def create(
        self, style_photo: EncodedImage | None, headshot: EncodedImage | None
    ) -> ModelSession:
        """Analyze the style photo and compose the headshot into its scene.

        Raises:
            InputValidationError: If either photo is missing
        """
        if style_photo is None or headshot is None:
            raise InputValidationError("Please upload both a fashion photo and a headshot.")

        logger.info("Analyzing style reference photo")
        description = await self.provider.analyze_image(style_photo, STYLE_ANALYSIS_PROMPT)

        prompt = build_model_generation_prompt(description)
        logger.info("Generating model image from headshot")
        image = await self.provider.compose_image(prompt, headshot)

        image_url = self.store.save_image(image, "model_0")
        return ModelSession(image=image, image_url=image_url, history=[prompt])

    async def edit(self, session: ModelSession, instruction: str) -> ModelSession:
        """Apply one edit instruction to the session's current image.

        On success the session's image is replaced and the instruction is
        appended to its history. On failure the exception propagates and the
        session is unchanged.

        Raises:
            InputValidationError: If the instruction is blank
        """
        instruction = instruction.strip()
        if not instruction:
            raise InputValidationError("Please describe the edit you want to make.")

        logger.info(f"Editing model image (edit #{session.edit_count + 1}): {instruction}")
        image = await self.provider.edit_image(session.image, instruction)

        session.image_url = self.store.save_image(image, f"model_{session.edit_count + 1}")
        session.image = image
        session.history.append(instruction)
        return session
