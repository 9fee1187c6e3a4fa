"""Validation utilities for UGC Ad Director UI inputs."""

import logging
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from addirector.core.media import encode_image_file
from addirector.core.models import EncodedImage, UserInput

from .models import MAX_VIDEO_LENGTH, MIN_VIDEO_LENGTH

logger = logging.getLogger(__name__)


class ValidationError(Exception):
    """User-friendly validation error.

    This exception is raised when user input fails validation.
    The message is intended to be displayed directly to the user.
    """

    pass


def load_image(path: str | None, label: str, required: bool = False) -> EncodedImage | None:
    """Encode an uploaded image file.

    Args:
        path: File path provided by the Gradio image component
        label: Human-readable name of the field for error messages
        required: Whether a missing file is an error

    Returns:
        EncodedImage, or None if no file was uploaded and it is optional

    Raises:
        ValidationError: If the file is required but missing, or unreadable
    """
    if not path:
        if required:
            raise ValidationError(f"Please upload a {label}.")
        return None

    try:
        return encode_image_file(Path(path))
    except (OSError, ValueError) as e:
        logger.warning(f"Could not read {label} at {path}: {e}")
        raise ValidationError(f"Could not read the {label}: {e}") from e


def validate_text_field(value: str | None, label: str, max_length: int = 5000) -> str:
    """Check that a required text field is filled in and not absurdly long.

    Returns:
        The stripped value

    Raises:
        ValidationError: If the field is empty or too long
    """
    value = (value or "").strip()
    if not value:
        raise ValidationError(f"Please provide a {label}.")
    if len(value) > max_length:
        raise ValidationError(
            f"The {label} is too long ({len(value)} characters). Maximum is {max_length} characters."
        )
    return value


def validate_video_length(video_length: float | int | None) -> int:
    """Validate the requested video length in seconds."""
    if video_length is None:
        raise ValidationError("Please choose a video length.")
    length = int(video_length)
    if length < MIN_VIDEO_LENGTH or length > MAX_VIDEO_LENGTH:
        raise ValidationError(
            f"Video length must be {MIN_VIDEO_LENGTH}-{MAX_VIDEO_LENGTH} seconds, got {length}"
        )
    return length


def build_user_input(
    product_image: str | None,
    actor_image: str | None,
    product_description: str | None,
    cta: str | None,
    platform: str,
    aspect_ratio: str,
    video_length: float | int | None,
    tone: str | None,
    generate_voiceover: bool,
) -> UserInput:
    """Validate the ad form and convert it to a UserInput.

    The product image is checked first so the most common mistake gets
    reported before anything else.

    Raises:
        ValidationError: If any field is missing or invalid
    """
    product = load_image(product_image, "product image", required=True)
    actor = load_image(actor_image, "actor image")

    try:
        return UserInput(
            product_image=product,
            actor_image=actor,
            product_description=validate_text_field(product_description, "product description"),
            cta=validate_text_field(cta, "call-to-action", max_length=500),
            platform=platform,
            aspect_ratio=aspect_ratio,
            video_length=validate_video_length(video_length),
            tone=validate_text_field(tone, "tone / style", max_length=500),
            generate_voiceover=bool(generate_voiceover),
        )
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"])
        raise ValidationError(f"Invalid {field}: {first['msg']}") from e
