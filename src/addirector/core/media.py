"""Media codec helpers.

Image encoding
--------------
Uploaded files are turned into :class:`~addirector.core.models.EncodedImage`
records (base64 text plus media type). When the caller does not know the
media type it is sniffed from the bytes with Pillow.

Audio container synthesis
-------------------------
The speech model returns headerless 16-bit little-endian PCM. Browsers and
Gradio's audio player need a container, so a canonical 44-byte RIFF/WAVE
header is synthesized and prepended:

    offset  size  field
    0       4     "RIFF"
    4       4     36 + data length
    8       4     "WAVE"
    12      4     "fmt "
    16      4     16 (fmt chunk size)
    20      2     1 (PCM format tag)
    22      2     channel count
    24      4     sample rate
    28      4     byte rate
    32      2     block align
    34      2     bits per sample
    36      4     "data"
    40      4     data length

All integers are little-endian.
"""

import logging
import mimetypes
import struct
from io import BytesIO
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from .models import EncodedImage

logger = logging.getLogger(__name__)

WAV_HEADER_SIZE = 44
PCM_FORMAT_TAG = 1

SPEECH_SAMPLE_RATE = 24000
SPEECH_CHANNELS = 1
SPEECH_BITS_PER_SAMPLE = 16


def sniff_image_media_type(data: bytes) -> str:
    """Detect the media type of raw image bytes.

    Args:
        data: Raw image bytes

    Returns:
        MIME type such as ``image/png``

    Raises:
        ValueError: If the bytes are not a recognised image
    """
    try:
        with Image.open(BytesIO(data)) as img:
            image_format = img.format
    except UnidentifiedImageError as e:
        raise ValueError("Unrecognised image data") from e

    media_type = Image.MIME.get(image_format or "")
    if not media_type:
        raise ValueError(f"Unsupported image format: {image_format}")
    return media_type


def encode_image_bytes(data: bytes, media_type: str | None = None) -> EncodedImage:
    """Encode raw image bytes.

    Args:
        data: Raw image bytes
        media_type: Known MIME type; sniffed from the bytes when omitted

    Returns:
        EncodedImage with a base64 payload
    """
    if not data:
        raise ValueError("Image data is empty")
    return EncodedImage.from_bytes(data, media_type or sniff_image_media_type(data))


def encode_image_file(path: str | Path) -> EncodedImage:
    """Read an image file and encode it.

    The media type is guessed from the file extension first, then sniffed.
    I/O errors propagate to the caller.

    Args:
        path: Path to the uploaded image

    Returns:
        EncodedImage for the file contents
    """
    path = Path(path)
    data = path.read_bytes()
    guessed, _ = mimetypes.guess_type(path.name)
    media_type = guessed if guessed and guessed.startswith("image/") else None
    logger.debug(f"Encoding {path.name} ({len(data)} bytes, {media_type or 'sniffed type'})")
    return encode_image_bytes(data, media_type)


def decode_data_url(url: str) -> EncodedImage:
    """Turn a ``data:`` URL back into an EncodedImage (defaults to PNG)."""
    return EncodedImage.from_data_url(url)


def wav_header(data_length: int, sample_rate: int, num_channels: int, bits_per_sample: int) -> bytes:
    """Build the 44-byte canonical WAV header for a PCM payload.

    Args:
        data_length: Size of the PCM payload in bytes
        sample_rate: Samples per second
        num_channels: Channel count
        bits_per_sample: Bits per sample (8, 16, ...)

    Returns:
        The header bytes
    """
    block_align = num_channels * bits_per_sample // 8
    byte_rate = sample_rate * block_align
    return struct.pack(
        "<4sI4s4sIHHIIHH4sI",
        b"RIFF",
        36 + data_length,
        b"WAVE",
        b"fmt ",
        16,
        PCM_FORMAT_TAG,
        num_channels,
        sample_rate,
        byte_rate,
        block_align,
        bits_per_sample,
        b"data",
        data_length,
    )


def pcm_to_wav(
    samples: bytes,
    sample_rate: int = SPEECH_SAMPLE_RATE,
    num_channels: int = SPEECH_CHANNELS,
    bits_per_sample: int = SPEECH_BITS_PER_SAMPLE,
) -> bytes:
    """Wrap raw PCM samples in a WAV container.

    Args:
        samples: Raw little-endian PCM bytes
        sample_rate: Samples per second (24000 for the speech model)
        num_channels: Channel count (mono for the speech model)
        bits_per_sample: Bits per sample (16 for the speech model)

    Returns:
        ``44 + len(samples)`` bytes of WAV data
    """
    return wav_header(len(samples), sample_rate, num_channels, bits_per_sample) + samples
