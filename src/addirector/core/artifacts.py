"""Local storage for generated media.

Every run gets its own directory under ``outputs_dir``. Generated frames,
videos and voiceovers are written there and referenced by file path, which
Gradio serves directly to the browser. Nothing is read back between sessions.

Layout::

    outputs/
        20250101-120000-3f2a9c1e/
            opening_frame.jpg
            video.mp4
            voiceover.wav
            ad.json
"""

from __future__ import annotations

import json
import logging
import uuid
from datetime import datetime
from pathlib import Path

from pydantic import BaseModel

from .models import EncodedImage

logger = logging.getLogger(__name__)


class ArtifactStore:
    """Writes the media of one run into a dedicated directory.

    The directory is created lazily on the first write so runs that fail
    before producing anything leave no trace.

    Args:
        root: Parent directory (normally ``config.outputs_dir``)
        run_id: Directory name; generated from the timestamp when omitted
    """

    def __init__(self, root: Path, run_id: str | None = None) -> None:
        self.root = Path(root)
        self.run_id = run_id or f"{datetime.now():%Y%m%d-%H%M%S}-{uuid.uuid4().hex[:8]}"

    @property
    def run_dir(self) -> Path:
        return self.root / self.run_id

    def for_run(self) -> ArtifactStore:
        """Return a store for a new run under the same root."""
        return ArtifactStore(self.root)

    def save_bytes(self, data: bytes, filename: str) -> str:
        """Write raw bytes and return the file path as a string."""
        self.run_dir.mkdir(parents=True, exist_ok=True)
        path = self.run_dir / filename
        path.write_bytes(data)
        logger.info(f"Saved {filename} ({len(data)} bytes) to {self.run_dir}")
        return str(path)

    def save_image(self, image: EncodedImage, stem: str) -> str:
        """Write an encoded image using the extension of its media type."""
        return self.save_bytes(image.to_bytes(), f"{stem}.{image.extension}")

    def save_metadata(self, record: BaseModel, filename: str = "ad.json") -> str:
        """Export a model as pretty-printed JSON next to the media."""
        self.run_dir.mkdir(parents=True, exist_ok=True)
        path = self.run_dir / filename
        with open(path, "w", encoding="utf-8") as f:
            json.dump(record.model_dump(mode="json"), f, indent=2, ensure_ascii=False)
        return str(path)
