"""UGC Ad Director - Short-form video ads from a product photo."""

__version__ = "0.1.0"

from addirector.core.config import AdDirectorConfig, config
from addirector.core.model_creator import ModelCreator
from addirector.core.pipeline import AdPipeline

__all__ = [
    "AdDirectorConfig",
    "AdPipeline",
    "ModelCreator",
    "config",
]
