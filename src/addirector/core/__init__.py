"""Core functionality for ad generation.

This package contains everything that does not depend on the UI:

- **AdDirectorConfig / config**: Configuration using Pydantic Settings
- **Models**: EncodedImage, UserInput, AdConcept, FinalOutput, ...
- **CapabilityProvider**: Abstract async interface to the generative-AI service
- **GeminiProvider**: The google-genai binding of that interface
- **AdPipeline**: The eight-stage ad pipeline with frame QC retry and video polling
- **ModelCreator**: Virtual model generation and iterative editing
- **media**: Image encoding and WAV container synthesis
- **ArtifactStore**: Per-run local storage for generated media

Architecture Overview
---------------------
1. **Configuration Layer** (config.py)
2. **Domain Layer** (models.py, errors.py, prompt_builder.py)
3. **Provider Layer** (provider.py, adapters/)
4. **Orchestration Layer** (pipeline.py, model_creator.py)
5. **Support Utilities** (media.py, artifacts.py)

Usage Example
-------------
    from addirector.core import AdPipeline, ArtifactStore, GeminiProvider, config

    provider = GeminiProvider(api_key=config.get_api_key(), config=config)
    pipeline = AdPipeline(provider, ArtifactStore(config.outputs_dir), config)
    output = await pipeline.run(user_input, on_progress=print)
"""

from addirector.core.adapters import GeminiProvider
from addirector.core.artifacts import ArtifactStore
from addirector.core.config import AdDirectorConfig, config
from addirector.core.errors import (
    AdDirectorError,
    CredentialError,
    InputValidationError,
    ProviderError,
    StageError,
    VideoJobError,
)
from addirector.core.model_creator import ModelCreator, ModelSession
from addirector.core.models import (
    AdAssets,
    AdConcept,
    EncodedImage,
    FinalOutput,
    ProgressUpdate,
    UserInput,
    ValidationResult,
    VideoJob,
)
from addirector.core.pipeline import AdPipeline
from addirector.core.provider import CapabilityProvider, CredentialManager

__all__ = [
    "AdAssets",
    "AdConcept",
    "AdDirectorConfig",
    "AdDirectorError",
    "AdPipeline",
    "ArtifactStore",
    "CapabilityProvider",
    "CredentialError",
    "CredentialManager",
    "EncodedImage",
    "FinalOutput",
    "GeminiProvider",
    "InputValidationError",
    "ModelCreator",
    "ModelSession",
    "ProgressUpdate",
    "ProviderError",
    "StageError",
    "UserInput",
    "ValidationResult",
    "VideoJob",
    "config",
]
