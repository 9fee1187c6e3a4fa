"""UI event handlers organized by feature area.

- generation: Ad pipeline runs, progress streaming and the API key box
- model_creator: Virtual Model Creator generation and edits
"""

from .generation import (
    credential_banner_on_load,
    format_hashtags,
    format_progress,
    format_result,
    generate_ad,
    use_api_key,
)
from .model_creator import (
    create_model,
    edit_model,
    format_history,
)

__all__ = [
    # Generation handlers
    "credential_banner_on_load",
    "format_hashtags",
    "format_progress",
    "format_result",
    "generate_ad",
    "use_api_key",
    # Model Creator handlers
    "create_model",
    "edit_model",
    "format_history",
]
