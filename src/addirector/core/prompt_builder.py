"""Prompt templates for every provider call in the ad pipeline.

Each function returns the exact text sent to the capability provider for one
stage. Keeping them here, away from the orchestration code, lets the
pipeline read as a sequence of stages and lets the prompts be tested on
their own.

Stages and their prompts
------------------------
========================  ==========================================
Stage                     Builder
========================  ==========================================
1 image analysis          ``IMAGE_ANALYSIS_PROMPT``
2 concept                 :func:`build_concept_prompt`
3 opening frame (actor)   :func:`build_actor_frame_prompt`
3 opening frame (no actor)  the concept's ``opening_frame_prompt``
4 frame QC                ``FRAME_VALIDATION_PROMPT``
5 video script            :func:`build_video_script_prompt`
7 voiceover               :func:`build_voiceover_text`
8 ad assets               :func:`build_ad_assets_prompt`
Model Creator             ``STYLE_ANALYSIS_PROMPT``, :func:`build_model_generation_prompt`
========================  ==========================================
"""

from __future__ import annotations

from .models import AdConcept, UserInput

IMAGE_ANALYSIS_PROMPT = (
    "Analyze this image. Summarize what the product or person looks like (color, shape, "
    "material, setting, gender presentation, hair, body type, outfit, vibe) and any "
    "brand/style cues."
)

FRAME_VALIDATION_PROMPT = """\
As an ad image quality control agent, analyze the provided image.
Check for these specific issues:
- Is the framing correct (e.g., not cutting off feet/head if a full-length shot was implied)?
- Is the product clearly visible and correctly scaled?
- Are there any anatomical impossibilities (extra limbs, warped hands, broken faces)?
- Are there any obvious AI glitches (messed up text, floating objects, distorted background)?
- Does it look photorealistic?

Respond with a JSON object indicating if it's valid and a suggestion for improvement if not."""

STYLE_ANALYSIS_PROMPT = (
    "Analyze this image. Describe in detail the person's outfit, pose, the environment, "
    "lighting, and overall style. This description is for generating a new image with a "
    "different person. Do NOT describe the original person's face, head, or specific "
    "physical attributes."
)


def combine_analyses(product_analysis: str, actor_analysis: str | None = None) -> str:
    """Join the product analysis and the optional actor analysis.

    The product always comes first; the actor summary is appended after a
    labelled separator.
    """
    if actor_analysis is None:
        return product_analysis
    return f"{product_analysis}\nActor Analysis: {actor_analysis}"


def build_concept_prompt(image_analysis: str, product_description: str, tone: str) -> str:
    """Prompt for the structured ad concept."""
    return f"""\
Based on the following analysis and user inputs, generate an ad concept.
Image Analysis: {image_analysis}
Product Description: {product_description}
Tone/Style: {tone}

Generate:
1. A strong ad title.
2. A clear ad idea (1-2 paragraphs).
3. A short, punchy ad description for social media (1-2 sentences).
4. A detailed, photorealistic opening frame prompt for an image model. Include full body \
framing, camera angle, lens, lighting, environment, clothing, pose, how the product is \
shown, mood, and color palette. Ensure the prompt is optimized to prevent cut-off subjects \
or impossible poses."""


def build_actor_frame_prompt(opening_frame_prompt: str) -> str:
    """Prompt for compositing the actor's headshot into the opening scene."""
    return (
        "Create a new, photorealistic image featuring the person from the provided headshot. "
        f'Place them in the scene described here: "{opening_frame_prompt}". '
        "Ensure the final image is a high-quality, realistic photograph where the person's "
        "head and body look natural together. The face must be an exact match to the "
        "provided headshot."
    )


def build_video_script_prompt(concept: AdConcept, user_input: UserInput) -> str:
    """Prompt for the single continuous-scene video direction script.

    The opening is tied to the (possibly QC-amended) opening frame prompt so
    the video starts where the still frame left off.
    """
    length = user_input.video_length
    return f"""\
Act as a video director. Based on the following concept, write a Veo-ready prompt for a \
{length}-second ad.

Ad Title: {concept.ad_title}
Ad Idea: {concept.ad_idea}
Aspect Ratio: {user_input.aspect_ratio}
Platform: {user_input.platform}
Tone: {user_input.tone}
Video Length: {length} seconds
Call-to-Action: "{user_input.cta}"

The prompt must describe ONE continuous master scene. Break down the {length}-second \
timeline in detail (e.g., 0.0-2.0s, 2.0-4.0s, etc.). For each segment, specify camera \
movement, actor actions, product features, and any on-screen text. The description must be \
camera- and scene-focused. The opening should match the opening frame prompt: \
"{concept.opening_frame_prompt}". Crucially, the actor's face and appearance must be \
consistently maintained throughout the video, matching the provided opening frame. The CTA \
should be integrated at the end."""


def build_voiceover_text(tone: str, cta: str) -> str:
    """Instruction line spoken by the TTS model."""
    return f"Say with a {tone} tone: {cta}"


def build_ad_assets_prompt(product_description: str, cta: str, tone: str) -> str:
    """Prompt for the ad copy variations and hashtags."""
    return f"""\
Generate assets for a social media ad.
Product: {product_description}
CTA: {cta}
Tone: {tone}

Provide:
1. 3 short, punchy ad copy variations (hooks or primary text).
2. 5 relevant hashtags (do not include the # symbol).

Return a JSON object with two keys: "ad_copy_variations" (an array of strings) and \
"hashtags" (an array of strings)."""


def build_model_generation_prompt(style_description: str) -> str:
    """Prompt for the Model Creator's full-body composite."""
    return (
        "Create a new, full-body, photorealistic image featuring the person from the "
        "provided headshot. The person should wear the outfit, and be in the pose and "
        f'environment described here: "{style_description}". Ensure the final image is a '
        "high-quality, realistic photograph where the person's head and body look natural "
        "together."
    )
