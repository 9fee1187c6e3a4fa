"""Gradio UI for UGC Ad Director."""

import logging

import gradio as gr

from addirector.core.config import config

from .handlers import (
    create_model,
    credential_banner_on_load,
    edit_model,
    generate_ad,
    use_api_key,
)
from .models import (
    ASPECT_RATIOS,
    CREDENTIAL_WARNING,
    DEFAULT_ASPECT_RATIO,
    DEFAULT_PLATFORM,
    DEFAULT_TONE,
    DEFAULT_VIDEO_LENGTH,
    MAX_VIDEO_LENGTH,
    MIN_VIDEO_LENGTH,
    PLATFORMS,
    UIState,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def create_ui() -> tuple[gr.Blocks, str]:
    """Create the Gradio UI.

    Returns:
        Tuple of (Gradio Blocks app, custom CSS string)
    """
    custom_css = """
    .error-banner {
        border: 1px solid #b91c1c;
        border-radius: 6px;
        padding: 12px;
    }
    .credential-banner {
        border: 1px solid #d97706;
        border-radius: 6px;
        padding: 12px;
    }
    """

    app = gr.Blocks(title="UGC Ad Director")

    with app:
        # Session state - one instance per user
        ui_state = gr.State(UIState())

        gr.Markdown(
            """
            # UGC Ad Director
            ### Turn a product photo into a short-form video ad
            """
        )

        with gr.Row():
            api_key_input = gr.Textbox(
                label="Google AI Studio API Key",
                placeholder="Leave empty to use the configured key",
                type="password",
                scale=4,
            )
            use_key_btn = gr.Button("Use Key", scale=1)
        key_status = gr.Markdown()
        credential_banner = gr.Markdown(
            CREDENTIAL_WARNING, visible=False, elem_classes="credential-banner"
        )

        with gr.Tabs():
            with gr.Tab("Ad Generator", id="generator_tab"):
                create_generator_tab(ui_state, credential_banner)

            with gr.Tab("Virtual Model Creator", id="model_creator_tab"):
                create_model_creator_tab(ui_state)

        use_key_btn.click(
            fn=use_api_key,
            inputs=[api_key_input, ui_state],
            outputs=[key_status, credential_banner, ui_state],
        )

        app.load(
            fn=credential_banner_on_load,
            inputs=[ui_state],
            outputs=[credential_banner, ui_state],
        )

    return app, custom_css


def create_generator_tab(ui_state: gr.State, credential_banner: gr.Markdown) -> None:
    """Create the ad brief form and the results panel."""
    with gr.Row():
        with gr.Column(scale=1):
            gr.Markdown("### Campaign Brief")

            with gr.Row():
                product_image = gr.Image(label="Product Image", type="filepath")
                actor_image = gr.Image(label="Actor Image (optional)", type="filepath")

            product_description = gr.Textbox(
                label="Product Description",
                placeholder="What is the product and who is it for?",
                lines=3,
            )
            cta = gr.Textbox(label="Call-to-Action", placeholder="e.g. Shop now at example.com")

            with gr.Row():
                platform = gr.Dropdown(choices=PLATFORMS, value=DEFAULT_PLATFORM, label="Platform")
                aspect_ratio = gr.Dropdown(
                    choices=ASPECT_RATIOS, value=DEFAULT_ASPECT_RATIO, label="Aspect Ratio"
                )

            video_length = gr.Slider(
                minimum=MIN_VIDEO_LENGTH,
                maximum=MAX_VIDEO_LENGTH,
                step=1,
                value=DEFAULT_VIDEO_LENGTH,
                label="Video Length (seconds)",
            )
            tone = gr.Textbox(label="Tone / Style", value=DEFAULT_TONE)
            generate_voiceover = gr.Checkbox(label="Generate voiceover", value=False)

            generate_btn = gr.Button("Generate Ad", variant="primary", size="lg")

        with gr.Column(scale=1):
            gr.Markdown("### Result")
            progress = gr.Markdown()
            error_banner = gr.Markdown(visible=False, elem_classes="error-banner")

            frame = gr.Image(label="Opening Frame", type="filepath", interactive=False)
            video = gr.Video(label="Video", interactive=False)
            voiceover = gr.Audio(label="Voiceover", type="filepath", interactive=False)
            result = gr.Markdown()

    generate_btn.click(
        fn=generate_ad,
        inputs=[
            product_image,
            actor_image,
            product_description,
            cta,
            platform,
            aspect_ratio,
            video_length,
            tone,
            generate_voiceover,
            ui_state,
        ],
        outputs=[
            progress,
            error_banner,
            result,
            frame,
            video,
            voiceover,
            credential_banner,
            ui_state,
        ],
    )


def create_model_creator_tab(ui_state: gr.State) -> None:
    """Create the Virtual Model Creator tab."""
    with gr.Row():
        with gr.Column(scale=1):
            gr.Markdown("### Inputs")
            with gr.Row():
                style_photo = gr.Image(label="Fashion / Style Photo", type="filepath")
                headshot = gr.Image(label="Your Headshot", type="filepath")
            create_btn = gr.Button("Generate Model", variant="primary")

            gr.Markdown("### Prompt History")
            history = gr.Markdown()

        with gr.Column(scale=1):
            gr.Markdown("### Current Model")
            model_error = gr.Markdown(visible=False, elem_classes="error-banner")
            model_image = gr.Image(label="Model", type="filepath", interactive=False)

            with gr.Row():
                edit_instruction = gr.Textbox(
                    label="Edit",
                    placeholder="e.g. make the jacket red",
                    scale=4,
                )
                edit_btn = gr.Button("Apply Edit", scale=1)

    create_btn.click(
        fn=create_model,
        inputs=[style_photo, headshot, ui_state],
        outputs=[model_image, history, model_error, ui_state],
    )

    edit_inputs = [edit_instruction, ui_state]
    edit_outputs = [model_image, history, model_error, edit_instruction, ui_state]
    edit_btn.click(fn=edit_model, inputs=edit_inputs, outputs=edit_outputs)
    edit_instruction.submit(fn=edit_model, inputs=edit_inputs, outputs=edit_outputs)


def main():
    """Main entry point for the application."""
    logger.info("Starting UGC Ad Director...")
    logger.info(f"Configuration: {config.model_dump(exclude={'api_key'})}")

    app, custom_css = create_ui()

    logger.info(f"Launching Gradio UI on {config.gradio_server_name}:{config.gradio_server_port}")

    app.launch(
        server_name=config.gradio_server_name,
        server_port=config.gradio_server_port,
        share=config.gradio_share,
        show_error=True,
        inbrowser=False,
        css=custom_css,
    )


if __name__ == "__main__":
    main()
