"""Gradio user interface for UGC Ad Director."""
