"""Shared Streamlit UI components."""

from .header import render_header

__all__ = ["render_header"]
