"""Reusable header component for the Streamlit app."""

from __future__ import annotations

from typing import Optional

import streamlit as st


def render_header(
    title: str,
    *,
    description: Optional[str] = None,
    help_title: Optional[str] = None,
    help_markdown: Optional[str] = None,
    help_expanded: bool = False,
) -> None:
    """Render the page header.

    Args:
        title: The main heading for the page.
        description: Optional caption providing additional context.
        help_title: Optional label for the collapsible help panel.
        help_markdown: Optional Markdown body shown inside the help panel.
        help_expanded: Whether the help panel is expanded by default.
    """

    st.title(title)
    if description:
        st.caption(description)

    if help_markdown:
        with st.expander(help_title or "How to use this page", expanded=help_expanded):
            st.markdown(help_markdown)


__all__ = ["render_header"]
