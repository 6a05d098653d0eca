"""
Top-level Streamlit app package.

This package hosts the interactive statrace visualization app (Streamlit) decoupled
from the statrace.* library modules. Chart builders remain under statrace.viz.*;
the Streamlit UI shell and app-specific helpers live here.

CLI entrypoint (configured in pyproject.toml):
    statrace-app = app.main:main
"""

from __future__ import annotations
