"""
Streamlit admin panel.

Rendering only: every decision (filtering, validation, payloads, auth)
lives in the plain modules of `content_admin` so it can be tested without
a browser.
"""

from __future__ import annotations
