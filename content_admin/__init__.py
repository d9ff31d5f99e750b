"""
Content Admin - admin panel for a multilingual publishing platform.

Run the panel with `streamlit run content_admin/app.py`.
"""

from __future__ import annotations

__version__ = "1.0.0"
