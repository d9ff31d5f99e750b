"""
UI styling (CSS injected via st.markdown).
"""

from __future__ import annotations

import streamlit as st

# Containers keyed `rtl-<field>` render Urdu inputs right-to-left.
THEME_CSS = """
<style>
  :root {
    --accent: #0f766e;
    --accent-light: #ccfbf1;
    --text-secondary: #6b7280;
    --border-color: #e5e7eb;
    --skeleton-start: #f0f0f0;
    --skeleton-mid: #e0e0e0;
    --danger: #b91c1c;
  }

  [class*="st-key-rtl-"] textarea,
  [class*="st-key-rtl-"] input,
  .rtl-text {
    direction: rtl;
    text-align: right;
    font-family: "Noto Nastaliq Urdu", "Jameel Noori Nastaleeq", serif;
    line-height: 2;
  }

  .stat-card {
    border: 1px solid var(--border-color);
    border-radius: 12px;
    padding: 1rem 1.25rem;
    background: #ffffff;
  }
  .stat-card h3 { margin: 0; font-size: 2rem; color: var(--accent); }
  .stat-card p { margin: 0; color: var(--text-secondary); font-size: 0.85rem; }

  .skeleton-row {
    height: 2.25rem;
    margin: 0.35rem 0;
    border-radius: 6px;
    background: linear-gradient(90deg, var(--skeleton-start) 25%, var(--skeleton-mid) 50%, var(--skeleton-start) 75%);
    background-size: 200% 100%;
    animation: skeleton-shimmer 1.4s ease-in-out infinite;
  }
  @keyframes skeleton-shimmer {
    0% { background-position: 200% 0; }
    100% { background-position: -200% 0; }
  }

  .avatar {
    display: inline-flex;
    align-items: center;
    justify-content: center;
    width: 2.5rem;
    height: 2.5rem;
    border-radius: 50%;
    background: var(--accent);
    color: #ffffff;
    font-weight: 600;
  }

  .role-badge {
    display: inline-block;
    padding: 0.1rem 0.55rem;
    border-radius: 999px;
    background: var(--accent-light);
    color: var(--accent);
    font-size: 0.75rem;
    font-weight: 600;
    text-transform: uppercase;
  }

  .empty-state {
    text-align: center;
    padding: 2.5rem 1rem;
    color: var(--text-secondary);
  }
</style>
"""


def apply_styles() -> None:
    st.markdown(THEME_CSS, unsafe_allow_html=True)
