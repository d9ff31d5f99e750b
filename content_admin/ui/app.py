"""
Streamlit UI entrypoint: login gate, role-filtered sidebar, page routing.
"""

from __future__ import annotations

import logging

import streamlit as st

from content_admin.config import RESOURCE_ICONS, ROLE_LABELS, settings
from content_admin.logging_config import configure_logging
from content_admin.resources import REGISTRY, SUPERADMIN_ONLY, nav_resources
from content_admin.ui.screens import render_dashboard, render_list_screen, render_login, render_profile
from content_admin.ui.session import current_admin, current_role, init_session_state, render_flashes, sign_out
from content_admin.ui.styles import apply_styles

logger = logging.getLogger(__name__)

DASHBOARD = "dashboard"
PROFILE = "profile"


def available_pages(role: str | None) -> list[str]:
    """Page keys the role may open, in sidebar order."""
    pages = [DASHBOARD] if role in SUPERADMIN_ONLY else []
    pages += [spec.key for spec in nav_resources(role)]
    pages.append(PROFILE)
    return pages


def _page_label(key: str) -> str:
    label = "Dashboard" if key == DASHBOARD else "Profile" if key == PROFILE else REGISTRY[key].label
    return f"{RESOURCE_ICONS.get(key, '•')} {label}"


def render_sidebar(admin: dict) -> str:
    st.sidebar.title(settings.site_name)
    name = f"{admin.get('fname', '')} {admin.get('lname', '')}".strip() or admin.get("email", "")
    st.sidebar.caption(f"{name} · {ROLE_LABELS.get(admin.get('role', ''), admin.get('role', ''))}")

    pages = available_pages(current_role())
    requested = st.query_params.get("page", pages[0])
    if requested not in pages:
        requested = pages[0]

    page = st.sidebar.radio(
        "Navigation",
        pages,
        index=pages.index(requested),
        format_func=_page_label,
        label_visibility="collapsed",
    )
    st.query_params["page"] = page

    st.sidebar.divider()
    if st.sidebar.button("Log out", use_container_width=True):
        sign_out()
        st.query_params.clear()
        st.rerun()
    return page


def main() -> None:
    st.set_page_config(
        page_title=settings.site_name,
        page_icon="📚",
        layout="wide",
        initial_sidebar_state="expanded",
    )

    apply_styles()
    init_session_state()
    render_flashes()

    admin = current_admin()
    if admin is None:
        render_login()
        return

    page = render_sidebar(admin)
    if page == DASHBOARD:
        render_dashboard()
    elif page == PROFILE:
        render_profile()
    else:
        render_list_screen(REGISTRY[page])


def run() -> None:
    configure_logging(log_format="console" if settings.debug_mode else None)
    main()
