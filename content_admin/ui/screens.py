"""
Page renderers: the generic list screen, dashboard, profile and login.
"""

from __future__ import annotations

import logging

import streamlit as st

from content_admin.api_client import get_client
from content_admin.config import RESOURCE_ICONS, settings
from content_admin.dashboard import CARDS, load_counts
from content_admin.exceptions import ContentAdminError, user_message
from content_admin.listing import ASC, DESC, ListController
from content_admin.repository.admins import get_admin_repo, get_admin_store
from content_admin.resources import ADMIN, ResourceSpec
from content_admin.state import FetchStatus
from content_admin.text_utils import format_count
from content_admin.ui.components import (
    cell_text,
    render_avatar,
    render_empty_state,
    render_error_with_retry,
    render_pagination,
    render_role_badge,
    render_table_skeleton,
)
from content_admin.ui.dialogs import open_delete_dialog, open_error_dialog, open_form_dialog, open_view_dialog
from content_admin.ui.session import (
    bind_log_context,
    current_admin,
    get_fetch_state,
    get_list_query,
    get_repo,
    sign_in,
    update_list_query,
)

logger = logging.getLogger(__name__)


def _sort_label(key: str) -> str:
    return {"createdOn": "Newest", "id": "ID"}.get(key, key[:1].upper() + key[1:])


def _ensure_loaded(spec: ResourceSpec) -> None:
    """Fetch when the view is idle, showing a skeleton until the result arrives."""
    state = get_fetch_state(spec.key)
    if state.status is not FetchStatus.IDLE:
        return
    placeholder = st.empty()
    with placeholder.container():
        render_table_skeleton()
    state.load(get_repo(spec).list)
    placeholder.empty()


def _render_controls(spec: ResourceSpec, records: list[dict]) -> None:
    query = get_list_query(spec.key)
    cols = st.columns([3, *([1] * len(spec.facets)), 1, 1, 1])

    with cols[0]:
        search = st.text_input(
            "Search",
            value=query.search,
            key=f"search_{spec.key}",
            placeholder=f"Search {spec.label.lower()}…",
            label_visibility="collapsed",
        )
        if search != query.search:
            query = update_list_query(spec.key, search=search)

    facets = dict(query.facets)
    for i, facet in enumerate(spec.facets, start=1):
        with cols[i]:
            options = ["", *ListController.facet_values(records, facet)]
            current = facets.get(facet, "")
            chosen = st.selectbox(
                spec.get_field(facet).label,
                options,
                index=options.index(current) if current in options else 0,
                format_func=lambda v: v or "All",
                key=f"facet_{spec.key}_{facet}",
            )
            if chosen:
                facets[facet] = chosen
            else:
                facets.pop(facet, None)
    if facets != dict(query.facets):
        query = update_list_query(spec.key, facets=facets)

    sort_keys = list(spec.sorters)
    offset = len(spec.facets) + 1
    with cols[offset]:
        default_sort = query.sort_key or spec.default_sort or sort_keys[0]
        sort_key = st.selectbox(
            "Sort by",
            sort_keys,
            index=sort_keys.index(default_sort) if default_sort in sort_keys else 0,
            format_func=_sort_label,
            key=f"sort_{spec.key}",
        )
    with cols[offset + 1]:
        direction = st.selectbox(
            "Order",
            [DESC, ASC],
            index=0 if query.direction == DESC else 1,
            format_func=lambda d: "Descending" if d == DESC else "Ascending",
            key=f"dir_{spec.key}",
        )
    if sort_key != query.sort_key or direction != query.direction:
        query = update_list_query(spec.key, sort_key=sort_key, direction=direction)

    with cols[offset + 2]:
        size_options = list(settings.page_size_options)
        current_size = query.page_size or settings.default_page_size
        if current_size not in size_options:
            size_options.append(current_size)
        page_size = st.selectbox(
            "Per page",
            sorted(size_options),
            index=sorted(size_options).index(current_size),
            key=f"size_{spec.key}",
        )
        if page_size != current_size:
            update_list_query(spec.key, page_size=page_size)


def _render_rows(spec: ResourceSpec, items: list[dict], start_index: int) -> None:
    columns = spec.table_fields
    widths = [0.5, *([2] * len(columns)), 1.6]

    header = st.columns(widths)
    header[0].markdown("**#**")
    for col, f in zip(header[1:], columns):
        col.markdown(f"**{f.label}**")
    header[-1].markdown("**Actions**")

    for offset, record in enumerate(items):
        row = st.columns(widths, vertical_alignment="center")
        row[0].write(start_index + offset + 1)
        for col, f in zip(row[1:], columns):
            col.write(cell_text(f, record.get(f.name)))

        record_key = f"{spec.key}_{record.get('id', offset)}"
        with row[-1]:
            actions = st.columns(3)
            if actions[0].button("👁", key=f"view_{record_key}", help="View"):
                open_view_dialog(spec, record)
            if not spec.read_only:
                if actions[1].button("✏️", key=f"edit_{record_key}", help="Edit"):
                    open_form_dialog(spec, record)
                if actions[2].button("🗑", key=f"delete_{record_key}", help="Delete"):
                    open_delete_dialog(spec, record)
        if spec.key == ADMIN.key:
            _render_admin_actions(record, record_key)


def _render_admin_actions(record: dict, record_key: str) -> None:
    with st.expander("Account", expanded=False):
        st.caption("Passwords are never changed from this panel. Send a reset email instead.")
        if st.button("Send password reset email", key=f"reset_{record_key}"):
            try:
                get_admin_repo().send_password_reset(str(record.get("email") or ""))
            except ContentAdminError as exc:
                exc.log(logging.WARNING)
                open_error_dialog(user_message(exc))
                return
            st.success(f"Reset email sent to {record.get('email')}")


def render_list_screen(spec: ResourceSpec) -> None:
    """Generic list view: fetch, search, sort, paginate, row actions."""
    bind_log_context(spec.key)
    state = get_fetch_state(spec.key)

    title_col, action_col = st.columns([4, 1], vertical_alignment="bottom")
    with title_col:
        st.title(f"{RESOURCE_ICONS.get(spec.key, '')} {spec.label}".strip())
    with action_col:
        if not spec.read_only and st.button(f"Add {spec.singular}", type="primary", use_container_width=True):
            open_form_dialog(spec)

    _ensure_loaded(spec)

    if state.status is FetchStatus.ERROR:
        if render_error_with_retry(state.error or "Unknown error", key=spec.key):
            state.invalidate()
            st.rerun()
        return

    _render_controls(spec, state.records)
    query = get_list_query(spec.key)
    page = spec.controller().apply(state.records, query)

    if page.is_empty:
        render_empty_state(spec, searching=bool(query.search.strip() or query.facets))
        return

    _render_rows(spec, page.items, page.start_index)
    target = render_pagination(page, key=spec.key)
    if target is not None:
        update_list_query(spec.key, page=target)
        st.rerun()

    if st.button("Refresh", key=f"refresh_{spec.key}"):
        state.invalidate()
        st.rerun()


# =============================================================================
# Dashboard
# =============================================================================


@st.cache_data(show_spinner=False, ttl=60)
def fetch_dashboard_counts() -> tuple[dict[str, int], bool]:
    counts = load_counts(get_client(), admin_counter=get_admin_store().count)
    return dict(counts.counts), counts.partial


def render_dashboard() -> None:
    bind_log_context("dashboard")
    st.title(f"{RESOURCE_ICONS['dashboard']} Dashboard")
    st.caption(f"Welcome back to {settings.site_name}.")

    with st.spinner("Loading counts…"):
        counts, partial = fetch_dashboard_counts()
    if partial:
        st.warning("Some counts could not be loaded and are shown as 0.", icon="⚠️")

    cols = st.columns(3)
    for i, (key, title, description) in enumerate(CARDS):
        with cols[i % 3]:
            st.markdown(
                f'<div class="stat-card"><p>{title}</p><h3>{format_count(counts.get(key, 0))}</h3>'
                f"<p>{description}</p></div>",
                unsafe_allow_html=True,
            )

    if st.button("Refresh counts"):
        fetch_dashboard_counts.clear()
        st.rerun()


# =============================================================================
# Profile and login
# =============================================================================


def render_profile() -> None:
    bind_log_context("profile")
    admin = current_admin() or {}
    st.title(f"{RESOURCE_ICONS['profile']} Profile")

    col1, col2 = st.columns([1, 6], vertical_alignment="center")
    with col1:
        render_avatar(admin.get("fname"), admin.get("lname"))
    with col2:
        st.markdown(f"### {admin.get('fname', '')} {admin.get('lname', '')}".strip())
        render_role_badge(admin.get("role"))

    st.text_input("Email", value=str(admin.get("email") or ""), disabled=True)

    st.divider()
    st.markdown("**Password**")
    st.caption("We will email you a link to choose a new password.")
    if st.button("Send password reset email"):
        try:
            get_admin_repo().send_password_reset(str(admin.get("email") or ""))
        except ContentAdminError as exc:
            exc.log(logging.WARNING)
            st.error(user_message(exc))
        else:
            st.success("Reset email sent. Check your inbox.")


def render_login() -> None:
    st.title(settings.site_name)
    st.caption("Sign in with your admin account.")

    with st.form("login"):
        email = st.text_input("Email", placeholder="name@example.com")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign in", type="primary", use_container_width=True)

    if submitted:
        if not email.strip() or not password:
            st.error("Email and password are required.")
        else:
            try:
                with st.spinner("Signing in…"):
                    sign_in(email, password)
            except ContentAdminError as exc:
                exc.log(logging.WARNING)
                st.error(user_message(exc))
            else:
                st.rerun()

    with st.expander("Forgot password?"):
        reset_email = st.text_input("Account email", key="reset_email")
        if st.button("Send reset link"):
            try:
                get_admin_repo().send_password_reset(reset_email.strip())
            except ContentAdminError as exc:
                exc.log(logging.WARNING)
                st.error(user_message(exc))
            else:
                st.success("If the account exists, a reset link is on its way.")
