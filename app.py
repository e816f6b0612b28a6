import altair as alt
import streamlit as st
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

from core.data import DATA_DIR, load_dashboard_data, prepare_context
from core.filters import normalize_filters
from core.menu import CURRENT_USER_ROLE, DashboardActions, profile_menu
from core.metrics_alerts import compute_alerts_panel
from core.metrics_companies import compute_company_activity
from core.metrics_overview import compute_overview
from core.models import CompanyStatus
from core.sources import DataSourceError

alt.data_transformers.disable_max_rows()


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .app-top-bar {padding: 6px 0 4px;border-bottom: 1px solid #e5e7eb;margin-bottom: 10px;}
        .app-top-bar .breadcrumb {color: #6b7280;font-size: 0.9rem;margin-bottom: 2px;}
        .app-top-bar .page-title {font-size: 1.4rem;font-weight: 700;color: #111827;}
        .card {border: 1px solid #e5e7eb;border-radius: 12px;padding: 16px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .card-header {display: flex;justify-content: space-between;align-items: center;margin-bottom: 8px;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #111827;}
        .card-actions {font-size: 0.9rem;color: #2563eb;}
        .chip {background: #f3f4f6;border: 1px solid #e5e7eb;border-radius: 14px;padding: 2px 10px;font-size: 0.8rem;color: #374151;}
        .chip-active {background: #dcfce7;color: #166534;}
        .chip-inactive {background: #f3f4f6;color: #1f2937;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str, actions: Optional[str] = None):
    container = st.container()
    container.markdown(
        f"""
        <div class="card">
          <div class="card-header">
            <div class="card-title">{title}</div>
            <div class="card-actions">{actions or ""}</div>
          </div>
        """,
        unsafe_allow_html=True,
    )
    body = container.container()
    with body:
        yield body
    container.markdown("</div>", unsafe_allow_html=True)


def notify(message: str):
    st.session_state["_last_action"] = message


def build_actions() -> DashboardActions:
    # Creating records and signing out belong to the host application; the page only records intent.
    return DashboardActions(
        on_create_company=lambda: notify("Create company requested"),
        on_create_job=lambda: notify("Create job requested"),
        on_create_motor=lambda: notify("Add motor requested"),
        on_view_profile=lambda: notify("Profile settings opened"),
        on_system_settings=lambda: notify("System settings opened"),
        on_security=lambda: notify("Security settings opened"),
        on_help=lambda: notify("Help & support opened"),
        on_sign_out=lambda: notify("Signed out"),
    )


def render_profile_menu(current_user: str):
    if "profile_menu" not in st.session_state:
        st.session_state["profile_menu"] = profile_menu(build_actions())
    menu = st.session_state["profile_menu"]

    label = f"{current_user} · {CURRENT_USER_ROLE} {'▴' if menu.is_open else '▾'}"
    if st.button(label, key="profile_trigger"):
        menu.toggle()
        st.rerun()
    if not menu.is_open:
        return
    with st.container(border=True):
        st.markdown(f"**{current_user}**  \n{CURRENT_USER_ROLE}")
        for item in menu.items:
            if st.button(item.label, key=f"menu_{item.key}", type="primary" if item.danger else "secondary"):
                menu.select(item.key)
                st.rerun()
        if st.button("Close", key="menu_dismiss"):
            menu.dismiss()
            st.rerun()


def render_page_header(title: str, breadcrumb: str, current_user: str):
    inject_base_styles()
    c1, c2 = st.columns([7, 3])
    with c1:
        st.markdown(
            f"<div class='app-top-bar'><div class='breadcrumb'>{breadcrumb}</div><div class='page-title'>{title}</div></div>",
            unsafe_allow_html=True,
        )
    with c2:
        render_profile_menu(current_user)
    last_action = st.session_state.pop("_last_action", None)
    if last_action:
        st.toast(last_action)


# ---------- UI setup ----------
st.set_page_config(page_title="Motor Workshop Dashboard", layout="wide")
inject_base_styles()

try:
    data_ctx = load_dashboard_data()
except DataSourceError as exc:
    st.error(f"Could not read workshop data: {exc}")
    st.stop()

if not data_ctx.get("files"):
    st.warning(f"No data files found in {DATA_DIR}. Add companies/jobs/invoices/warranties CSV or JSON exports.")

with st.sidebar:
    st.markdown("### Settings")
    current_user = st.text_input("Signed in as", value=st.session_state.get("current_user", "Admin"))
    st.session_state["current_user"] = current_user
    status_options = [s.value for s in CompanyStatus]
    selected_statuses = st.multiselect("Company status", options=status_options, default=[])
    with st.expander("Advanced settings", expanded=False):
        top_n = st.slider("Companies shown", min_value=1, max_value=25, value=5)
        st.subheader("Alert windows")
        job_due_days = st.slider("Jobs due within (days)", 1, 30, 7)
        warranty_expiry_days = st.slider("Warranties expiring within (days)", 1, 120, 30)

filters = normalize_filters(
    {
        "selected_statuses": selected_statuses,
        "top_n": top_n,
        "thresholds": {"job_due_days": job_due_days, "warranty_expiry_days": warranty_expiry_days},
    }
)
ctx = prepare_context(filters, data_ctx)
actions = build_actions()


def render_metric_cards(cards: List[Dict[str, Any]]):
    cols = st.columns(len(cards))
    for col, metric in zip(cols, cards):
        col.metric(metric["title"], metric["value"])


def render_company_activity(activity: Dict[str, Any]):
    with card("Company Activity Overview", "View All Companies"):
        if activity["empty"]:
            st.info("No companies yet")
            if st.button("Add your first company", key="empty_add_company"):
                actions.on_create_company()
                st.rerun()
            return
        for row in activity["companies"]:
            with st.container(border=True):
                head, chip = st.columns([4, 1])
                head.markdown(f"**{row['name']}**")
                chip.markdown(
                    f"<span class='chip chip-{row['status']}'>{row['status_label']}</span>",
                    unsafe_allow_html=True,
                )
                c1, c2, c3, c4 = st.columns(4)
                c1.metric("Active Jobs", row["active_jobs"])
                c2.metric("Total Motors", row["motor_count"])
                c3.metric("Completed", row["completed_jobs"])
                c4.metric("Est. Value", row["total_estimated_value_display"])
                st.caption(f"Contact: {row['contact_name']} · Last activity: {row['last_activity_display']}")


def render_alerts(panel: Dict[str, Any]):
    st.markdown("**Alerts & Reminders**")
    if not panel["has_alerts"]:
        st.success(f"{panel['all_clear']['message']} {panel['all_clear']['detail']}")
        return
    for a in panel["alerts"]:
        text = f"**{a['message']}**  \n{a['action']}"
        if a["severity"] == "high":
            st.error(text)
        elif a["severity"] == "medium":
            st.warning(text)
        else:
            st.info(text)


def render_quick_actions(panel: Dict[str, Any]):
    with card("Quick Actions"):
        if st.button("Create Job", key="qa_create_job", type="primary", use_container_width=True):
            actions.on_create_job()
            st.rerun()
        if st.button("Add Company", key="qa_add_company", use_container_width=True):
            actions.on_create_company()
            st.rerun()
        if st.button("Add Motor", key="qa_add_motor", use_container_width=True):
            actions.on_create_motor()
            st.rerun()
        st.markdown("---")
        render_alerts(panel)


def render_dashboard_page():
    overview = compute_overview(filters, ctx)
    activity = compute_company_activity(filters, ctx)
    panel = compute_alerts_panel(filters, ctx)

    render_page_header("Welcome back!", overview["welcome_date"], current_user)
    render_metric_cards(overview["cards"])

    left, right = st.columns([2, 1])
    with left:
        render_company_activity(activity)
        if overview["jobs_by_status_chart"] is not None:
            with card("Jobs by Status"):
                st.vega_lite_chart(overview["jobs_by_status_chart"], use_container_width=True)
    with right:
        render_quick_actions(panel)


render_dashboard_page()
