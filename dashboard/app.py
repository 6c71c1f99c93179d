"""Business Admin Dashboard

Main Streamlit application with sidebar navigation.
Run with: streamlit run dashboard/app.py
"""

import logging
import streamlit as st
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

logger = logging.getLogger(__name__)

# Page config
st.set_page_config(
    page_title="Business Admin Dashboard",
    page_icon="📊",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Custom CSS
st.markdown("""
<style>
    /* Sidebar styling */
    [data-testid="stSidebar"] {
        background: linear-gradient(180deg, #0f172a 0%, #1e293b 100%);
    }
    [data-testid="stSidebar"] * {
        color: #e2e8f0 !important;
    }
    [data-testid="stSidebar"] .stButton > button {
        width: 100%;
        text-align: left;
        padding: 12px 16px;
        border-radius: 10px;
        border: none;
        background: transparent;
        color: #e2e8f0 !important;
        font-size: 0.95rem;
        margin-bottom: 4px;
    }
    [data-testid="stSidebar"] .stButton > button:hover {
        background: rgba(59, 130, 246, 0.2) !important;
    }
    [data-testid="stSidebar"] .stButton > button[kind="primary"] {
        background: rgba(59, 130, 246, 0.3) !important;
        border-left: 3px solid #3b82f6 !important;
    }
    .main .block-container { padding-top: 2rem; }
</style>
""", unsafe_allow_html=True)


PAGES = {
    "reports": ("📊", "Reports & Analytics"),
    "status": ("🩺", "System Status"),
}


def main():
    if "current_page" not in st.session_state:
        st.session_state.current_page = "reports"

    with st.sidebar:
        st.markdown("### 📊 Business Admin")
        st.markdown("---")

        for page_id, (icon, label) in PAGES.items():
            is_active = st.session_state.current_page == page_id
            if st.button(
                f"{icon}  {label}",
                key=f"nav_{page_id}",
                type="primary" if is_active else "secondary",
                use_container_width=True,
            ):
                st.session_state.current_page = page_id
                st.rerun()

        st.markdown("---")
        from bizadmin import __version__
        st.markdown(
            f"<div style='text-align:center; font-size:0.75rem; opacity:0.5;'>v{__version__}</div>",
            unsafe_allow_html=True,
        )

    page = st.session_state.current_page
    if page == "status":
        render_status()
    else:
        from pages.reports import render_reports_page
        render_reports_page()


def render_status():
    """Component health as reported by the application."""
    st.title("🩺 System Status")
    try:
        from pages.reports import _get_app
        status = _get_app().get_status()
    except Exception as exc:
        logger.error("Status check failed: %s", exc)
        st.error("Could not determine system status.")
        return

    icons = {"ok": "✅", "warning": "⚠️", "error": "❌"}
    cols = st.columns(len(status))
    for col, (component, info) in zip(cols, status.items()):
        with col:
            st.metric(
                f"{icons.get(info['status'], '•')} {component.title()}",
                info["status"].upper(),
                help=info["details"],
            )
            st.caption(info["details"])


if __name__ == "__main__":
    main()
