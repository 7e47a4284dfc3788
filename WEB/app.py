"""
Licseal: Operator Console
==========================

Streamlit application entry point.

Launch:
    cd licseal
    LICSEAL_PUBLIC_KEY_FILE=public_key.pem streamlit run WEB/app.py

Key material is resolved by ``licseal.KeyProvider.from_environment``; the
page refuses to start without it.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

# -- Ensure project root is importable ------------------------------------
_project_root = str(Path(__file__).resolve().parent.parent)
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

# -- Ensure WEB/ directory is importable ----------------------------------
_web_root = str(Path(__file__).resolve().parent)
if _web_root not in sys.path:
    sys.path.insert(0, _web_root)

import streamlit as st  # noqa: E402

import licseal  # noqa: E402
from utils import describe_error, human_size  # noqa: E402

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

# ---------------------------------------------------------------------------
# Page config (must be the first Streamlit command)
# ---------------------------------------------------------------------------

st.set_page_config(
    page_title="Licseal",
    page_icon="🔐",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown(
    """
    <style>
    .stButton > button[kind="primary"] {
        background-color: #e94560;
        border-color: #e94560;
    }
    .stButton > button[kind="primary"]:hover {
        background-color: #d63a54;
        border-color: #d63a54;
    }
    .licseal-header {
        text-align: center;
        padding: 1rem 0 0.5rem 0;
    }
    .licseal-header p {
        color: #a0a0b8;
        font-size: 0.95rem;
    }
    </style>
    <div class="licseal-header">
        <h1>🔐 Licseal</h1>
        <p>RSA licence envelopes: issue and read licence records</p>
    </div>
    """,
    unsafe_allow_html=True,
)

# ---------------------------------------------------------------------------
# Keys: a configuration error is fatal for the page
# ---------------------------------------------------------------------------

try:
    provider = licseal.default_provider()
except licseal.KeyConfigError as exc:
    st.error(describe_error(exc))
    st.info(
        f"Set `{licseal.ENV_PUBLIC_KEY_FILE}` (issuer) and/or "
        f"`{licseal.ENV_PRIVATE_KEY_FILE}` (holder) and restart the console."
    )
    st.stop()

# ---------------------------------------------------------------------------
# Sidebar
# ---------------------------------------------------------------------------

with st.sidebar:
    st.markdown("### Active key")
    st.markdown(
        f"**RSA-{provider.key_size}**  \n"
        f"Block size: {provider.block_size} bytes  \n"
        f"Chunk limit: {provider.chunk_limit} bytes  \n"
        f"Largest licence: {human_size(provider.max_message_bytes)}"
    )
    st.markdown("---")
    st.markdown("#### Loaded halves")
    st.markdown(
        "• Public key: **yes**  \n"
        f"• Private key: **{'yes' if provider.has_private_key else 'no'}**"
    )
    st.caption(provider.source)
    st.markdown("---")
    st.caption("Licseal v1.0 · Operator Console")

# ---------------------------------------------------------------------------
# Tabs
# ---------------------------------------------------------------------------

from tabs.licence_tab import render as render_licence  # noqa: E402

(tab_licence,) = st.tabs(["📝 Licence"])

with tab_licence:
    render_licence(provider)
