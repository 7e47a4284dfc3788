"""
Licseal Console: Licence Tab
=============================

Issue (encrypt) or read (decrypt) a licence payload with the keys the
console was started with.  Output envelopes are plain ASCII and can be
pasted straight into JSON fields or database columns.
"""

from __future__ import annotations

import sys
from pathlib import Path

import streamlit as st

# -- project-root import ---------------------------------------------------
_root = str(Path(__file__).resolve().parent.parent.parent)
if _root not in sys.path:
    sys.path.insert(0, _root)

import licseal  # noqa: E402

from utils import describe_error, envelope_summary, human_size, planned_form  # noqa: E402


# ---------------------------------------------------------------------------
# Public render function
# ---------------------------------------------------------------------------

def render(provider: licseal.KeyProvider) -> None:
    """Render the licence issue / read tab."""

    operations = ["Issue", "Read"] if provider.has_private_key else ["Issue"]
    operation = st.radio(
        "Operation",
        operations,
        horizontal=True,
        key="licence_operation",
    )
    if not provider.has_private_key:
        st.caption("No private key is configured, so this console can only issue licences.")

    st.markdown("---")

    if operation == "Issue":
        input_text = st.text_area(
            "Licence text",
            height=220,
            placeholder="Paste the licence record to seal…",
            key="licence_input_issue",
        )
    else:
        input_text = st.text_area(
            "Envelope",
            height=220,
            placeholder="Paste a Base64 block or a CHUNK:<n>:… envelope…",
            key="licence_input_read",
        )

    # Input stats
    if input_text:
        n_bytes = len(input_text.encode("utf-8"))
        if operation == "Issue":
            form = planned_form(n_bytes, provider.chunk_limit)
            st.caption(f"{len(input_text):,} chars  |  {human_size(n_bytes)}  |  {form}")
        else:
            form, blocks, chars = envelope_summary(input_text.strip())
            st.caption(f"{chars:,} chars  |  {form}  |  {blocks} block(s)")

    btn_label = "🔒 Issue" if operation == "Issue" else "🔓 Read"
    if st.button(btn_label, type="primary", use_container_width=True, key="licence_action"):
        if operation == "Read" and not input_text.strip():
            st.error(describe_error(licseal.DecryptError(licseal.ErrorKind.EMPTY_INPUT)))
            return

        try:
            if operation == "Issue":
                envelope = licseal.encrypt_with_key(input_text, provider.get_public_key())
                form, blocks, chars = envelope_summary(envelope)

                st.success(f"Licence sealed as {form} ({blocks} block(s), {chars:,} chars).")
                st.text_area(
                    "Envelope",
                    value=envelope,
                    height=220,
                    key="licence_output_display",
                )
                st.download_button(
                    "📥 Download envelope",
                    data=envelope,
                    file_name="licence.envelope",
                    mime="text/plain",
                    key="licence_download_envelope",
                )
            else:
                plaintext = licseal.decrypt_with_key(
                    input_text.strip(), provider.get_private_key()
                )

                st.success("Licence opened.")
                st.text_area(
                    "Licence text",
                    value=plaintext,
                    height=220,
                    key="licence_output_display",
                )
                st.download_button(
                    "📥 Download licence",
                    data=plaintext,
                    file_name="licence.txt",
                    mime="text/plain",
                    key="licence_download_text",
                )

        except licseal.LicsealError as e:
            st.error(describe_error(e))
        except Exception as e:
            st.error(f"Unexpected error: {e}")
