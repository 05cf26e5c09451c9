# --------------------------------------------------------------
# File: 2_Patient_Dashboard.py
# Description: Destino tras el login; muestra la sesión local del paciente.
# --------------------------------------------------------------

import streamlit as st

from patient_access.errors import AuthServiceError
from patient_access.logging_config import configure_logging

configure_logging()

flow = st.session_state.get("patient_flow")
session = flow.current_session() if flow is not None else None
if session is None:
    st.warning("Sign in first on the **Patient Login** page.")
    st.stop()

flash = st.session_state.pop("flash", None)
if flash is not None:
    st.success(f"**{flash.title}** {flash.description}")

st.title(f"Hello, {session.name}")
st.write(f"Signed in as {session.email}.")
st.caption(f"Session valid until {session.expires_at:%Y-%m-%d %H:%M} UTC")

if st.button("Sign out"):
    try:
        flow.sign_out()
    except AuthServiceError as exc:
        st.error(exc.message)
    else:
        st.switch_page("pages/1_Patient_Login.py")
