# --------------------------------------------------------------
# File: 1_Patient_Login.py
# Description: Formulario de dos modos (registro o login) del portal de pacientes.
# --------------------------------------------------------------

import streamlit as st

from api.supabase_gateway import build_patient_access_flow
from patient_access.form import NOT_FOUND_HINT
from patient_access.logging_config import configure_logging
from patient_access.models import FormMode
from patient_access.password_policy import MIN_LENGTH
from patient_access.session_store import new_scope

configure_logging()

FLOW_KEY = "patient_flow"
REDIRECT_KEY = "pending_redirect"
SCOPE_KEY = "session_scope"
OUTCOME_KEY = "last_outcome"


def _navigate(target: str) -> None:
    # switch_page no puede llamarse desde un callback; se difiere al cuerpo del script.
    st.session_state[REDIRECT_KEY] = target


def _get_flow():
    """Devuelve el flujo montado de esta sesión de navegador, creándolo si falta."""

    if FLOW_KEY not in st.session_state:
        try:
            scope = st.session_state.setdefault(SCOPE_KEY, new_scope())
            st.session_state[FLOW_KEY] = build_patient_access_flow(_navigate, scope=scope)
        except RuntimeError as exc:
            st.error(str(exc))
            st.stop()
    return st.session_state[FLOW_KEY]


flow = _get_flow()
form = flow.form


def _on_email_change() -> None:
    # on_change salta al pulsar Enter o al perder el foco: una consulta por edición, no por tecla.
    flow.on_email_change(st.session_state["pl_email"])


def _on_submit() -> None:
    form.password = st.session_state.get("pl_password", "")
    form.confirm_password = st.session_state.get("pl_confirm", "")
    st.session_state[OUTCOME_KEY] = flow.submit()
    # Refleja en los widgets el borrado de contraseñas tras un registro.
    st.session_state["pl_password"] = form.password
    st.session_state["pl_confirm"] = form.confirm_password


if st.button("← Back to Home"):
    st.switch_page("Home.py")

st.title(form.title)
st.caption(form.subtitle)

st.text_input("Email", key="pl_email", placeholder="your@email.com", on_change=_on_email_change)
if form.show_not_found_hint:
    st.error(NOT_FOUND_HINT)

registering = form.mode is FormMode.REGISTRATION
st.text_input(
    form.password_label,
    key="pl_password",
    type="password",
    placeholder="Choose a secure password" if registering else "Your password",
)
if registering:
    st.caption(f"Password must be at least {MIN_LENGTH} characters long")
    st.text_input("Confirm Password", key="pl_confirm", type="password", placeholder="Confirm your password")

form.password = st.session_state.get("pl_password", "")
form.confirm_password = st.session_state.get("pl_confirm", "") if registering else ""

st.button(
    form.submit_label,
    type="primary",
    use_container_width=True,
    disabled=not form.can_submit(),
    on_click=_on_submit,
)

outcome = st.session_state.pop(OUTCOME_KEY, None)
if outcome is not None:
    if outcome.destructive:
        st.error(f"**{outcome.title}** {outcome.description}")
    else:
        st.success(f"**{outcome.title}** {outcome.description}")

redirect = st.session_state.pop(REDIRECT_KEY, None)
if redirect:
    st.session_state["flash"] = outcome
    st.switch_page(redirect)
