# --------------------------------------------------------------
# File: Home.py
# Description: Define la página principal de Streamlit con el acceso al portal de pacientes.
# --------------------------------------------------------------

import streamlit as st

from patient_access.logging_config import configure_logging

configure_logging()

# Configura los metadatos de la página principal de la aplicación.
st.set_page_config(page_title="Patient Portal", page_icon="🩺", layout="centered")

st.title("🩺 Patient Portal")
st.write("Access your therapy space with the email your psychologist registered for you.")

if st.button("Go to patient login"):
    st.switch_page("pages/1_Patient_Login.py")
