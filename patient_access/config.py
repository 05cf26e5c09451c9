# --------------------------------------------------------------
# File: config.py
# Description: Parámetros de despliegue leídos del entorno y del fichero .env.
# --------------------------------------------------------------
"""Configuración del acceso de pacientes."""

import os

from dotenv import load_dotenv

load_dotenv()

SUPABASE_URL = os.getenv("SUPABASE_URL", "")
SUPABASE_KEY = os.getenv("SUPABASE_KEY", "")

APP_BASE_URL = os.getenv("APP_BASE_URL", "http://localhost:8501").rstrip("/")
EMAIL_REDIRECT_PATH = os.getenv("EMAIL_REDIRECT_PATH", "/Patient_Login")
EMAIL_REDIRECT_URL = f"{APP_BASE_URL}{EMAIL_REDIRECT_PATH}"

APP_SECRET = os.getenv("APP_SECRET", "change_this_dev_secret").encode()

STORAGE_PATH = os.getenv("STORAGE_PATH", "./_data")
SESSION_TTL_SECONDS = int(os.getenv("SESSION_TTL_SECONDS", "43200"))

PATIENT_HOME_PAGE = os.getenv("PATIENT_HOME_PAGE", "pages/2_Patient_Dashboard.py")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
