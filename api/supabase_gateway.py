# --------------------------------------------------------------
# File: supabase_gateway.py
# Description: Adaptadores de Supabase para autenticación, procedimientos RPC y fichas.
# --------------------------------------------------------------
"""Implementaciones de ``AuthGateway`` y ``PatientDirectory`` sobre supabase-py."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

import httpx
from pydantic import ValidationError
from supabase import AuthError, Client, PostgrestAPIError, create_client
from supabase.client import ClientOptions

from patient_access import config
from patient_access.auth_flow import PatientAccessFlow
from patient_access.errors import (
    AuthServiceError,
    MarkRegisteredError,
    PatientLookupError,
    StatusLookupError,
)
from patient_access.gateway import AuthListener, Subscription
from patient_access.models import (
    AuthSession,
    AuthUser,
    PatientRecord,
    SignInResult,
    SignUpResult,
)
from patient_access.session_crypto import derive_session_key
from patient_access.session_store import SessionStore, new_scope

logger = logging.getLogger(__name__)

CHECK_EMAIL_RPC = "check_patient_email"
MARK_REGISTERED_RPC = "mark_patient_registered"
PATIENTS_TABLE = "patients"


def _to_user(user: Any) -> Optional[AuthUser]:
    if user is None:
        return None
    return AuthUser(id=str(user.id), email=user.email)


def _to_session(session: Any) -> Optional[AuthSession]:
    if session is None:
        return None
    return AuthSession(access_token=session.access_token, refresh_token=session.refresh_token)


class SupabaseAuthGateway:
    """Credenciales y eventos de sesión de Supabase Auth.

    Args:
        client (Client): Cliente Supabase compartido con el directorio.

    """

    def __init__(self, client: Client):
        self._auth = client.auth

    def sign_up(self, email: str, password: str, *, redirect_to: str) -> SignUpResult:
        try:
            response = self._auth.sign_up(
                {
                    "email": email,
                    "password": password,
                    "options": {"email_redirect_to": redirect_to},
                }
            )
        except AuthError as exc:
            raise AuthServiceError(str(exc)) from exc
        return SignUpResult(user=_to_user(response.user), session=_to_session(response.session))

    def sign_in_with_password(self, email: str, password: str) -> SignInResult:
        try:
            response = self._auth.sign_in_with_password({"email": email, "password": password})
        except AuthError as exc:
            raise AuthServiceError(str(exc)) from exc
        return SignInResult(user=_to_user(response.user), session=_to_session(response.session))

    def sign_out(self) -> None:
        try:
            self._auth.sign_out()
        except AuthError as exc:
            raise AuthServiceError(str(exc)) from exc

    def on_auth_state_change(self, listener: AuthListener) -> Subscription:
        def _relay(event: str, session: Any) -> None:
            listener(str(event), _to_session(session))

        return self._auth.on_auth_state_change(_relay)


class SupabasePatientDirectory:
    """Procedimientos privilegiados y tabla ``patients`` protegida por RLS.

    La existencia de un email solo se consulta vía ``check_patient_email``; la
    tabla se lee únicamente tras autenticar al usuario.
    """

    def __init__(self, client: Client):
        self._client = client

    def check_patient_email(self, email: str) -> Any:
        try:
            response = self._client.rpc(CHECK_EMAIL_RPC, {"p_email": email}).execute()
        except (PostgrestAPIError, httpx.HTTPError) as exc:
            raise StatusLookupError(str(exc)) from exc
        return response.data

    def mark_patient_registered(self) -> None:
        try:
            self._client.rpc(MARK_REGISTERED_RPC, {}).execute()
        except (PostgrestAPIError, httpx.HTTPError) as exc:
            raise MarkRegisteredError(str(exc)) from exc

    def find_patient_by_email(self, email: str) -> Optional[PatientRecord]:
        try:
            response = (
                self._client.table(PATIENTS_TABLE)
                .select("*")
                .eq("email", email)
                .maybe_single()
                .execute()
            )
        except PostgrestAPIError as exc:
            # Versiones antiguas de postgrest señalan "sin filas" con un 204.
            if str(getattr(exc, "code", "")) == "204":
                return None
            raise PatientLookupError(str(exc)) from exc
        except httpx.HTTPError as exc:
            raise PatientLookupError(str(exc)) from exc

        if response is None or not response.data:
            return None
        try:
            return PatientRecord.model_validate(response.data)
        except ValidationError as exc:
            raise PatientLookupError(f"Malformed patient record: {exc.error_count()} error(s)") from exc


def create_supabase_client(url: str = config.SUPABASE_URL, key: str = config.SUPABASE_KEY) -> Client:
    """Crea el cliente Supabase a partir de la configuración.

    Raises:
        RuntimeError: Si faltan ``SUPABASE_URL`` o ``SUPABASE_KEY``.

    """

    if not url or not key:
        raise RuntimeError("SUPABASE_URL and SUPABASE_KEY must be configured")
    # Sin renovación automática: no quedan temporizadores vivos al cerrarse la pestaña.
    return create_client(url, key, options=ClientOptions(auto_refresh_token=False))


def build_patient_access_flow(
    navigate: Callable[[str], None],
    client: Optional[Client] = None,
    scope: Optional[str] = None,
) -> PatientAccessFlow:
    """Ensambla un ``PatientAccessFlow`` montado con los adaptadores de Supabase.

    Args:
        navigate (Callable[[str], None]): Función de navegación de la interfaz.
        client (Optional[Client]): Cliente ya creado; por defecto se crea uno nuevo.
        scope (Optional[str]): Ámbito de la sesión local; por defecto uno aleatorio,
            de modo que cada sesión de navegador tiene su propia copia.

    Returns:
        PatientAccessFlow: Flujo suscrito a los eventos de sesión.

    """

    client = client or create_supabase_client()
    store = SessionStore(
        config.STORAGE_PATH,
        derive_session_key(config.APP_SECRET),
        config.SESSION_TTL_SECONDS,
        scope or new_scope(),
    )
    flow = PatientAccessFlow(
        SupabaseAuthGateway(client),
        SupabasePatientDirectory(client),
        store,
        email_redirect_to=config.EMAIL_REDIRECT_URL,
        landing_page=config.PATIENT_HOME_PAGE,
        navigate=navigate,
    )
    flow.mount()
    logger.debug("Patient access flow mounted")
    return flow
