# --------------------------------------------------------------
# File: conftest.py
# Description: Fixtures compartidas con dobles en memoria de los servicios externos.
# --------------------------------------------------------------

import importlib
import os
from typing import Any, Dict, Iterator, List, Optional, Tuple

import pytest

from patient_access.auth_flow import PatientAccessFlow
from patient_access.errors import AuthServiceError, MarkRegisteredError, StatusLookupError
from patient_access.gateway import SIGNED_IN, AuthListener
from patient_access.models import AuthSession, AuthUser, PatientRecord, SignInResult, SignUpResult
from patient_access.session_crypto import derive_session_key
from patient_access.session_store import SessionStore

LANDING = "pages/2_Patient_Dashboard.py"
REDIRECT = "http://localhost:8501/Patient_Login"


class FakeSubscription:
    def __init__(self, auth: "FakeAuth", listener: AuthListener):
        self._auth = auth
        self._listener = listener

    def unsubscribe(self) -> None:
        self._auth.listeners.remove(self._listener)


class FakeAuth:
    """Servicio de autenticación en memoria.

    ``immediate_session`` decide si el alta devuelve sesión; ``notify_on_sign_up``
    emite ``SIGNED_IN`` dentro de la propia llamada, como hace supabase-py.
    """

    def __init__(self) -> None:
        self.accounts: Dict[str, str] = {}
        self.listeners: List[AuthListener] = []
        self.calls: List[Tuple[str, Any]] = []
        self.immediate_session = True
        self.notify_on_sign_up = False
        self.signed_in: Optional[str] = None
        self.sign_up_error: Optional[str] = None

    def _session(self) -> AuthSession:
        return AuthSession(access_token="token", refresh_token="refresh")

    def emit(self, event: str, session: Optional[AuthSession] = None) -> None:
        for listener in list(self.listeners):
            listener(event, session)

    def sign_up(self, email: str, password: str, *, redirect_to: str) -> SignUpResult:
        self.calls.append(("sign_up", (email, redirect_to)))
        if self.sign_up_error:
            raise AuthServiceError(self.sign_up_error)
        if email in self.accounts:
            raise AuthServiceError("User already registered")
        self.accounts[email] = password
        user = AuthUser(id=f"user-{email}", email=email)
        if not self.immediate_session:
            return SignUpResult(user=user, session=None)
        self.signed_in = email
        if self.notify_on_sign_up:
            self.emit(SIGNED_IN, self._session())
        return SignUpResult(user=user, session=self._session())

    def sign_in_with_password(self, email: str, password: str) -> SignInResult:
        self.calls.append(("sign_in", email))
        if self.accounts.get(email) != password:
            raise AuthServiceError("Invalid login credentials")
        self.signed_in = email
        return SignInResult(user=AuthUser(id=f"user-{email}", email=email), session=self._session())

    def sign_out(self) -> None:
        self.calls.append(("sign_out", self.signed_in))
        self.signed_in = None

    def on_auth_state_change(self, listener: AuthListener) -> FakeSubscription:
        self.listeners.append(listener)
        return FakeSubscription(self, listener)

    def called(self, name: str) -> int:
        return sum(1 for call, _ in self.calls if call == name)


class FakeDirectory:
    """Procedimientos privilegiados y tabla ``patients`` en memoria."""

    def __init__(self) -> None:
        self.status_rows: Dict[str, Any] = {}
        self.patients: Dict[str, PatientRecord] = {}
        self.lookups: List[str] = []
        self.mark_calls = 0
        self.lookup_error = False
        self.mark_error = False

    def add_patient(self, email: str, *, registered: bool, id: str = "p1", name: str = "Pat") -> PatientRecord:
        record = PatientRecord(id=id, name=name, email=email, psychologist_id="psy-1")
        self.patients[email] = record
        self.status_rows[email] = [{"email_exists": True, "is_registered": registered}]
        return record

    def check_patient_email(self, email: str) -> Any:
        self.lookups.append(email)
        if self.lookup_error:
            raise StatusLookupError("connection refused")
        return self.status_rows.get(email, [])

    def mark_patient_registered(self) -> None:
        self.mark_calls += 1
        if self.mark_error:
            raise MarkRegisteredError("permission denied for function mark_patient_registered")

    def find_patient_by_email(self, email: str) -> Optional[PatientRecord]:
        return self.patients.get(email)


@pytest.fixture(autouse=True)
def _isolate_storage(tmp_path, monkeypatch) -> Iterator[None]:
    """Aísla STORAGE_PATH y recarga la configuración para cada prueba.

    Args:
        tmp_path (Path): Carpeta temporal proporcionada por pytest.
        monkeypatch (pytest.MonkeyPatch): Fixture para ajustar variables de entorno.

    Returns:
        Iterator[None]: Control del fixture autouse durante la ejecución de cada test.
    """
    data_dir = tmp_path / "_data"
    data_dir.mkdir()
    monkeypatch.setenv("STORAGE_PATH", str(data_dir))

    import patient_access.config as config_module

    importlib.reload(config_module)

    yield


@pytest.fixture
def auth() -> FakeAuth:
    return FakeAuth()


@pytest.fixture
def directory() -> FakeDirectory:
    return FakeDirectory()


@pytest.fixture
def store() -> SessionStore:
    return SessionStore(os.environ["STORAGE_PATH"], derive_session_key(b"test-secret"), 3600, "alice")


@pytest.fixture
def navigations() -> List[str]:
    return []


@pytest.fixture
def flow(auth, directory, store, navigations) -> Iterator[PatientAccessFlow]:
    """Flujo montado sobre los dobles en memoria."""
    access_flow = PatientAccessFlow(
        auth,
        directory,
        store,
        email_redirect_to=REDIRECT,
        landing_page=LANDING,
        navigate=navigations.append,
    )
    access_flow.mount()
    yield access_flow
    access_flow.unmount()
