# --------------------------------------------------------------
# File: test_session_store.py
# Description: Pruebas de la persistencia cifrada de la sesión local del paciente.
# --------------------------------------------------------------

import json
import os
from datetime import UTC, datetime, timedelta

import pytest
from cryptography.exceptions import InvalidTag

from patient_access.models import PatientRecord
from patient_access.session_crypto import derive_session_key, seal, unseal
from patient_access.session_store import SESSION_KEY, SessionStore

RECORD = PatientRecord(id="p1", name="Pat", email="pat@clinic.com", psychologist_id="psy-1")


class _Clock:
    def __init__(self) -> None:
        self.now = datetime(2025, 8, 9, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now


def _store(tmp_path, clock=None, secret=b"test-secret", ttl=3600, scope="alice") -> SessionStore:
    kwargs = {"clock": clock} if clock else {}
    return SessionStore(str(tmp_path), derive_session_key(secret), ttl, scope, **kwargs)


def test_load_returns_none_when_missing(tmp_path):
    """Comprueba que sin fichero no exista sesión.

    Args:
        tmp_path (Path): Carpeta temporal proporcionada por pytest.

    Returns:
        None: Las aserciones validan la ausencia de sesión y de fichero.
    """
    store = _store(tmp_path)
    assert store.load() is None
    assert not os.path.exists(store.path)


def test_save_then_load_keeps_patient_fields(tmp_path):
    clock = _Clock()
    store = _store(tmp_path, clock=clock)
    saved = store.save(RECORD)
    loaded = store.load()
    assert loaded == saved
    assert (loaded.id, loaded.name, loaded.email, loaded.psychologist_id) == ("p1", "Pat", "pat@clinic.com", "psy-1")
    assert loaded.expires_at - loaded.created_at == timedelta(hours=1)


def test_file_is_scoped_and_does_not_leak_patient_data(tmp_path):
    """Verifica la clave de almacenamiento y que el contenido vaya cifrado.

    Returns:
        None: Las aserciones inspeccionan el fichero escrito.
    """
    store = _store(tmp_path)
    store.save(RECORD)
    assert os.path.basename(store.path) == f"{SESSION_KEY}-alice.json"
    assert not os.path.exists(f"{store.path}.tmp")
    with open(store.path, encoding="utf-8") as handler:
        raw = handler.read()
    assert "pat@clinic.com" not in raw
    assert json.loads(raw)["key"] == SESSION_KEY


def test_expired_session_is_cleared(tmp_path):
    clock = _Clock()
    store = _store(tmp_path, clock=clock)
    store.save(RECORD)
    clock.now += timedelta(hours=1)
    assert store.load() is None
    assert not os.path.exists(store.path)


def test_tampered_or_foreign_key_session_is_discarded(tmp_path):
    """Un fichero alterado o sellado con otra clave se descarta.

    Returns:
        None: Las aserciones confirman el borrado del fichero.
    """
    _store(tmp_path, secret=b"other-secret").save(RECORD)
    store = _store(tmp_path)
    assert store.load() is None
    assert not os.path.exists(store.path)


def test_corrupt_json_is_discarded(tmp_path):
    store = _store(tmp_path)
    with open(store.path, "w", encoding="utf-8") as handler:
        handler.write("{not json")
    assert store.load() is None
    assert not os.path.exists(store.path)


def test_clear_is_idempotent(tmp_path):
    store = _store(tmp_path)
    store.save(RECORD)
    store.clear()
    store.clear()
    assert store.load() is None


def test_seal_binds_associated_data():
    key = derive_session_key(b"test-secret")
    token = seal(key, b"payload", b"patientSession")
    assert unseal(key, token, b"patientSession") == b"payload"
    with pytest.raises(InvalidTag):
        unseal(key, token, b"otherKey")


def test_derived_key_depends_on_secret():
    assert derive_session_key(b"a") != derive_session_key(b"b")
    assert len(derive_session_key(b"a")) == 32


def test_scopes_never_share_a_session(tmp_path):
    """Dos sesiones de navegador con el mismo directorio no ven ni borran la sesión ajena.

    Args:
        tmp_path (Path): Carpeta temporal proporcionada por pytest.

    Returns:
        None: Las aserciones comprueban el aislamiento entre ámbitos.
    """
    alice = _store(tmp_path, scope="alice")
    stranger = _store(tmp_path, scope="bob")
    alice.save(RECORD)

    assert stranger.load() is None
    stranger.clear()
    assert alice.load() is not None


def test_file_moved_to_another_scope_cannot_be_opened(tmp_path):
    alice = _store(tmp_path, scope="alice")
    stranger = _store(tmp_path, scope="bob")
    alice.save(RECORD)
    os.replace(alice.path, stranger.path)
    assert stranger.load() is None
    assert not os.path.exists(stranger.path)


@pytest.mark.parametrize("scope", ["", "../alice", "a/b", "x" * 65])
def test_invalid_scope_is_rejected(tmp_path, scope):
    with pytest.raises(ValueError):
        _store(tmp_path, scope=scope)
