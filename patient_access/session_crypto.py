# --------------------------------------------------------------
# File: session_crypto.py
# Description: Sellado AES-GCM de la sesión local con clave derivada del secreto de la app.
# --------------------------------------------------------------
"""Primitivas de cifrado para la copia local de la sesión del paciente."""

import base64
import os
from typing import Optional

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

NONCE_SIZE = 12
_SESSION_INFO = b"patient-access/local-session/v1"


def _b64u(data: bytes) -> str:
    """Codifica datos binarios en Base64 URL-safe sin relleno."""

    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def _unb64u(value: str) -> bytes:
    pad = "=" * (-len(value) % 4)
    return base64.urlsafe_b64decode(value + pad)


def derive_session_key(app_secret: bytes, length: int = 32) -> bytes:
    """Deriva la clave de sesión con HKDF-SHA256.

    Args:
        app_secret (bytes): Secreto de la aplicación (``APP_SECRET``).
        length (int): Longitud en bytes de la clave resultante.

    Returns:
        bytes: Clave simétrica para AES-GCM.

    """

    hkdf = HKDF(algorithm=hashes.SHA256(), length=length, salt=None, info=_SESSION_INFO)
    return hkdf.derive(app_secret)


def seal(key: bytes, plaintext: bytes, aad: Optional[bytes] = None) -> str:
    """Cifra y autentica ``plaintext``; devuelve ``nonce || ct || tag`` en Base64 URL-safe."""

    nonce = os.urandom(NONCE_SIZE)
    ct_full = AESGCM(key).encrypt(nonce, plaintext, aad)
    return _b64u(nonce + ct_full)


def unseal(key: bytes, token: str, aad: Optional[bytes] = None) -> bytes:
    """Revierte ``seal``.

    Raises:
        cryptography.exceptions.InvalidTag: Si el token fue alterado o la clave no coincide.
        ValueError: Si el token no es Base64 válido o es demasiado corto.

    """

    raw = _unb64u(token)
    if len(raw) <= NONCE_SIZE:
        raise ValueError("Sealed token too short")
    nonce, ct_full = raw[:NONCE_SIZE], raw[NONCE_SIZE:]
    return AESGCM(key).decrypt(nonce, ct_full, aad)
