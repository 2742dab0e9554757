"""Шифрование API-токенов Exotel (Fernet)."""
import base64
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from apps.backend.config import get_settings


def _get_fernet(secret: str) -> Fernet:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=b"exotel_whatsapp_credentials",
        iterations=100000,
    )
    key = base64.urlsafe_b64encode(kdf.derive(secret.encode()))
    return Fernet(key)


def encryption_key() -> str:
    s = get_settings()
    return s.credential_encryption_key or s.secret_key


def encrypt_token(plain: str, key: str | None = None) -> str:
    if not plain:
        return ""
    f = _get_fernet(key or encryption_key())
    return f.encrypt(plain.encode()).decode()


def decrypt_token(cipher: str, key: str | None = None) -> Optional[str]:
    if not cipher:
        return None
    try:
        f = _get_fernet(key or encryption_key())
        return f.decrypt(cipher.encode()).decode()
    except InvalidToken:
        return None


def mask_token(token: Optional[str]) -> str:
    if not token or len(token) < 4:
        return "****"
    return "****" + token[-4:]
