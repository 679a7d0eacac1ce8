import base64
import hashlib
import secrets
from dataclasses import dataclass

from listings_hub.core.config import settings


@dataclass(frozen=True)
class SessionTokenParts:
    prefix: str
    plain: str
    hashed: str


def generate_session_token(prefix_len: int = 8) -> SessionTokenParts:
    # Example: st_<prefix>_<random>
    raw = secrets.token_urlsafe(32)
    prefix = raw[:prefix_len]
    plain = f"st_{prefix}_{raw}"
    hashed = hash_session_token(plain)
    return SessionTokenParts(prefix=prefix, plain=plain, hashed=hashed)


def hash_session_token(plain: str) -> str:
    # Pepper protects against rainbow tables if DB leaks.
    salted = (plain + settings.session_token_pepper.get_secret_value()).encode("utf-8")
    digest = hashlib.sha256(salted).digest()
    return base64.b64encode(digest).decode("utf-8")
