"""
Sealing of cluster credentials at rest.

An environment's kubernetes token is stored as a Fernet token. The Fernet key
is derived with PBKDF2-SHA256 from the ENCRYPTION_KEY master secret, salted
with the environment name, so a token sealed for one environment never opens
under another environment's key.

The salt is tied to the name an environment was registered under; since
environments are append-only that name never changes.
"""
import base64
from functools import lru_cache

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from deploy_tracker.config import settings

SALT_PREFIX = "environment:"
KDF_ITERATIONS = 100_000


@lru_cache(maxsize=None)
def _cipher_for(environment_name: str) -> Fernet:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=f"{SALT_PREFIX}{environment_name}".encode(),
        iterations=KDF_ITERATIONS,
    )
    return Fernet(base64.urlsafe_b64encode(kdf.derive(settings.ENCRYPTION_KEY.encode())))


def _require_name(environment_name: str):
    if not environment_name:
        raise ValueError("environment name required to derive the credential key")


def seal_credential(credential: str, environment_name: str) -> str:
    """
    Encrypt a cluster credential for storage on the named environment.

    An empty credential is stored as an empty string.
    """
    if not credential:
        return ""
    _require_name(environment_name)
    return _cipher_for(environment_name).encrypt(credential.encode()).decode()


def open_credential(sealed: str, environment_name: str) -> str:
    """
    Decrypt a credential sealed by seal_credential().

    Raises:
        ValueError: the token was sealed for another environment, under
            another master key, or is corrupted
    """
    if not sealed:
        return ""
    _require_name(environment_name)
    try:
        return _cipher_for(environment_name).decrypt(sealed.encode()).decode()
    except InvalidToken:
        raise ValueError(
            f"Cannot open credential of environment '{environment_name}': "
            f"wrong ENCRYPTION_KEY or corrupted data"
        ) from None


def clear_key_cache():
    """Forget derived keys, e.g. after ENCRYPTION_KEY rotation."""
    _cipher_for.cache_clear()
