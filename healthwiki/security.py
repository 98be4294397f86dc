"""
Privacy helpers for request logging.

User prompts are never written to the logs verbatim; they are reduced to a
short fingerprint so repeated queries can still be correlated.
"""

import hashlib
import hmac
from typing import Optional

FINGERPRINT_LENGTH = 16


def prompt_digest(data: str, secret_key: Optional[str] = None) -> str:
    """
    Full hex digest of a prompt for log correlation.

    Keyed with HMAC-SHA256 when APP_SECRET is configured, plain SHA256
    otherwise, so fingerprints cannot be reversed by hashing guesses unless
    the secret is known.

    Args:
        data (str): Text to digest
        secret_key (str, optional): APP_SECRET from settings

    Returns:
        str: 64 hex characters

    Raises:
        TypeError: If data is not a string
    """
    if not isinstance(data, str):
        raise TypeError("Input data must be a string")

    payload = data.encode('utf-8')
    if secret_key:
        return hmac.new(secret_key.encode('utf-8'), payload, hashlib.sha256).hexdigest()
    return hashlib.sha256(payload).hexdigest()


def fingerprint(data: str, secret_key: Optional[str] = None) -> str:
    """Short, log-safe form of prompt_digest."""
    return prompt_digest(data, secret_key)[:FINGERPRINT_LENGTH]
