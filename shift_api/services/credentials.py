"""
Credential verification behind a single-method contract, so the login route
never knows how secrets are stored.

Install a different implementation with
    app.extensions["credential_verifier"] = MyVerifier()
"""
from __future__ import annotations

import logging
from typing import Protocol

from flask import current_app

from shift_api.models.user import User

log = logging.getLogger(__name__)


class CredentialVerifier(Protocol):
    def verify(self, identity: str, secret: str) -> bool: ...


class PasswordHashVerifier:
    """Checks against the salted Werkzeug hash stored on User."""

    def verify(self, identity: str, secret: str) -> bool:
        if not identity or not secret:
            return False
        u = User.query.filter_by(username=identity).first()
        if u is None:
            log.info("login failed: unknown user %r", identity)
            return False
        if not u.check_password(secret):
            log.info("login failed: bad password for %r", identity)
            return False
        return True


def get_verifier() -> CredentialVerifier:
    v = current_app.extensions.get("credential_verifier")
    if v is None:
        v = PasswordHashVerifier()
        current_app.extensions["credential_verifier"] = v
    return v
