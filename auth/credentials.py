"""
auth/credentials.py -- Username/password authentication from a request header.

The Authorization header carries "username:password" verbatim. The value is
split on the first ':' so passwords may themselves contain ':'; usernames
cannot (signup rejects them).

authenticate_credentials() verifies identity and stops there. Issuing a
session token is the login endpoint's job (auth.session.start_session).

Layer rule: no imports from api/.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from auth.errors import BadHeaderCount, MissingAuth, NoUser, WrongPassword, from_store_error
from auth.models import AuthOutcome, Credential
from auth.store import UserStore
from auth.tokens import verify_password
from docstore.errors import StoreError

logger = logging.getLogger("accountsvc.auth")


def parse_credential(header_value: str) -> Credential | None:
    """Split "username:password" on the first ':'.

    Returns None when the separator is missing or either side is empty.
    """
    username, sep, password = header_value.partition(":")
    if not sep or not username or not password:
        return None
    return Credential(username=username, password=password)


def verify_credential(credential: Credential, store: UserStore) -> AuthOutcome:
    """Check credential against the stored salt and hash."""
    try:
        user = store.get_by_username(credential.username)
    except StoreError as exc:
        return AuthOutcome.failure(from_store_error(exc))
    if user is None:
        return AuthOutcome.failure(NoUser(credential.username))
    if not verify_password(user.salt, credential.password, user.password_hash):
        return AuthOutcome.failure(WrongPassword(credential.username))
    return AuthOutcome.success(user)


def authenticate_credentials(header_values: Sequence[str], store: UserStore) -> AuthOutcome:
    """Authenticate a request from all of its Authorization header values.

    Zero headers is MissingAuth, more than one is BadHeaderCount. A single
    header that does not parse is MissingAuth.
    """
    if len(header_values) == 0:
        return AuthOutcome.failure(MissingAuth())
    if len(header_values) > 1:
        return AuthOutcome.failure(BadHeaderCount())

    credential = parse_credential(header_values[0])
    if credential is None:
        return AuthOutcome.failure(MissingAuth())

    outcome = verify_credential(credential, store)
    if outcome.ok:
        logger.debug("Credentials accepted for %s", credential.username)
    return outcome
