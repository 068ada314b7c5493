"""
auth/models.py -- Domain dataclass for the user record behind a token.

Pattern: Data class (pure data container, zero logic). Mirrors
board/models.py -- dataclasses own domain shape; stores and routes do the work.

Layer rule: no imports from api/ or board/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """A registered principal, owned by the credential store.

    token is opaque and case-sensitive. It is provisioned out of band; this
    service only checks that it exists and echoes it back on GET /users.
    """

    surname: str
    email: str
    token: str
    status: str = "aktiv"
    id: int | None = None
