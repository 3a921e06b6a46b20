"""
Identity mapping.

Sign-in itself is handled by the hosted OpenID Connect provider configured
for Streamlit (`st.login` / `st.logout`). This module turns the claims it
returns into our User.
"""

import hashlib
from typing import Any, Mapping, Optional

from finfamily.models.user import User


DEFAULT_USER_NAME = "Usuário"


def user_from_claims(claims: Mapping[str, Any]) -> Optional[User]:
    """
    Build a User from identity-provider claims.

    Returns None when the claims don't identify anyone (signed out).

    The id is the provider's stable `sub` claim; providers that don't send
    one fall back to a hash of the e-mail address so the id is still stable.
    """
    if not claims.get("is_logged_in", True):
        return None

    email = (claims.get("email") or "").strip()
    subject = (claims.get("sub") or "").strip()

    if subject:
        user_id = subject
    elif email:
        user_id = hashlib.sha256(email.lower().encode("utf-8")).hexdigest()[:32]
    else:
        return None

    name = (
        claims.get("name")
        or claims.get("full_name")
        or email
        or DEFAULT_USER_NAME
    ).strip()

    return User(id=user_id, name=name or DEFAULT_USER_NAME, email=email)
