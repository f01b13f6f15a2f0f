"""
Session Context
Who the caller is, plus scratch space for handing drafts between steps
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from supabase import AuthError

from cookbook.core.errors import NotAuthenticatedError

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """Per-caller context passed explicitly into the repository and API"""
    user_id: Optional[str] = None
    access_token: Optional[str] = None
    drafts: dict[str, Any] = field(default_factory=dict)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.user_id)

    def require_user(self) -> str:
        if not self.user_id:
            raise NotAuthenticatedError()
        return self.user_id

    def save_draft(self, key: str, value: Any) -> None:
        """Keep a draft recipe or result list for the next step"""
        self.drafts[key] = value

    def peek_draft(self, key: str) -> Any:
        return self.drafts.get(key)

    def pop_draft(self, key: str) -> Any:
        """Take a draft out; it is gone afterwards"""
        return self.drafts.pop(key, None)


def session_from_token(client, token: Optional[str]) -> Session:
    """
    Resolve a bearer token to a Session via Supabase auth.

    A missing or rejected token gives an anonymous session; operations that
    need an owner then fail with NotAuthenticatedError.
    """
    if not token:
        return Session()

    try:
        response = client.auth.get_user(token)
    except AuthError as e:
        logger.warning("Token rejected by auth backend: %s", e)
        return Session(access_token=token)

    user = getattr(response, "user", None)
    if user is None:
        return Session(access_token=token)
    return Session(user_id=user.id, access_token=token)
