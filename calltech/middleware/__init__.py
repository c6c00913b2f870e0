"""
Request authentication: session resolution, the access gate, and the
route dependencies that resolve the caller's tenant.
"""

from .auth import (
    get_current_identity,
    get_tenant,
    require_org_access,
)
from .gate import AccessGateMiddleware
from .session import SessionIdentity, SessionResolver, SessionResult

__all__ = [
    "AccessGateMiddleware",
    "SessionIdentity",
    "SessionResolver",
    "SessionResult",
    "get_current_identity",
    "get_tenant",
    "require_org_access",
]
