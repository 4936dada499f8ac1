"""
Authorization gate.

Pure decisions over an already-resolved identity. Roles are flat: a route
that requires `staff` admits staff only, not admins.
"""
from newsdesk.core.errors import PermissionDenied, Unauthenticated
from newsdesk.storage.records import ROLES, AccountProfile


def check_authenticated(identity: AccountProfile | None) -> AccountProfile:
    if identity is None:
        raise Unauthenticated()
    return identity


def check_role(identity: AccountProfile | None, role: str) -> AccountProfile:
    if role not in ROLES:
        raise ValueError(f"unknown role: {role}")
    identity = check_authenticated(identity)
    if identity.role != role:
        raise PermissionDenied()
    return identity
