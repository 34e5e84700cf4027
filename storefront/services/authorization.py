"""Who is calling, and what may they do to this order.

Admin status comes from a role source. The primary source is the
``user_profiles`` table; when that table isn't provisioned the
``FallbackRoleSource`` asks the identity provider's own user record instead.
Each source can be used and tested on its own.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.core.config import settings
from storefront.core.errors import ServerError
from storefront.core.security import bearer_token, decode_token
from storefront.models.order import Order
from storefront.models.user import User, UserProfile


class RoleTableUnavailable(Exception):
    """The role lookup table doesn't exist in this database."""


def _is_missing_table(exc: SQLAlchemyError) -> bool:
    orig = getattr(exc, "orig", None)
    if getattr(orig, "pgcode", None) == "42P01":
        return True
    return "no such table" in str(orig or exc).lower()


class ProfileRoleSource:
    def __init__(self, db: Session):
        self.db = db

    def role_for(self, user_id: str) -> Optional[str]:
        try:
            profile = self.db.query(UserProfile).filter(UserProfile.user_id == user_id).first()
        except SQLAlchemyError as e:
            self.db.rollback()
            if _is_missing_table(e):
                raise RoleTableUnavailable(str(e)) from e
            raise
        return profile.role if profile else None


class MetadataRoleSource:
    """Reads a role claim from the identity provider's user metadata"""

    def __init__(self, db: Session):
        self.db = db

    def role_for(self, user_id: str) -> Optional[str]:
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            return None
        return (user.user_metadata or {}).get("role") or (user.app_metadata or {}).get("role")


class FallbackRoleSource:
    def __init__(self, primary, fallback):
        self.primary = primary
        self.fallback = fallback

    def role_for(self, user_id: str) -> Optional[str]:
        try:
            return self.primary.role_for(user_id)
        except RoleTableUnavailable:
            logging.warning("Role table unavailable, checking user metadata for %s", user_id)
            return self.fallback.role_for(user_id)


def default_role_source(db: Session) -> FallbackRoleSource:
    return FallbackRoleSource(ProfileRoleSource(db), MetadataRoleSource(db))


@dataclass(frozen=True)
class Caller:
    user_id: Optional[str] = None
    guest_session_id: Optional[str] = None


@dataclass(frozen=True)
class Access:
    is_admin: bool = False
    is_owner_or_guest: bool = False


def identify_caller(db: Session, authorization: Optional[str], guest_session_id: Optional[str] = None) -> Caller:
    """Turn the Authorization header into a known user, or an anonymous caller"""
    user_id = None
    token = bearer_token(authorization)
    if token:
        claimed = decode_token(token)
        if claimed and db.query(User.id).filter(User.id == claimed).first():
            user_id = claimed
    return Caller(user_id=user_id, guest_session_id=guest_session_id or None)


class AuthorizationResolver:
    def __init__(self, role_source, admin_roles=None):
        self.role_source = role_source
        self.admin_roles = frozenset(admin_roles or settings.ADMIN_ROLES)

    def is_admin(self, user_id: Optional[str]) -> bool:
        if not user_id:
            return False
        try:
            role = self.role_source.role_for(user_id)
        except SQLAlchemyError as e:
            logging.error("Error checking admin status for %s: %s", user_id, e)
            raise ServerError("Failed to verify admin permissions") from e
        return role in self.admin_roles

    def resolve(self, caller: Caller, order: Order) -> Access:
        is_owner = caller.user_id is not None and caller.user_id == order.user_id
        is_guest = (
            caller.guest_session_id is not None
            and order.guest_session_id is not None
            and caller.guest_session_id == order.guest_session_id
        )
        return Access(is_admin=self.is_admin(caller.user_id), is_owner_or_guest=is_owner or is_guest)
