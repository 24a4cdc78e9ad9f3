"""
Role Policy
-----------
Decides the role of a newly registered account from configuration.

ADMIN is granted only to emails listed in AUTH_ADMIN_EMAILS; every grant is
written to the log so role seeding stays auditable. Existing accounts are
promoted with ``scripts/bootstrap_admin.py`` instead.
"""

from typing import Iterable

from loguru import logger

from session_auth.core.config_manager import ApplicationSettings
from session_auth.models.users_model import UserRole


class RolePolicy:
    def __init__(
        self,
        default_role: UserRole = UserRole.USER,
        admin_emails: Iterable[str] = (),
    ):
        self.default_role = UserRole(default_role)
        self.admin_emails = frozenset(email.strip().lower() for email in admin_emails)

    @classmethod
    def from_settings(cls, settings: ApplicationSettings) -> "RolePolicy":
        return cls(
            default_role=UserRole(settings.auth_default_role),
            admin_emails=settings.admin_email_list,
        )

    def role_for_new_user(self, email: str) -> UserRole:
        if email.strip().lower() in self.admin_emails:
            logger.warning(
                f"Role seeding: granting {UserRole.ADMIN.value} to {email} (AUTH_ADMIN_EMAILS)"
            )
            return UserRole.ADMIN
        return self.default_role
