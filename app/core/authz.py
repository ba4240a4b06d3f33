"""
Authorization policy for the bootstrap super-admin identity.

The policy is built from settings by a FastAPI dependency and passed
explicitly into the services that need it, so tests can substitute a
different identity without touching the process environment.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AuthorizationPolicy:
    super_admin_email: str = ""

    @property
    def bootstrap_configured(self) -> bool:
        return bool(self.super_admin_email)

    def is_bootstrap_super_admin(self, email: str | None) -> bool:
        """True when *email* is the configured super-admin identity."""
        if not self.super_admin_email or not email:
            return False
        return email.strip().lower() == self.super_admin_email.strip().lower()
