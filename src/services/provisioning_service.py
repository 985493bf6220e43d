"""
Admin agent provisioning.

A staff account is two records in two Data Service subsystems that share
no transaction: an auth identity and a profile row with the same id.
Create writes the identity first; delete removes the profile first.

When the profile insert fails after the identity exists, the identity is
deleted again (compensation) unless ``compensate`` is off. If compensation
itself fails, or is disabled, the error carries the orphaned identity id
and an error log flags it for manual reconciliation.
"""

from __future__ import annotations

from typing import Dict

from models.admin import AgentCreateRequest
from models.profile import Profile, Role
from repositories.identity_repo import IdentityRepository
from repositories.profile_repo import ProfileRepository
from utils.error_handling import ProvisioningError
from utils.logging_config import get_logger
from utils.validators import ensure_present

logger = get_logger(__name__)


class ProvisioningService:
    """Create and remove staff accounts."""

    def __init__(
        self,
        identities: IdentityRepository,
        profiles: ProfileRepository,
        compensate: bool = True,
    ):
        self.identities = identities
        self.profiles = profiles
        self.compensate = compensate

    def create_agent(self, request: AgentCreateRequest) -> str:
        """Provision identity + profile; returns the shared id."""
        ensure_present(request.full_name, "full_name")
        ensure_present(request.email, "email")
        role = request.role.value

        try:
            user_id = self.identities.create_identity(request.email, request.full_name, role)
        except Exception as exc:
            logger.warning("Agent identity step failed", extra={"step": "identity"})
            raise ProvisioningError(
                _message(exc, "Failed to create the authentication user"),
                step="identity",
                status_code=400,
            ) from exc

        try:
            self.profiles.create(
                Profile(id=user_id, full_name=request.full_name, email=request.email, role=Role(role))
            )
        except Exception as exc:
            self._handle_profile_failure(user_id, exc)

        logger.info("Agent provisioned", extra={"agent_id": user_id, "role": role})
        return user_id

    def delete_agent(self, agent_id: str) -> Dict[str, bool]:
        """Remove profile, then identity."""
        ensure_present(agent_id, "id")

        try:
            self.profiles.delete(agent_id)
        except Exception as exc:
            logger.warning("Agent profile removal failed", extra={"agent_id": agent_id})
            raise ProvisioningError(
                _message(exc, "Failed to remove the profile record"),
                step="profile",
                status_code=400,
            ) from exc

        try:
            self.identities.delete_identity(agent_id)
        except Exception as exc:
            logger.error(
                "Agent profile removed but identity remains; needs manual reconciliation",
                extra={"agent_id": agent_id, "step": "identity", "reconcile": True},
            )
            raise ProvisioningError(
                _message(exc, "Failed to remove the authentication user"),
                step="identity",
                status_code=500,
                orphaned_identity_id=agent_id,
            ) from exc

        logger.info("Agent removed", extra={"agent_id": agent_id})
        return {"ok": True}

    def _handle_profile_failure(self, user_id: str, exc: Exception) -> None:
        message = _message(exc, "Failed to create the profile record")

        if not self.compensate:
            logger.warning(
                "Agent profile step failed; identity left in place",
                extra={"agent_id": user_id, "step": "profile", "reconcile": True},
            )
            raise ProvisioningError(
                message, step="profile", status_code=500, orphaned_identity_id=user_id
            ) from exc

        try:
            self.identities.delete_identity(user_id)
        except Exception:
            logger.error(
                "Compensating identity delete failed; needs manual reconciliation",
                extra={"agent_id": user_id, "step": "profile", "reconcile": True},
            )
            raise ProvisioningError(
                message, step="profile", status_code=500, orphaned_identity_id=user_id
            ) from exc

        logger.warning(
            "Agent profile step failed; identity rolled back",
            extra={"agent_id": user_id, "step": "profile"},
        )
        raise ProvisioningError(
            message, step="profile", status_code=500, rolled_back=True
        ) from exc


def _message(exc: Exception, fallback: str) -> str:
    return getattr(exc, "message", None) or str(exc) or fallback
