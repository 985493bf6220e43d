"""
Agent provisioning tests.

The identity and profile repositories are mocked; the profile side uses a
real SQLite-backed repository where listing after a failure matters.

Run with: pytest tests/unit/test_provisioning.py -v
"""

from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError

from models.admin import AgentCreateRequest
from models.profile import Role
from repositories.profile_repo import ProfileRepository
from services.provisioning_service import ProvisioningService
from utils.error_handling import DataServiceError, ProvisioningError


@pytest.fixture
def identities():
    repo = MagicMock()
    repo.create_identity.return_value = "agent-1"
    return repo


def _request(**overrides):
    data = {"full_name": "Ana Souza", "email": "Ana@Example.com", "role": "agent"}
    data.update(overrides)
    return AgentCreateRequest.model_validate(data)


class TestAgentCreateRequest:
    def test_blank_name_rejected_before_any_remote_call(self, identities):
        with pytest.raises(ValidationError) as exc_info:
            _request(full_name="")
        assert "full_name and email are required" in str(exc_info.value)
        identities.create_identity.assert_not_called()

    def test_missing_email_uses_same_message(self):
        with pytest.raises(ValidationError) as exc_info:
            AgentCreateRequest.model_validate({"full_name": "Ana"})
        assert "full_name and email are required" in str(exc_info.value)

    def test_role_defaults_to_agent(self):
        assert _request(role="").role.value == "agent"
        assert _request(role="ADMIN").role.value == "admin"

    def test_customer_role_is_not_allowed(self):
        with pytest.raises(ValidationError):
            _request(role="customer")


class TestCreateAgent:
    def test_success_writes_identity_then_profile(self, identities):
        profiles = MagicMock()
        service = ProvisioningService(identities, profiles)

        agent_id = service.create_agent(_request())

        assert agent_id == "agent-1"
        identities.create_identity.assert_called_once_with("ana@example.com", "Ana Souza", "agent")
        created = profiles.create.call_args[0][0]
        assert created.id == "agent-1"
        assert created.role == Role.AGENT

    def test_identity_failure_is_400_and_skips_profile(self, identities):
        identities.create_identity.side_effect = DataServiceError("User already registered")
        profiles = MagicMock()

        with pytest.raises(ProvisioningError) as exc_info:
            ProvisioningService(identities, profiles).create_agent(_request())

        assert exc_info.value.status_code == 400
        assert exc_info.value.step == "identity"
        assert exc_info.value.message == "User already registered"
        profiles.create.assert_not_called()

    def test_profile_failure_rolls_back_identity(self, identities, engine):
        profiles = ProfileRepository(engine)
        profiles.create = MagicMock(side_effect=DataServiceError("Database error: IntegrityError"))

        with pytest.raises(ProvisioningError) as exc_info:
            ProvisioningService(identities, profiles).create_agent(_request())

        error = exc_info.value
        assert error.status_code == 500
        assert error.step == "profile"
        assert error.rolled_back is True
        assert error.orphaned_identity_id is None
        identities.delete_identity.assert_called_once_with("agent-1")
        assert ProfileRepository(engine).list_by_roles([Role.AGENT]) == []

    def test_profile_failure_without_compensation_reports_orphan(self, identities):
        profiles = MagicMock()
        profiles.create.side_effect = DataServiceError("Database error: OperationalError")

        with pytest.raises(ProvisioningError) as exc_info:
            ProvisioningService(identities, profiles, compensate=False).create_agent(_request())

        assert exc_info.value.orphaned_identity_id == "agent-1"
        assert exc_info.value.to_body()["orphaned_identity_id"] == "agent-1"
        identities.delete_identity.assert_not_called()

    def test_failed_compensation_reports_orphan(self, identities):
        profiles = MagicMock()
        profiles.create.side_effect = DataServiceError("Database error: OperationalError")
        identities.delete_identity.side_effect = DataServiceError("auth down")

        with pytest.raises(ProvisioningError) as exc_info:
            ProvisioningService(identities, profiles).create_agent(_request())

        assert exc_info.value.rolled_back is False
        assert exc_info.value.orphaned_identity_id == "agent-1"
        assert exc_info.value.message == "Database error: OperationalError"


class TestDeleteAgent:
    def test_success_removes_profile_then_identity(self, identities):
        calls = []
        profiles = MagicMock()
        profiles.delete.side_effect = lambda agent_id: calls.append(("profile", agent_id))
        identities.delete_identity.side_effect = lambda agent_id: calls.append(("identity", agent_id))

        result = ProvisioningService(identities, profiles).delete_agent("agent-1")

        assert result == {"ok": True}
        assert calls == [("profile", "agent-1"), ("identity", "agent-1")]

    def test_profile_failure_is_400_and_keeps_identity(self, identities):
        profiles = MagicMock()
        profiles.delete.side_effect = DataServiceError("Database error: OperationalError")

        with pytest.raises(ProvisioningError) as exc_info:
            ProvisioningService(identities, profiles).delete_agent("agent-1")

        assert exc_info.value.status_code == 400
        assert exc_info.value.step == "profile"
        identities.delete_identity.assert_not_called()

    def test_identity_failure_leaves_profile_removed(self, identities, engine):
        from models.profile import Profile

        profiles = ProfileRepository(engine)
        profiles.create(Profile(id="agent-1", full_name="Ana", email="ana@example.com", role=Role.AGENT))
        identities.delete_identity.side_effect = DataServiceError("auth down")

        with pytest.raises(ProvisioningError) as exc_info:
            ProvisioningService(identities, profiles).delete_agent("agent-1")

        assert exc_info.value.status_code == 500
        assert exc_info.value.orphaned_identity_id == "agent-1"
        assert profiles.list_by_roles([Role.AGENT]) == []
