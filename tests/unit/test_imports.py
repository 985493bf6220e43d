"""
Import validation tests.

These tests ensure all modules can be imported successfully, catching
issues like missing dependencies or circular imports BEFORE deployment.

Run with: pytest tests/unit/test_imports.py -v
"""

import importlib
import sys
from pathlib import Path

import pytest


# Add src to path to simulate Lambda environment
SRC_PATH = Path(__file__).parent.parent.parent / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))


class TestHandlerImports:
    """Verify all handler modules can be imported without errors."""

    @pytest.mark.parametrize("module_name,entrypoint", [
        ("handlers.main", "lambda_handler"),
        ("handlers.health_check", "lambda_handler"),
        ("handlers.auth", "login_handler"),
        ("handlers.tickets", "list_handler"),
        ("handlers.customers", "list_handler"),
        ("handlers.reports", "report_handler"),
        ("handlers.team", "list_handler"),
        ("handlers.email_settings", "get_handler"),
        ("handlers.admin_agents", "create_handler"),
    ])
    def test_handler_import(self, module_name: str, entrypoint: str):
        """Each handler module should import without errors."""
        try:
            module = importlib.import_module(module_name)
            assert hasattr(module, entrypoint), f"{module_name} missing {entrypoint}"
        except ImportError as e:
            pytest.fail(f"Failed to import {module_name}: {e}")

    def test_import_does_not_connect(self):
        """Lazy services stay unset until a request needs them."""
        module = importlib.import_module("handlers.admin_agents")
        assert module._provisioning_service is None


class TestServiceImports:
    """Verify all service modules can be imported."""

    @pytest.mark.parametrize("module_name", [
        "services.aggregation_service",
        "services.auth_service",
        "services.customer_service",
        "services.email_settings_service",
        "services.factory",
        "services.provisioning_service",
        "services.report_service",
        "services.team_service",
        "services.ticket_service",
    ])
    def test_service_import(self, module_name: str):
        """Each service module should import without errors."""
        try:
            importlib.import_module(module_name)
        except ImportError as e:
            pytest.fail(f"Failed to import {module_name}: {e}")


class TestModelImports:
    """Verify all model modules can be imported."""

    @pytest.mark.parametrize("module_name", [
        "models",
        "models.admin",
        "models.email_settings",
        "models.profile",
        "models.report",
        "models.session",
        "models.ticket",
    ])
    def test_model_import(self, module_name: str):
        """Each model module should import without errors."""
        try:
            importlib.import_module(module_name)
        except ImportError as e:
            pytest.fail(f"Failed to import {module_name}: {e}")


class TestRepositoryAndUtilImports:
    """Verify repository and utility modules can be imported."""

    @pytest.mark.parametrize("module_name", [
        "repositories.connections",
        "repositories.identity_repo",
        "repositories.postgres_repo",
        "repositories.profile_repo",
        "repositories.schema",
        "repositories.settings_repo",
        "repositories.ticket_repo",
        "utils.auth_guard",
        "utils.cache_service",
        "utils.config",
        "utils.error_handling",
        "utils.http",
        "utils.logging_config",
        "utils.validators",
    ])
    def test_module_import(self, module_name: str):
        try:
            importlib.import_module(module_name)
        except ImportError as e:
            pytest.fail(f"Failed to import {module_name}: {e}")


class TestNoSrcPrefix:
    """Ensure no modules use 'from src.' imports (breaks in Lambda)."""

    @pytest.mark.parametrize("package", ["handlers", "services", "models", "repositories", "utils"])
    def test_no_src_prefix(self, package: str):
        for py_file in (SRC_PATH / package).glob("*.py"):
            content = py_file.read_text()
            assert "from src." not in content, f"{py_file.name} contains 'from src.' import"
            assert "import src." not in content, f"{py_file.name} contains 'import src.' import"
