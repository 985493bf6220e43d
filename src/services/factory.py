"""
Service construction from the shared connections and config.

Handlers call these lazily so nothing connects at import time.
"""

from repositories.connections import get_admin_client, get_auth_client, get_db_engine
from repositories.identity_repo import IdentityRepository
from repositories.profile_repo import ProfileRepository
from repositories.settings_repo import EmailSettingsRepository
from repositories.ticket_repo import MessageRepository, TicketRepository
from utils.cache_service import LRUCache
from utils.config import get_config


def _identities() -> IdentityRepository:
    return IdentityRepository(get_admin_client(), get_auth_client())


def _profiles() -> ProfileRepository:
    return ProfileRepository(get_db_engine())


def build_auth_service():
    from services.auth_service import AuthService

    return AuthService(_identities(), _profiles(), default_language=get_config().default_language)


def build_ticket_service():
    from services.ticket_service import TicketService

    engine = get_db_engine()
    return TicketService(TicketRepository(engine), MessageRepository(engine), _profiles())


def build_customer_service():
    from services.customer_service import CustomerService

    return CustomerService(_profiles())


def build_report_service():
    from services.report_service import ReportService

    config = get_config()
    cache = LRUCache(
        max_size=config.report_cache_max_size,
        ttl_seconds=config.report_cache_ttl_seconds,
    )
    return ReportService(TicketRepository(get_db_engine()), cache=cache)


def build_team_service():
    from services.team_service import TeamService

    return TeamService(
        _profiles(),
        _identities(),
        password_reset_redirect_url=get_config().password_reset_redirect_url,
    )


def build_email_settings_service():
    from services.email_settings_service import EmailSettingsService

    return EmailSettingsService(EmailSettingsRepository(get_db_engine()))


def build_provisioning_service():
    from services.provisioning_service import ProvisioningService

    return ProvisioningService(
        IdentityRepository(get_admin_client()),
        _profiles(),
        compensate=get_config().compensate_failed_provisioning,
    )
