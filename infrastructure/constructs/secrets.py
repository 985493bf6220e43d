"""
Secrets construct: Data Service credentials for the API Lambda.

The secret is created empty-ish; operators fill in the real values after
the first deploy:

    {"host": ..., "port": 5432, "username": ..., "password": ..., "dbname": "postgres",
     "supabase_url": ..., "supabase_service_role_key": ..., "supabase_anon_key": ...}
"""

import json

from aws_cdk import RemovalPolicy, SecretValue, aws_secretsmanager as secretsmanager
from constructs import Construct

SECRET_KEYS = (
    "host",
    "port",
    "username",
    "password",
    "dbname",
    "supabase_url",
    "supabase_service_role_key",
    "supabase_anon_key",
)


class SecretsConstruct(Construct):
    """Provision the app secret read by utils.config at cold start."""

    def __init__(self, scope: Construct, construct_id: str, *, environment: str) -> None:
        super().__init__(scope, construct_id)

        placeholder = {key: "" for key in SECRET_KEYS}
        placeholder.update({"port": "5432", "dbname": "postgres"})

        self.app_secret = secretsmanager.Secret(
            self,
            "DataServiceCredentials",
            secret_name=f"helpdesk/{environment}/data-service",
            description="Hosted Postgres and auth API credentials for the help desk API",
            secret_string_value=SecretValue.unsafe_plain_text(json.dumps(placeholder)),
            removal_policy=RemovalPolicy.RETAIN if environment == "prod" else RemovalPolicy.DESTROY,
        )
