"""
Help desk stack: one secret for the Data Service keys and the API Lambda.

Tickets, profiles and identities live in the hosted Data Service, so the
stack owns no database resources of its own.
"""

from aws_cdk import CfnOutput, Stack, Tags
from constructs import Construct

from infrastructure.config.settings import Settings
from infrastructure.constructs.api_layer import ApiLayerConstruct
from infrastructure.constructs.secrets import SecretsConstruct


class HelpDeskStack(Stack):
    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        settings: Settings,
        **kwargs,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        for key, value in (
            ("Project", "helpdesk"),
            ("Environment", settings.environment),
            ("ManagedBy", "cdk"),
        ):
            Tags.of(self).add(key, value)

        secrets = SecretsConstruct(self, "Secrets", environment=settings.environment)
        app_secret = secrets.app_secret

        api = ApiLayerConstruct(
            self,
            "ApiLayer",
            environment=settings.environment,
            app_secret_arn=app_secret.secret_arn,
            extra_environment=settings.lambda_environment(),
            cors_allow_origins=settings.cors_allow_origins,
            lambda_memory_mb=settings.lambda_memory_mb,
            lambda_timeout_seconds=settings.lambda_timeout_seconds,
        )

        # The Lambda resolves DATABASE_URL and the Data Service keys from this secret.
        app_secret.grant_read(api.main_lambda)

        CfnOutput(self, "ApiEndpoint", value=api.api.api_endpoint)
        CfnOutput(self, "AppSecretArn", value=app_secret.secret_arn)
