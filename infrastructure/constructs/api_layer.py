"""
API layer construct: shared Lambda + HTTP API routes.

A single Lambda keeps warm caches and reduces cold start costs.
Uses Docker bundling for dependencies (runs in CI/CD pipeline).
"""

from typing import Dict, Sequence

from aws_cdk import (
    BundlingOptions,
    Duration,
    aws_lambda as _lambda,
    aws_apigatewayv2 as apigw,
    aws_apigatewayv2_integrations as integrations,
    aws_logs as logs,
)
from constructs import Construct

# Mirrors handlers.main.ROUTES; the Lambda does the fine-grained dispatch.
ROUTE_DEFS = (
    (apigw.HttpMethod.GET, "/health"),
    (apigw.HttpMethod.POST, "/api/auth/login"),
    (apigw.HttpMethod.POST, "/api/auth/logout"),
    (apigw.HttpMethod.GET, "/api/auth/me"),
    (apigw.HttpMethod.GET, "/api/tickets"),
    (apigw.HttpMethod.POST, "/api/tickets"),
    (apigw.HttpMethod.GET, "/api/tickets/{id}"),
    (apigw.HttpMethod.PATCH, "/api/tickets/{id}"),
    (apigw.HttpMethod.GET, "/api/tickets/{id}/messages"),
    (apigw.HttpMethod.POST, "/api/tickets/{id}/messages"),
    (apigw.HttpMethod.GET, "/api/customers"),
    (apigw.HttpMethod.POST, "/api/customers"),
    (apigw.HttpMethod.GET, "/api/reports"),
    (apigw.HttpMethod.GET, "/api/dashboard"),
    (apigw.HttpMethod.GET, "/api/team"),
    (apigw.HttpMethod.PATCH, "/api/team/{id}"),
    (apigw.HttpMethod.POST, "/api/team/{id}/password-reset"),
    (apigw.HttpMethod.PATCH, "/api/profile"),
    (apigw.HttpMethod.GET, "/api/settings/email"),
    (apigw.HttpMethod.PUT, "/api/settings/email"),
    (apigw.HttpMethod.POST, "/api/settings/email/test"),
    (apigw.HttpMethod.POST, "/api/admin/agents"),
    (apigw.HttpMethod.DELETE, "/api/admin/agents/{id}"),
)


class ApiLayerConstruct(Construct):
    """Expose help desk endpoints via HTTP API."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        environment: str,
        app_secret_arn: str,
        extra_environment: Dict[str, str],
        cors_allow_origins: Sequence[str] = ("*",),
        lambda_memory_mb: int = 512,
        lambda_timeout_seconds: int = 30,
    ) -> None:
        super().__init__(scope, construct_id)

        # Bundle Lambda code with dependencies using Docker (works in CI/CD)
        # Installs pydantic, sqlalchemy, psycopg2-binary, supabase, imap-tools
        bundled_code = _lambda.Code.from_asset(
            "src",
            bundling=BundlingOptions(
                image=_lambda.Runtime.PYTHON_3_12.bundling_image,
                command=[
                    "bash", "-c",
                    "pip install -r requirements-lambda.txt -t /asset-output && "
                    "cp -r . /asset-output"
                ],
            ),
        )

        self.main_lambda = _lambda.Function(
            self,
            "ApiHandler",
            runtime=_lambda.Runtime.PYTHON_3_12,
            handler="handlers.main.lambda_handler",
            code=bundled_code,
            memory_size=lambda_memory_mb,
            timeout=Duration.seconds(lambda_timeout_seconds),
            architecture=_lambda.Architecture.X86_64,
            environment={
                "ENVIRONMENT": environment,
                "APP_SECRET_ARN": app_secret_arn,
                **{k: v for k, v in extra_environment.items() if v},
            },
            log_retention=logs.RetentionDays.ONE_WEEK,
        )

        # HTTP API with minimal latency and low cost.
        self.api = apigw.HttpApi(
            self,
            "HttpApi",
            api_name=f"helpdesk-api-{environment}",
            cors_preflight=apigw.CorsPreflightOptions(
                allow_origins=list(cors_allow_origins),
                allow_methods=[apigw.CorsHttpMethod.ANY],
                allow_headers=["Authorization", "Content-Type", "X-Language"],
            ),
        )

        integration = integrations.HttpLambdaIntegration(
            "LambdaIntegration", self.main_lambda
        )

        for method, path in ROUTE_DEFS:
            self.api.add_routes(
                path=path,
                methods=[method],
                integration=integration,
            )
