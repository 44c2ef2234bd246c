from typing import Optional
from aws_cdk import (
    Stack,
    Duration,
    BundlingOptions,
    CfnOutput,
    aws_apigateway as apigw,
    aws_lambda as _lambda,
    aws_logs as logs,
    aws_secretsmanager as secretsmanager,
    aws_xray as xray,
)
from constructs import Construct

# Installs the lead_notifier package next to the Lambda entry point
BUNDLE_COMMAND = "pip install --no-cache-dir /asset-input -t /asset-output && cp /asset-input/functions/contact.py /asset-output/"


class ApiStack(Stack):
    def __init__(self, scope: Construct, construct_id: str,
                 bot_token_secret_name: str,
                 chat_id: str,
                 topic_id: Optional[str] = None,
                 site_name: Optional[str] = None,
                 enable_xray: bool = True,
                 **kwargs) -> None:
        super().__init__(scope, construct_id, **kwargs)

        # Bot token lives in Secrets Manager, never in the function environment
        bot_token = secretsmanager.Secret.from_secret_name_v2(self, "BotToken", bot_token_secret_name)

        env = {
            "BOT_TOKEN_SECRET_ID": bot_token.secret_arn,
            "CHAT_ID": chat_id,
            "ENABLE_CORS": "true",
            "SUPPORTS_TOPICS": "true",
        }
        if topic_id:
            env["TOPIC_ID"] = str(topic_id)
        if site_name:
            env["SITE_NAME"] = site_name

        runtime = _lambda.Runtime.PYTHON_3_12

        contact_fn = _lambda.Function(self, "ContactFn",
                                      runtime=runtime,
                                      handler="contact.handler",
                                      code=_lambda.Code.from_asset("..",
                                                                   exclude=["cdk", "cdk.out", "tests", ".git", ".venv", "*.md"],
                                                                   bundling=BundlingOptions(
                                                                       image=runtime.bundling_image,
                                                                       command=["bash", "-c", BUNDLE_COMMAND])),
                                      environment=env,
                                      timeout=Duration.seconds(10),
                                      tracing=_lambda.Tracing.ACTIVE if enable_xray else _lambda.Tracing.DISABLED,
                                      log_retention=logs.RetentionDays.TWO_WEEKS)

        bot_token.grant_read(contact_fn)

        # API Gateway
        api = apigw.RestApi(self, "HttpApi",
                            deploy_options=apigw.StageOptions(metrics_enabled=True, logging_level=apigw.MethodLoggingLevel.INFO, tracing_enabled=enable_xray),
                            cloud_watch_role=True)

        # /api/contact, preflight answered by the function itself
        contact = api.root.add_resource("api").add_resource("contact")
        contact_lambda_integration = apigw.LambdaIntegration(contact_fn, proxy=True)
        contact.add_method("POST", contact_lambda_integration)
        contact.add_method("OPTIONS", contact_lambda_integration)

        # X-Ray enable
        if enable_xray:
            xray.CfnSamplingRule(self, "DefaultSampling",
                                 sampling_rule=xray.CfnSamplingRule.SamplingRuleProperty(
                                     rule_name="ContactRule",
                                     resource_arn="*",
                                     priority=10000,
                                     fixed_rate=0.1,
                                     reservoir_size=1,
                                     service_name="*",
                                     service_type="*",
                                     host="*",
                                     http_method="*",
                                     url_path="*",
                                     version=1))

        CfnOutput(self, "ContactEndpoint", value=f"{api.url}api/contact")
