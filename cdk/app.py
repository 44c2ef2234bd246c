#!/usr/bin/env python3
import os
import aws_cdk as cdk
from stacks.api_stack import ApiStack

app = cdk.App()

env = cdk.Environment(
    account=os.getenv("CDK_DEFAULT_ACCOUNT"),
    region=os.getenv("CDK_DEFAULT_REGION", "us-east-1")
)

chat_id = app.node.try_get_context("chat_id")
if not chat_id:
    raise SystemExit("Pass the destination chat with -c chat_id=<id>")

# Lambda + API Gateway in front of the Telegram relay
ApiStack(app, "ContactRelayStack",
         env=env,
         bot_token_secret_name=app.node.try_get_context("bot_token_secret_name") or "contact-relay/bot-token",
         chat_id=str(chat_id),
         topic_id=app.node.try_get_context("topic_id"),
         site_name=app.node.try_get_context("site_name"),
         enable_xray=True)

app.synth()
