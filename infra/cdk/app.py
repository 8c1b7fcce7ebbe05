#!/usr/bin/env python3
import logging

import aws_cdk as cdk

from app_context import context_flag, context_list
from stacks.deploy_role_stack import DeployRoleStack
from stacks.network_stack import NetworkStack


app = cdk.App()

logging.basicConfig(
    level=(app.node.try_get_context("log_level") or "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

region = app.node.try_get_context("region")
env = cdk.Environment(region=region) if region else None

network_stack = NetworkStack(app, "BaselineNetworkStack", env=env)

deploy_role_stack = DeployRoleStack(
    app,
    "BaselineDeployRoleStack",
    github_repository=app.node.try_get_context("github_repository") or "example/sandbox",
    github_environment=app.node.try_get_context("github_environment") or "production",
    role_name=app.node.try_get_context("deploy_role_name") or "example-deploy",
    github_branches=context_list(app, "github_branches"),
    create_provider=context_flag(app, "create_oidc_provider"),
    managed_policy_names=context_list(app, "deploy_role_managed_policies"),
    env=env,
)

cdk.Tags.of(app).add("Project", "CdkBaseline")
cdk.Tags.of(app).add("ManagedBy", "cdk")

app.synth()
