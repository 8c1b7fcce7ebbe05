from typing import Optional, Sequence

from aws_cdk import CfnOutput, aws_iam as iam, aws_ssm as ssm
from constructs import Construct

from baseline.github_actions import (
    GithubActionsIdentity,
    GithubActionsIdentityProvider,
    GithubActionsPrincipal,
)
from baseline.stack import BaseStack


class DeployRoleStack(BaseStack):
    """
    Role assumed by GitHub Actions workflows to deploy this repository.

    The OIDC provider is imported from the account unless `create_provider`
    is set; only the first stack in an account should create it. Attach the
    permissions the workflow needs through `managed_policy_names`.
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        github_repository: str,
        github_environment: str,
        role_name: str = "example-deploy",
        github_branches: Sequence[str] = (),
        create_provider: bool = False,
        managed_policy_names: Optional[Sequence[str]] = None,
        **kwargs,
    ):
        super().__init__(scope, construct_id, **kwargs)

        if create_provider:
            self.identity_provider = GithubActionsIdentityProvider.create(
                self, "GithubActionsIdentityProvider"
            )
        else:
            self.identity_provider = GithubActionsIdentityProvider.from_stack_account(
                self, "GithubActionsIdentityProvider"
            )

        trusted = [GithubActionsIdentity.from_environment(github_repository, github_environment)]
        trusted += [GithubActionsIdentity.from_heads(github_repository, b) for b in github_branches]
        self.principal = GithubActionsPrincipal(self.identity_provider, trusted)

        self.role = iam.Role(
            self,
            "DeployRole",
            role_name=role_name,
            assumed_by=self.principal.principal,
            managed_policies=[
                iam.ManagedPolicy.from_aws_managed_policy_name(name)
                for name in (managed_policy_names or [])
            ],
        )

        CfnOutput(
            self,
            "DeployRoleArn",
            value=self.role.role_arn,
            description="Role ARN for aws-actions/configure-aws-credentials role-to-assume",
        )
        ssm.StringParameter(
            self,
            "DeployRoleArnParam",
            parameter_name="/cdk-baseline/deploy_role_arn",
            string_value=self.role.role_arn,
        )
