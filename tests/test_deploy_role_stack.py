from aws_cdk.assertions import Match, Template

from stacks.deploy_role_stack import DeployRoleStack

PROVIDER_ARN = "arn:aws:iam::123456789012:oidc-provider/token.actions.githubusercontent.com"

def _stack(app, env, **kwargs):
    return DeployRoleStack(
        app,
        "DeployRole",
        github_repository="example/sandbox",
        github_environment="production",
        env=env,
        **kwargs,
    )

def test_role_trusts_imported_provider(app, env):
    template = Template.from_stack(_stack(app, env))
    template.resource_count_is("Custom::AWSCDKOpenIdConnectProvider", 0)
    template.has_resource_properties("AWS::IAM::Role", {
        "RoleName": "example-deploy",
        "AssumeRolePolicyDocument": {
            "Statement": [Match.object_like({
                "Principal": {"Federated": PROVIDER_ARN},
                "Condition": {
                    "StringEquals": {"token.actions.githubusercontent.com:aud": "sts.amazonaws.com"},
                    "StringLike": {
                        "token.actions.githubusercontent.com:sub": ["repo:example/sandbox:environment:production"],
                    },
                },
            })],
        },
    })

def test_branches_extend_trusted_subjects(app, env):
    stack = _stack(app, env, github_branches=["main", "release"])
    assert stack.principal.subjects == [
        "repo:example/sandbox:environment:production",
        "repo:example/sandbox:ref:refs/heads/main",
        "repo:example/sandbox:ref:refs/heads/release",
    ]

def test_create_provider(app, env):
    template = Template.from_stack(_stack(app, env, create_provider=True))
    template.resource_count_is("Custom::AWSCDKOpenIdConnectProvider", 1)

def test_managed_policies_attached(app, env):
    template = Template.from_stack(_stack(app, env, managed_policy_names=["PowerUserAccess"]))
    (role,) = template.find_resources("AWS::IAM::Role").values()
    (policy_arn,) = role["Properties"]["ManagedPolicyArns"]
    parts = policy_arn["Fn::Join"][1]
    assert parts[-1].endswith(":iam::aws:policy/PowerUserAccess")

def test_role_arn_published(app, env):
    template = Template.from_stack(_stack(app, env))
    template.has_output("DeployRoleArn", {})
    template.has_resource_properties("AWS::SSM::Parameter", {
        "Name": "/cdk-baseline/deploy_role_arn",
        "Type": "String",
    })
