import aws_cdk as cdk
import pytest

ACCOUNT = "123456789012"
REGION = "eu-west-2"

@pytest.fixture
def app():
    return cdk.App()

@pytest.fixture
def env():
    return cdk.Environment(account=ACCOUNT, region=REGION)

@pytest.fixture
def stack(app, env):
    return cdk.Stack(app, "TestStack", env=env)

@pytest.fixture(autouse=True)
def no_ambient_cdk_env(monkeypatch):
    monkeypatch.delenv("CDK_DEFAULT_ACCOUNT", raising=False)
    monkeypatch.delenv("CDK_DEFAULT_REGION", raising=False)
