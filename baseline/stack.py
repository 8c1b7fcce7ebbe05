import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

import aws_cdk as cdk
from constructs import Construct

logger = logging.getLogger(__name__)

ACCOUNT_VARIABLE = "CDK_DEFAULT_ACCOUNT"
REGION_VARIABLE = "CDK_DEFAULT_REGION"


@dataclass(frozen=True)
class StackDefaults:
    """
    Account and region a stack is deployed to.

    Fields left as None are filled from CDK_DEFAULT_ACCOUNT and
    CDK_DEFAULT_REGION, which the CDK CLI sets from the active credentials.
    """

    account: Optional[str] = None
    region: Optional[str] = None

    @classmethod
    def from_cdk_environment(cls, env: Optional[cdk.Environment]) -> "StackDefaults":
        if env is None:
            return cls()
        return cls(account=env.account, region=env.region)

    def resolve(self, environ: Mapping[str, str]) -> cdk.Environment:
        # Each field falls back on its own: Environment(region="x") still
        # picks up CDK_DEFAULT_ACCOUNT. The TypeScript BaseStack ignored the
        # ambient values as soon as any env was passed.
        return cdk.Environment(
            account=self.account if self.account is not None else environ.get(ACCOUNT_VARIABLE),
            region=self.region if self.region is not None else environ.get(REGION_VARIABLE),
        )


class BaseStack(cdk.Stack):
    """
    Stack deployed with the CLI credentials into the current account/region.

    `CliCredentialsStackSynthesizer` uses the caller's credentials instead of
    the bootstrap deploy roles. Pass `synthesizer` or `env` to override.
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        env: Optional[cdk.Environment] = None,
        synthesizer: Optional[cdk.IStackSynthesizer] = None,
        environ: Optional[Mapping[str, str]] = None,
        **kwargs,
    ):
        resolved_env = StackDefaults.from_cdk_environment(env).resolve(
            os.environ if environ is None else environ
        )
        super().__init__(
            scope,
            construct_id,
            env=resolved_env,
            synthesizer=synthesizer or cdk.CliCredentialsStackSynthesizer(),
            **kwargs,
        )
        logger.debug(
            f"Stack {construct_id} targets account={resolved_env.account} region={resolved_env.region}"
        )
