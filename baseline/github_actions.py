"""
GitHub Actions OIDC federation.

An IAM role can be assumed from a GitHub Actions workflow without static
credentials by trusting the GitHub OIDC provider and restricting the token
subject claim. See
https://docs.github.com/en/actions/deployment/security-hardening-your-deployments/about-security-hardening-with-openid-connect#example-subject-claims
"""
import logging
from typing import List, Sequence

from aws_cdk import Stack, aws_iam as iam
from constructs import Construct

logger = logging.getLogger(__name__)

ISSUER_DOMAIN = "token.actions.githubusercontent.com"
# aws-actions/configure-aws-credentials requests this audience by default
AUDIENCE = "sts.amazonaws.com"
# https://github.blog/changelog/2023-06-27-github-actions-update-on-oidc-integration-with-aws/
ISSUER_CERTIFICATE_THUMBPRINTS = [
    "6938fd4d98bab03faadb97b34396831e3780aea1",
    "1c58a3a8518e8759bf075b76b750d4f2df264fcd",
]


def provider_arn_for_account(account: str) -> str:
    return f"arn:aws:iam::{account}:oidc-provider/{ISSUER_DOMAIN}"


class GithubActionsIdentityProvider:
    """
    GitHub OpenID Connect provider registered in (or imported into) a stack.

    Use `create` once per account; every other stack should use
    `from_stack_account`, an AWS account can only have a single provider for
    the GitHub issuer.
    """

    def __init__(self, provider: iam.IOpenIdConnectProvider):
        self.provider = provider

    @property
    def provider_arn(self) -> str:
        return self.provider.open_id_connect_provider_arn

    @classmethod
    def create(cls, scope: Construct, construct_id: str) -> "GithubActionsIdentityProvider":
        provider = iam.OpenIdConnectProvider(
            scope,
            construct_id,
            url=f"https://{ISSUER_DOMAIN}",
            client_ids=[AUDIENCE],
            thumbprints=ISSUER_CERTIFICATE_THUMBPRINTS,
        )
        logger.debug(f"Defined GitHub OIDC provider {construct_id} for https://{ISSUER_DOMAIN}")
        return cls(provider)

    @classmethod
    def from_stack_account(cls, scope: Construct, construct_id: str) -> "GithubActionsIdentityProvider":
        """
        Reference the provider already registered in the account of `scope`'s stack.

        The ARN is derived from the account id and the issuer domain. Nothing
        checks the provider exists; a missing provider fails at deploy time.
        """
        provider_arn = provider_arn_for_account(Stack.of(scope).account)
        provider = iam.OpenIdConnectProvider.from_open_id_connect_provider_arn(
            scope, construct_id, provider_arn
        )
        logger.debug(f"Imported GitHub OIDC provider {provider_arn}")
        return cls(provider)


class GithubActionsIdentity:
    """
    A trusted workflow identity, rendered as a token subject claim.

    Examples:
        repo:<owner/name>:environment:<environment>
        repo:<owner/name>:ref:refs/heads/<branch>
        repo:<owner/name>:ref:refs/tags/<tag>
        repo:<owner/name>:pull_request

    Build identities with the `from_*` factories. The constructor stays
    public like its TypeScript counterpart, but any `filter_clause` it is
    given goes into the subject unchecked.
    """

    __slots__ = ("_repository", "_filter")

    def __init__(self, repository: str, filter_clause: str):
        self._repository = repository
        self._filter = filter_clause

    @property
    def repository(self) -> str:
        return self._repository

    @property
    def filter(self) -> str:
        return self._filter

    @property
    def subject(self) -> str:
        return f"repo:{self._repository}:{self._filter}"

    @classmethod
    def from_environment(cls, repository: str, environment: str) -> "GithubActionsIdentity":
        return cls(repository, f"environment:{environment}")

    @classmethod
    def from_heads(cls, repository: str, branch: str) -> "GithubActionsIdentity":
        return cls(repository, f"ref:refs/heads/{branch}")

    @classmethod
    def from_tags(cls, repository: str, tag: str) -> "GithubActionsIdentity":
        return cls(repository, f"ref:refs/tags/{tag}")

    @classmethod
    def from_pull_request(cls, repository: str) -> "GithubActionsIdentity":
        return cls(repository, "pull_request")

    def __eq__(self, other):
        if not isinstance(other, GithubActionsIdentity):
            return NotImplemented
        return self.subject == other.subject

    def __hash__(self):
        return hash(self.subject)

    def __repr__(self):
        return f"GithubActionsIdentity({self.subject!r})"

    def __str__(self):
        return self.subject


def trust_conditions(trusted_identities: Sequence[GithubActionsIdentity]) -> dict:
    subjects: List[str] = [identity.subject for identity in trusted_identities]
    return {
        "StringEquals": {f"{ISSUER_DOMAIN}:aud": AUDIENCE},
        # StringLike so subjects may carry wildcards, e.g. repo:owner/name:*
        "StringLike": {f"{ISSUER_DOMAIN}:sub": subjects},
    }


class GithubActionsPrincipal:
    """
    Trust principal for roles assumed from GitHub Actions workflows.

    The audience must equal `sts.amazonaws.com` and the subject must match
    any of `trusted_identities`. An empty list is accepted and produces a
    policy no token can satisfy.

        provider = GithubActionsIdentityProvider.from_stack_account(self, "GithubActionsIdentityProvider")
        iam.Role(
            self,
            "DeployRole",
            assumed_by=GithubActionsPrincipal(provider, [
                GithubActionsIdentity.from_environment("example/sandbox", "production"),
            ]).principal,
        )
    """

    def __init__(
        self,
        identity_provider: GithubActionsIdentityProvider,
        trusted_identities: Sequence[GithubActionsIdentity],
    ):
        self.identity_provider = identity_provider
        self.trusted_identities = list(trusted_identities)
        if not self.trusted_identities:
            logger.warning("GitHub Actions principal has no trusted identities; no workflow can assume it")
        self.conditions = trust_conditions(self.trusted_identities)
        self.principal = iam.OpenIdConnectPrincipal(
            identity_provider.provider,
            conditions=self.conditions,
        )
        logger.debug(f"Trusting subjects {[i.subject for i in self.trusted_identities]}")

    @property
    def subjects(self) -> List[str]:
        return [identity.subject for identity in self.trusted_identities]
