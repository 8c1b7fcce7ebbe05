"""
VPC whose default security group and default network ACL are locked down.

Implements "CIS AWS Foundations Benchmark" control 4.3, "Ensure the default
security group of every VPC restricts all traffic", see
https://docs.aws.amazon.com/securityhub/latest/userguide/securityhub-cis-controls.html#securityhub-cis-controls-4.3
and denies inbound SSH and RDP on the default network ACL.
"""
import logging

from aws_cdk import Stack, aws_ec2 as ec2, custom_resources as cr
from constructs import Construct

logger = logging.getLogger(__name__)

ANY_IPV4 = "0.0.0.0/0"
ALL_PROTOCOLS = "-1"
SSH_PORT = 22
RDP_PORT = 3389
# CloudFormation and the console number user entries from 100 upwards
DEFAULT_RULE_NUMBER = 100


def revoke_ingress_call(group_id: str) -> dict:
    # a fresh default group allows all traffic from itself
    return {
        "GroupId": group_id,
        "IpPermissions": [
            {
                "IpProtocol": ALL_PROTOCOLS,
                "UserIdGroupPairs": [{"GroupId": group_id}],
            }
        ],
    }


def revoke_egress_call(group_id: str) -> dict:
    # a fresh default group allows all traffic out to anywhere
    return {
        "GroupId": group_id,
        "IpPermissions": [
            {
                "IpProtocol": ALL_PROTOCOLS,
                "IpRanges": [{"CidrIp": ANY_IPV4}],
            }
        ],
    }


class AclRuleNumbers:
    """Hands out network ACL rule numbers counting down from just below `start`."""

    def __init__(self, start: int = DEFAULT_RULE_NUMBER):
        self._current = start

    def allocate(self) -> int:
        self._current -= 1
        return self._current

    @property
    def last(self) -> int:
        return self._current


class HardenedVpc(Construct):
    """
    Wraps an `ec2.Vpc` and strips the permissive defaults AWS attaches to it.

    On creation the default security group loses its ingress and egress rules
    through two `AwsCustomResource` SDK calls. The calls only run on create:
    rules added back to the default group later are not revoked again.

    The default network ACL gets explicit deny entries numbered 99, 98, ...
    so they are evaluated before entries added at the conventional 100.

    All keyword arguments are passed to `ec2.Vpc`.
    """

    def __init__(self, scope: Construct, construct_id: str, **vpc_props):
        super().__init__(scope, construct_id)

        self.vpc = ec2.Vpc(self, "Vpc", **vpc_props)
        self.rule_numbers = AclRuleNumbers()

        default_sg = self.vpc.vpc_default_security_group
        default_sg_arn = Stack.of(self).format_arn(
            service="ec2",
            resource="security-group",
            resource_name=default_sg,
        )
        policy = cr.AwsCustomResourcePolicy.from_sdk_calls(resources=[default_sg_arn])
        physical_resource_id = cr.PhysicalResourceId.of(f"{self.vpc.vpc_id}/{default_sg}")

        self.revoke_ingress = cr.AwsCustomResource(
            self,
            "RevokeDefaultSecurityGroupIngressRulesAction",
            resource_type="Custom::RevokeDefaultSecurityGroupIngressRules",
            on_create=cr.AwsSdkCall(
                service="EC2",
                action="revokeSecurityGroupIngress",
                parameters=revoke_ingress_call(default_sg),
                physical_resource_id=physical_resource_id,
            ),
            policy=policy,
        )
        self.revoke_egress = cr.AwsCustomResource(
            self,
            "RevokeDefaultSecurityGroupEgressRulesAction",
            resource_type="Custom::RevokeDefaultSecurityGroupEgressRules",
            on_create=cr.AwsSdkCall(
                service="EC2",
                action="revokeSecurityGroupEgress",
                parameters=revoke_egress_call(default_sg),
                physical_resource_id=physical_resource_id,
            ),
            policy=policy,
        )

        self.default_network_acl = ec2.NetworkAcl.from_network_acl_id(
            self, "DefaultNetworkAcl", self.vpc.vpc_default_network_acl
        )
        self.deny_inbound_tcp_port("DenyInboundSshIpv4NetworkAclEntry", SSH_PORT)
        self.deny_inbound_tcp_port("DenyInboundRdpIpv4NetworkAclEntry", RDP_PORT)

    @property
    def vpc_id(self) -> str:
        return self.vpc.vpc_id

    def deny_inbound_tcp_port(self, construct_id: str, port: int) -> ec2.NetworkAclEntry:
        rule_number = self.rule_numbers.allocate()
        entry = self.default_network_acl.add_entry(
            construct_id,
            rule_number=rule_number,
            rule_action=ec2.Action.DENY,
            cidr=ec2.AclCidr.any_ipv4(),
            traffic=ec2.AclTraffic.tcp_port(port),
        )
        logger.debug(f"Default network ACL entry {construct_id}: rule {rule_number} denies tcp/{port}")
        return entry
