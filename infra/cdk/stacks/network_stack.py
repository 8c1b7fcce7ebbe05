from aws_cdk import aws_ec2 as ec2, aws_ssm as ssm
from constructs import Construct

from baseline.stack import BaseStack
from baseline.vpc import HardenedVpc


class NetworkStack(BaseStack):
    """
    NAT-free VPC with isolated subnets and a locked-down default security posture.

    Workloads reach S3 through the gateway endpoint; add interface endpoints
    for any other service they call.
    """

    def __init__(self, scope: Construct, construct_id: str, max_azs: int = 2, **kwargs):
        super().__init__(scope, construct_id, **kwargs)

        self.hardened_vpc = HardenedVpc(
            self,
            "BaselineVpc",
            max_azs=max_azs,
            nat_gateways=0,
            subnet_configuration=[
                ec2.SubnetConfiguration(
                    name="PrivateIsolated",
                    subnet_type=ec2.SubnetType.PRIVATE_ISOLATED,
                    cidr_mask=24,
                )
            ],
            enable_dns_hostnames=True,
            enable_dns_support=True,
        )
        self.vpc = self.hardened_vpc.vpc

        # S3 gateway endpoint (free)
        self.vpc.add_gateway_endpoint(
            "S3GatewayEndpoint",
            service=ec2.GatewayVpcEndpointAwsService.S3,
        )

        self.private_subnet_ids = self.vpc.select_subnets(
            subnet_type=ec2.SubnetType.PRIVATE_ISOLATED
        ).subnet_ids

        ssm.StringParameter(
            self,
            "VpcIdParam",
            parameter_name="/cdk-baseline/vpc_id",
            string_value=self.vpc.vpc_id,
        )
