import argparse
import sys
import boto3

PARAMS = {
    "DEPLOY_ROLE_ARN": "/cdk-baseline/deploy_role_arn",
    "VPC_ID": "/cdk-baseline/vpc_id",
}

def get_output(key: str, ssm=None) -> str:
    ssm = ssm or boto3.client("ssm")
    return ssm.get_parameter(Name=PARAMS[key])["Parameter"]["Value"]

def main(argv=None) -> None:
    ap = argparse.ArgumentParser(description="Print a value published by the baseline stacks.")
    ap.add_argument("--key", required=True, choices=PARAMS.keys())
    args = ap.parse_args(argv)

    ssm = boto3.client("ssm")
    try:
        print(get_output(args.key, ssm))
    except ssm.exceptions.ParameterNotFound:
        print(f"Parameter not found: {PARAMS[args.key]}", file=sys.stderr)
        raise SystemExit(1)

if __name__ == "__main__":
    main()
