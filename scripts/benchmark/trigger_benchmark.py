#!/usr/bin/env python3
"""
Trigger Benchmark Runs

Invokes the deployed dispatcher Lambda outside its schedule, with the same
event the EventBridge rule sends. Useful right after a deploy, or to add
samples for one runtime.

Usage:
    python trigger_benchmark.py --env dev
    python trigger_benchmark.py --env dev --target PY312
    python trigger_benchmark.py --env dev --target PY311 --target PY313 --wait
"""

import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional

import boto3
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)

TARGETS = ("PY311", "PY312", "PY313")
DISPATCHER_OUTPUT_KEY = "DispatcherLambdaName"


def benchmark_event(target: str) -> Dict[str, Any]:
    """Event payload matching the scheduled rule input."""
    return {"detail-type": "lambda-benchmark", "detail": {"target": target}}


class BenchmarkTrigger:
    """Invoke the benchmark dispatcher for one or more runtimes."""

    def __init__(self, env: str = "dev", region: Optional[str] = None,
                 cloudformation_client=None, lambda_client=None):
        """
        Initialize trigger.

        Args:
            env: Environment name (dev, prod)
            region: AWS region (defaults to the boto3 session region)
            cloudformation_client: Optional preconfigured client
            lambda_client: Optional preconfigured client
        """
        self.env = env
        self.stack_name = f"LambdaBenchmark-{env}"
        self.cloudformation_client = cloudformation_client or boto3.client('cloudformation', region_name=region)
        self.lambda_client = lambda_client or boto3.client('lambda', region_name=region)

    def get_dispatcher_name(self) -> str:
        """
        Read the dispatcher function name from the stack outputs.

        Raises:
            RuntimeError: If the stack or output does not exist
        """
        try:
            response = self.cloudformation_client.describe_stacks(StackName=self.stack_name)
        except ClientError as e:
            raise RuntimeError(f"Stack {self.stack_name} not found. Run 'cdk deploy' first.") from e

        for output in response['Stacks'][0].get('Outputs', []):
            if output.get('OutputKey') == DISPATCHER_OUTPUT_KEY:
                return output['OutputValue']

        raise RuntimeError(f"Output {DISPATCHER_OUTPUT_KEY} missing from stack {self.stack_name}")

    def trigger(self, targets: List[str], wait: bool = False) -> List[Dict[str, Any]]:
        """
        Invoke the dispatcher once per target.

        Args:
            targets: Runtimes to trigger
            wait: Invoke synchronously and return the dispatcher summary

        Returns:
            One result dict per target
        """
        function_name = self.get_dispatcher_name()
        invocation_type = 'RequestResponse' if wait else 'Event'
        results = []

        for target in targets:
            logger.info(f"Invoking {function_name} for {target} ({invocation_type})")
            response = self.lambda_client.invoke(
                FunctionName=function_name,
                InvocationType=invocation_type,
                Payload=json.dumps(benchmark_event(target)).encode('utf-8'),
            )

            result = {
                'target': target,
                'status_code': response.get('StatusCode'),
                'function_error': response.get('FunctionError'),
            }
            if wait and 'Payload' in response:
                result['response'] = json.loads(response['Payload'].read() or b'null')
            results.append(result)

        return results


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Trigger Lambda runtime benchmark runs")
    parser.add_argument('--env', default='dev', help="Environment name (default: dev)")
    parser.add_argument('--region', default=None, help="AWS region")
    parser.add_argument('--target', action='append', choices=TARGETS,
                        help="Runtime to trigger (repeatable, default: all)")
    parser.add_argument('--wait', action='store_true',
                        help="Wait for each dispatcher run and print its summary")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format='%(message)s')

    trigger = BenchmarkTrigger(env=args.env, region=args.region)
    results = trigger.trigger(args.target or list(TARGETS), wait=args.wait)

    print(json.dumps(results, indent=2, default=str))
    return 1 if any(r['function_error'] for r in results) else 0


if __name__ == '__main__':
    sys.exit(main())
