"""
Benchmark Dispatcher Lambda Handler.

Triggered by the scheduled "lambda-benchmark" EventBridge rule, once per
runtime per tick. This Lambda:
1. Validates the queue bindings for every runtime
2. Reads the target runtime from the event detail
3. Resolves the target's SQS queue URL
4. Sends 30 empty trigger messages with staggered DelaySeconds

Event format:
    {"detail-type": "lambda-benchmark", "detail": {"target": "PY312"}}
"""

import json
import logging
from typing import Any, Dict, Optional

import boto3

from .config import DispatcherError, load_config
from .dispatcher import BenchmarkDispatcher

# Setup logging
logger = logging.getLogger()
logger.setLevel(logging.INFO)

# SQS client, created on first use and reused across warm invocations
_sqs_client = None


def get_sqs_client():
    global _sqs_client
    if _sqs_client is None:
        _sqs_client = boto3.client('sqs')
    return _sqs_client


def parse_target(event: Dict[str, Any]) -> Optional[str]:
    """
    Extract the target runtime from an EventBridge event.

    Args:
        event: Lambda event dictionary

    Returns:
        Target identifier, or None if the event carries none
    """
    detail = event.get('detail') if isinstance(event, dict) else None
    if not isinstance(detail, dict):
        return None
    return detail.get('target')


def handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Lambda handler for the benchmark dispatcher.

    Configuration, target and queue resolution errors are raised so the
    invocation is reported as failed. Individual send failures are only
    logged and counted.

    Args:
        event: EventBridge scheduled event
        context: Lambda context

    Returns:
        Dict with the target and send counts
    """
    logger.debug(f"Event: {json.dumps(event)}")

    target = parse_target(event)
    dispatcher = BenchmarkDispatcher(load_config(), get_sqs_client())

    try:
        outcomes = dispatcher.dispatch(target)
    except DispatcherError as e:
        logger.error(f"Benchmark dispatch failed for {target}: {e}", exc_info=True)
        raise

    succeeded = sum(1 for o in outcomes if o.success)
    summary = {
        'target': target,
        'attempted': len(outcomes),
        'succeeded': succeeded,
        'failed': len(outcomes) - succeeded,
    }
    logger.info(f"Dispatch complete: {json.dumps(summary)}")
    return summary
