"""
Benchmark dispatcher core.

Each run sends INVOKE_MAX empty trigger messages to the target's queue. The
first message is visible immediately so every run samples at least one cold
start; later messages are delayed along a hyperbolic curve that spreads the
remaining triggers across the DELAY_MAX window:

    delay(0) = unset
    delay(i) = min(round(DELAY_MAX / i), DELAY_MAX)    for i >= 1

Sends are sequential and best-effort: a failed send is logged and recorded,
and the loop moves on to the next index.
"""

import json
import logging
import math
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional

from botocore.exceptions import BotoCoreError, ClientError

from .config import TARGETS, DispatcherConfig, DispatcherError

logger = logging.getLogger(__name__)

DELAY_MAX = 900  # seconds, the SQS DelaySeconds ceiling
INVOKE_MAX = 30
MESSAGE_BODY = "{}"


class UnknownTargetError(DispatcherError):
    """Raised when the trigger names a target outside TARGETS."""
    pass


class ResolutionError(DispatcherError):
    """Raised when the bound queue cannot be resolved to a queue URL."""
    pass


def delay_seconds(index: int, delay_max: int = DELAY_MAX) -> Optional[int]:
    """
    Delay for the message at a given send index.

    Halves round up, so index 8 of a 900 second window gets 113 seconds.

    Args:
        index: 0-based send index
        delay_max: Upper bound and numerator of the curve

    Returns:
        Delay in seconds, or None for index 0 (no delay)
    """
    if index < 0:
        raise ValueError(f"Send index must be non-negative, got {index}")
    if index == 0:
        return None
    return min(int(math.floor(delay_max / index + 0.5)), delay_max)


def queue_name_from_arn(queue_arn: str) -> str:
    """arn:aws:sqs:region:account:name -> name"""
    return queue_arn.split(":")[-1]


@dataclass(frozen=True)
class ScheduledMessage:
    """One trigger message within a run."""

    sequence_index: int
    delay_seconds: Optional[int]
    body: str = MESSAGE_BODY

    def send_params(self, queue_url: str) -> Dict[str, Any]:
        """Keyword arguments for sqs.send_message."""
        params = {"QueueUrl": queue_url, "MessageBody": self.body}
        if self.delay_seconds is not None:
            params["DelaySeconds"] = self.delay_seconds
        return params


def schedule_messages(invoke_max: int = INVOKE_MAX, delay_max: int = DELAY_MAX) -> List[ScheduledMessage]:
    """Build the ordered message schedule for one run."""
    return [
        ScheduledMessage(sequence_index=i, delay_seconds=delay_seconds(i, delay_max))
        for i in range(invoke_max)
    ]


@dataclass(frozen=True)
class BenchmarkRun:
    """A single dispatcher invocation against one target."""

    target: str
    invoke_max: int = INVOKE_MAX
    delay_max: int = DELAY_MAX

    def messages(self) -> List[ScheduledMessage]:
        return schedule_messages(self.invoke_max, self.delay_max)


@dataclass(frozen=True)
class DispatchOutcome:
    """Result of one send attempt. Used for logging only."""

    sequence_index: int
    delay_seconds: Optional[int]
    success: bool
    status_code: Optional[int] = None
    message_id: Optional[str] = None
    sequence_number: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class BenchmarkDispatcher:
    """
    Sends a staggered burst of trigger messages to one target's queue.

    Usage:
        dispatcher = BenchmarkDispatcher(load_config(), boto3.client("sqs"))
        outcomes = dispatcher.dispatch("PY312")
    """

    def __init__(
        self,
        config: DispatcherConfig,
        sqs_client,
        invoke_max: int = INVOKE_MAX,
        delay_max: int = DELAY_MAX,
    ):
        """
        Initialize dispatcher.

        Args:
            config: Queue bindings for every target
            sqs_client: boto3 SQS client
            invoke_max: Messages sent per run
            delay_max: Delay ceiling in seconds
        """
        self.config = config
        self.sqs_client = sqs_client
        self.invoke_max = invoke_max
        self.delay_max = delay_max

    def dispatch(self, target: str) -> List[DispatchOutcome]:
        """
        Run one benchmark burst against a target.

        Args:
            target: One of TARGETS

        Returns:
            One DispatchOutcome per scheduled message, in send order

        Raises:
            ConfigurationError: If any target lacks a queue binding
            UnknownTargetError: If target is not one of TARGETS
            ResolutionError: If the target's queue cannot be resolved
        """
        self.config.validate()

        if target not in TARGETS:
            raise UnknownTargetError(f'Unknown queue arn for "{target}".')

        run = BenchmarkRun(target=target, invoke_max=self.invoke_max, delay_max=self.delay_max)
        queue_url = self.resolve_queue_url(self.config.queue_arn_for(target))
        logger.info(f"Dispatching {run.invoke_max} messages for {target} to {queue_url}")

        outcomes = [self._send(queue_url, message) for message in run.messages()]

        failed = sum(1 for o in outcomes if not o.success)
        if failed:
            logger.warning(f"{failed} of {len(outcomes)} sends failed for {target}")
        return outcomes

    def resolve_queue_url(self, queue_arn: str) -> str:
        """
        Look up the queue URL for a queue ARN.

        Raises:
            ResolutionError: If the queue does not exist or the lookup fails
        """
        queue_name = queue_name_from_arn(queue_arn)
        try:
            response = self.sqs_client.get_queue_url(QueueName=queue_name)
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "Unknown")
            raise ResolutionError(f"Could not resolve queue {queue_name}: {code}") from e
        except BotoCoreError as e:
            raise ResolutionError(f"Could not resolve queue {queue_name}: {e}") from e
        return response["QueueUrl"]

    def _send(self, queue_url: str, message: ScheduledMessage) -> DispatchOutcome:
        try:
            response = self.sqs_client.send_message(**message.send_params(queue_url))
        except ClientError as e:
            outcome = DispatchOutcome(
                sequence_index=message.sequence_index,
                delay_seconds=message.delay_seconds,
                success=False,
                status_code=e.response.get("ResponseMetadata", {}).get("HTTPStatusCode"),
                error=e.response.get("Error", {}).get("Code", str(e)),
            )
            logger.error(json.dumps({"message": "Send Message Failed", **_log_fields(outcome)}))
            return outcome
        except BotoCoreError as e:
            outcome = DispatchOutcome(
                sequence_index=message.sequence_index,
                delay_seconds=message.delay_seconds,
                success=False,
                error=str(e),
            )
            logger.error(json.dumps({"message": "Send Message Failed", **_log_fields(outcome)}))
            return outcome

        outcome = DispatchOutcome(
            sequence_index=message.sequence_index,
            delay_seconds=message.delay_seconds,
            success=True,
            status_code=response.get("ResponseMetadata", {}).get("HTTPStatusCode"),
            message_id=response.get("MessageId"),
            sequence_number=response.get("SequenceNumber"),
        )
        logger.info(json.dumps({"message": "Send Message Complete", **_log_fields(outcome)}))
        return outcome


def _log_fields(outcome: DispatchOutcome) -> Dict[str, Any]:
    fields = {
        "statusCode": outcome.status_code,
        "messageId": outcome.message_id,
        "sequenceNumber": outcome.sequence_number,
        "sequenceIndex": outcome.sequence_index,
        "delaySeconds": outcome.delay_seconds,
    }
    if outcome.error:
        fields["error"] = outcome.error
    return fields
