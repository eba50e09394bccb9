"""Queue-driven Lambda function construct for the runtimes under test."""

from aws_cdk import (
    Duration,
    Tags,
    aws_lambda as lambda_,
    aws_lambda_event_sources as event_sources,
    aws_logs as logs,
    aws_sqs as sqs,
)
from constructs import Construct
from typing import Optional

BENCHMARK_TAG_KEY = "BenchmarkFunction"


class BenchmarkFunction(Construct):
    """
    Workload function fed one message at a time from its own queue.

    Every runtime under test is built through this construct so they share:
    - ARM64 architecture and the same memory size
    - JSON log format, which the dashboard queries rely on
    - An SQS event source with batch size 1
    - The BenchmarkFunction=true tag
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        runtime: lambda_.Runtime,
        handler: str,
        code: lambda_.Code,
        queue: sqs.IQueue,
        timeout: Duration,
        memory_size: int = 128,
        log_retention: logs.RetentionDays = logs.RetentionDays.ONE_MONTH,
        description: Optional[str] = None,
        **kwargs
    ):
        """
        Initialize benchmark function construct.

        Args:
            scope: CDK scope
            construct_id: Construct identifier
            runtime: Lambda runtime under test
            handler: Function handler
            code: Lambda code
            queue: Queue that triggers the function
            timeout: Function timeout
            memory_size: Memory allocation in MB
            log_retention: CloudWatch log retention
            description: Function description
            **kwargs: Additional Lambda function properties
        """
        super().__init__(scope, construct_id)

        self.queue = queue

        self.function = lambda_.Function(
            self,
            "Function",
            runtime=runtime,
            handler=handler,
            code=code,
            timeout=timeout,
            memory_size=memory_size,
            architecture=lambda_.Architecture.ARM_64,
            logging_format=lambda_.LoggingFormat.JSON,
            log_retention=log_retention,
            description=description,
            **kwargs
        )

        self.function.add_event_source(
            event_sources.SqsEventSource(queue, batch_size=1)
        )

        Tags.of(self.function).add(BENCHMARK_TAG_KEY, "true")
