"""Compute stack: benchmark queues, workload functions, dispatcher and schedule."""

import os

from aws_cdk import (
    Stack,
    Duration,
    CfnOutput,
    aws_lambda as lambda_,
    aws_logs as logs,
    aws_events as events,
    aws_events_targets as targets,
    aws_sqs as sqs,
)
from constructs import Construct
from typing import Dict

from cdk_constructs import BenchmarkFunction
from environment import EnvironmentConfig

# Runtimes under test, keyed by the target name the dispatcher receives
BENCHMARK_RUNTIMES: Dict[str, lambda_.Runtime] = {
    "PY311": lambda_.Runtime.PYTHON_3_11,
    "PY312": lambda_.Runtime.PYTHON_3_12,
    "PY313": lambda_.Runtime.PYTHON_3_13,
}

BENCHMARK_DETAIL_TYPE = "lambda-benchmark"

LAMBDAS_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "..", "lambdas")


class ComputeStack(Stack):
    """
    Benchmark compute infrastructure.

    Components:
    - One SQS queue per runtime under test
    - One workload Lambda per runtime, fed by its queue (batch size 1)
    - Dispatcher Lambda that fills the queues with staggered triggers
    - EventBridge schedule rule with one target per runtime
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        env_name: str,
        env_config: EnvironmentConfig,
        **kwargs
    ):
        """
        Initialize compute stack.

        Args:
            scope: CDK app
            construct_id: Stack ID
            env_name: Environment name (dev/prod)
            env_config: Validated environment configuration
            **kwargs: Additional stack properties
        """
        super().__init__(scope, construct_id, **kwargs)

        self.env_name = env_name
        self.env_config = env_config
        self.log_retention = self._get_log_retention(env_config.log_retention_days)

        self.queues: Dict[str, sqs.Queue] = {}
        self.workload_functions: Dict[str, lambda_.Function] = {}

        self._create_queues()
        self._create_workload_lambdas()
        self._create_dispatcher_lambda()
        self._create_schedule_rule()
        self._create_outputs()

        self.all_lambdas = list(self.workload_functions.values()) + [self.dispatcher_lambda]

    def _get_log_retention(self, days: int) -> logs.RetentionDays:
        """Convert integer days to RetentionDays enum."""
        retention_map = {
            1: logs.RetentionDays.ONE_DAY,
            3: logs.RetentionDays.THREE_DAYS,
            5: logs.RetentionDays.FIVE_DAYS,
            7: logs.RetentionDays.ONE_WEEK,
            14: logs.RetentionDays.TWO_WEEKS,
            30: logs.RetentionDays.ONE_MONTH,
            60: logs.RetentionDays.TWO_MONTHS,
            90: logs.RetentionDays.THREE_MONTHS,
            120: logs.RetentionDays.FOUR_MONTHS,
            150: logs.RetentionDays.FIVE_MONTHS,
            180: logs.RetentionDays.SIX_MONTHS,
        }
        return retention_map.get(days, logs.RetentionDays.ONE_MONTH)

    def _create_queues(self):
        """Create one trigger queue per runtime."""
        for target in BENCHMARK_RUNTIMES:
            self.queues[target] = sqs.Queue(
                self,
                f"{target}Queue",
                visibility_timeout=Duration.minutes(self.env_config.queue_visibility_timeout_minutes),
            )

    def _create_workload_lambdas(self):
        """Create the workload function for every runtime from the same code."""
        workload_code = lambda_.Code.from_asset(
            os.path.join(LAMBDAS_DIR, "workload"),
            exclude=["tests", "**/__pycache__"],
        )

        for target, runtime in BENCHMARK_RUNTIMES.items():
            benchmark_function = BenchmarkFunction(
                self,
                f"{target}Function",
                runtime=runtime,
                handler="handler.handler",
                code=workload_code,
                queue=self.queues[target],
                timeout=Duration.seconds(self.env_config.workload_timeout_seconds),
                memory_size=self.env_config.workload_memory_mb,
                log_retention=self.log_retention,
                description=f"Benchmark workload on {runtime.name} - {self.env_name}",
            )
            self.workload_functions[target] = benchmark_function.function

    def _create_dispatcher_lambda(self):
        """Create the dispatcher Lambda bound to every queue."""
        environment = {}
        for target in BENCHMARK_RUNTIMES:
            environment[f"ARN_{target}_QUEUE"] = self.queues[target].queue_arn
            environment[f"ARN_{target}_FUNCTION"] = self.workload_functions[target].function_arn

        self.dispatcher_lambda = lambda_.Function(
            self,
            "DispatcherLambda",
            runtime=lambda_.Runtime.PYTHON_3_12,
            handler="dispatcher.handler.handler",
            code=lambda_.Code.from_asset(
                LAMBDAS_DIR,
                exclude=["workload", "**/tests", "**/__pycache__"],
            ),
            timeout=Duration.minutes(self.env_config.dispatcher_timeout_minutes),
            environment=environment,
            logging_format=lambda_.LoggingFormat.JSON,
            log_retention=self.log_retention,
            description=f"Benchmark dispatcher Lambda - {self.env_name}",
        )

        # Grant permissions
        for target in BENCHMARK_RUNTIMES:
            self.queues[target].grant_send_messages(self.dispatcher_lambda)
            self.workload_functions[target].grant_invoke(self.dispatcher_lambda)

    def _create_schedule_rule(self):
        """Create the schedule rule that fires the dispatcher once per runtime."""
        self.schedule_rule = events.Rule(
            self,
            "BenchmarkRule",
            rule_name=f"LambdaBenchmark-{self.env_name}",
            schedule=events.Schedule.rate(Duration.hours(self.env_config.schedule_rate_hours)),
            description="Periodic Lambda runtime benchmark",
        )

        for target in BENCHMARK_RUNTIMES:
            self.schedule_rule.add_target(
                targets.LambdaFunction(
                    self.dispatcher_lambda,
                    event=events.RuleTargetInput.from_object({
                        "detail-type": BENCHMARK_DETAIL_TYPE,
                        "detail": {"target": target},
                    }),
                )
            )

    def _create_outputs(self):
        """Create CloudFormation outputs."""
        CfnOutput(
            self,
            "DispatcherLambdaName",
            value=self.dispatcher_lambda.function_name,
            description="Benchmark dispatcher Lambda name",
            export_name=f"lambda-benchmark-{self.env_name}-dispatcher-name",
        )

        CfnOutput(
            self,
            "DispatcherLambdaArn",
            value=self.dispatcher_lambda.function_arn,
            description="Benchmark dispatcher Lambda ARN",
            export_name=f"lambda-benchmark-{self.env_name}-dispatcher-arn",
        )

        for target in BENCHMARK_RUNTIMES:
            CfnOutput(
                self,
                f"{target}QueueUrl",
                value=self.queues[target].queue_url,
                description=f"Trigger queue URL for {target}",
            )
            CfnOutput(
                self,
                f"{target}LambdaName",
                value=self.workload_functions[target].function_name,
                description=f"Workload Lambda name for {target}",
            )
