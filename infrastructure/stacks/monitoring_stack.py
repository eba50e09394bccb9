"""Monitoring stack: benchmark dashboard and dispatcher alarms."""

from aws_cdk import (
    Stack,
    Duration,
    aws_cloudwatch as cloudwatch,
    aws_cloudwatch_actions as cw_actions,
    aws_lambda as lambda_,
    aws_sns as sns,
)
from constructs import Construct
from typing import List

# Lambda platform.report records carry durationMs on every invocation and
# initDurationMs only on cold starts.
REPORT_FILTER = 'filter type = "platform.report"'

PERCENTILES = (10, 25, 50, 75, 90)


def _percentiles(field: str, prefix: str) -> str:
    return ", ".join(f"pct({field}, {p}) as p{p}{prefix}" for p in PERCENTILES)


DURATION_STATS = f"avg(durationMs) as avgDuration, {_percentiles('durationMs', 'Duration')}"
INIT_DURATION_STATS = f"avg(initDurationMs) as avgInitDuration, {_percentiles('initDurationMs', 'InitDuration')}"


class MonitoringStack(Stack):
    """
    Monitoring infrastructure stack.

    Components:
    - CloudWatch Dashboard with Logs Insights tables per runtime
    - Dispatcher error alarm with SNS topic (optional)
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        env_name: str,
        workload_lambdas: List[lambda_.IFunction],
        dispatcher_lambda: lambda_.IFunction,
        create_alarms: bool = True,
        **kwargs
    ):
        """
        Initialize monitoring stack.

        Args:
            scope: CDK app
            construct_id: Stack ID
            env_name: Environment name (dev/prod)
            workload_lambdas: Functions under test
            dispatcher_lambda: Benchmark dispatcher function
            create_alarms: Whether to create CloudWatch alarms
            **kwargs: Additional stack properties
        """
        super().__init__(scope, construct_id, **kwargs)

        self.env_name = env_name
        self.workload_lambdas = workload_lambdas
        self.dispatcher_lambda = dispatcher_lambda

        if create_alarms:
            self._create_alarm_topic()

        self._create_dashboard()

        if create_alarms:
            self._create_alarms()

    def _create_alarm_topic(self):
        """Create SNS topic for alarm notifications."""
        self.alarm_topic = sns.Topic(
            self,
            "AlarmTopic",
            topic_name=f"lambda-benchmark-{self.env_name}-alarms",
            display_name=f"Lambda Benchmark Alarms - {self.env_name}",
        )

    def _log_query_widget(self, title: str, fields: str, stats: str) -> cloudwatch.LogQueryWidget:
        return cloudwatch.LogQueryWidget(
            title=title,
            log_group_names=[fn.log_group.log_group_name for fn in self.workload_lambdas],
            view=cloudwatch.LogQueryVisualizationType.TABLE,
            width=24,
            height=4,
            query_lines=[
                f"fields {fields}, @entity.KeyAttributes.Name AS functionName",
                REPORT_FILTER,
                f"stats {stats} by functionName",
            ],
        )

    def _create_dashboard(self):
        """Create CloudWatch Dashboard with benchmark statistics."""
        self.dashboard = cloudwatch.Dashboard(
            self,
            "Dashboard",
            dashboard_name=f"Lambda_Runtime_Benchmark_{self.env_name}",
        )

        stats_widget = self._log_query_widget(
            "Benchmark Stats",
            "record.metrics.durationMs AS durationMs, record.metrics.initDurationMs AS initDurationMs",
            "count() as invocations, count(initDurationMs) as coldStarts, "
            f"{DURATION_STATS}, {INIT_DURATION_STATS}",
        )

        duration_widget = self._log_query_widget(
            "Benchmark Stats - Invocation Duration",
            "record.metrics.durationMs AS durationMs",
            f"count() as invocations, {DURATION_STATS}",
        )

        init_duration_widget = self._log_query_widget(
            "Benchmark Stats - Initialization Duration",
            "record.metrics.initDurationMs AS initDurationMs",
            f"count() as invocations, count(initDurationMs) as coldStarts, {INIT_DURATION_STATS}",
        )

        dispatcher_widget = cloudwatch.GraphWidget(
            title="Dispatcher Runs",
            left=[
                self.dispatcher_lambda.metric_invocations(statistic="Sum", label="Invocations"),
                self.dispatcher_lambda.metric_errors(statistic="Sum", label="Errors"),
            ],
            width=24,
        )

        self.dashboard.add_widgets(stats_widget)
        self.dashboard.add_widgets(duration_widget)
        self.dashboard.add_widgets(init_duration_widget)
        self.dashboard.add_widgets(dispatcher_widget)

    def _create_alarms(self):
        """Alarm when a scheduled dispatcher run fails."""
        self.dispatcher_error_alarm = cloudwatch.Alarm(
            self,
            "DispatcherErrorAlarm",
            alarm_name=f"lambda-benchmark-{self.env_name}-dispatcher-errors",
            metric=self.dispatcher_lambda.metric_errors(
                period=Duration.minutes(5),
                statistic="Sum",
            ),
            threshold=1,
            evaluation_periods=1,
            comparison_operator=cloudwatch.ComparisonOperator.GREATER_THAN_OR_EQUAL_TO_THRESHOLD,
            treat_missing_data=cloudwatch.TreatMissingData.NOT_BREACHING,
        )
        self.dispatcher_error_alarm.add_alarm_action(cw_actions.SnsAction(self.alarm_topic))
