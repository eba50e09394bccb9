"""Unit tests for MonitoringStack."""

import json

import aws_cdk as cdk
from aws_cdk import assertions

from environment import EnvironmentConfig
from stacks.compute_stack import ComputeStack
from stacks.monitoring_stack import MonitoringStack


def create_test_monitoring_stack(create_alarms: bool):
    """Helper to create MonitoringStack on top of a ComputeStack."""
    app = cdk.App()
    compute_stack = ComputeStack(
        app,
        "TestComputeStack",
        env_name="dev",
        env_config=EnvironmentConfig(),
    )
    return MonitoringStack(
        app,
        "TestMonitoringStack",
        env_name="dev",
        workload_lambdas=list(compute_stack.workload_functions.values()),
        dispatcher_lambda=compute_stack.dispatcher_lambda,
        create_alarms=create_alarms,
    )


def test_monitoring_stack_creates_dashboard():
    """Test that the benchmark dashboard is created."""
    template = assertions.Template.from_stack(create_test_monitoring_stack(create_alarms=False))

    template.resource_count_is("AWS::CloudWatch::Dashboard", 1)
    template.has_resource_properties(
        "AWS::CloudWatch::Dashboard",
        {"DashboardName": "Lambda_Runtime_Benchmark_dev"},
    )


def test_dashboard_queries_platform_reports():
    """Test that dashboard widgets query Lambda platform.report records."""
    template = assertions.Template.from_stack(create_test_monitoring_stack(create_alarms=False))

    body = json.dumps(template.to_json())
    assert "platform.report" in body
    assert "count(initDurationMs) as coldStarts" in body
    assert "pct(durationMs, 90) as p90Duration" in body
    assert "Benchmark Stats - Initialization Duration" in body


def test_no_alarms_when_disabled():
    """Test that dev deployments skip alarms."""
    template = assertions.Template.from_stack(create_test_monitoring_stack(create_alarms=False))

    template.resource_count_is("AWS::CloudWatch::Alarm", 0)
    template.resource_count_is("AWS::SNS::Topic", 0)


def test_dispatcher_error_alarm():
    """Test that a failed dispatcher run raises an alarm."""
    template = assertions.Template.from_stack(create_test_monitoring_stack(create_alarms=True))

    template.resource_count_is("AWS::SNS::Topic", 1)
    template.has_resource_properties(
        "AWS::CloudWatch::Alarm",
        {
            "MetricName": "Errors",
            "Namespace": "AWS/Lambda",
            "Threshold": 1,
            "ComparisonOperator": "GreaterThanOrEqualToThreshold",
            "AlarmActions": assertions.Match.any_value(),
        },
    )
