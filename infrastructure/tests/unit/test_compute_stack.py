"""Unit tests for ComputeStack."""

import json

import aws_cdk as cdk
from aws_cdk import assertions

from environment import EnvironmentConfig
from stacks.compute_stack import BENCHMARK_RUNTIMES, ComputeStack


def create_test_compute_stack(app, **config_overrides):
    """Helper to create ComputeStack with default dev configuration."""
    return ComputeStack(
        app,
        "TestComputeStack",
        env_name="dev",
        env_config=EnvironmentConfig(**config_overrides),
    )


def create_template(**config_overrides):
    app = cdk.App()
    stack = create_test_compute_stack(app, **config_overrides)
    return assertions.Template.from_stack(stack)


def test_compute_stack_creates_one_queue_per_runtime():
    """Test that three queues with a 30 minute visibility timeout exist."""
    template = create_template()

    template.resource_count_is("AWS::SQS::Queue", 3)
    template.resource_properties_count_is(
        "AWS::SQS::Queue",
        {"VisibilityTimeout": 1800},
        3,
    )


def test_each_runtime_lambda_created():
    """Test that a workload Lambda exists for every runtime under test."""
    template = create_template()

    for runtime in ("python3.11", "python3.12", "python3.13"):
        template.has_resource_properties(
            "AWS::Lambda::Function",
            {
                "Runtime": runtime,
                "Handler": "handler.handler",
                "Architectures": ["arm64"],
            },
        )


def test_lambdas_have_a_level_playing_field():
    """Test that workload Lambdas share architecture, memory and tag."""
    template = create_template()

    template.resource_properties_count_is(
        "AWS::Lambda::Function",
        {
            "Architectures": ["arm64"],
            "MemorySize": 128,
            "LoggingConfig": {"LogFormat": "JSON"},
            "Tags": assertions.Match.array_with([
                assertions.Match.object_like({"Key": "BenchmarkFunction", "Value": "true"}),
            ]),
        },
        3,
    )


def test_workload_memory_is_configurable():
    """Test that memory size follows the environment config."""
    template = create_template(workload_memory_mb=256)

    template.resource_properties_count_is(
        "AWS::Lambda::Function",
        {"Architectures": ["arm64"], "MemorySize": 256},
        3,
    )


def test_queues_feed_lambdas_one_message_at_a_time():
    """Test that every workload Lambda has an SQS event source with batch size 1."""
    template = create_template()

    template.resource_properties_count_is(
        "AWS::Lambda::EventSourceMapping",
        {"BatchSize": 1},
        3,
    )


def test_dispatcher_lambda_bindings():
    """Test that the dispatcher receives a queue and function ARN per runtime."""
    template = create_template()

    variables = {}
    for target in BENCHMARK_RUNTIMES:
        variables[f"ARN_{target}_QUEUE"] = assertions.Match.any_value()
        variables[f"ARN_{target}_FUNCTION"] = assertions.Match.any_value()

    template.has_resource_properties(
        "AWS::Lambda::Function",
        {
            "Handler": "dispatcher.handler.handler",
            "Runtime": "python3.12",
            "Timeout": 900,
            "Environment": {"Variables": variables},
        },
    )


def test_dispatcher_can_send_to_queues():
    """Test that the dispatcher role may send messages."""
    template = create_template()

    template.has_resource_properties(
        "AWS::IAM::Policy",
        {
            "PolicyDocument": {
                "Statement": assertions.Match.array_with([
                    assertions.Match.object_like({
                        "Action": assertions.Match.array_with(["sqs:SendMessage", "sqs:GetQueueUrl"]),
                    }),
                ]),
            },
        },
    )


def test_schedule_rule_targets_every_runtime():
    """Test that the schedule rule fires the dispatcher once per runtime."""
    template = create_template()

    targets = assertions.Capture()
    template.has_resource_properties(
        "AWS::Events::Rule",
        {
            "ScheduleExpression": "rate(3 hours)",
            "Targets": targets,
        },
    )

    inputs = [json.loads(t["Input"]) for t in targets.as_array()]
    assert [i["detail"]["target"] for i in inputs] == ["PY311", "PY312", "PY313"]
    assert all(i["detail-type"] == "lambda-benchmark" for i in inputs)


def test_schedule_rate_is_configurable():
    template = create_template(schedule_rate_hours=6)

    template.has_resource_properties(
        "AWS::Events::Rule",
        {"ScheduleExpression": "rate(6 hours)"},
    )


def test_compute_stack_outputs():
    """Test that stack creates required outputs."""
    template = create_template()

    template.has_output("DispatcherLambdaName", {})
    template.has_output("DispatcherLambdaArn", {})
    for target in BENCHMARK_RUNTIMES:
        template.has_output(f"{target}QueueUrl", {})
        template.has_output(f"{target}LambdaName", {})


def test_runtime_targets_match_dispatcher_targets():
    """Test that the stack and the dispatcher agree on target names."""
    from lambdas.dispatcher.config import TARGETS

    assert tuple(BENCHMARK_RUNTIMES) == TARGETS
