#!/usr/bin/env python3
"""
CDK Application for the Lambda runtime benchmark.

Deploys the benchmark queues, workload functions, dispatcher, schedule rule
and dashboard.

Usage:
    cdk synth --context env=dev
    cdk deploy --context env=dev --all
    cdk destroy --context env=dev --all

Environment: dev or prod (default: dev)
"""

from aws_cdk import App, Environment, Tags

from environment import DeploySettings, load_environment_config
from stacks.compute_stack import ComputeStack
from stacks.monitoring_stack import MonitoringStack

# Initialize CDK app
app = App()
settings = DeploySettings()

# Get environment from context or CDK_ENV
env_name = app.node.try_get_context("env") or settings.cdk_env
env_config = load_environment_config(app.node.try_get_context("environments"), env_name)

account_id = settings.cdk_default_account or env_config.account
region = settings.cdk_default_region or env_config.region

aws_env = Environment(
    account=account_id,
    region=region,
)

print(f"Deploying to environment: {env_name}")
print(f"AWS Account: {account_id}")
print(f"AWS Region: {region}")

# 1. Compute Stack (queues, workload Lambdas, dispatcher, schedule)
compute_stack = ComputeStack(
    app,
    f"LambdaBenchmark-{env_name}",
    env=aws_env,
    env_name=env_name,
    env_config=env_config,
    description=f"Lambda Runtime Benchmark Stack - {env_name}",
)

# 2. Monitoring Stack (dashboard, alarms)
monitoring_stack = MonitoringStack(
    app,
    f"LambdaBenchmarkMonitoring-{env_name}",
    env=aws_env,
    env_name=env_name,
    workload_lambdas=list(compute_stack.workload_functions.values()),
    dispatcher_lambda=compute_stack.dispatcher_lambda,
    create_alarms=env_name != "dev",  # No alarms in dev
    description=f"Lambda Runtime Benchmark Monitoring - {env_name}",
)

Tags.of(app).add("Environment", env_name)
Tags.of(app).add("Project", "lambda-runtime-benchmark")
Tags.of(app).add("ManagedBy", "CDK")

app.synth()
