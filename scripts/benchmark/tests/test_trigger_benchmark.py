"""
Unit tests for the manual benchmark trigger script.
"""

import io
import json
from unittest.mock import Mock, patch

import pytest
from botocore.exceptions import ClientError

from scripts.benchmark import trigger_benchmark


@pytest.fixture
def mock_cloudformation():
    client = Mock()
    client.describe_stacks.return_value = {
        'Stacks': [{
            'Outputs': [
                {'OutputKey': 'PY311QueueUrl', 'OutputValue': 'https://sqs/py311'},
                {'OutputKey': 'DispatcherLambdaName', 'OutputValue': 'LambdaBenchmark-dev-Dispatcher'},
            ],
        }],
    }
    return client


@pytest.fixture
def mock_lambda():
    client = Mock()
    client.invoke.return_value = {'StatusCode': 202}
    return client


@pytest.fixture
def trigger(mock_cloudformation, mock_lambda):
    return trigger_benchmark.BenchmarkTrigger(
        env='dev',
        cloudformation_client=mock_cloudformation,
        lambda_client=mock_lambda,
    )


class TestGetDispatcherName:

    def test_reads_stack_output(self, trigger, mock_cloudformation):
        assert trigger.get_dispatcher_name() == 'LambdaBenchmark-dev-Dispatcher'
        mock_cloudformation.describe_stacks.assert_called_once_with(StackName='LambdaBenchmark-dev')

    def test_missing_output(self, trigger, mock_cloudformation):
        mock_cloudformation.describe_stacks.return_value = {'Stacks': [{'Outputs': []}]}

        with pytest.raises(RuntimeError, match='DispatcherLambdaName'):
            trigger.get_dispatcher_name()

    def test_missing_stack(self, trigger, mock_cloudformation):
        mock_cloudformation.describe_stacks.side_effect = ClientError(
            {'Error': {'Code': 'ValidationError', 'Message': 'does not exist'}},
            'DescribeStacks',
        )

        with pytest.raises(RuntimeError, match='cdk deploy'):
            trigger.get_dispatcher_name()


class TestTrigger:

    def test_async_invoke_per_target(self, trigger, mock_lambda):
        results = trigger.trigger(['PY311', 'PY313'])

        assert [r['target'] for r in results] == ['PY311', 'PY313']
        assert mock_lambda.invoke.call_count == 2
        first = mock_lambda.invoke.call_args_list[0].kwargs
        assert first['InvocationType'] == 'Event'
        assert json.loads(first['Payload']) == {
            'detail-type': 'lambda-benchmark',
            'detail': {'target': 'PY311'},
        }

    def test_wait_returns_summary(self, trigger, mock_lambda):
        summary = {'target': 'PY312', 'attempted': 30, 'succeeded': 30, 'failed': 0}
        mock_lambda.invoke.return_value = {
            'StatusCode': 200,
            'Payload': io.BytesIO(json.dumps(summary).encode('utf-8')),
        }

        results = trigger.trigger(['PY312'], wait=True)

        assert mock_lambda.invoke.call_args.kwargs['InvocationType'] == 'RequestResponse'
        assert results[0]['response'] == summary


class TestMain:

    def test_main_defaults_to_all_targets(self, mock_cloudformation, mock_lambda, capsys):
        with patch.object(trigger_benchmark.boto3, 'client', side_effect=[mock_cloudformation, mock_lambda]):
            exit_code = trigger_benchmark.main(['--env', 'dev'])

        assert exit_code == 0
        assert mock_lambda.invoke.call_count == 3
        assert 'PY313' in capsys.readouterr().out

    def test_main_reports_function_error(self, mock_cloudformation, mock_lambda):
        mock_lambda.invoke.return_value = {
            'StatusCode': 200,
            'FunctionError': 'Unhandled',
            'Payload': io.BytesIO(b'{"errorType": "ConfigurationError"}'),
        }

        with patch.object(trigger_benchmark.boto3, 'client', side_effect=[mock_cloudformation, mock_lambda]):
            exit_code = trigger_benchmark.main(['--target', 'PY311', '--wait'])

        assert exit_code == 1

    def test_main_rejects_unknown_target(self):
        with pytest.raises(SystemExit):
            trigger_benchmark.main(['--target', 'NODE'])
