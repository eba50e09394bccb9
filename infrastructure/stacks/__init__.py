"""CDK Stacks for the Lambda runtime benchmark."""

from .compute_stack import ComputeStack
from .monitoring_stack import MonitoringStack

__all__ = [
    "ComputeStack",
    "MonitoringStack",
]
