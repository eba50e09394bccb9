"""Reusable CDK Constructs."""

from .benchmark_function import BenchmarkFunction, BENCHMARK_TAG_KEY

__all__ = [
    "BenchmarkFunction",
    "BENCHMARK_TAG_KEY",
]
