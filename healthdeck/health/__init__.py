"""Health core — results, targets, resources and their summaries."""

from .resource import Resource
from .result import Result
from .target import Target

__all__ = ["Resource", "Result", "Target"]
