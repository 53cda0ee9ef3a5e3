"""simulation/__init__.py"""
from .simulator import QuerySimulator

__all__ = ["QuerySimulator"]
