"""Declarative HTTP commands and the machinery that sends them."""

from .base import HttpCommand, HttpMethod, IssueRef
from .invoker import CommandInvoker, new_generic_response
from .retry import RetryOutcome, RetryPolicy, invoke_repeatable
from .session import XraySessionResolver

__all__ = [
    "CommandInvoker",
    "HttpCommand",
    "HttpMethod",
    "IssueRef",
    "RetryOutcome",
    "RetryPolicy",
    "XraySessionResolver",
    "invoke_repeatable",
    "new_generic_response",
]
