"""
Driver policies installed on every hearth session.

- MultipleRetryPolicy: bounded retries per request
- ExponentialReconnectionPolicy: doubling backoff between reconnects
- LocalDcFirstPolicy: local datacenter nodes first, stable order
"""
from .load_balancing import LocalDcFirstPolicy
from .reconnection import ExponentialReconnectionPolicy
from .retry import MultipleRetryPolicy, Outcome, RetryDecision

__all__ = [
    "ExponentialReconnectionPolicy",
    "LocalDcFirstPolicy",
    "MultipleRetryPolicy",
    "Outcome",
    "RetryDecision",
]
