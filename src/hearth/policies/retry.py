"""
Bounded retry policy for requests on an established session.

The driver asks its retry policy what to do after every failed attempt. This
policy answers the same way for every failure kind until the configured
number of retries is used up, then always rethrows. Decisions depend only on
the outcome and the retry count, so they are easy to reason about in tests.
"""
from enum import Enum

from cassandra.policies import RetryPolicy


class Outcome(str, Enum):
    """What happened to a request attempt."""

    SUCCESS = "success"
    READ_TIMEOUT = "read_timeout"
    WRITE_TIMEOUT = "write_timeout"
    UNAVAILABLE = "unavailable"
    FAILURE = "failure"


class RetryDecision(str, Enum):
    """What to do next."""

    RETRY_SAME_NODE = "retry_same_node"
    RETRY_NEXT_NODE = "retry_next_node"
    RETHROW = "rethrow"
    IGNORE = "ignore"


class MultipleRetryPolicy(RetryPolicy):
    """
    Retry up to ``max_retry_count`` times, then rethrow.

    Timeouts retry on the same node (the replica was reachable, just slow);
    unavailable replicas and request errors move on to the next node.

    Example:
        ```python
        policy = MultipleRetryPolicy(max_retry_count=3)
        policy.decide(Outcome.READ_TIMEOUT, retry_num=0)  # RETRY_SAME_NODE
        policy.decide(Outcome.READ_TIMEOUT, retry_num=3)  # RETHROW
        ```
    """

    _DRIVER_DECISIONS = {
        RetryDecision.RETRY_SAME_NODE: RetryPolicy.RETRY,
        RetryDecision.RETRY_NEXT_NODE: RetryPolicy.RETRY_NEXT_HOST,
        RetryDecision.RETHROW: RetryPolicy.RETHROW,
        RetryDecision.IGNORE: RetryPolicy.IGNORE,
    }

    def __init__(self, max_retry_count: int):
        if max_retry_count < 0:
            raise ValueError(
                f"max_retry_count must be non-negative, got {max_retry_count}"
            )
        self.max_retry_count = max_retry_count

    def decide(self, outcome: Outcome, retry_num: int) -> RetryDecision:
        """
        Decide what to do after an attempt.

        Args:
            outcome: What happened to the attempt
            retry_num: Number of retries already made for this request

        Returns:
            RETHROW once ``retry_num`` reaches the bound, otherwise the
            decision for the outcome
        """
        if retry_num >= self.max_retry_count:
            return RetryDecision.RETHROW
        if outcome is Outcome.SUCCESS:
            return RetryDecision.IGNORE
        if outcome in (Outcome.READ_TIMEOUT, Outcome.WRITE_TIMEOUT):
            return RetryDecision.RETRY_SAME_NODE
        return RetryDecision.RETRY_NEXT_NODE

    def _answer(self, outcome: Outcome, retry_num: int, consistency):
        decision = self._DRIVER_DECISIONS[self.decide(outcome, retry_num)]
        if decision in (RetryPolicy.RETHROW, RetryPolicy.IGNORE):
            return decision, None
        return decision, consistency

    def on_read_timeout(
        self,
        query,
        consistency,
        required_responses,
        received_responses,
        data_retrieved,
        retry_num,
    ):
        return self._answer(Outcome.READ_TIMEOUT, retry_num, consistency)

    def on_write_timeout(
        self,
        query,
        consistency,
        write_type,
        required_responses,
        received_responses,
        retry_num,
    ):
        return self._answer(Outcome.WRITE_TIMEOUT, retry_num, consistency)

    def on_unavailable(
        self, query, consistency, required_replicas, alive_replicas, retry_num
    ):
        return self._answer(Outcome.UNAVAILABLE, retry_num, consistency)

    def on_request_error(self, query, consistency, error, retry_num):
        return self._answer(Outcome.FAILURE, retry_num, consistency)
