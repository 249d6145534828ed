"""Exponential backoff with jitter for rate-limited requests.

The transport only ever retries ``429`` responses, so the policy is a
single pure function of the attempt number.  Randomness is injected so
tests can pin the jitter.
"""

from __future__ import annotations

import random
from collections.abc import Callable

# Seconds before the first retry and the cap on the un-jittered delay.
INITIAL_RETRY_DELAY = 5.0
MAX_RETRY_DELAY = 600.0


def exponential_backoff_with_jitter(
    attempt: int,
    *,
    initial: float = INITIAL_RETRY_DELAY,
    maximum: float = MAX_RETRY_DELAY,
    rand: Callable[[], float] = random.random,
) -> float:
    """Compute the delay before retry number *attempt* + 1.

    The base delay doubles with every attempt (``initial * 2**attempt``)
    and is capped at *maximum*.  A random jitter of up to the same amount
    is then added, so the result lies in ``[clipped, 2 * clipped)`` and
    concurrent clients spread their retries instead of retrying in step.

    Parameters
    ----------
    attempt:
        Number of retries already performed for this request (0-indexed).
    initial:
        Delay in seconds for ``attempt == 0`` before jitter.
    maximum:
        Cap in seconds on the pre-jitter delay.
    rand:
        Source of uniform floats in ``[0, 1)``.

    Returns
    -------
    float
        Delay in seconds.
    """
    if attempt < 0:
        raise ValueError(f"attempt must be >= 0, got {attempt}")

    # 2**1000 still converts to a float; past that the cap applies anyway.
    clipped = min(maximum, initial * float(2 ** min(attempt, 1000)))

    return clipped + rand() * clipped
