"""Solver for the server-issued proof-of-work challenge."""

import math
import re

_DIGIT_RUN = re.compile(r"[0-9]+")


def solve_challenge(challenge: str, token: str) -> int:
    """
    Multiply every run of decimal digits found in `challenge`.

    The token is opaque and only echoed back to the server, but a challenge
    without one is not solvable. A challenge with no digits yields 1.
    """
    if not token:
        raise ValueError("challenge token must be non-empty")
    return math.prod(int(run) for run in _DIGIT_RUN.findall(challenge))
