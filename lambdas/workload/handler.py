"""
Benchmark Workload Lambda Handler.

Deployed unchanged to every runtime under test and triggered by its SQS
queue (batch size 1). Each invocation hashes HASH_NUMBER fresh strings built
from the current time and two random values with SHA3-512.

Duration and init duration are reported by the Lambda platform itself
(platform.report records), so the handler does no timing of its own.
"""

import hashlib
import logging
import random
from datetime import datetime, timezone
from typing import Any, List

logger = logging.getLogger()
logger.setLevel(logging.INFO)

HASH_NUMBER = 50


def compute_digests(count: int = HASH_NUMBER) -> List[str]:
    """Return `count` SHA3-512 hex digests of time and random seeded strings."""
    output = []
    for _ in range(count):
        hasher = hashlib.sha3_512()
        seed = f"{datetime.now(timezone.utc).isoformat()}-{random.random()}-{random.random()}"
        hasher.update(seed.encode('utf-8'))
        output.append(hasher.hexdigest())
    return output


def handler(event: Any, context: Any) -> List[str]:
    return compute_digests()
