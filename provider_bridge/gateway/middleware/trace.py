"""
Request Tracing.

Request ID generation and propagation, and a per-stage timer for the
gateway flow.
"""

import secrets
import time
from typing import Dict, Mapping, Optional

REQUEST_ID_HEADER = "X-Request-ID"


def generate_request_id() -> str:
    """
    Generate a unique request ID.

    Format: req_<timestamp_hex>_<random>
    Example: req_18d5b3f2_a7b9c4d2e1f0
    """
    timestamp = int(time.time() * 1000)
    random_part = secrets.token_hex(6)
    return f"req_{timestamp:x}_{random_part}"


def extract_or_generate_request_id(headers: Mapping[str, str]) -> str:
    """Reuse the caller's X-Request-ID when present."""
    request_id = headers.get(REQUEST_ID_HEADER) or headers.get(REQUEST_ID_HEADER.lower())
    return request_id or generate_request_id()


class RequestTimer:
    """Timer for measuring request duration and named stages."""

    def __init__(self):
        self.start_time: Optional[float] = None
        self.end_time: Optional[float] = None
        self.stages: Dict[str, int] = {}
        self._stage_start: Optional[float] = None

    def start(self) -> None:
        """Start the timer."""
        self.start_time = time.time()
        self._stage_start = self.start_time

    def stop(self) -> None:
        """Stop the timer."""
        self.end_time = time.time()

    def mark(self, stage: str) -> int:
        """Record the time spent since the previous mark, in milliseconds."""
        now = time.time()
        since = self._stage_start if self._stage_start is not None else now
        elapsed = int((now - since) * 1000)
        self.stages[stage] = elapsed
        self._stage_start = now
        return elapsed

    @property
    def total_ms(self) -> Optional[int]:
        """Get total duration in milliseconds."""
        if self.start_time is None:
            return None
        end = self.end_time or time.time()
        return int((end - self.start_time) * 1000)
