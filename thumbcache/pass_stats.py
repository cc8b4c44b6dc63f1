"""
PassStats - Statistics for one conversion pass.
"""

import time
from dataclasses import dataclass, field
from typing import List


@dataclass
class PassStats:
    """
    Statistics for one pass over the repository.

    Attributes:
        files_seen: Files visited
        built: Thumbnails generated and indexed
        cached: Thumbnails skipped because they were already indexed
        skipped: Files skipped (unsupported or undetectable type, bad route)
        errors: Thumbnails that failed to build
        bytes_generated: Total bytes of thumbnails written
        start_time: Start timestamp
        end_time: End timestamp, 0 while the pass is running
        stopped: True if the pass was cut short by a stop request
        error_details: List of error messages
    """
    files_seen: int = 0
    built: int = 0
    cached: int = 0
    skipped: int = 0
    errors: int = 0
    bytes_generated: int = 0
    start_time: float = field(default_factory=time.time)
    end_time: float = 0.0
    stopped: bool = False
    error_details: List[str] = field(default_factory=list)

    def finish(self) -> None:
        self.end_time = time.time()

    @property
    def elapsed_seconds(self) -> float:
        """Elapsed time in seconds."""
        end = self.end_time or time.time()
        return end - self.start_time

    @property
    def attempted(self) -> int:
        """Thumbnails that required resize work (built + errors)."""
        return self.built + self.errors

    def summary(self) -> str:
        return (
            f"{self.files_seen} files, {self.built} built, {self.cached} cached, "
            f"{self.skipped} skipped, {self.errors} errors ({self.elapsed_seconds:.1f}s)"
        )
