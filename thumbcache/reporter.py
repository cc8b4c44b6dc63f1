"""
Reporter - Generates human-readable reports from a thumbnail index.
"""

import logging
import os
import sys
from collections import Counter
from typing import Optional, TextIO

from .pass_stats import PassStats
from .thumbnail_index import ThumbnailIndex


class Reporter:
    """
    Generates human-readable reports from a thumbnail index.
    """

    def __init__(
        self,
        output: Optional[TextIO] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize reporter.

        Args:
            output: Output stream (default: stdout)
            logger: Optional logger instance
        """
        self.output = output or sys.stdout
        self.logger = logger or logging.getLogger(__name__)

    def _print(self, text: str = "") -> None:
        self.output.write(f"{text}\n")

    def _format_bytes(self, size: float) -> str:
        """Render a byte count with a binary unit, e.g. '1.5 MB'."""
        units = ('B', 'KB', 'MB', 'GB', 'TB', 'PB')
        step = 0
        while size >= 1024 and step < len(units) - 1:
            size /= 1024
            step += 1
        return f"{size:.1f} {units[step]}"

    def _format_duration(self, seconds: float) -> str:
        """Render seconds as seconds, minutes or hours."""
        for limit, divisor, unit in ((60, 1, 'seconds'), (3600, 60, 'minutes')):
            if seconds < limit:
                return f"{seconds / divisor:.1f} {unit}"
        return f"{seconds / 3600:.1f} hours"

    def report_summary(self, index: ThumbnailIndex, thumbnail_folder: Optional[str] = None) -> None:
        """
        Print totals per dimension.

        Args:
            index: Thumbnail index
            thumbnail_folder: If given, also check which thumbnail files are missing
        """
        by_dimension = Counter(record.key for record in index.records())

        self._print("=" * 60)
        self._print("THUMBNAIL INDEX SUMMARY")
        self._print("=" * 60)
        self._print(f"  Source files:   {len(index.routes()):,}")
        self._print(f"  Thumbnails:     {len(index):,}")
        self._print()
        self._print("  By dimension:")
        if not by_dimension:
            self._print("    (none)")
        for key in sorted(by_dimension, key=lambda k: tuple(int(p) for p in k.split('x'))):
            self._print(f"    {key:<12} {by_dimension[key]:,}")

        if thumbnail_folder is not None:
            missing = 0
            total_bytes = 0
            for record in index.records():
                path = os.path.join(thumbnail_folder, record.filename)
                if os.path.isfile(path):
                    total_bytes += os.path.getsize(path)
                else:
                    missing += 1
            self._print()
            self._print(f"  Folder:         {thumbnail_folder}")
            self._print(f"  On disk:        {self._format_bytes(total_bytes)}")
            self._print(f"  Missing files:  {missing:,}")

        self._print("=" * 60)

    def report_detailed(self, index: ThumbnailIndex) -> None:
        """Print every indexed thumbnail grouped by source route."""
        self._print("=" * 60)
        self._print("THUMBNAIL INDEX DETAILS")
        self._print("=" * 60)

        for route in index.routes():
            self._print(route)
            for record in index.records_for(route):
                self._print(f"  {record.key:<12} {record.filename}")

        self._print("=" * 60)

    def report_pass(self, stats: PassStats) -> None:
        """Print the results of one conversion pass."""
        self._print()
        self._print(f"Files:   {stats.files_seen}")
        self._print(f"Built:   {stats.built} ({self._format_bytes(stats.bytes_generated)})")
        self._print(f"Cached:  {stats.cached}")
        self._print(f"Skipped: {stats.skipped}")
        self._print(f"Errors:  {stats.errors}")
        self._print(f"Time:    {self._format_duration(stats.elapsed_seconds)}")
        if stats.stopped:
            self._print("Pass was stopped before completion")
