"""Tests for Reporter class."""

import io

import pytest

from thumbcache.pass_stats import PassStats
from thumbcache.reporter import Reporter
from thumbcache.thumb import Dimensions, ThumbnailRecord
from thumbcache.thumbnail_index import ThumbnailIndex


@pytest.fixture
def sample_index():
    index = ThumbnailIndex()
    for width in (200, 400, 800):
        index.insert(ThumbnailRecord('docs/photo.jpg', Dimensions(width, 0), f"abc-{width}-0.jpg"))
    index.insert(ThumbnailRecord('docs/logo.png', Dimensions(200, 0), 'def-200-0.png'))
    return index


class TestReporter:
    """Tests for Reporter class."""

    def test_init_default_output(self):
        """Test default output is stdout."""
        import sys
        reporter = Reporter()
        assert reporter.output == sys.stdout

    def test_format_bytes(self):
        """Test byte formatting."""
        reporter = Reporter()

        assert reporter._format_bytes(500) == '500.0 B'
        assert reporter._format_bytes(1024 * 1024) == '1.0 MB'

    def test_format_duration(self):
        """Test duration formatting."""
        reporter = Reporter()

        assert reporter._format_duration(30) == '30.0 seconds'
        assert reporter._format_duration(90) == '1.5 minutes'

    def test_report_summary(self, sample_index):
        """Test summary report generation."""
        output = io.StringIO()
        reporter = Reporter(output=output)

        reporter.report_summary(sample_index)

        result = output.getvalue()
        assert 'SUMMARY' in result
        assert 'Source files:   2' in result
        assert 'Thumbnails:     4' in result
        assert result.index('200x0') < result.index('400x0') < result.index('800x0')
        assert 'Missing files' not in result

    def test_report_summary_empty(self):
        """Test summary of an empty index."""
        output = io.StringIO()

        Reporter(output=output).report_summary(ThumbnailIndex())

        assert '(none)' in output.getvalue()

    def test_report_summary_missing_files(self, sample_index, tmp_path):
        """Test thumbnails absent from the folder are counted."""
        (tmp_path / 'abc-200-0.jpg').write_bytes(b'x' * 2048)
        output = io.StringIO()

        Reporter(output=output).report_summary(sample_index, str(tmp_path))

        result = output.getvalue()
        assert 'Missing files:  3' in result
        assert '2.0 KB' in result

    def test_report_detailed(self, sample_index):
        """Test detailed report lists every record."""
        output = io.StringIO()

        Reporter(output=output).report_detailed(sample_index)

        result = output.getvalue()
        assert 'DETAILS' in result
        assert 'docs/photo.jpg' in result
        assert 'abc-800-0.jpg' in result
        assert 'def-200-0.png' in result

    def test_report_pass(self):
        """Test pass report."""
        output = io.StringIO()
        stats = PassStats(files_seen=2, built=3, skipped=1, bytes_generated=1024)
        stats.finish()

        Reporter(output=output).report_pass(stats)

        result = output.getvalue()
        assert 'Files:   2' in result
        assert 'Built:   3 (1.0 KB)' in result
        assert 'stopped' not in result

    def test_report_pass_stopped(self):
        """Test a stopped pass is reported."""
        output = io.StringIO()
        stats = PassStats(stopped=True)

        Reporter(output=output).report_pass(stats)

        assert 'stopped before completion' in output.getvalue()
