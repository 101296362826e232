"""
Tests for Rich console configuration and output helpers.

Tests the console setup, progress bar creation, and styled output functions.
"""

import pytest
import logging

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from rich_console import (
    console,
    TRACKER_THEME,
    setup_rich_logging,
    create_replay_progress,
    create_poll_progress,
    print_banner,
    print_config_summary,
    print_completion_summary,
    print_error,
)
from tracking.controller import TrackerStatus
from tracking.data_models import TrackerConfig, TrackerState
from tracking.errors import TrackerError


class TestConsoleSetup:
    """Tests for console initialization."""

    def test_console_exists(self):
        """Console should be initialized."""
        assert console is not None

    def test_theme_has_required_styles(self):
        """Theme should have required style definitions."""
        required_styles = ["info", "warning", "error", "success", "highlight", "gps", "distance"]
        for style in required_styles:
            assert style in TRACKER_THEME.styles, f"Missing style: {style}"


class TestLogging:
    """Tests for Rich logging setup."""

    def test_setup_creates_logger(self):
        """Setup should configure root logger with WARNING level by default."""
        setup_rich_logging(verbose=False)
        logger = logging.getLogger()
        assert logger.level == logging.WARNING

    def test_verbose_sets_debug(self):
        """Verbose flag should set DEBUG level."""
        setup_rich_logging(verbose=True)
        logger = logging.getLogger()
        assert logger.level == logging.DEBUG


class TestProgressBars:
    """Tests for progress bar creation."""

    def test_create_replay_progress(self):
        """Replay progress should track fixes with a status field."""
        progress = create_replay_progress()
        with progress:
            task_id = progress.add_task("Replaying", total=10, status="searching")
            progress.update(task_id, advance=1, status="1 pts • 0.0 m")
            assert progress.tasks[0].completed == 1

    def test_create_poll_progress(self):
        """Poll progress should work without a known total."""
        progress = create_poll_progress()
        with progress:
            task_id = progress.add_task("Tracking", total=None, status="searching")
            progress.update(task_id, status="locked • 3 pts")
            assert progress.tasks[0].fields["status"] == "locked • 3 pts"


class TestOutputFunctions:
    """Tests for styled output functions."""

    def test_print_banner_no_error(self):
        """Print banner should not raise errors."""
        print_banner("1.0.0")

    def test_print_config_summary_no_error(self):
        """Print config summary should not raise errors."""
        print_config_summary("drive.csv", TrackerConfig(), outputs=["track.png"])

    def test_print_config_summary_bounded_retries(self):
        print_config_summary("http://vehicle.local", TrackerConfig(max_retries=3))

    def test_print_completion_summary_no_error(self):
        """Print completion summary should not raise errors."""
        status = TrackerStatus(
            state=TrackerState.IDLE,
            point_count=42,
            total_distance_m=123.4,
            elapsed_seconds=95,
            x_m=10.0,
            y_m=-3.5,
        )
        print_completion_summary(status, ["track.png", "drive.csv"])

    def test_print_completion_summary_with_error(self):
        """Completion summary should show the last error."""
        status = TrackerStatus(state=TrackerState.ERROR, error=TrackerError.PERMISSION_DENIED)
        print_completion_summary(status, [])

    def test_print_error_no_error(self):
        """Print error should not raise errors."""
        print_error("Test error message")

    def test_print_error_with_hint(self):
        """Print error with hint should not raise errors."""
        print_error("Test error", hint="Try this instead")
