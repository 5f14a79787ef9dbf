"""Unit tests for refresh preference models."""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from sahwsync.refresh.models import DismissalDuration, PromptFrequency, RefreshPreferences


class TestDismissalDuration:
    """Test dismissal window lengths."""

    @pytest.mark.parametrize(
        "duration,hours",
        [
            (DismissalDuration.TEMPORARY, 2),
            (DismissalDuration.SESSION, 8),
            (DismissalDuration.EXTENDED, 24),
        ],
    )
    def test_duration(self, duration, hours):
        assert duration.duration == timedelta(hours=hours)


class TestRefreshPreferences:
    """Test parsing and serialization of stored preferences."""

    def test_parses_stored_json_with_z_suffix(self):
        preferences = RefreshPreferences.model_validate_json(
            '{"enableAutoPrompts": true, "promptFrequency": "aggressive",'
            ' "dismissedUntil": "2026-01-15T20:00:00.000Z"}'
        )

        assert preferences.prompt_frequency is PromptFrequency.AGGRESSIVE
        assert preferences.dismissed_until == datetime(2026, 1, 15, 20, tzinfo=timezone.utc)

    def test_to_json_omits_missing_dismissal(self):
        assert RefreshPreferences().to_json() == (
            '{"enableAutoPrompts":true,"promptFrequency":"normal"}'
        )

    def test_unknown_frequency_rejected(self):
        with pytest.raises(ValidationError):
            RefreshPreferences(prompt_frequency="sometimes")

    def test_is_dismissed_without_deadline(self):
        assert RefreshPreferences().is_dismissed(datetime.now(timezone.utc)) is False
