import pytest

from coursetime.models import Calendar


@pytest.fixture
def open_calendar():
    """Two days of eight hours, nothing blocked."""
    return Calendar(num_days=2, slots_per_day=8, blocked=frozenset(), day_names=None, hour_labels=None)
