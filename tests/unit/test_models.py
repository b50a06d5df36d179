"""
Tests for the timestamp helper behind the created_at/updated_at columns.
"""

import warnings
from datetime import datetime, timedelta, timezone

from storage.models import utcnow


def test_utcnow_is_naive_utc():
    with warnings.catch_warnings():
        warnings.simplefilter("error", DeprecationWarning)
        now = utcnow()

    assert now.tzinfo is None
    reference = datetime.now(timezone.utc).replace(tzinfo=None)
    assert abs(reference - now) < timedelta(seconds=5)
