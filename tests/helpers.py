"""Constants shared by the http-hmac tests."""

from datetime import datetime, timezone

FIXED_NOW = datetime(2013, 1, 1, 0, 5, 0, tzinfo=timezone.utc)
FIXED_DATE = "Tue, 01 Jan 2013 00:00:00 GMT"
