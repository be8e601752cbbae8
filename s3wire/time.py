# -*- coding: utf-8 -*-
# s3wire, Python client for Amazon S3 compatible object storage,
# (C) 2026 The s3wire Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Date formats used on the S3 wire."""

from __future__ import absolute_import, annotations

import calendar
from datetime import datetime, timezone

_WEEK_DAYS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
_MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct",
           "Nov", "Dec"]


def _to_utc(value: datetime) -> datetime:
    """Convert aware datetime to naive UTC; naive values are taken as UTC."""
    if value.tzinfo:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def utcnow() -> datetime:
    """Current time as timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_amz_date(value: datetime) -> str:
    """Format datetime as X-Amz-Date value, e.g. 20150830T123600Z."""
    return _to_utc(value).strftime("%Y%m%dT%H%M%SZ")


def to_signer_date(value: datetime) -> str:
    """Format datetime as date part of a signature V4 scope."""
    return _to_utc(value).strftime("%Y%m%d")


def to_http_header(value: datetime) -> str:
    """
    Format datetime as RFC 7231 HTTP date. Names are looked up from
    tables as strftime() is locale dependent.
    """
    value = _to_utc(value)
    return (
        f"{_WEEK_DAYS[value.weekday()]}, {value.day:02d} "
        f"{_MONTHS[value.month - 1]} {value.year:04d} "
        f"{value.hour:02d}:{value.minute:02d}:{value.second:02d} GMT"
    )


def from_http_header(value: str | None) -> datetime | None:
    """Parse RFC 7231 HTTP date; return None for absent value."""
    if not value:
        return None
    tokens = value.split()
    if (
            len(tokens) != 6 or tokens[5] != "GMT" or
            tokens[0].rstrip(",") not in _WEEK_DAYS or
            tokens[2] not in _MONTHS
    ):
        raise ValueError(f"time data {value} does not match HTTP date format")
    clock = datetime.strptime(tokens[4], "%H:%M:%S")
    return datetime(
        int(tokens[3]), _MONTHS.index(tokens[2]) + 1, int(tokens[1]),
        clock.hour, clock.minute, clock.second, tzinfo=timezone.utc,
    )


def from_iso8601utc(value: str | None) -> datetime | None:
    """Parse ISO-8601 UTC timestamp as used in S3 XML documents."""
    if not value:
        return None
    for fmt in ("%Y-%m-%dT%H:%M:%S.%fZ", "%Y-%m-%dT%H:%M:%SZ"):
        try:
            return datetime.strptime(value, fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            continue
    raise ValueError(f"time data {value} does not match ISO-8601 format")


def to_epoch(value: datetime) -> int:
    """Seconds since epoch of given datetime."""
    return calendar.timegm(_to_utc(value).timetuple())
