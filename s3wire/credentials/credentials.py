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

"""Credentials used to sign requests."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional


@dataclass(frozen=True)
class Credentials:
    """Access key, secret key and optional session token."""

    access_key: str
    secret_key: str
    session_token: Optional[str] = None
    expiration: Optional[datetime] = None

    def __post_init__(self):
        if not self.access_key:
            raise ValueError("Access key must not be empty")

        if not self.secret_key:
            raise ValueError("Secret key must not be empty")

        # Empty token must never end up as an empty header.
        if not self.session_token:
            object.__setattr__(self, "session_token", None)

        if self.expiration and not self.expiration.tzinfo:
            object.__setattr__(
                self, "expiration",
                self.expiration.replace(tzinfo=timezone.utc),
            )

    def is_expired(self) -> bool:
        """Check whether these credentials expire within ten seconds."""
        if not self.expiration:
            return False
        return (
            self.expiration <
            datetime.now(timezone.utc) + timedelta(seconds=10)
        )
