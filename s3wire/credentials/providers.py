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

"""
Authorization context providers. Every provider hands out the
credentials to sign the next request with via `sign_context()`.
"""

from __future__ import annotations

import json
import os
import threading
from abc import ABCMeta, abstractmethod
from typing import Callable, Optional

from urllib3.poolmanager import PoolManager
from urllib3.response import BaseHTTPResponse
from urllib3.util import Retry, Timeout

from s3wire.time import from_iso8601utc

from .credentials import Credentials

_IMDS_ENDPOINT = "http://169.254.169.254"
_IMDS_TOKEN_TTL_SECONDS = "21600"


def _urlopen(
        http_client: PoolManager,
        method: str,
        url: str,
        headers: Optional[dict[str, str]] = None,
) -> BaseHTTPResponse:
    """Wrapper of urlopen() handles HTTP status code."""
    res = http_client.urlopen(method, url, headers=headers)
    if res.status not in [200, 204, 206]:
        raise ValueError(f"{url} failed with HTTP status code {res.status}")
    return res


class Provider:  # pylint: disable=too-few-public-methods
    """Credential retriever."""
    __metaclass__ = ABCMeta

    @abstractmethod
    def retrieve(self) -> Credentials:
        """Retrieve credentials and its expiry if available."""

    def sign_context(self) -> Credentials:
        """Credentials to sign the next request with."""
        return self.retrieve()


class StaticProvider(Provider):
    """Basic authorization with fixed access key and secret key."""

    def __init__(
            self,
            access_key: str,
            secret_key: str,
            session_token: Optional[str] = None,
    ):
        self._credentials = Credentials(access_key, secret_key, session_token)

    def retrieve(self) -> Credentials:
        """Return passed credentials."""
        return self._credentials


class SessionProvider(Provider):
    """
    Temporary (IAM/STS) credentials carrying a session token. When a
    `refresh` callable is given, it is invoked to obtain new credentials
    once the current ones are missing or expired.
    """

    def __init__(
            self,
            access_key: Optional[str] = None,
            secret_key: Optional[str] = None,
            session_token: Optional[str] = None,
            refresh: Optional[Callable[[], Credentials]] = None,
    ):
        if not refresh and not (access_key and secret_key):
            raise ValueError(
                "access key and secret key or refresh function must be given",
            )
        self._refresh = refresh
        self._lock = threading.Lock()
        self._credentials: Optional[Credentials] = (
            Credentials(access_key, secret_key, session_token)
            if access_key and secret_key else None
        )

    def retrieve(self) -> Credentials:
        """Return current credentials, refreshing them when expired."""
        with self._lock:
            if self._refresh and (
                    self._credentials is None or
                    self._credentials.is_expired()
            ):
                self._credentials = self._refresh()
            if self._credentials is None:
                raise ValueError("no credentials available")
            return self._credentials


class EnvAWSProvider(Provider):
    """Credential provider from AWS environment variables."""

    def retrieve(self) -> Credentials:
        """Retrieve credentials."""
        return Credentials(
            access_key=(
                os.environ.get("AWS_ACCESS_KEY_ID") or
                os.environ.get("AWS_ACCESS_KEY") or ""
            ),
            secret_key=(
                os.environ.get("AWS_SECRET_ACCESS_KEY") or
                os.environ.get("AWS_SECRET_KEY") or ""
            ),
            session_token=os.environ.get("AWS_SESSION_TOKEN"),
        )


class IamAwsProvider(Provider):
    """Credential provider using the IAM role of an Amazon EC2 instance."""

    def __init__(
            self,
            custom_endpoint: Optional[str] = None,
            http_client: Optional[PoolManager] = None,
    ):
        self._endpoint = custom_endpoint or _IMDS_ENDPOINT
        self._http_client = http_client or PoolManager(
            timeout=Timeout(connect=5, read=5),
            retries=Retry(
                total=3,
                backoff_factor=0.2,
                status_forcelist=[500, 502, 503, 504],
            ),
        )
        self._lock = threading.Lock()
        self._credentials: Optional[Credentials] = None

    def fetch(self) -> Credentials:
        """Fetch credentials from EC2 instance metadata service (IMDSv2)."""
        res = _urlopen(
            self._http_client,
            "PUT",
            self._endpoint + "/latest/api/token",
            headers={
                "X-aws-ec2-metadata-token-ttl-seconds":
                _IMDS_TOKEN_TTL_SECONDS,
            },
        )
        token = res.data.decode("utf-8")
        headers = {"X-aws-ec2-metadata-token": token} if token else None

        url = self._endpoint + "/latest/meta-data/iam/security-credentials/"
        res = _urlopen(self._http_client, "GET", url, headers=headers)
        role_names = [
            name.strip("\r") for name in res.data.decode("utf-8").split("\n")
            if name.strip()
        ]
        if not role_names:
            raise ValueError(f"no IAM roles attached to EC2 service {url}")

        res = _urlopen(
            self._http_client, "GET", url + role_names[0], headers=headers,
        )
        data = json.loads(res.data)
        if data.get("Code", "Success") != "Success":
            raise ValueError(
                f"{url} failed with code {data['Code']} "
                f"message {data.get('Message')}"
            )
        return Credentials(
            data["AccessKeyId"],
            data["SecretAccessKey"],
            data.get("Token"),
            from_iso8601utc(data.get("Expiration")),
        )

    def retrieve(self) -> Credentials:
        """Return cached credentials, fetching them again once expired."""
        with self._lock:
            if self._credentials is None or self._credentials.is_expired():
                self._credentials = self.fetch()
            return self._credentials
