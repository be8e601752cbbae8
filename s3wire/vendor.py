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
Vendor describes an S3 compatible deployment: its host, TLS usage,
addressing style and signature scheme.
"""

from __future__ import absolute_import, annotations

import re
import threading
import urllib.parse
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional

from .error import ValidationError
from .helpers import encode_query, is_dns_compatible, quote

AMAZON_S3_HOST = "s3.amazonaws.com"
DEFAULT_REGION = "us-east-1"

_REGION_REGEX = re.compile(r'^((?!_)(?!-)[a-z_\d-]{1,63}(?<!-)(?<!_))$',
                           re.IGNORECASE)


class SignatureScheme(Enum):
    """Request signing scheme."""
    V2 = "V2"
    V4 = "V4"


@dataclass(frozen=True)
class Vendor:
    """S3 service deployment."""
    host: str = AMAZON_S3_HOST
    use_https: bool = True
    use_virtual_host: bool = False
    signature_scheme: Optional[SignatureScheme] = None
    region: Optional[str] = None

    def __post_init__(self):
        if not self.host or "/" in self.host:
            raise ValidationError(f"invalid host {self.host!r}")
        if self.region and not _REGION_REGEX.match(self.region):
            raise ValidationError(f"invalid region {self.region}")
        if isinstance(self.signature_scheme, str):
            object.__setattr__(
                self, "signature_scheme",
                SignatureScheme(self.signature_scheme.upper()),
            )

    @property
    def scheme(self) -> str:
        """URL scheme."""
        return "https" if self.use_https else "http"

    @property
    def is_amazon(self) -> bool:
        """Whether host is the canonical Amazon S3 host."""
        return self.host == AMAZON_S3_HOST

    def default_signature_scheme(self) -> SignatureScheme:
        """
        Signature scheme of this vendor. Amazon S3 requires signature V4;
        other vendors default to V2 unless configured otherwise.
        """
        if self.signature_scheme is not None:
            return self.signature_scheme
        return SignatureScheme.V4 if self.is_amazon else SignatureScheme.V2

    def is_virtual_host_style(self, bucket_name: Optional[str]) -> bool:
        """Whether bucket is addressed via host name for this vendor."""
        if not bucket_name or not self.use_virtual_host:
            return False
        if not is_dns_compatible(bucket_name):
            return False
        # Wildcard certificates do not cover dotted bucket names.
        return not (self.use_https and "." in bucket_name)

    def canonical_host(self, bucket_name: Optional[str] = None) -> str:
        """Host (with port, if any) requests for given bucket are sent to."""
        if self.is_virtual_host_style(bucket_name):
            return f"{bucket_name}.{self.host}"
        return self.host

    def build_url(
            self,
            bucket_name: Optional[str] = None,
            object_name: Optional[str] = None,
            query_params: Optional[Mapping[str, Optional[str]]] = None,
    ) -> urllib.parse.SplitResult:
        """Build request URL according to addressing style."""
        if object_name and not bucket_name:
            raise ValidationError(
                f"empty bucket name for object name {object_name}",
            )
        path = "/"
        if bucket_name and not self.is_virtual_host_style(bucket_name):
            path = f"/{bucket_name}"
            if object_name:
                path += "/"
        if object_name:
            path += quote(object_name)
        return urllib.parse.SplitResult(
            self.scheme,
            self.canonical_host(bucket_name),
            path,
            encode_query(query_params),
            "",
        )


@dataclass(frozen=True)
class AmazonVendor(Vendor):
    """Amazon S3 with virtual host style addressing and signature V4."""
    host: str = AMAZON_S3_HOST
    use_https: bool = True
    use_virtual_host: bool = True
    signature_scheme: Optional[SignatureScheme] = SignatureScheme.V4


def bucket_location_to_region(location: Optional[str]) -> str:
    """Convert GetBucketLocation result to region name."""
    if not location:
        return DEFAULT_REGION
    if location == "EU":
        return "eu-west-1"
    return location


class RegionMap:
    """Thread-safe cache of bucket regions."""

    def __init__(self):
        self._map: dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, bucket_name: str) -> Optional[str]:
        """Get cached region of bucket."""
        with self._lock:
            return self._map.get(bucket_name)

    def set(self, bucket_name: str, region: str):
        """Cache region of bucket."""
        with self._lock:
            self._map[bucket_name] = region

    def remove(self, bucket_name: str):
        """Forget region of bucket."""
        with self._lock:
            self._map.pop(bucket_name, None)
