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

"""Helper functions."""

from __future__ import absolute_import, annotations

import base64
import hashlib
import platform
import re
import urllib.parse
from typing import Dict, List, Mapping, Optional, Tuple, Union

from typing_extensions import Protocol

from . import __title__, __version__
from .error import ValidationError

_DEFAULT_USER_AGENT = (
    f"s3wire ({platform.system()}; {platform.machine()}) "
    f"{__title__}/{__version__}"
)

MAX_MULTIPART_COUNT = 10000  # 10000 parts
MAX_PART_SIZE = 5 * 1024 * 1024 * 1024  # 5GiB
MIN_PART_SIZE = 5 * 1024 * 1024  # 5MiB
MAX_DELETE_KEYS = 1000

_BUCKET_NAME_REGEX = re.compile(r'^[a-z0-9][a-z0-9\.\-]{1,61}[a-z0-9]$')
_OLD_BUCKET_NAME_REGEX = re.compile(r'^[a-z0-9][a-z0-9_\.\-]{1,253}[a-z0-9]$',
                                    re.IGNORECASE)
_IPV4_REGEX = re.compile(
    r'^((25[0-5]|2[0-4][0-9]|1[0-9][0-9]|[1-9][0-9]|[0-9])\.){3}'
    r'(25[0-5]|2[0-4][0-9]|1[0-9][0-9]|[1-9][0-9]|[0-9])$')
_MD5_ETAG_REGEX = re.compile(r'^[a-f0-9]{32}$')

DictType = Dict[str, Union[str, List[str], Tuple[str]]]


class CancelSignal(Protocol):  # pylint: disable=too-few-public-methods
    """typing stub for cancellation signal such as threading.Event."""

    def is_set(self) -> bool:
        """Return True once cancellation was requested."""


def is_cancelled(cancel: Optional[CancelSignal]) -> bool:
    """Check optional cancellation signal."""
    return bool(cancel is not None and cancel.is_set())


def quote(
        resource: str,
        safe: str = "/",
        encoding: str | None = None,
        errors: str | None = None,
) -> str:
    """Percent-encode resource keeping '~' unescaped."""
    return urllib.parse.quote(
        resource,
        safe=safe,
        encoding=encoding,
        errors=errors,
    ).replace("%7E", "~")


def queryencode(query: str, safe: str = "") -> str:
    """Encode query parameter key or value."""
    return quote(query, safe)


def headers_to_strings(
        headers: Mapping[str, str | list[str] | tuple[str]],
        titled_key: bool = False,
) -> str:
    """Convert HTTP headers to multi-line string with secrets redacted."""
    values = []
    for key, value in headers.items():
        key = key.title() if titled_key else key
        for item in value if isinstance(value, (list, tuple)) else [value]:
            if key.lower() == "authorization":
                item = re.sub(r"Signature=([0-9a-f]+)",
                              "Signature=*REDACTED*", item)
                item = re.sub(r"Credential=([^/]+)",
                              "Credential=*REDACTED*", item)
                item = re.sub(r"^AWS ([^:]+):(.+)$",
                              "AWS *REDACTED*:*REDACTED*", item)
            elif key.lower() == "x-amz-security-token":
                item = "*REDACTED*"
            values.append(f"{key}: {item}")
    return "\n".join(values)


def check_bucket_name(bucket_name: str | None, strict: bool = False):
    """
    Validate bucket name. Strict check applies DNS compatible naming
    rules required by virtual host style addressing and bucket creation.
    """
    if not isinstance(bucket_name, str) or not bucket_name.strip():
        raise ValidationError("bucket name must be a non-empty string")

    regex = _BUCKET_NAME_REGEX if strict else _OLD_BUCKET_NAME_REGEX
    if not regex.match(bucket_name):
        raise ValidationError(f"invalid bucket name {bucket_name}")

    if _IPV4_REGEX.match(bucket_name):
        raise ValidationError(f"bucket name {bucket_name} must not be "
                              "formatted as an IP address")

    if any(x in bucket_name for x in ("..", ".-", "-.")):
        raise ValidationError(f"bucket name {bucket_name} contains invalid "
                              "successive characters")


def check_object_name(object_name: str | None):
    """Validate object key."""
    if not isinstance(object_name, str) or not object_name:
        raise ValidationError("object name must be a non-empty string")
    if len(object_name.encode()) > 1024:
        raise ValidationError("object name must not exceed 1024 bytes")


def is_dns_compatible(bucket_name: str) -> bool:
    """Check whether bucket name may be used as host name label."""
    return bool(
        _BUCKET_NAME_REGEX.match(bucket_name) and
        not _IPV4_REGEX.match(bucket_name) and
        not any(x in bucket_name for x in ("..", ".-", "-."))
    )


def md5sum_hash(data: bytes) -> str:
    """Compute MD5 of data and return hash as Base64 encoded value."""
    hasher = hashlib.new(  # type: ignore[call-arg]
        "md5",
        usedforsecurity=False,
    )
    hasher.update(data)
    return base64.b64encode(hasher.digest()).decode()


def md5hex_hash(data: bytes) -> str:
    """Compute MD5 of data and return hash as hex encoded value."""
    hasher = hashlib.new(  # type: ignore[call-arg]
        "md5",
        usedforsecurity=False,
    )
    hasher.update(data)
    return hasher.hexdigest()


def sha256_hash(data: str | bytes | None) -> str:
    """Compute SHA-256 of data and return hash as hex encoded value."""
    data = data or b""
    return hashlib.sha256(
        data.encode() if isinstance(data, str) else data,
    ).hexdigest()


def unquote_etag(etag: str | None) -> str | None:
    """Strip double quotes the service puts around ETag values."""
    if etag is None:
        return None
    return etag.replace('"', "").replace("&quot;", "")


def is_simple_etag(etag: str | None) -> bool:
    """Check whether ETag is a plain content MD5, not a multipart one."""
    return bool(etag and _MD5_ETAG_REGEX.match(etag))


def url_replace(
        url: urllib.parse.SplitResult,
        scheme: str | None = None,
        netloc: str | None = None,
        path: str | None = None,
        query: str | None = None,
        fragment: str | None = None,
) -> urllib.parse.SplitResult:
    """Return new URL with replaced properties in given URL."""
    return urllib.parse.SplitResult(
        scheme if scheme is not None else url.scheme,
        netloc if netloc is not None else url.netloc,
        path if path is not None else url.path,
        query if query is not None else url.query,
        fragment if fragment is not None else url.fragment,
    )


def encode_query(query_params: Mapping[str, str | None] | None) -> str:
    """
    Encode query parameters sorted by key. A None value renders the bare
    key as used by S3 sub-resources like `?acl` or `?uploads`.
    """
    query = []
    for key, value in sorted((query_params or {}).items()):
        if value is None:
            query.append(queryencode(key))
        else:
            query.append(f"{queryencode(key)}={queryencode(value)}")
    return "&".join(query)


def metadata_to_headers(metadata: Mapping[str, str] | None) -> dict[str, str]:
    """Convert user metadata to x-amz-meta-* headers."""
    headers = {}
    for key, value in (metadata or {}).items():
        key = str(key).lower()
        if not key.startswith("x-amz-meta-"):
            key = "x-amz-meta-" + key
        value = str(value)
        try:
            value.encode("us-ascii")
        except UnicodeEncodeError as exc:
            raise ValidationError(
                f"unsupported metadata value {value}; "
                f"only US-ASCII encoded characters are supported"
            ) from exc
        if "\n" in value or "\r" in value:
            raise ValidationError(
                f"metadata value of {key} must not contain line breaks",
            )
        headers[key] = value
    return headers


def headers_to_metadata(headers: Mapping[str, str]) -> dict[str, str]:
    """Extract user metadata from x-amz-meta-* response headers."""
    return {
        key.lower()[len("x-amz-meta-"):]: value
        for key, value in headers.items()
        if key.lower().startswith("x-amz-meta-")
    }
