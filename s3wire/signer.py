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
s3wire.signer
~~~~~~~~~~~~~

This module implements AWS signature version '2' and version '4', both
for Authorization headers and for presigned URLs.

Signing is a pure function of its inputs: the request timestamp is passed
in by the caller and is the only time dependent value.

"""

from __future__ import absolute_import, annotations

import base64
import hashlib
import hmac
import re
from datetime import datetime
from typing import Mapping, Optional, cast
from urllib.parse import SplitResult, unquote

from . import time
from .credentials import Credentials
from .helpers import DictType, queryencode, sha256_hash, url_replace

SIGN_V4_ALGORITHM = "AWS4-HMAC-SHA256"
UNSIGNED_PAYLOAD = "UNSIGNED-PAYLOAD"
_MULTI_SPACE_REGEX = re.compile(r"( +)")
_FOLDED_LINE_REGEX = re.compile(r"\s*\n\s*")

# Sub-resources taking part in the V2 canonical resource.
_V2_SUBRESOURCES = frozenset([
    "acl", "cors", "delete", "lifecycle", "location", "logging",
    "notification", "partNumber", "policy", "requestPayment", "restore",
    "tagging", "torrent", "uploadId", "uploads", "versionId", "versioning",
    "versions", "website",
    "response-cache-control", "response-content-disposition",
    "response-content-encoding", "response-content-language",
    "response-content-type", "response-expires",
])


def _hmac_hash(
        key: bytes,
        data: bytes,
        hexdigest: bool = False,
) -> bytes | str:
    """Return HMacSHA256 digest of given key and data."""

    hasher = hmac.new(key, data, hashlib.sha256)
    return hasher.hexdigest() if hexdigest else hasher.digest()


def _header_values(value: str | list[str] | tuple[str]) -> list[str]:
    return list(value) if isinstance(value, (list, tuple)) else [value]


def _split_query(query: str) -> list[tuple[str, Optional[str]]]:
    """Split encoded query into (key, value) pairs; bare keys give None."""
    pairs: list[tuple[str, Optional[str]]] = []
    for token in (query or "").split("&"):
        if not token:
            continue
        key, sep, value = token.partition("=")
        pairs.append((key, value if sep else None))
    return pairs


# Signature V4


def _get_scope(date: datetime, region: str, service_name: str) -> str:
    """Get scope string."""
    return f"{time.to_signer_date(date)}/{region}/{service_name}/aws4_request"


def _get_canonical_headers(
        headers: Mapping[str, str | list[str] | tuple[str]],
) -> tuple[str, str]:
    """Get canonical headers."""

    ordered_headers: dict[str, str] = {}
    for key, values in headers.items():
        key = key.lower()
        if key in ("authorization", "user-agent"):
            continue
        value = ",".join(
            _MULTI_SPACE_REGEX.sub(" ", item.strip())
            for item in _header_values(values)
        )
        if key in ordered_headers:
            value = ordered_headers[key] + "," + value
        ordered_headers[key] = value

    ordered_headers = dict(sorted(ordered_headers.items()))
    signed_headers = ";".join(ordered_headers.keys())
    canonical_headers = "\n".join(
        [f"{key}:{value}" for key, value in ordered_headers.items()],
    )
    return canonical_headers, signed_headers


def _get_canonical_query_string(query: str) -> str:
    """Get canonical query string; bare keys are rendered as 'key='."""
    return "&".join(
        f"{key}={value or ''}" for key, value in sorted(
            _split_query(query), key=lambda pair: (pair[0], pair[1] or ""),
        )
    )


def _get_canonical_request_hash(
        method: str,
        url: SplitResult,
        headers: Mapping[str, str | list[str] | tuple[str]],
        content_sha256: str,
) -> tuple[str, str]:
    """Get canonical request hash."""
    canonical_headers, signed_headers = _get_canonical_headers(headers)
    canonical_query_string = _get_canonical_query_string(url.query)

    # CanonicalRequest =
    #   HTTPRequestMethod + '\n' +
    #   CanonicalURI + '\n' +
    #   CanonicalQueryString + '\n' +
    #   CanonicalHeaders + '\n\n' +
    #   SignedHeaders + '\n' +
    #   HexEncode(Hash(RequestPayload))
    canonical_request = (
        f"{method}\n"
        f"{url.path or '/'}\n"
        f"{canonical_query_string}\n"
        f"{canonical_headers}\n\n"
        f"{signed_headers}\n"
        f"{content_sha256}"
    )
    return sha256_hash(canonical_request), signed_headers


def _get_string_to_sign(
        date: datetime,
        scope: str,
        canonical_request_hash: str,
) -> str:
    """Get string-to-sign."""
    return (
        f"{SIGN_V4_ALGORITHM}\n{time.to_amz_date(date)}\n{scope}\n"
        f"{canonical_request_hash}"
    )


def _get_signing_key(
        secret_key: str,
        date: datetime,
        region: str,
        service_name: str,
) -> bytes:
    """Derive signing key by HMAC chain over date, region and service."""

    key = ("AWS4" + secret_key).encode()
    for data in (time.to_signer_date(date), region, service_name,
                 "aws4_request"):
        key = cast(bytes, _hmac_hash(key, data.encode()))
    return key


def _get_signature(signing_key: bytes, string_to_sign: str) -> str:
    """Get signature."""

    return cast(
        str,
        _hmac_hash(signing_key, string_to_sign.encode(), hexdigest=True),
    )


def _get_authorization(
        access_key: str,
        scope: str,
        signed_headers: str,
        signature: str,
) -> str:
    """Get authorization."""
    return (
        f"{SIGN_V4_ALGORITHM} Credential={access_key}/{scope}, "
        f"SignedHeaders={signed_headers}, Signature={signature}"
    )


def sign_v4(
        method: str,
        url: SplitResult,
        region: str,
        headers: DictType,
        credentials: Credentials,
        content_sha256: str,
        date: datetime,
        service_name: str = "s3",
) -> DictType:
    """
    Do signature V4 of given request. Headers must already carry Host,
    x-amz-date, x-amz-content-sha256 and x-amz-security-token (if any).
    """

    scope = _get_scope(date, region, service_name)
    canonical_request_hash, signed_headers = _get_canonical_request_hash(
        method, url, headers, content_sha256,
    )
    string_to_sign = _get_string_to_sign(date, scope, canonical_request_hash)
    signing_key = _get_signing_key(
        credentials.secret_key, date, region, service_name,
    )
    signature = _get_signature(signing_key, string_to_sign)
    headers["Authorization"] = _get_authorization(
        credentials.access_key, scope, signed_headers, signature,
    )
    return headers


def presign_v4(
        method: str,
        url: SplitResult,
        region: str,
        credentials: Credentials,
        date: datetime,
        expires: int,
) -> SplitResult:
    """Do signature V4 of given presign request."""

    scope = _get_scope(date, region, "s3")
    query = url.query + "&" if url.query else ""
    query += (
        f"X-Amz-Algorithm={SIGN_V4_ALGORITHM}"
        f"&X-Amz-Credential={queryencode(credentials.access_key + '/' + scope)}"
        f"&X-Amz-Date={time.to_amz_date(date)}"
        f"&X-Amz-Expires={expires}"
    )
    if credentials.session_token:
        query += (
            f"&X-Amz-Security-Token={queryencode(credentials.session_token)}"
        )
    query += "&X-Amz-SignedHeaders=host"
    url = url_replace(url, query=query)

    canonical_request = (
        f"{method}\n"
        f"{url.path or '/'}\n"
        f"{_get_canonical_query_string(query)}\n"
        f"host:{url.netloc}\n\n"
        f"host\n"
        f"{UNSIGNED_PAYLOAD}"
    )
    string_to_sign = _get_string_to_sign(
        date, scope, sha256_hash(canonical_request),
    )
    signing_key = _get_signing_key(credentials.secret_key, date, region, "s3")
    signature = _get_signature(signing_key, string_to_sign)
    return url_replace(
        url, query=f"{url.query}&X-Amz-Signature={queryencode(signature)}",
    )


# Signature V2


def _get_canonical_amz_headers(
        headers: Mapping[str, str | list[str] | tuple[str]],
) -> str:
    """
    Lower-cased, sorted x-amz-* headers; values of repeated headers are
    merged with ',' and folded lines are unfolded.
    """
    amz_headers: dict[str, list[str]] = {}
    for key, values in headers.items():
        key = key.lower()
        if not key.startswith("x-amz-"):
            continue
        amz_headers.setdefault(key, []).extend(
            _FOLDED_LINE_REGEX.sub(" ", item.strip())
            for item in _header_values(values)
        )
    return "".join(
        f"{key}:{','.join(values)}\n"
        for key, values in sorted(amz_headers.items())
    )


def _get_canonical_resource(
        url: SplitResult,
        virtual_host_bucket: Optional[str] = None,
) -> str:
    """Canonical resource: path style path plus signed sub-resources."""
    resource = url.path or "/"
    if virtual_host_bucket:
        resource = f"/{virtual_host_bucket}{resource}"

    subresources = sorted(
        (key, value) for key, value in _split_query(url.query)
        if key in _V2_SUBRESOURCES
    )
    if subresources:
        # Sub-resource values are signed unencoded.
        resource += "?" + "&".join(
            key if value is None else f"{key}={unquote(value)}"
            for key, value in subresources
        )
    return resource


def get_string_to_sign_v2(
        method: str,
        url: SplitResult,
        headers: Mapping[str, str | list[str] | tuple[str]],
        virtual_host_bucket: Optional[str] = None,
        expires: Optional[int] = None,
) -> str:
    """Get signature V2 string-to-sign."""
    lowered = {key.lower(): value for key, value in headers.items()}

    def _get(name: str) -> str:
        return ",".join(_header_values(lowered.get(name, "")))

    if expires is not None:
        date = str(expires)
    elif "x-amz-date" in lowered:
        date = ""
    else:
        date = _get("date")

    return (
        f"{method}\n"
        f"{_get('content-md5')}\n"
        f"{_get('content-type')}\n"
        f"{date}\n"
        f"{_get_canonical_amz_headers(headers)}"
        f"{_get_canonical_resource(url, virtual_host_bucket)}"
    )


def _get_signature_v2(secret_key: str, string_to_sign: str) -> str:
    """HMAC-SHA1 of string-to-sign, standard base64 encoded."""
    digest = hmac.new(
        secret_key.encode(), string_to_sign.encode(), hashlib.sha1,
    ).digest()
    return base64.b64encode(digest).decode()


def sign_v2(
        method: str,
        url: SplitResult,
        headers: DictType,
        credentials: Credentials,
        virtual_host_bucket: Optional[str] = None,
) -> DictType:
    """
    Do signature V2 of given request. Headers must already carry Date (or
    x-amz-date) and x-amz-security-token (if any).
    """
    string_to_sign = get_string_to_sign_v2(
        method, url, headers, virtual_host_bucket,
    )
    signature = _get_signature_v2(credentials.secret_key, string_to_sign)
    headers["Authorization"] = f"AWS {credentials.access_key}:{signature}"
    return headers


def presign_v2(
        method: str,
        url: SplitResult,
        credentials: Credentials,
        expires_at: datetime,
        virtual_host_bucket: Optional[str] = None,
) -> SplitResult:
    """Do signature V2 query string authentication of given request."""
    expires = time.to_epoch(expires_at)
    headers: dict[str, str] = {}
    if credentials.session_token:
        headers["x-amz-security-token"] = credentials.session_token
    string_to_sign = get_string_to_sign_v2(
        method, url, headers, virtual_host_bucket, expires,
    )
    signature = _get_signature_v2(credentials.secret_key, string_to_sign)

    query = url.query + "&" if url.query else ""
    query += (
        f"AWSAccessKeyId={queryencode(credentials.access_key)}"
        f"&Expires={expires}"
        f"&Signature={queryencode(signature)}"
    )
    if credentials.session_token:
        query += (
            f"&x-amz-security-token={queryencode(credentials.session_token)}"
        )
    return url_replace(url, query=query)
