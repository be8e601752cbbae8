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

# pylint: disable=too-many-instance-attributes

"""
Request builders of S3 operations.

Every builder is an immutable value holding the parameters of one
operation. `build()` validates them and produces an unsigned `HttpRequest`;
no builder performs I/O. Signing happens in the client right before the
request is handed to the transport.
"""

from __future__ import absolute_import, annotations

import base64
import hashlib
import os
from abc import ABCMeta, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, BinaryIO, ClassVar, Mapping, Optional, Sequence, Union

from urllib3._collections import HTTPHeaderDict

from .error import ValidationError
from .helpers import (MAX_DELETE_KEYS, MAX_MULTIPART_COUNT, check_bucket_name,
                      check_object_name, md5sum_hash, metadata_to_headers,
                      quote, sha256_hash)
from .vendor import bucket_location_to_region
from .xml import Element, SubElement, getbytes

_CANNED_ACLS = frozenset([
    "private", "public-read", "public-read-write", "aws-exec-read",
    "authenticated-read", "bucket-owner-read", "bucket-owner-full-control",
    "log-delivery-write",
])
_RESTORE_TIERS = frozenset(["Standard", "Bulk", "Expedited"])
_STREAM_CHUNK_SIZE = 1024 * 1024

BodyType = Union[bytes, BinaryIO]


class Operation(Enum):
    """S3 operations known to this library."""
    LIST_BUCKETS = "ListBuckets"
    CREATE_BUCKET = "CreateBucket"
    DELETE_BUCKET = "DeleteBucket"
    GET_BUCKET_LOCATION = "GetBucketLocation"
    LIST_OBJECTS = "ListObjects"
    PUT_OBJECT = "PutObject"
    GET_OBJECT = "GetObject"
    HEAD_OBJECT = "HeadObject"
    DELETE_OBJECT = "DeleteObject"
    DELETE_MULTI_OBJECT = "DeleteObjects"
    INITIATE_MULTIPART_UPLOAD = "CreateMultipartUpload"
    PUT_PART = "UploadPart"
    COMPLETE_MULTIPART_UPLOAD = "CompleteMultipartUpload"
    ABORT_MULTIPART_UPLOAD = "AbortMultipartUpload"
    LIST_PARTS = "ListParts"
    GET_BUCKET_ACL = "GetBucketAcl"
    SET_BUCKET_ACL = "PutBucketAcl"
    GET_OBJECT_ACL = "GetObjectAcl"
    SET_OBJECT_ACL = "PutObjectAcl"
    PUT_BUCKET_TAGGING = "PutBucketTagging"
    DELETE_BUCKET_TAGGING = "DeleteBucketTagging"
    PUT_OBJECT_TAGGING = "PutObjectTagging"
    DELETE_OBJECT_TAGGING = "DeleteObjectTagging"
    RESTORE_OBJECT = "RestoreObject"


@dataclass
class HttpRequest:
    """Wire level request before signing."""
    operation: Operation
    method: str
    bucket_name: Optional[str] = None
    object_name: Optional[str] = None
    query_params: dict[str, Optional[str]] = field(default_factory=dict)
    headers: HTTPHeaderDict = field(default_factory=HTTPHeaderDict)
    body: Optional[BodyType] = None
    content_length: Optional[int] = None
    content_sha256: Optional[str] = None
    region: Optional[str] = None


def _check_acl_short(acl_short: Optional[str]):
    if acl_short is not None and acl_short not in _CANNED_ACLS:
        raise ValidationError(f"invalid canned ACL {acl_short}")


def _stream_info(stream: BinaryIO) -> tuple[str, str, int]:
    """Base64 MD5, hex SHA-256 and size of seekable stream from its
    current position; the position is restored afterwards."""
    position = stream.tell()
    md5 = hashlib.new("md5", usedforsecurity=False)  # type: ignore[call-arg]
    sha256 = hashlib.sha256()
    size = 0
    while True:
        data = stream.read(_STREAM_CHUNK_SIZE)
        if not data:
            break
        md5.update(data)
        sha256.update(data)
        size += len(data)
    stream.seek(position, os.SEEK_SET)
    return base64.b64encode(md5.digest()).decode(), sha256.hexdigest(), size


def _to_int(value: Any, name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(
            f"{name} must be a number; got {value!r}",
        ) from exc


def _with_body(request: HttpRequest, body: BodyType,
               content_type: Optional[str] = None) -> HttpRequest:
    """Attach body with Content-MD5, Content-Length and payload hash."""
    if isinstance(body, (bytes, bytearray)):
        body = bytes(body)
        request.headers["Content-MD5"] = md5sum_hash(body)
        request.content_length = len(body)
        request.content_sha256 = sha256_hash(body)
    else:
        if not all(hasattr(body, name) for name in ("read", "seek", "tell")):
            raise ValidationError(
                "value must be bytes or binary stream; "
                f"got {type(body).__name__}",
            )
        try:
            md5, sha256, size = _stream_info(body)
        except OSError as exc:
            raise ValidationError(
                f"value stream must be seekable; {exc}",
            ) from exc
        request.headers["Content-MD5"] = md5
        request.content_length = size
        request.content_sha256 = sha256
    request.body = body
    if content_type:
        request.headers["Content-Type"] = content_type
    return request


def _tagging_body(tags: Mapping[str, str], limit: int) -> bytes:
    if len(tags) > limit:
        raise ValidationError(f"at most {limit} tags are allowed")
    element = Element("Tagging")
    tag_set = SubElement(element, "TagSet")
    for key, value in tags.items():
        if not key:
            raise ValidationError("tag key must not be empty")
        tag = SubElement(tag_set, "Tag")
        SubElement(tag, "Key", str(key))
        SubElement(tag, "Value", str(value))
    return getbytes(element)


def _part_pairs(parts: Sequence[Any]) -> list[tuple[int, str]]:
    """Normalize parts given as (number, etag) pairs or Part objects."""
    pairs = []
    for part in parts:
        try:
            if isinstance(part, (tuple, list)):
                number, etag = part
            else:
                number, etag = part.part_number, part.etag
        except (AttributeError, ValueError) as exc:
            raise ValidationError(
                f"part must be (number, ETag) pair or Part; got {part!r}",
            ) from exc
        pairs.append((_to_int(number, "part number"), str(etag)))
    return pairs


class Request:  # pylint: disable=too-few-public-methods
    """Operation request builder."""
    __metaclass__ = ABCMeta
    operation: ClassVar[Operation]

    @abstractmethod
    def build(self) -> HttpRequest:
        """Validate parameters and produce unsigned wire request."""


@dataclass(frozen=True)
class ListBucketsRequest(Request):
    """ListBuckets: GET /"""
    operation: ClassVar[Operation] = Operation.LIST_BUCKETS

    def build(self) -> HttpRequest:
        return HttpRequest(self.operation, "GET")


@dataclass(frozen=True)
class CreateBucketRequest(Request):
    """CreateBucket: PUT /bucket"""
    bucket_name: str
    acl_short: Optional[str] = None
    location_constraint: Optional[str] = None
    operation: ClassVar[Operation] = Operation.CREATE_BUCKET

    def build(self) -> HttpRequest:
        check_bucket_name(self.bucket_name, True)
        _check_acl_short(self.acl_short)
        request = HttpRequest(
            self.operation, "PUT", self.bucket_name,
            region=bucket_location_to_region(self.location_constraint),
        )
        if self.acl_short:
            request.headers["x-amz-acl"] = self.acl_short
        if self.location_constraint and (
                self.location_constraint != "us-east-1"
        ):
            element = Element("CreateBucketConfiguration")
            SubElement(element, "LocationConstraint", self.location_constraint)
            _with_body(request, getbytes(element), "application/xml")
        return request


@dataclass(frozen=True)
class DeleteBucketRequest(Request):
    """DeleteBucket: DELETE /bucket"""
    bucket_name: str
    operation: ClassVar[Operation] = Operation.DELETE_BUCKET

    def build(self) -> HttpRequest:
        check_bucket_name(self.bucket_name)
        return HttpRequest(self.operation, "DELETE", self.bucket_name)


@dataclass(frozen=True)
class GetBucketLocationRequest(Request):
    """GetBucketLocation: GET /bucket?location"""
    bucket_name: str
    operation: ClassVar[Operation] = Operation.GET_BUCKET_LOCATION

    def build(self) -> HttpRequest:
        check_bucket_name(self.bucket_name)
        return HttpRequest(
            self.operation, "GET", self.bucket_name,
            query_params={"location": None},
        )


@dataclass(frozen=True)
class ListObjectsRequest(Request):
    """ListObjects (version 1): GET /bucket?prefix&delimiter&max-keys&marker"""
    bucket_name: str
    prefix: Optional[str] = None
    delimiter: Optional[str] = None
    max_keys: Optional[int] = None
    marker: Optional[str] = None
    operation: ClassVar[Operation] = Operation.LIST_OBJECTS

    def build(self) -> HttpRequest:
        check_bucket_name(self.bucket_name)
        query_params: dict[str, Optional[str]] = {}
        if self.prefix:
            query_params["prefix"] = self.prefix
        if self.delimiter:
            query_params["delimiter"] = self.delimiter
        if self.max_keys is not None:
            max_keys = _to_int(self.max_keys, "max keys")
            if max_keys <= 0:
                raise ValidationError("max keys must be a positive number")
            query_params["max-keys"] = str(max_keys)
        if self.marker:
            query_params["marker"] = self.marker
        return HttpRequest(
            self.operation, "GET", self.bucket_name,
            query_params=query_params,
        )


@dataclass(frozen=True)
class PutObjectRequest(Request):
    """
    PutObject: PUT /bucket/key. With `copy_source` ("bucket/key") the
    object is copied server side instead of uploading `value`.
    """
    bucket_name: str
    object_name: str
    value: Optional[BodyType] = None
    content_type: Optional[str] = None
    acl_short: Optional[str] = None
    metadata: Optional[Mapping[str, str]] = None
    headers: Optional[Mapping[str, str]] = None
    copy_source: Optional[str] = None
    metadata_directive: Optional[str] = None
    storage_class: Optional[str] = None
    encryption: Optional[str] = None
    operation: ClassVar[Operation] = Operation.PUT_OBJECT

    def build(self) -> HttpRequest:
        check_bucket_name(self.bucket_name)
        check_object_name(self.object_name)
        _check_acl_short(self.acl_short)
        if self.copy_source and self.value is not None:
            raise ValidationError("copy source and value are exclusive")
        if self.metadata_directive not in (None, "COPY", "REPLACE"):
            raise ValidationError(
                f"invalid metadata directive {self.metadata_directive}",
            )

        request = HttpRequest(
            self.operation, "PUT", self.bucket_name, self.object_name,
        )
        for key, value in (self.headers or {}).items():
            request.headers[key] = str(value)
        for key, value in metadata_to_headers(self.metadata).items():
            request.headers[key] = value
        if self.acl_short:
            request.headers["x-amz-acl"] = self.acl_short
        if self.storage_class:
            request.headers["x-amz-storage-class"] = self.storage_class
        if self.encryption:
            request.headers["x-amz-server-side-encryption"] = self.encryption

        if self.copy_source:
            request.headers["x-amz-copy-source"] = quote(
                self.copy_source if self.copy_source.startswith("/")
                else "/" + self.copy_source,
            )
            if self.metadata_directive:
                request.headers["x-amz-metadata-directive"] = (
                    self.metadata_directive
                )
            if self.content_type:
                request.headers["Content-Type"] = self.content_type
            request.content_length = 0
            return request

        return _with_body(
            request,
            self.value if self.value is not None else b"",
            self.content_type or "binary/octet-stream",
        )


@dataclass(frozen=True)
class GetObjectRequest(Request):
    """GetObject: GET /bucket/key, optionally ranged."""
    bucket_name: str
    object_name: str
    range: Optional[str] = None
    operation: ClassVar[Operation] = Operation.GET_OBJECT

    def build(self) -> HttpRequest:
        check_bucket_name(self.bucket_name)
        check_object_name(self.object_name)
        request = HttpRequest(
            self.operation, "GET", self.bucket_name, self.object_name,
        )
        if self.range:
            if not self.range.startswith("bytes="):
                raise ValidationError(f"invalid range {self.range}")
            request.headers["Range"] = self.range
        return request


@dataclass(frozen=True)
class HeadObjectRequest(Request):
    """HeadObject: HEAD /bucket/key"""
    bucket_name: str
    object_name: str
    operation: ClassVar[Operation] = Operation.HEAD_OBJECT

    def build(self) -> HttpRequest:
        check_bucket_name(self.bucket_name)
        check_object_name(self.object_name)
        return HttpRequest(
            self.operation, "HEAD", self.bucket_name, self.object_name,
        )


@dataclass(frozen=True)
class DeleteObjectRequest(Request):
    """DeleteObject: DELETE /bucket/key"""
    bucket_name: str
    object_name: str
    operation: ClassVar[Operation] = Operation.DELETE_OBJECT

    def build(self) -> HttpRequest:
        check_bucket_name(self.bucket_name)
        check_object_name(self.object_name)
        return HttpRequest(
            self.operation, "DELETE", self.bucket_name, self.object_name,
        )


@dataclass(frozen=True)
class DeleteMultiObjectRequest(Request):
    """DeleteObjects: POST /bucket?delete, quiet mode."""
    bucket_name: str
    keys: Sequence[str]
    operation: ClassVar[Operation] = Operation.DELETE_MULTI_OBJECT

    def build(self) -> HttpRequest:
        check_bucket_name(self.bucket_name)
        if not self.keys:
            raise ValidationError("at least one key must be given")
        if len(self.keys) > MAX_DELETE_KEYS:
            raise ValidationError(
                f"at most {MAX_DELETE_KEYS} keys can be deleted at once",
            )
        element = Element("Delete")
        SubElement(element, "Quiet", "true")
        for key in self.keys:
            check_object_name(key)
            SubElement(SubElement(element, "Object"), "Key", key)
        request = HttpRequest(
            self.operation, "POST", self.bucket_name,
            query_params={"delete": None},
        )
        return _with_body(request, getbytes(element), "application/xml")


@dataclass(frozen=True)
class InitiateMultipartUploadRequest(Request):
    """CreateMultipartUpload: POST /bucket/key?uploads"""
    bucket_name: str
    object_name: str
    content_type: Optional[str] = None
    acl_short: Optional[str] = None
    metadata: Optional[Mapping[str, str]] = None
    headers: Optional[Mapping[str, str]] = None
    operation: ClassVar[Operation] = Operation.INITIATE_MULTIPART_UPLOAD

    def build(self) -> HttpRequest:
        check_bucket_name(self.bucket_name)
        check_object_name(self.object_name)
        _check_acl_short(self.acl_short)
        request = HttpRequest(
            self.operation, "POST", self.bucket_name, self.object_name,
            query_params={"uploads": None},
        )
        for key, value in (self.headers or {}).items():
            request.headers[key] = str(value)
        for key, value in metadata_to_headers(self.metadata).items():
            request.headers[key] = value
        if self.acl_short:
            request.headers["x-amz-acl"] = self.acl_short
        if self.content_type:
            request.headers["Content-Type"] = self.content_type
        return request


def _check_upload_id(upload_id: Optional[str]):
    if not upload_id:
        raise ValidationError("upload ID must not be empty")


@dataclass(frozen=True)
class PutPartRequest(Request):
    """UploadPart: PUT /bucket/key?partNumber=N&uploadId=U"""
    bucket_name: str
    object_name: str
    upload_id: str
    part_number: int
    value: BodyType
    operation: ClassVar[Operation] = Operation.PUT_PART

    def build(self) -> HttpRequest:
        check_bucket_name(self.bucket_name)
        check_object_name(self.object_name)
        _check_upload_id(self.upload_id)
        part_number = _to_int(self.part_number, "part number")
        if not 1 <= part_number <= MAX_MULTIPART_COUNT:
            raise ValidationError(
                f"part number must be between 1 and {MAX_MULTIPART_COUNT}",
            )
        request = HttpRequest(
            self.operation, "PUT", self.bucket_name, self.object_name,
            query_params={
                "partNumber": str(part_number),
                "uploadId": self.upload_id,
            },
        )
        return _with_body(request, self.value)


@dataclass(frozen=True)
class CompleteMultipartUploadRequest(Request):
    """
    CompleteMultipartUpload: POST /bucket/key?uploadId=U. Parts must be
    numbered 1..N without gaps and listed in ascending order.
    """
    bucket_name: str
    object_name: str
    upload_id: str
    parts: Sequence[Any]
    operation: ClassVar[Operation] = Operation.COMPLETE_MULTIPART_UPLOAD

    def build(self) -> HttpRequest:
        check_bucket_name(self.bucket_name)
        check_object_name(self.object_name)
        _check_upload_id(self.upload_id)
        pairs = _part_pairs(self.parts)
        if not pairs:
            raise ValidationError("at least one part must be given")
        numbers = [number for number, _ in pairs]
        if numbers != list(range(1, len(numbers) + 1)):
            raise ValidationError(
                f"parts must be numbered 1..{len(numbers)} in ascending "
                f"order; got {numbers}"
            )

        element = Element("CompleteMultipartUpload")
        for number, etag in pairs:
            if not etag:
                raise ValidationError(f"empty ETag of part {number}")
            tag = SubElement(element, "Part")
            SubElement(tag, "PartNumber", str(number))
            SubElement(tag, "ETag", f'"{etag.strip(chr(34))}"')
        request = HttpRequest(
            self.operation, "POST", self.bucket_name, self.object_name,
            query_params={"uploadId": self.upload_id},
        )
        return _with_body(request, getbytes(element), "application/xml")


@dataclass(frozen=True)
class AbortMultipartUploadRequest(Request):
    """AbortMultipartUpload: DELETE /bucket/key?uploadId=U"""
    bucket_name: str
    object_name: str
    upload_id: str
    operation: ClassVar[Operation] = Operation.ABORT_MULTIPART_UPLOAD

    def build(self) -> HttpRequest:
        check_bucket_name(self.bucket_name)
        check_object_name(self.object_name)
        _check_upload_id(self.upload_id)
        return HttpRequest(
            self.operation, "DELETE", self.bucket_name, self.object_name,
            query_params={"uploadId": self.upload_id},
        )


@dataclass(frozen=True)
class ListPartsRequest(Request):
    """ListParts: GET /bucket/key?uploadId=U"""
    bucket_name: str
    object_name: str
    upload_id: str
    part_number_marker: Optional[int] = None
    max_parts: Optional[int] = None
    operation: ClassVar[Operation] = Operation.LIST_PARTS

    def build(self) -> HttpRequest:
        check_bucket_name(self.bucket_name)
        check_object_name(self.object_name)
        _check_upload_id(self.upload_id)
        query_params: dict[str, Optional[str]] = {"uploadId": self.upload_id}
        if self.part_number_marker:
            query_params["part-number-marker"] = str(self.part_number_marker)
        if self.max_parts:
            query_params["max-parts"] = str(self.max_parts)
        return HttpRequest(
            self.operation, "GET", self.bucket_name, self.object_name,
            query_params=query_params,
        )


@dataclass(frozen=True)
class GetAclRequest(Request):
    """GetBucketAcl / GetObjectAcl: GET ...?acl"""
    bucket_name: str
    object_name: Optional[str] = None

    @property
    def operation(self) -> Operation:  # type: ignore[override]
        return (
            Operation.GET_OBJECT_ACL if self.object_name
            else Operation.GET_BUCKET_ACL
        )

    def build(self) -> HttpRequest:
        check_bucket_name(self.bucket_name)
        if self.object_name is not None:
            check_object_name(self.object_name)
        return HttpRequest(
            self.operation, "GET", self.bucket_name, self.object_name,
            query_params={"acl": None},
        )


@dataclass(frozen=True)
class SetAclRequest(Request):
    """
    PutBucketAcl / PutObjectAcl: PUT ...?acl with either canned ACL header
    or AccessControlPolicy document.
    """
    bucket_name: str
    object_name: Optional[str] = None
    acl_short: Optional[str] = None
    acl_xml: Optional[Union[str, bytes]] = None

    @property
    def operation(self) -> Operation:  # type: ignore[override]
        return (
            Operation.SET_OBJECT_ACL if self.object_name
            else Operation.SET_BUCKET_ACL
        )

    def build(self) -> HttpRequest:
        check_bucket_name(self.bucket_name)
        if self.object_name is not None:
            check_object_name(self.object_name)
        if bool(self.acl_short) == bool(self.acl_xml):
            raise ValidationError(
                "exactly one of canned ACL or ACL XML must be given",
            )
        _check_acl_short(self.acl_short)
        request = HttpRequest(
            self.operation, "PUT", self.bucket_name, self.object_name,
            query_params={"acl": None},
        )
        if self.acl_short:
            request.headers["x-amz-acl"] = self.acl_short
            request.content_length = 0
            return request
        body = self.acl_xml
        return _with_body(
            request,
            body.encode() if isinstance(body, str) else body,
            "application/xml",
        )


@dataclass(frozen=True)
class PutTaggingRequest(Request):
    """PutBucketTagging / PutObjectTagging: PUT ...?tagging"""
    bucket_name: str
    tags: Mapping[str, str]
    object_name: Optional[str] = None

    @property
    def operation(self) -> Operation:  # type: ignore[override]
        return (
            Operation.PUT_OBJECT_TAGGING if self.object_name
            else Operation.PUT_BUCKET_TAGGING
        )

    def build(self) -> HttpRequest:
        check_bucket_name(self.bucket_name)
        if self.object_name is not None:
            check_object_name(self.object_name)
        if not self.tags:
            raise ValidationError("at least one tag must be given")
        body = _tagging_body(self.tags, 10 if self.object_name else 50)
        request = HttpRequest(
            self.operation, "PUT", self.bucket_name, self.object_name,
            query_params={"tagging": None},
        )
        return _with_body(request, body, "application/xml")


@dataclass(frozen=True)
class DeleteTaggingRequest(Request):
    """DeleteBucketTagging / DeleteObjectTagging: DELETE ...?tagging"""
    bucket_name: str
    object_name: Optional[str] = None

    @property
    def operation(self) -> Operation:  # type: ignore[override]
        return (
            Operation.DELETE_OBJECT_TAGGING if self.object_name
            else Operation.DELETE_BUCKET_TAGGING
        )

    def build(self) -> HttpRequest:
        check_bucket_name(self.bucket_name)
        if self.object_name is not None:
            check_object_name(self.object_name)
        return HttpRequest(
            self.operation, "DELETE", self.bucket_name, self.object_name,
            query_params={"tagging": None},
        )


@dataclass(frozen=True)
class RestoreObjectRequest(Request):
    """RestoreObject: POST /bucket/key?restore"""
    bucket_name: str
    object_name: str
    days: int
    tier: str = "Standard"
    operation: ClassVar[Operation] = Operation.RESTORE_OBJECT

    def build(self) -> HttpRequest:
        check_bucket_name(self.bucket_name)
        check_object_name(self.object_name)
        days = _to_int(self.days, "days")
        if days < 1:
            raise ValidationError("days must be a positive number")
        if self.tier not in _RESTORE_TIERS:
            raise ValidationError(f"invalid restore tier {self.tier}")
        element = Element("RestoreRequest")
        SubElement(element, "Days", str(days))
        SubElement(
            SubElement(element, "GlacierJobParameters"), "Tier", self.tier,
        )
        request = HttpRequest(
            self.operation, "POST", self.bucket_name, self.object_name,
            query_params={"restore": None},
        )
        return _with_body(request, getbytes(element), "application/xml")
