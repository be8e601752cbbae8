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
Response classes and typed results of S3 operations.
"""

from __future__ import absolute_import, annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Optional, Type, TypeVar, cast
from xml.etree import ElementTree as ET

from urllib3._collections import HTTPHeaderDict

from .error import InvalidResponseError, S3Error, classify
from .helpers import headers_to_metadata, unquote_etag
from .operations import Operation
from .time import from_http_header, from_iso8601utc
from .vendor import bucket_location_to_region
from .xml import find, findall, findtext, localname, parse

# Error codes the service sends for an outcome the caller asked for anyway.
_ACCEPTED_ERROR_CODES = {
    Operation.CREATE_BUCKET: frozenset(["BucketAlreadyOwnedByYou"]),
}

# Operations whose 200 response may still carry an <Error> document.
_OK_ERROR_OPERATIONS = frozenset([Operation.COMPLETE_MULTIPART_UPLOAD])

_STATUS_ERRORS = {
    301: ("PermanentRedirect", "Moved Permanently"),
    307: ("Redirect", "Temporary redirect"),
    400: ("BadRequest", "Bad request"),
    403: ("AccessDenied", "Access denied"),
    405: ("MethodNotAllowed",
          "The specified method is not allowed against this resource"),
    409: ("Conflict", "Conflict"),
    501: ("MethodNotAllowed",
          "The specified method is not allowed against this resource"),
}

_UNSET = object()


class Response:
    """
    Status, headers and body of one HTTP exchange. The XML document is
    parsed lazily, once, on first access.
    """

    def __init__(  # pylint: disable=too-many-positional-arguments
            self,
            operation: Operation,
            status: int,
            headers: Optional[HTTPHeaderDict] = None,
            data: bytes = b"",
            bucket_name: Optional[str] = None,
            object_name: Optional[str] = None,
            *,
            is_copy: bool = False,
    ):
        self._operation = operation
        self._ok_body_may_fail = operation in _OK_ERROR_OPERATIONS or (
            is_copy and operation == Operation.PUT_OBJECT
        )
        self._status = status
        self._headers = headers if headers is not None else HTTPHeaderDict()
        self._data = data or b""
        self._bucket_name = bucket_name
        self._object_name = object_name
        self._element: Any = _UNSET

    @classmethod
    def from_http(
            cls,
            operation: Operation,
            http_response: Any,
            bucket_name: Optional[str] = None,
            object_name: Optional[str] = None,
            is_copy: bool = False,
    ) -> Response:
        """Create response from urllib3 response with preloaded content."""
        return cls(
            operation, http_response.status,
            HTTPHeaderDict(http_response.headers), http_response.data,
            bucket_name, object_name,
            is_copy=is_copy,
        )

    @property
    def operation(self) -> Operation:
        """Get operation."""
        return self._operation

    @property
    def status(self) -> int:
        """Get HTTP status code."""
        return self._status

    @property
    def headers(self) -> HTTPHeaderDict:
        """Get HTTP response headers."""
        return self._headers

    @property
    def data(self) -> bytes:
        """Get response body."""
        return self._data

    @property
    def bucket_name(self) -> Optional[str]:
        """Get bucket name."""
        return self._bucket_name

    @property
    def object_name(self) -> Optional[str]:
        """Get object name."""
        return self._object_name

    @property
    def element(self) -> Optional[ET.Element]:
        """Parsed XML body or None if the body is not an XML document."""
        if self._element is _UNSET:
            self._element = None
            if self._data.lstrip().startswith(b"<"):
                try:
                    self._element = parse(self._data)
                except ValueError:
                    self._element = None
        return self._element

    @property
    def content_type(self) -> Optional[str]:
        """Get Content-Type header."""
        return self._headers.get("content-type")

    @property
    def error_code(self) -> Optional[str]:
        """Service error code from <Error> body, if any."""
        element = self.element
        if element is None or localname(element) != "Error":
            return None
        return findtext(element, "Code")

    @property
    def is_success(self) -> bool:
        """Whether the operation succeeded."""
        return not self.is_error

    @property
    def is_error(self) -> bool:
        """
        Whether the operation failed. Besides non-2xx statuses this covers
        200 responses carrying an <Error> body as CompleteMultipartUpload
        and server side copies may return them. Bodies of other successful
        responses, object content included, are never inspected.
        """
        if not 200 <= self._status <= 299:
            return self.error_code not in _ACCEPTED_ERROR_CODES.get(
                self._operation, (),
            )
        if not self._ok_body_may_fail:
            return False
        return self.error_code is not None

    def error(self) -> Optional[S3Error]:
        """Build S3Error of this response; None on success."""
        if not self.is_error:
            return None

        element = self.element
        if element is not None and localname(element) == "Error":
            code = findtext(element, "Code")
            return S3Error(
                classify(self._status, code),
                findtext(element, "Message"),
                status=self._status,
                code=code,
                resource=findtext(element, "Resource"),
                request_id=(
                    findtext(element, "RequestId") or
                    self._headers.get("x-amz-request-id")
                ),
                host_id=(
                    findtext(element, "HostId") or
                    self._headers.get("x-amz-id-2")
                ),
                bucket_name=findtext(element, "BucketName", default=(
                    self._bucket_name
                )),
                object_name=findtext(element, "Key", default=(
                    self._object_name
                )),
                response=self,
            )

        code, message = _STATUS_ERRORS.get(self._status, (None, None))
        if self._status == 404:
            if self._object_name:
                code, message = "NoSuchKey", "Object does not exist"
            elif self._bucket_name:
                code, message = "NoSuchBucket", "Bucket does not exist"
            else:
                code, message = "ResourceNotFound", "Request resource not found"
        if self._status in (301, 307) and self._headers.get(
                "x-amz-bucket-region",
        ):
            message = (
                f"{message}; bucket is in region "
                f"{self._headers['x-amz-bucket-region']}"
            )
        if message is None:
            message = (
                self._data.decode(errors="replace")[:256] or
                f"HTTP status {self._status}"
            )
        return S3Error(
            classify(self._status, code),
            message,
            status=self._status,
            code=code,
            request_id=self._headers.get("x-amz-request-id"),
            host_id=self._headers.get("x-amz-id-2"),
            bucket_name=self._bucket_name,
            object_name=self._object_name,
            response=self,
        )

    def __repr__(self):
        return (
            f"Response(operation={self._operation.value}, "
            f"status={self._status})"
        )


def _require_element(response: Response) -> ET.Element:
    element = response.element
    if element is None:
        raise InvalidResponseError(
            response.status,
            response.content_type,
            response.data.decode(errors="replace"),
        )
    return element


def _int(value: Optional[str]) -> Optional[int]:
    return int(value) if value else None


def _bool(value: Optional[str]) -> bool:
    return (value or "").lower() == "true"


@dataclass(frozen=True)
class Owner:
    """Owner of bucket or object."""
    id: Optional[str] = None
    display_name: Optional[str] = None

    @classmethod
    def fromxml(cls, element: Optional[ET.Element]) -> Optional[Owner]:
        """Create new object with values from XML element."""
        if element is None:
            return None
        return cls(findtext(element, "ID"), findtext(element, "DisplayName"))


@dataclass(frozen=True)
class BucketInfo:
    """Bucket information."""
    name: str
    creation_date: Optional[datetime] = None


A = TypeVar("A", bound="ListAllMyBucketsResult")


@dataclass(frozen=True)
class ListAllMyBucketsResult:
    """ListBuckets API result."""
    owner_id: Optional[str]
    owner_display_name: Optional[str]
    buckets: list[BucketInfo]

    @classmethod
    def fromxml(cls: Type[A], element: ET.Element) -> A:
        """Create new object with values from XML element."""
        owner = Owner.fromxml(find(element, "Owner")) or Owner()
        buckets = []
        elem = find(element, "Buckets")
        for bucket in [] if elem is None else findall(elem, "Bucket"):
            creation_date = findtext(bucket, "CreationDate")
            buckets.append(BucketInfo(
                cast(str, findtext(bucket, "Name", True)),
                from_iso8601utc(creation_date) if creation_date else None,
            ))
        return cls(owner.id, owner.display_name, buckets)


B = TypeVar("B", bound="ObjectInfo")


@dataclass(frozen=True)
class ObjectInfo:
    """Object information as listed in a bucket."""
    key: str
    last_modified: Optional[datetime] = None
    etag: Optional[str] = None
    size: Optional[int] = None
    storage_class: Optional[str] = None
    owner_id: Optional[str] = None
    owner_display_name: Optional[str] = None

    @classmethod
    def fromxml(cls: Type[B], element: ET.Element) -> B:
        """Create new object with values from XML element."""
        last_modified = findtext(element, "LastModified")
        owner = Owner.fromxml(find(element, "Owner")) or Owner()
        return cls(
            cast(str, findtext(element, "Key", True)),
            from_iso8601utc(last_modified) if last_modified else None,
            unquote_etag(findtext(element, "ETag")),
            _int(findtext(element, "Size")),
            findtext(element, "StorageClass"),
            owner.id,
            owner.display_name,
        )


C = TypeVar("C", bound="ListBucketResult")


@dataclass(frozen=True)
class ListBucketResult:
    """ListObjects (version 1) API result."""
    bucket: str
    prefix: Optional[str] = None
    marker: Optional[str] = None
    next_marker: Optional[str] = None
    max_keys: Optional[int] = None
    is_truncated: bool = False
    keys: list[ObjectInfo] = field(default_factory=list)
    common_prefixes: list[str] = field(default_factory=list)

    @classmethod
    def fromxml(
            cls: Type[C],
            element: ET.Element,
            delimiter: Optional[str] = None,
    ) -> C:
        """
        Create new object with values from XML element. Common prefixes
        are returned without their trailing delimiter.
        """
        common_prefixes = []
        for elem in findall(element, "CommonPrefixes"):
            prefix = findtext(elem, "Prefix") or ""
            if delimiter and prefix.endswith(delimiter):
                prefix = prefix[:-len(delimiter)]
            common_prefixes.append(prefix)
        return cls(
            bucket=cast(str, findtext(element, "Name", default="")),
            prefix=findtext(element, "Prefix"),
            marker=findtext(element, "Marker"),
            next_marker=findtext(element, "NextMarker") or None,
            max_keys=_int(findtext(element, "MaxKeys")),
            is_truncated=_bool(findtext(element, "IsTruncated")),
            keys=[
                ObjectInfo.fromxml(elem)
                for elem in findall(element, "Contents")
            ],
            common_prefixes=common_prefixes,
        )

    def continuation_marker(self) -> Optional[str]:
        """
        Marker of the next page, None when this is the last page. The
        service sends NextMarker only for delimited listings; otherwise the
        last listed key is the marker.
        """
        if not self.is_truncated:
            return None
        if self.next_marker:
            return self.next_marker
        if self.keys:
            return self.keys[-1].key
        return None


D = TypeVar("D", bound="ObjectValue")


@dataclass(frozen=True)
class ObjectValue:
    """Object value and metadata from GetObject/HeadObject."""
    content_length: Optional[int] = None
    content_type: Optional[str] = None
    etag: Optional[str] = None
    last_modified: Optional[datetime] = None
    metadata: dict[str, str] = field(default_factory=dict)
    value: Optional[bytes] = None
    headers: Optional[HTTPHeaderDict] = None

    @classmethod
    def fromheaders(
            cls: Type[D],
            headers: HTTPHeaderDict,
            value: Optional[bytes] = None,
    ) -> D:
        """Create new object with values from response headers."""
        return cls(
            content_length=_int(headers.get("content-length")),
            content_type=headers.get("content-type"),
            etag=unquote_etag(headers.get("etag")),
            last_modified=from_http_header(headers.get("last-modified")),
            metadata=headers_to_metadata(headers),
            value=value,
            headers=headers,
        )


@dataclass(frozen=True)
class PutObjectResult:
    """PutObject (and server side copy) API result."""
    etag: Optional[str]
    version_id: Optional[str] = None
    last_modified: Optional[datetime] = None


@dataclass(frozen=True)
class DeleteError:
    """Failure of one key in DeleteObjects API."""
    key: Optional[str]
    code: Optional[str]
    message: Optional[str]


@dataclass(frozen=True)
class DeleteMultiObjectResult:
    """DeleteObjects API result; quiet mode reports failures only."""
    errors: list[DeleteError] = field(default_factory=list)


@dataclass(frozen=True)
class InitiateMultipartUploadResult:
    """CreateMultipartUpload API result."""
    bucket: Optional[str]
    key: Optional[str]
    upload_id: str


E = TypeVar("E", bound="Part")


@dataclass(frozen=True)
class Part:
    """Part of a multipart upload."""
    part_number: int
    etag: str
    size: Optional[int] = None
    last_modified: Optional[datetime] = None

    @classmethod
    def fromxml(cls: Type[E], element: ET.Element) -> E:
        """Create new object with values from XML element."""
        last_modified = findtext(element, "LastModified")
        return cls(
            int(cast(str, findtext(element, "PartNumber", True))),
            cast(str, unquote_etag(findtext(element, "ETag", True))),
            _int(findtext(element, "Size")),
            from_iso8601utc(last_modified) if last_modified else None,
        )


@dataclass(frozen=True)
class PutPartResult:
    """UploadPart API result."""
    etag: Optional[str]


@dataclass(frozen=True)
class CompleteMultipartUploadResult:
    """CompleteMultipartUpload API result."""
    location: Optional[str]
    bucket: Optional[str]
    key: Optional[str]
    etag: Optional[str]


@dataclass(frozen=True)
class ListPartsResult:
    """ListParts API result."""
    bucket: Optional[str]
    key: Optional[str]
    upload_id: Optional[str]
    next_part_number_marker: Optional[int]
    is_truncated: bool
    parts: list[Part]


@dataclass(frozen=True)
class AccessControlPolicy:
    """ACL document; `xml` holds it verbatim for pass-through."""
    owner_id: Optional[str]
    owner_display_name: Optional[str]
    xml: str


def _parse_status(_: Response) -> bool:
    return True


def _parse_list_buckets(response: Response) -> ListAllMyBucketsResult:
    return ListAllMyBucketsResult.fromxml(_require_element(response))


def _parse_location(response: Response) -> str:
    element = response.element
    return bucket_location_to_region(
        None if element is None else element.text,
    )


def _parse_list_objects(
        response: Response,
        delimiter: Optional[str] = None,
) -> ListBucketResult:
    return ListBucketResult.fromxml(_require_element(response), delimiter)


def _parse_put_object(response: Response) -> PutObjectResult:
    etag = response.headers.get("etag")
    last_modified = None
    element = response.element
    if element is not None:
        # Server side copy reports the new ETag in CopyObjectResult.
        etag = findtext(element, "ETag", default=etag)
        value = findtext(element, "LastModified")
        last_modified = from_iso8601utc(value) if value else None
    return PutObjectResult(
        unquote_etag(etag),
        response.headers.get("x-amz-version-id"),
        last_modified,
    )


def _parse_get_object(response: Response) -> ObjectValue:
    return ObjectValue.fromheaders(response.headers, response.data)


def _parse_head_object(response: Response) -> ObjectValue:
    return ObjectValue.fromheaders(response.headers)


def _parse_delete_multi_object(response: Response) -> DeleteMultiObjectResult:
    element = response.element
    if element is None:
        return DeleteMultiObjectResult()
    return DeleteMultiObjectResult([
        DeleteError(
            findtext(elem, "Key"),
            findtext(elem, "Code"),
            findtext(elem, "Message"),
        )
        for elem in findall(element, "Error")
    ])


def _parse_initiate(response: Response) -> InitiateMultipartUploadResult:
    element = _require_element(response)
    return InitiateMultipartUploadResult(
        findtext(element, "Bucket"),
        findtext(element, "Key"),
        cast(str, findtext(element, "UploadId", True)),
    )


def _parse_put_part(response: Response) -> PutPartResult:
    return PutPartResult(unquote_etag(response.headers.get("etag")))


def _parse_complete(response: Response) -> CompleteMultipartUploadResult:
    element = _require_element(response)
    return CompleteMultipartUploadResult(
        findtext(element, "Location"),
        findtext(element, "Bucket"),
        findtext(element, "Key"),
        unquote_etag(findtext(element, "ETag")),
    )


def _parse_list_parts(response: Response) -> ListPartsResult:
    element = _require_element(response)
    return ListPartsResult(
        findtext(element, "Bucket"),
        findtext(element, "Key"),
        findtext(element, "UploadId"),
        _int(findtext(element, "NextPartNumberMarker")),
        _bool(findtext(element, "IsTruncated")),
        [Part.fromxml(elem) for elem in findall(element, "Part")],
    )


def _parse_acl(response: Response) -> AccessControlPolicy:
    element = _require_element(response)
    owner = Owner.fromxml(find(element, "Owner")) or Owner()
    return AccessControlPolicy(
        owner.id, owner.display_name, response.data.decode(),
    )


_PARSERS: dict[Operation, Callable[[Response], Any]] = {
    Operation.LIST_BUCKETS: _parse_list_buckets,
    Operation.CREATE_BUCKET: _parse_status,
    Operation.DELETE_BUCKET: _parse_status,
    Operation.GET_BUCKET_LOCATION: _parse_location,
    Operation.LIST_OBJECTS: _parse_list_objects,
    Operation.PUT_OBJECT: _parse_put_object,
    Operation.GET_OBJECT: _parse_get_object,
    Operation.HEAD_OBJECT: _parse_head_object,
    Operation.DELETE_OBJECT: _parse_status,
    Operation.DELETE_MULTI_OBJECT: _parse_delete_multi_object,
    Operation.INITIATE_MULTIPART_UPLOAD: _parse_initiate,
    Operation.PUT_PART: _parse_put_part,
    Operation.COMPLETE_MULTIPART_UPLOAD: _parse_complete,
    Operation.ABORT_MULTIPART_UPLOAD: _parse_status,
    Operation.LIST_PARTS: _parse_list_parts,
    Operation.GET_BUCKET_ACL: _parse_acl,
    Operation.GET_OBJECT_ACL: _parse_acl,
    Operation.SET_BUCKET_ACL: _parse_status,
    Operation.SET_OBJECT_ACL: _parse_status,
    Operation.PUT_BUCKET_TAGGING: _parse_status,
    Operation.DELETE_BUCKET_TAGGING: _parse_status,
    Operation.PUT_OBJECT_TAGGING: _parse_status,
    Operation.DELETE_OBJECT_TAGGING: _parse_status,
    Operation.RESTORE_OBJECT: _parse_status,
}


def parse_response(response: Response, **options: Any) -> Any:
    """
    Convert successful response into the typed result of its operation.
    Malformed documents raise InvalidResponseError. Options are passed
    to the parser, e.g. `delimiter` of ListObjects.
    """
    try:
        return _PARSERS[response.operation](response, **options)
    except InvalidResponseError:
        raise
    except (ValueError, KeyError) as exc:
        raise InvalidResponseError(
            response.status,
            response.content_type,
            f"{exc}; {response.data.decode(errors='replace')}",
        ) from exc
