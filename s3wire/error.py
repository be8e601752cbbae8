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
s3wire.error
~~~~~~~~~~~~

Exception classes raised by s3wire and the classification of S3 service
failures into error kinds.

"""

from __future__ import absolute_import, annotations

from enum import Enum
from typing import Any, Optional


class ErrorKind(Enum):
    """Classification of a failed operation."""
    NETWORK = "Network"
    AUTHENTICATION = "Authentication"
    NOT_FOUND = "NotFound"
    CONFLICT = "Conflict"
    VALIDATION = "Validation"
    SERVER = "ServerError"
    RATE_LIMITED = "RateLimited"
    UNKNOWN = "Unknown"

    @property
    def retryable(self) -> bool:
        """Only transient failures are eligible for transport retry."""
        return self in (ErrorKind.NETWORK, ErrorKind.SERVER)

    def __str__(self) -> str:
        return self.value


_CODE_KINDS = {
    "NoSuchBucket": ErrorKind.NOT_FOUND,
    "NoSuchKey": ErrorKind.NOT_FOUND,
    "NoSuchUpload": ErrorKind.NOT_FOUND,
    "NoSuchVersion": ErrorKind.NOT_FOUND,
    "NoSuchTagSet": ErrorKind.NOT_FOUND,
    "BucketNotEmpty": ErrorKind.CONFLICT,
    "BucketAlreadyExists": ErrorKind.CONFLICT,
    "OperationAborted": ErrorKind.CONFLICT,
    "RestoreAlreadyInProgress": ErrorKind.CONFLICT,
    "SlowDown": ErrorKind.RATE_LIMITED,
    "TooManyRequests": ErrorKind.RATE_LIMITED,
    "RequestLimitExceeded": ErrorKind.RATE_LIMITED,
    "AccessDenied": ErrorKind.AUTHENTICATION,
    "InvalidAccessKeyId": ErrorKind.AUTHENTICATION,
    "SignatureDoesNotMatch": ErrorKind.AUTHENTICATION,
    "ExpiredToken": ErrorKind.AUTHENTICATION,
    "InvalidToken": ErrorKind.AUTHENTICATION,
    "InternalError": ErrorKind.SERVER,
    "ServiceUnavailable": ErrorKind.SERVER,
}


def classify(status: int, code: Optional[str] = None) -> ErrorKind:
    """Map HTTP status and optional service error code to an error kind."""
    if code in _CODE_KINDS:
        return _CODE_KINDS[code]
    if status in (401, 403):
        return ErrorKind.AUTHENTICATION
    if status == 404:
        return ErrorKind.NOT_FOUND
    if status == 409:
        return ErrorKind.CONFLICT
    if status == 429:
        return ErrorKind.RATE_LIMITED
    if 400 <= status < 500:
        return ErrorKind.VALIDATION
    if 500 <= status < 600:
        return ErrorKind.SERVER
    return ErrorKind.UNKNOWN


class S3WireException(Exception):
    """Base s3wire exception."""


class S3Error(S3WireException):
    """
    Raised to indicate that an S3 operation failed. Carries the error kind,
    HTTP status and the decoded service error document, if any.
    """

    def __init__(  # pylint: disable=too-many-positional-arguments
            self,
            kind: ErrorKind,
            message: Optional[str],
            status: Optional[int] = None,
            code: Optional[str] = None,
            resource: Optional[str] = None,
            request_id: Optional[str] = None,
            host_id: Optional[str] = None,
            bucket_name: Optional[str] = None,
            object_name: Optional[str] = None,
            response: Any = None,
    ):
        self.kind = kind
        self.message = message
        self.status = status
        self.code = code
        self.resource = resource
        self.request_id = request_id
        self.host_id = host_id
        self.bucket_name = bucket_name
        self.object_name = object_name
        self.response = response

        details = f"{kind}"
        if status is not None:
            details += f", status: {status}"
        if code:
            details += f", code: {code}"
        if bucket_name:
            details += f", bucket_name: {bucket_name}"
        if object_name:
            details += f", object_name: {object_name}"
        super().__init__(f"S3 operation failed; {details}; message: {message}")

    @property
    def retryable(self) -> bool:
        """Whether the failure is transient."""
        return self.kind.retryable

    def __reduce__(self):
        return type(self), (
            self.kind, self.message, self.status, self.code, self.resource,
            self.request_id, self.host_id, self.bucket_name, self.object_name,
        )

    def __repr__(self):
        return (
            f"{type(self).__name__}(kind={self.kind!r}, "
            f"status={self.status!r}, code={self.code!r}, "
            f"message={self.message!r})"
        )


class ValidationError(S3Error, ValueError):
    """Raised for bad caller parameters before anything is sent."""

    def __init__(self, message: str):
        super().__init__(ErrorKind.VALIDATION, message)

    def __reduce__(self):
        return type(self), (self.message,)


class NetworkError(S3Error):
    """Raised when the transport failed to complete an HTTP exchange."""

    def __init__(self, message: str, bucket_name: Optional[str] = None,
                 object_name: Optional[str] = None):
        super().__init__(
            ErrorKind.NETWORK, message,
            bucket_name=bucket_name, object_name=object_name,
        )

    def __reduce__(self):
        return type(self), (self.message, self.bucket_name, self.object_name)


class InvalidResponseError(S3Error):
    """Raised to indicate malformed or unexpected response from server."""

    def __init__(self, status: int, content_type: Optional[str],
                 body: Optional[str]):
        self.content_type = content_type
        self.body = body
        super().__init__(
            ErrorKind.UNKNOWN,
            f"invalid response from server; Content-Type: {content_type}, "
            f"Body: {body}",
            status=status,
        )

    def __reduce__(self):
        return type(self), (self.status, self.content_type, self.body)


class OperationCancelled(S3WireException):
    """Raised when a long running operation observed its cancel signal."""
