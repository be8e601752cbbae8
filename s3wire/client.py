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

# pylint: disable=too-many-public-methods,too-many-instance-attributes
# pylint: disable=too-many-arguments,too-many-positional-arguments

"""
Object oriented interface. Unlike the legacy interface, errors are raised
as :class:`s3wire.error.S3Error` unless another error policy is given.
"""

from __future__ import absolute_import, annotations

import logging
from datetime import datetime, timedelta
from typing import (Any, BinaryIO, Iterator, Mapping, Optional, Sequence,
                    Type, Union)

from .api import S3
from .datatypes import (AccessControlPolicy, DeleteMultiObjectResult,
                        ListBucketResult, ListPartsResult, ObjectInfo,
                        ObjectValue, Part)
from .error import ErrorKind, OperationCancelled, S3Error, ValidationError
from .handler import Confess, ErrorHandler, get_handler_class
from .helpers import (MAX_DELETE_KEYS, MAX_MULTIPART_COUNT, MAX_PART_SIZE,
                      MIN_PART_SIZE, CancelSignal, is_cancelled,
                      is_simple_etag, md5hex_hash)
from .operations import (AbortMultipartUploadRequest,
                         CompleteMultipartUploadRequest,
                         DeleteMultiObjectRequest,
                         DeleteObjectRequest, DeleteTaggingRequest,
                         GetAclRequest, GetBucketLocationRequest,
                         GetObjectRequest, HeadObjectRequest,
                         InitiateMultipartUploadRequest, ListBucketsRequest,
                         ListObjectsRequest, ListPartsRequest,
                         PutObjectRequest, PutPartRequest, PutTaggingRequest,
                         RestoreObjectRequest, SetAclRequest)

_LOGGER = logging.getLogger(__name__)


class _UploadFailed(Exception):
    """Multipart upload step soft-failed under the error policy."""


def _read_part(stream: BinaryIO, size: int) -> bytes:
    """Read up to size bytes; short reads of pipes are continued."""
    chunks = []
    remaining = size
    while remaining:
        data = stream.read(remaining)
        if not data:
            break
        chunks.append(data)
        remaining -= len(data)
    return b"".join(chunks)


class Client:
    """
    Object oriented S3 client.

    Example:
        >>> client = Client(access_key="ACCESS-KEY", secret_key="SECRET-KEY")
        >>> bucket = client.create_bucket("my-bucket")
        >>> bucket.object("hello.txt").put(b"Hello, World")
    """

    def __init__(
            self,
            s3: Optional[S3] = None,
            error_handler_class: Optional[
                Union[str, Type[ErrorHandler]]
            ] = None,
            **kwargs: Any,
    ):
        """
        Args:
            s3 (Optional[S3], default=None):
                Engine to use; built from `kwargs` when not given.

            error_handler_class (Optional[str | Type[ErrorHandler]]):
                Error policy, :class:`Confess` when not given.

            kwargs:
                Arguments of :class:`s3wire.api.S3`.
        """
        handler_class = get_handler_class(error_handler_class, Confess)
        if s3 is None:
            s3 = S3(error_handler_class=handler_class, **kwargs)
        elif kwargs:
            raise ValueError("engine arguments given along with engine")
        self._s3 = s3
        self._error_handler = handler_class(s3)

    def __enter__(self) -> Client:
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def close(self):
        """Release pooled connections of the engine."""
        self._s3.close()

    @property
    def s3(self) -> S3:
        """Get engine."""
        return self._s3

    @property
    def error_handler(self) -> ErrorHandler:
        """Get error policy of this client."""
        return self._error_handler

    def _execute(self, request: Any, **kwargs: Any) -> Any:
        return self._s3.execute(
            request, error_handler=self._error_handler, **kwargs,
        )

    def buckets(self) -> list[ClientBucket]:
        """
        List buckets owned by the account.

        Returns:
            list[ClientBucket]:
                Buckets with owner and creation date.
        """
        result = self._execute(ListBucketsRequest())
        if result is None:
            return []
        return [
            ClientBucket(
                self, info.name,
                owner_id=result.owner_id,
                owner_display_name=result.owner_display_name,
                creation_date=info.creation_date,
            )
            for info in result.buckets
        ]

    def create_bucket(
            self,
            name: str,
            acl_short: Optional[str] = None,
            location_constraint: Optional[str] = None,
    ) -> Optional[ClientBucket]:
        """
        Create bucket, or return the existing one owned by the account.
        """
        if not self._s3.add_bucket(
                name, acl_short, location_constraint,
                error_handler=self._error_handler,
        ):
            return None
        return self.bucket(name)

    def bucket(self, name: str) -> ClientBucket:
        """Get handle of bucket; nothing is sent to the service."""
        return ClientBucket(self, name)


class ClientBucket:
    """Bucket of the object oriented interface."""

    def __init__(
            self,
            client: Client,
            name: str,
            owner_id: Optional[str] = None,
            owner_display_name: Optional[str] = None,
            creation_date: Optional[datetime] = None,
    ):
        self._client = client
        self._name = name
        self.owner_id = owner_id
        self.owner_display_name = owner_display_name
        self.creation_date = creation_date

    @property
    def name(self) -> str:
        """Get bucket name."""
        return self._name

    @property
    def client(self) -> Client:
        """Get client."""
        return self._client

    def __repr__(self):
        return f"ClientBucket({self._name!r})"

    def _execute(self, request: Any, **kwargs: Any) -> Any:
        return self._client._execute(  # pylint: disable=protected-access
            request, **kwargs,
        )

    def delete(self) -> bool:
        """Delete this bucket; fails with Conflict unless it is empty."""
        return self._client.s3.delete_bucket(
            self._name,
            error_handler=self._client.error_handler,
        )

    def acl(self) -> Optional[str]:
        """Get ACL document of this bucket."""
        result: Optional[AccessControlPolicy] = self._execute(
            GetAclRequest(self._name),
        )
        return None if result is None else result.xml

    def set_acl(
            self,
            acl_short: Optional[str] = None,
            acl_xml: Optional[Union[str, bytes]] = None,
    ) -> bool:
        """Set ACL of this bucket by canned ACL or document."""
        return bool(self._execute(
            SetAclRequest(self._name, None, acl_short, acl_xml),
        ))

    def location_constraint(self) -> Optional[str]:
        """Get region of this bucket."""
        return self._execute(GetBucketLocationRequest(self._name))

    def add_tags(self, tags: Mapping[str, str]) -> bool:
        """Replace tags of this bucket."""
        return bool(self._execute(PutTaggingRequest(self._name, tags)))

    def delete_tags(self) -> bool:
        """Delete tags of this bucket."""
        return bool(self._execute(DeleteTaggingRequest(self._name)))

    def list_page(
            self,
            prefix: Optional[str] = None,
            delimiter: Optional[str] = None,
            max_keys: Optional[int] = None,
            marker: Optional[str] = None,
    ) -> Optional[ListBucketResult]:
        """List one page of keys."""
        return self._execute(
            ListObjectsRequest(self._name, prefix, delimiter, max_keys, marker),
            delimiter=delimiter,
        )

    def list(
            self,
            prefix: Optional[str] = None,
            delimiter: Optional[str] = None,
            max_keys: Optional[int] = None,
            marker: Optional[str] = None,
            cancel: Optional[CancelSignal] = None,
    ) -> Iterator[ClientObject]:
        """
        Iterate objects of this bucket, requesting pages lazily. Iteration
        stops when `cancel` is set before the next page is requested.

        Example:
            >>> for obj in bucket.list(prefix="photos/"):
            ...     print(obj.key, obj.size)
        """
        while True:
            if is_cancelled(cancel):
                _LOGGER.debug("listing of bucket %s cancelled", self._name)
                return
            result = self.list_page(prefix, delimiter, max_keys, marker)
            if result is None:
                return
            for info in result.keys:
                yield self.object_from_info(info)
            next_marker = result.continuation_marker()
            if not next_marker or next_marker == marker:
                return
            marker = next_marker

    def object(self, key: str, **attrs: Any) -> ClientObject:
        """Get handle of object; nothing is sent to the service."""
        return ClientObject(self, key, **attrs)

    def object_from_info(self, info: ObjectInfo) -> ClientObject:
        """Get handle of listed object."""
        return ClientObject(
            self, info.key,
            etag=info.etag,
            size=info.size,
            last_modified=info.last_modified,
            storage_class=info.storage_class,
            owner_id=info.owner_id,
            owner_display_name=info.owner_display_name,
        )

    def delete_multi_object(
            self,
            *objects: Union[str, ClientObject],
    ) -> DeleteMultiObjectResult:
        """
        Delete objects or keys in batches of 1000. Per-key failures are
        reported in the result, not raised.
        """
        keys = [
            obj.key if isinstance(obj, ClientObject) else obj
            for obj in objects
        ]
        errors = []
        for index in range(0, len(keys), MAX_DELETE_KEYS):
            result = self._execute(DeleteMultiObjectRequest(
                self._name, keys[index:index + MAX_DELETE_KEYS],
            ))
            if result is None:
                break
            errors.extend(result.errors)
        return DeleteMultiObjectResult(errors)


class ClientObject:
    """Object of the object oriented interface."""

    def __init__(
            self,
            bucket: ClientBucket,
            key: str,
            etag: Optional[str] = None,
            size: Optional[int] = None,
            last_modified: Optional[datetime] = None,
            storage_class: Optional[str] = None,
            owner_id: Optional[str] = None,
            owner_display_name: Optional[str] = None,
            content_type: Optional[str] = None,
            acl_short: Optional[str] = None,
            metadata: Optional[Mapping[str, str]] = None,
            encryption: Optional[str] = None,
            headers: Optional[Mapping[str, str]] = None,
    ):
        self._bucket = bucket
        self._key = key
        self.etag = etag
        self.size = size
        self.last_modified = last_modified
        self.storage_class = storage_class
        self.owner_id = owner_id
        self.owner_display_name = owner_display_name
        self.content_type = content_type
        self.acl_short = acl_short
        self.metadata = dict(metadata or {})
        self.encryption = encryption
        self.headers = dict(headers or {})

    @property
    def key(self) -> str:
        """Get key."""
        return self._key

    @property
    def bucket(self) -> ClientBucket:
        """Get bucket."""
        return self._bucket

    def __repr__(self):
        return f"ClientObject({self._bucket.name!r}, {self._key!r})"

    def _execute(self, request: Any, **kwargs: Any) -> Any:
        return self._bucket._execute(  # pylint: disable=protected-access
            request, **kwargs,
        )

    def _fail(self, error: S3Error):
        self._bucket.client.error_handler.fail(error)

    def _update(self, value: ObjectValue):
        self.etag = value.etag
        self.size = value.content_length
        self.last_modified = value.last_modified
        self.content_type = value.content_type
        self.metadata = value.metadata

    def _verify_etag(self, etag: Optional[str], data: bytes) -> bool:
        """Compare simple ETag with MD5 of data; multipart ETags pass."""
        if not is_simple_etag(etag):
            return True
        md5 = md5hex_hash(data)
        if etag == md5:
            return True
        self._fail(S3Error(
            ErrorKind.UNKNOWN,
            f"ETag {etag} does not match MD5 {md5} of the content",
            bucket_name=self._bucket.name,
            object_name=self._key,
        ))
        return False

    def exists(self) -> bool:
        """Check whether object exists."""
        try:
            value = self._bucket.client.s3.execute(
                HeadObjectRequest(self._bucket.name, self._key),
                error_handler=Confess(self._bucket.client.s3),
            )
        except S3Error as exc:
            if exc.kind == ErrorKind.NOT_FOUND:
                return False
            self._fail(exc)
            return False
        self._update(value)
        return True

    def head(self) -> Optional[ObjectValue]:
        """Fetch metadata of object."""
        value = self._execute(HeadObjectRequest(self._bucket.name, self._key))
        if value is not None:
            self._update(value)
        return value

    def get(
            self,
            range: Optional[str] = None,  # pylint: disable=redefined-builtin
    ) -> Optional[bytes]:
        """
        Fetch value of object. A full download is verified against its
        simple ETag.
        """
        value = self._execute(
            GetObjectRequest(self._bucket.name, self._key, range),
        )
        if value is None:
            return None
        self._update(value)
        if range is None and not self._verify_etag(
                value.etag, value.value or b"",
        ):
            return None
        return value.value

    def get_decoded(self, encoding: str = "utf-8") -> Optional[str]:
        """Fetch value of object as text."""
        data = self.get()
        return None if data is None else data.decode(encoding)

    def get_filename(self, filename: str) -> bool:
        """Fetch value of object into file."""
        value = self._execute(
            GetObjectRequest(self._bucket.name, self._key),
            filename=filename,
        )
        if value is None:
            return False
        self._update(value)
        return True

    def _put_request(self, value: Union[bytes, BinaryIO]) -> PutObjectRequest:
        return PutObjectRequest(
            self._bucket.name, self._key, value,
            content_type=self.content_type,
            acl_short=self.acl_short,
            metadata=self.metadata,
            headers=self.headers,
            storage_class=self.storage_class,
            encryption=self.encryption,
        )

    def put(self, value: Union[str, bytes]) -> bool:
        """
        Store value. The returned ETag is checked against the MD5 of the
        value sent.
        """
        data = value.encode() if isinstance(value, str) else value
        result = self._execute(self._put_request(data))
        if result is None:
            return False
        if not self._verify_etag(result.etag, data):
            return False
        self.etag = result.etag
        self.size = len(data)
        return True

    def put_filename(self, filename: str) -> bool:
        """Store content of file."""
        with open(filename, "rb") as file:
            result = self._execute(self._put_request(file))
        if result is None:
            return False
        self.etag = result.etag
        return True

    def delete(self) -> bool:
        """Delete object."""
        return bool(self._execute(
            DeleteObjectRequest(self._bucket.name, self._key),
        ))

    def uri(
            self,
            expires: timedelta = timedelta(days=7),
            method: str = "GET",
            request_date: Optional[datetime] = None,
    ) -> Optional[str]:
        """Get presigned URL of object."""
        client = self._bucket.client
        return client.s3.presign(
            self._bucket.name, self._key, method, expires, request_date,
            error_handler=client.error_handler,
        )

    def acl(self) -> Optional[str]:
        """Get ACL document of object."""
        result: Optional[AccessControlPolicy] = self._execute(
            GetAclRequest(self._bucket.name, self._key),
        )
        return None if result is None else result.xml

    def set_acl(
            self,
            acl_short: Optional[str] = None,
            acl_xml: Optional[Union[str, bytes]] = None,
    ) -> bool:
        """Set ACL of object by canned ACL or document."""
        return bool(self._execute(
            SetAclRequest(self._bucket.name, self._key, acl_short, acl_xml),
        ))

    def add_tags(self, tags: Mapping[str, str]) -> bool:
        """Replace tags of object."""
        return bool(self._execute(
            PutTaggingRequest(self._bucket.name, tags, self._key),
        ))

    def delete_tags(self) -> bool:
        """Delete tags of object."""
        return bool(self._execute(
            DeleteTaggingRequest(self._bucket.name, self._key),
        ))

    def restore(self, days: int, tier: str = "Standard") -> bool:
        """Restore archived object for given days."""
        return bool(self._execute(
            RestoreObjectRequest(self._bucket.name, self._key, days, tier),
        ))

    def initiate_multipart_upload(self) -> Optional[str]:
        """Start multipart upload and return its upload ID."""
        result = self._execute(InitiateMultipartUploadRequest(
            self._bucket.name, self._key,
            content_type=self.content_type,
            acl_short=self.acl_short,
            metadata=self.metadata,
            headers=self.headers,
        ))
        return None if result is None else result.upload_id

    def put_part(
            self,
            upload_id: str,
            part_number: int,
            value: bytes,
    ) -> Optional[str]:
        """Upload one part and return its verified ETag."""
        result = self._execute(PutPartRequest(
            self._bucket.name, self._key, upload_id, part_number, value,
        ))
        if result is None or not self._verify_etag(result.etag, value):
            return None
        return result.etag

    def complete_multipart_upload(
            self,
            upload_id: str,
            parts: Sequence[Union[Part, tuple[int, str]]],
    ) -> bool:
        """
        Complete multipart upload with parts numbered 1..N in ascending
        order. Completing an upload twice fails with NoSuchUpload.
        """
        result = self._execute(CompleteMultipartUploadRequest(
            self._bucket.name, self._key, upload_id, parts,
        ))
        if result is None:
            return False
        self.etag = result.etag
        return True

    def abort_multipart_upload(self, upload_id: str) -> bool:
        """Abort multipart upload and discard its parts."""
        return bool(self._execute(AbortMultipartUploadRequest(
            self._bucket.name, self._key, upload_id,
        )))

    def list_parts(self, upload_id: str) -> list[Part]:
        """List all uploaded parts of multipart upload."""
        parts: list[Part] = []
        marker = None
        while True:
            result: Optional[ListPartsResult] = self._execute(
                ListPartsRequest(
                    self._bucket.name, self._key, upload_id, marker,
                ),
            )
            if result is None:
                return parts
            parts.extend(result.parts)
            if not result.is_truncated or not result.next_part_number_marker:
                return parts
            marker = result.next_part_number_marker

    def put_multipart(
            self,
            stream: BinaryIO,
            part_size: int = MIN_PART_SIZE,
            cancel: Optional[CancelSignal] = None,
    ) -> bool:
        """
        Upload stream in parts of `part_size` bytes. On failure or when
        `cancel` gets set between parts, the upload is aborted and the
        error is raised, :class:`OperationCancelled` for cancellation.

        Example:
            >>> with open("video.mp4", "rb") as file:
            ...     obj.put_multipart(file, part_size=16 * 1024 * 1024)
        """
        if not MIN_PART_SIZE <= part_size <= MAX_PART_SIZE:
            self._fail(ValidationError(
                f"part size must be between {MIN_PART_SIZE} and "
                f"{MAX_PART_SIZE}",
            ))
            return False

        upload_id = self.initiate_multipart_upload()
        if upload_id is None:
            return False

        parts: list[Part] = []
        try:
            data = _read_part(stream, part_size)
            while True:
                if is_cancelled(cancel):
                    raise OperationCancelled(
                        f"multipart upload {upload_id} of {self._key} "
                        "cancelled",
                    )
                part_number = len(parts) + 1
                if part_number > MAX_MULTIPART_COUNT:
                    self._fail(ValidationError(
                        f"stream exceeds {MAX_MULTIPART_COUNT} parts of "
                        f"{part_size} bytes",
                    ))
                    raise _UploadFailed(upload_id)
                etag = self.put_part(upload_id, part_number, data)
                if etag is None:
                    raise _UploadFailed(upload_id)
                _LOGGER.debug(
                    "uploaded part %d of %s (%d bytes)",
                    part_number, self._key, len(data),
                )
                parts.append(Part(part_number, etag, len(data)))
                data = _read_part(stream, part_size)
                if not data:
                    break
            if not self.complete_multipart_upload(upload_id, parts):
                raise _UploadFailed(upload_id)
        except _UploadFailed:
            self._abort_quietly(upload_id)
            return False
        except BaseException:
            self._abort_quietly(upload_id)
            raise
        return True

    def _abort_quietly(self, upload_id: str):
        """Abort upload while another error is propagating."""
        try:
            self._bucket.client.s3.execute(
                AbortMultipartUploadRequest(
                    self._bucket.name, self._key, upload_id,
                ),
                error_handler=Confess(self._bucket.client.s3),
            )
        except S3Error as exc:
            _LOGGER.debug("abort of upload %s failed: %s", upload_id, exc)
