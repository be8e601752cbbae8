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

# pylint: disable=too-many-public-methods

"""Legacy bucket handle."""

from __future__ import absolute_import, annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, BinaryIO, Mapping, Optional, Sequence, Union

from .datatypes import (AccessControlPolicy, DeleteError,
                        DeleteMultiObjectResult, InitiateMultipartUploadResult,
                        ListBucketResult, ListPartsResult, ObjectValue)
from .error import ValidationError
from .helpers import MAX_DELETE_KEYS, CancelSignal
from .operations import (AbortMultipartUploadRequest,
                         CompleteMultipartUploadRequest,
                         DeleteMultiObjectRequest, DeleteTaggingRequest,
                         GetAclRequest, GetBucketLocationRequest,
                         InitiateMultipartUploadRequest, ListPartsRequest,
                         PutObjectRequest, PutPartRequest, PutTaggingRequest,
                         RestoreObjectRequest, SetAclRequest)


class Bucket:
    """
    Handle of one bucket of the legacy interface. Creating it sends
    nothing; the bucket may not exist until an operation says so. All
    methods follow the error policy of the engine.
    """

    def __init__(
            self,
            s3: Any,
            bucket: str,
            owner_id: Optional[str] = None,
            owner_display_name: Optional[str] = None,
            creation_date: Optional[datetime] = None,
    ):
        self._s3 = s3
        self._bucket = bucket
        self.owner_id = owner_id
        self.owner_display_name = owner_display_name
        self.creation_date = creation_date

    @property
    def bucket(self) -> str:
        """Get bucket name."""
        return self._bucket

    @property
    def name(self) -> str:
        """Get bucket name."""
        return self._bucket

    @property
    def account(self) -> Any:
        """Get engine this bucket belongs to."""
        return self._s3

    @property
    def err(self) -> Optional[str]:
        """Get last error code of the engine."""
        return self._s3.err

    @property
    def errstr(self) -> Optional[str]:
        """Get last error message of the engine."""
        return self._s3.errstr

    def __repr__(self):
        return f"Bucket({self._bucket!r})"

    def add_key(
            self,
            key: str,
            value: Union[str, bytes, BinaryIO],
            **conf: Any,
    ) -> bool:
        """Store value under key; see S3.add_key() for `conf`."""
        return self._s3.add_key(self._bucket, key, value, **conf)

    def add_key_filename(self, key: str, filename: str, **conf: Any) -> bool:
        """Store content of file under key."""
        with open(filename, "rb") as file:
            return self.add_key(key, file, **conf)

    def copy_key(
            self,
            key: str,
            source: str,
            metadata: Optional[Mapping[str, str]] = None,
            acl_short: Optional[str] = None,
    ) -> bool:
        """
        Copy `source` ("bucket/key" or "/bucket/key") to key server side.
        Given metadata replaces that of the source.
        """
        return bool(self._s3.execute(PutObjectRequest(
            self._bucket, key,
            copy_source=source,
            metadata=metadata,
            metadata_directive="REPLACE" if metadata is not None else None,
            acl_short=acl_short,
        )))

    def edit_metadata(self, key: str, metadata: Mapping[str, str]) -> bool:
        """Replace metadata of key by copying it onto itself."""
        return self.copy_key(key, f"/{self._bucket}/{key}", metadata)

    def head_key(self, key: str) -> Optional[ObjectValue]:
        """Fetch metadata of key."""
        return self._s3.head_key(self._bucket, key)

    def get_key(
            self,
            key: str,
            method: str = "GET",
            filename: Optional[str] = None,
    ) -> Optional[ObjectValue]:
        """Fetch value of key into memory, or into `filename` if given."""
        return self._s3.get_key(self._bucket, key, method, filename)

    def get_key_filename(
            self,
            key: str,
            filename: str,
            method: str = "GET",
    ) -> Optional[ObjectValue]:
        """Fetch value of key into file."""
        return self.get_key(key, method, filename)

    def delete_key(self, key: str) -> bool:
        """Delete key."""
        return self._s3.delete_key(self._bucket, key)

    def delete_keys(
            self,
            keys: Sequence[str],
    ) -> Optional[DeleteMultiObjectResult]:
        """
        Delete many keys using as few DeleteObjects requests as possible.
        Keys the service failed to delete are reported in the result.
        """
        errors: list[DeleteError] = []
        for index in range(0, len(keys), MAX_DELETE_KEYS):
            result = self._s3.execute(DeleteMultiObjectRequest(
                self._bucket, list(keys[index:index + MAX_DELETE_KEYS]),
            ))
            if result is None:
                return None
            errors.extend(result.errors)
        return DeleteMultiObjectResult(errors)

    def delete_bucket(self) -> bool:
        """Delete this bucket; it must be empty."""
        return self._s3.delete_bucket(self._bucket)

    def list(
            self,
            prefix: Optional[str] = None,
            delimiter: Optional[str] = None,
            max_keys: Optional[int] = None,
            marker: Optional[str] = None,
    ) -> Optional[ListBucketResult]:
        """List one page of keys."""
        return self._s3.list_bucket(
            self._bucket, prefix, delimiter, max_keys, marker,
        )

    def list_all(
            self,
            prefix: Optional[str] = None,
            delimiter: Optional[str] = None,
            max_keys: Optional[int] = None,
            cancel: Optional[CancelSignal] = None,
    ) -> Optional[ListBucketResult]:
        """List all keys."""
        return self._s3.list_bucket_all(
            self._bucket, prefix, delimiter, max_keys, cancel=cancel,
        )

    def get_acl(self, key: Optional[str] = None) -> Optional[str]:
        """Get ACL document of this bucket, or of key if given."""
        result: Optional[AccessControlPolicy] = self._s3.execute(
            GetAclRequest(self._bucket, key),
        )
        return None if result is None else result.xml

    def set_acl(
            self,
            acl_short: Optional[str] = None,
            acl_xml: Optional[Union[str, bytes]] = None,
            key: Optional[str] = None,
    ) -> bool:
        """Set ACL of this bucket, or of key if given."""
        return bool(self._s3.execute(
            SetAclRequest(self._bucket, key, acl_short, acl_xml),
        ))

    def get_location_constraint(self) -> Optional[str]:
        """Get region of this bucket."""
        return self._s3.execute(GetBucketLocationRequest(self._bucket))

    def add_tags(
            self,
            tags: Mapping[str, str],
            key: Optional[str] = None,
    ) -> bool:
        """Replace tags of this bucket, or of key if given."""
        return bool(self._s3.execute(
            PutTaggingRequest(self._bucket, tags, key),
        ))

    def delete_tags(self, key: Optional[str] = None) -> bool:
        """Delete tags of this bucket, or of key if given."""
        return bool(self._s3.execute(DeleteTaggingRequest(self._bucket, key)))

    def initiate_multipart_upload(
            self,
            key: str,
            **conf: Any,
    ) -> Optional[str]:
        """Start multipart upload of key and return its upload ID."""
        result: Optional[InitiateMultipartUploadResult] = self._s3.execute(
            InitiateMultipartUploadRequest(self._bucket, key, **conf),
        )
        return None if result is None else result.upload_id

    def upload_part_of_multipart_upload(
            self,
            key: str,
            upload_id: str,
            part_number: int,
            value: Union[bytes, BinaryIO],
    ) -> Optional[str]:
        """Upload one part and return its ETag."""
        result = self._s3.execute(
            PutPartRequest(self._bucket, key, upload_id, part_number, value),
        )
        return None if result is None else result.etag

    def complete_multipart_upload(
            self,
            key: str,
            upload_id: str,
            part_numbers: Sequence[int],
            etags: Sequence[str],
    ) -> bool:
        """
        Complete multipart upload. Part numbers must be 1..N in ascending
        order, each paired with the ETag of its upload.
        """
        if len(part_numbers) != len(etags):
            self._s3.fail(ValidationError(
                "part numbers and ETags must have the same length",
            ))
            return False
        return bool(self._s3.execute(CompleteMultipartUploadRequest(
            self._bucket, key, upload_id, list(zip(part_numbers, etags)),
        )))

    def abort_multipart_upload(self, key: str, upload_id: str) -> bool:
        """Abort multipart upload and discard its parts."""
        return bool(self._s3.execute(
            AbortMultipartUploadRequest(self._bucket, key, upload_id),
        ))

    def list_multipart_upload_parts(
            self,
            key: str,
            upload_id: str,
    ) -> Optional[ListPartsResult]:
        """List uploaded parts of multipart upload."""
        return self._s3.execute(ListPartsRequest(self._bucket, key, upload_id))

    def restore_key(
            self,
            key: str,
            days: int,
            tier: str = "Standard",
    ) -> bool:
        """Restore archived key for given days."""
        return bool(self._s3.execute(
            RestoreObjectRequest(self._bucket, key, days, tier),
        ))


@dataclass(frozen=True)
class Buckets:
    """Buckets owned by an account."""
    owner_id: Optional[str]
    owner_display_name: Optional[str]
    buckets: list[Bucket] = field(default_factory=list)
