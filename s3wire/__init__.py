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
s3wire - Python client for Amazon S3 compatible object storage

    >>> from s3wire import Client
    >>> client = Client(
    ...     access_key="ACCESS-KEY",
    ...     secret_key="SECRET-KEY",
    ... )
    >>> for bucket in client.buckets():
    ...     print(bucket.name, bucket.creation_date)

Legacy interface, returning falsy values on errors:

    >>> from s3wire import S3
    >>> s3 = S3(access_key="ACCESS-KEY", secret_key="SECRET-KEY")
    >>> if not s3.add_bucket("my-bucket"):
    ...     print(s3.err, s3.errstr)

:copyright: (C) 2026 The s3wire Authors.
:license: Apache 2.0, see LICENSE for more details.
"""

__title__ = "s3wire"
__author__ = "The s3wire Authors"
__version__ = "0.9.0"
__license__ = "Apache 2.0"
__copyright__ = "Copyright 2026 The s3wire Authors"

# pylint: disable=unused-import,useless-import-alias
from .api import S3 as S3
from .bucket import Bucket as Bucket
from .client import Client as Client
from .client import ClientBucket as ClientBucket
from .client import ClientObject as ClientObject
from .error import ErrorKind as ErrorKind
from .error import InvalidResponseError as InvalidResponseError
from .error import NetworkError as NetworkError
from .error import OperationCancelled as OperationCancelled
from .error import S3Error as S3Error
from .error import S3WireException as S3WireException
from .error import ValidationError as ValidationError
from .handler import Confess as Confess
from .handler import Legacy as Legacy
from .vendor import AmazonVendor as AmazonVendor
from .vendor import SignatureScheme as SignatureScheme
from .vendor import Vendor as Vendor
