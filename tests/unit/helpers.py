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


from datetime import datetime, timezone

from s3wire import S3, Vendor

from .s3_mocks import MockConnection

FIXED_DATE = datetime(2015, 6, 20, 1, 2, 3, 0, timezone.utc)


def generate_error(code, message, request_id, host_id,
                   resource, bucket_name, object_name):
    return f'''
    <Error>
      <Code>{code}</Code>
      <Message>{message}</Message>
      <RequestId>{request_id}</RequestId>
      <HostId>{host_id}</HostId>
      <Resource>{resource}</Resource>
      <BucketName>{bucket_name}</BucketName>
      <Key>{object_name}</Key>
    </Error>
    '''.encode()


def local_s3(mock_server=None, **kwargs):
    """S3 engine of a local server speaking signature V2 over http."""
    kwargs.setdefault("access_key", "minio")
    kwargs.setdefault("secret_key", "minio123")
    return S3(
        vendor=Vendor(host="localhost:9000", use_https=False),
        http_client=mock_server or MockConnection(),
        **kwargs,
    )
