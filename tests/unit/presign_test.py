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

import base64
import hashlib
import hmac
from datetime import timedelta
from unittest import TestCase

from s3wire import S3, Client, ValidationError, Vendor
from s3wire.helpers import queryencode

from .helpers import FIXED_DATE, local_s3
from .s3_mocks import MockConnection


class PresignTest(TestCase):
    def test_presign_v4(self):
        s3 = S3(
            vendor=Vendor(host='localhost:9000', use_https=False,
                          signature_scheme='V4', region='us-east-1'),
            access_key='minio', secret_key='minio123',
            http_client=MockConnection(),
        )
        url = s3.presign('bucket-name', 'objectName',
                         request_date=FIXED_DATE,
                         query_params={'versionId': 'uuid'})
        self.assertEqual(
            url,
            'http://localhost:9000/bucket-name/objectName?versionId=uuid'
            '&X-Amz-Algorithm=AWS4-HMAC-SHA256'
            '&X-Amz-Credential=minio%2F20150620%2Fus-east-1%2Fs3%2F'
            'aws4_request'
            '&X-Amz-Date=20150620T010203Z&X-Amz-Expires=604800'
            '&X-Amz-SignedHeaders=host'
            '&X-Amz-Signature='
            '3ce13e2ca929fafa20581a05730e4e9435f2a5e20ec7c5a082d175692fb0a663',
        )

    def test_presign_v2(self):
        s3 = local_s3()
        url = s3.presign('hello', 'world', expires=timedelta(hours=1),
                         request_date=FIXED_DATE)
        signature = base64.b64encode(hmac.new(
            b'minio123', b'GET\n\n\n1434765723\n/hello/world', hashlib.sha1,
        ).digest()).decode()
        self.assertEqual(
            url,
            'http://localhost:9000/hello/world?AWSAccessKeyId=minio'
            f'&Expires=1434765723&Signature={queryencode(signature)}',
        )

    def test_presign_sends_nothing(self):
        mock_server = MockConnection()
        local_s3(mock_server).presign('hello', 'world')
        self.assertEqual([], mock_server.sent)

    def test_expiry_bounds(self):
        s3 = local_s3()
        self.assertIsNone(s3.presign('hello', 'world',
                                     expires=timedelta(days=8)))
        self.assertEqual('Validation', s3.err)
        self.assertIsNone(s3.presign('hello', 'world',
                                     expires=timedelta(seconds=0)))
        self.assertIsNotNone(s3.presign('hello', 'world',
                                        expires=timedelta(seconds=1)))

    def test_anonymous_presign_fails(self):
        s3 = S3(vendor=Vendor(host='localhost:9000', use_https=False),
                http_client=MockConnection())
        self.assertIsNone(s3.presign('hello', 'world'))
        self.assertEqual('Validation', s3.err)

    def test_client_uri(self):
        obj = Client(local_s3()).bucket('hello').object('world')
        self.assertTrue(obj.uri(timedelta(minutes=5)).startswith(
            'http://localhost:9000/hello/world?AWSAccessKeyId=minio',
        ))
        with self.assertRaises(ValidationError):
            obj.uri(timedelta(days=30))
