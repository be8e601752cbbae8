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
from unittest import TestCase, mock

from s3wire import Client

from .helpers import local_s3
from .s3_mocks import MockConnection, MockResponse


def _page(keys, is_truncated=False, next_marker=None, prefixes=()):
    contents = ''.join(
        '<Contents>'
        f'<Key>{key}</Key>'
        '<LastModified>2015-05-05T02:21:15.716Z</LastModified>'
        '<ETag>&quot;5eb63bbbe01eeed093cb22bb8f5acdc3&quot;</ETag>'
        '<Size>11</Size>'
        '<StorageClass>STANDARD</StorageClass>'
        '<Owner><ID>minio</ID><DisplayName>minio</DisplayName></Owner>'
        '</Contents>'
        for key in keys
    )
    common_prefixes = ''.join(
        f'<CommonPrefixes><Prefix>{prefix}</Prefix></CommonPrefixes>'
        for prefix in prefixes
    )
    marker = f'<NextMarker>{next_marker}</NextMarker>' if next_marker else ''
    return (
        '<?xml version="1.0"?>'
        '<ListBucketResult '
        'xmlns="http://s3.amazonaws.com/doc/2006-03-01/">'
        '<Name>bucket</Name><Prefix/><Marker/>'
        f'{marker}<MaxKeys>1000</MaxKeys>'
        f'<IsTruncated>{"true" if is_truncated else "false"}</IsTruncated>'
        f'{contents}{common_prefixes}'
        '</ListBucketResult>'
    ).encode()


class ListObjectsTest(TestCase):
    def test_empty_list_objects_works(self):
        mock_server = MockConnection()
        mock_server.mock_add_request(
            MockResponse('GET', 'http://localhost:9000/bucket', {}, 200,
                         content=_page([])),
        )
        result = local_s3(mock_server).list_bucket('bucket')
        self.assertEqual([], result.keys)
        self.assertFalse(result.is_truncated)
        self.assertIsNone(result.continuation_marker())

    def test_list_objects_works(self):
        mock_server = MockConnection()
        mock_server.mock_add_request(
            MockResponse('GET', 'http://localhost:9000/bucket', {}, 200,
                         content=_page(['key1', 'key2'])),
        )
        result = local_s3(mock_server).list_bucket('bucket')
        self.assertEqual(['key1', 'key2'], [key.key for key in result.keys])
        info = result.keys[0]
        self.assertEqual('5eb63bbbe01eeed093cb22bb8f5acdc3', info.etag)
        self.assertEqual(11, info.size)
        self.assertEqual('STANDARD', info.storage_class)
        self.assertEqual('minio', info.owner_id)
        self.assertEqual(
            datetime(2015, 5, 5, 2, 21, 15, 716000, timezone.utc),
            info.last_modified,
        )

    def test_query_parameters(self):
        mock_server = MockConnection()
        mock_server.mock_add_request(
            MockResponse(
                'GET',
                'http://localhost:9000/bucket'
                '?delimiter=%2F&marker=photos%2Fa&max-keys=2'
                '&prefix=photos%2F',
                {}, 200,
                content=_page([], prefixes=['photos/2006/', 'photos/2007/']),
            ),
        )
        result = local_s3(mock_server).list_bucket(
            'bucket', prefix='photos/', delimiter='/', max_keys=2,
            marker='photos/a',
        )
        self.assertEqual(['photos/2006', 'photos/2007'],
                         result.common_prefixes)

    def test_list_all_uses_last_key_as_marker(self):
        mock_server = MockConnection()
        mock_server.mock_add_request(
            MockResponse('GET', 'http://localhost:9000/bucket', {}, 200,
                         content=_page(['a', 'b'], is_truncated=True)),
        )
        mock_server.mock_add_request(
            MockResponse('GET', 'http://localhost:9000/bucket?marker=b', {},
                         200, content=_page(['c', 'd'], is_truncated=True)),
        )
        mock_server.mock_add_request(
            MockResponse('GET', 'http://localhost:9000/bucket?marker=d', {},
                         200, content=_page(['e'])),
        )
        result = local_s3(mock_server).bucket('bucket').list_all()
        self.assertEqual(['a', 'b', 'c', 'd', 'e'],
                         [key.key for key in result.keys])
        self.assertFalse(result.is_truncated)
        self.assertEqual(3, len(mock_server.sent))

    def test_list_all_prefers_next_marker(self):
        mock_server = MockConnection()
        mock_server.mock_add_request(
            MockResponse(
                'GET', 'http://localhost:9000/bucket?delimiter=%2F', {}, 200,
                content=_page(['a'], is_truncated=True,
                              next_marker='dir/', prefixes=['dir/']),
            ),
        )
        mock_server.mock_add_request(
            MockResponse(
                'GET', 'http://localhost:9000/bucket?delimiter=%2F'
                '&marker=dir%2F', {}, 200,
                content=_page(['z']),
            ),
        )
        result = local_s3(mock_server).list_bucket_all('bucket',
                                                       delimiter='/')
        self.assertEqual(['a', 'z'], [key.key for key in result.keys])
        self.assertEqual(['dir'], result.common_prefixes)

    def test_list_all_stops_without_usable_marker(self):
        mock_server = MockConnection()
        mock_server.mock_add_request(
            MockResponse('GET', 'http://localhost:9000/bucket', {}, 200,
                         content=_page([], is_truncated=True)),
        )
        result = local_s3(mock_server).list_bucket_all('bucket')
        self.assertEqual([], result.keys)
        self.assertFalse(result.is_truncated)
        self.assertEqual(1, len(mock_server.sent))

    def test_list_all_stops_on_repeated_marker(self):
        mock_server = MockConnection()
        mock_server.mock_add_request(
            MockResponse('GET', 'http://localhost:9000/bucket?marker=a', {},
                         200, content=_page(['a'], is_truncated=True)),
        )
        result = local_s3(mock_server).list_bucket_all('bucket', marker='a')
        self.assertEqual(['a'], [key.key for key in result.keys])
        self.assertEqual(1, len(mock_server.sent))

    def test_cancelled_listing_returns_partial_result(self):
        mock_server = MockConnection()
        mock_server.mock_add_request(
            MockResponse('GET', 'http://localhost:9000/bucket', {}, 200,
                         content=_page(['a', 'b'], is_truncated=True)),
        )
        cancel = mock.Mock()
        cancel.is_set.side_effect = [False, True]
        result = local_s3(mock_server).list_bucket_all('bucket',
                                                       cancel=cancel)
        self.assertEqual(['a', 'b'], [key.key for key in result.keys])
        self.assertTrue(result.is_truncated)
        self.assertEqual('b', result.next_marker)
        self.assertEqual(1, len(mock_server.sent))

    def test_failed_page_soft_fails(self):
        mock_server = MockConnection()
        mock_server.mock_add_request(
            MockResponse('GET', 'http://localhost:9000/bucket', {}, 200,
                         content=_page(['a'], is_truncated=True)),
        )
        mock_server.mock_add_request(
            MockResponse('GET', 'http://localhost:9000/bucket?marker=a', {},
                         503, content=b''),
        )
        s3 = local_s3(mock_server)
        self.assertIsNone(s3.list_bucket_all('bucket'))
        self.assertEqual('ServerError', s3.err)

    def test_malformed_document_is_invalid_response(self):
        mock_server = MockConnection()
        mock_server.mock_add_request(
            MockResponse('GET', 'http://localhost:9000/bucket', {}, 200,
                         content=b'<ListBucketResult><Contents>'),
        )
        s3 = local_s3(mock_server)
        self.assertIsNone(s3.list_bucket('bucket'))
        self.assertEqual('Unknown', s3.err)

    def test_max_keys_not_a_number(self):
        mock_server = MockConnection()
        s3 = local_s3(mock_server)
        self.assertIsNone(s3.list_bucket('bucket', max_keys='ten'))
        self.assertEqual('Validation', s3.err)
        self.assertIn('max keys', s3.errstr)
        self.assertEqual([], mock_server.sent)


class ClientListTest(TestCase):
    def test_list_iterates_pages_lazily(self):
        mock_server = MockConnection()
        mock_server.mock_add_request(
            MockResponse('GET', 'http://localhost:9000/bucket?prefix=k', {},
                         200, content=_page(['k1', 'k2'], is_truncated=True)),
        )
        mock_server.mock_add_request(
            MockResponse('GET',
                         'http://localhost:9000/bucket?marker=k2&prefix=k',
                         {}, 200, content=_page(['k3'])),
        )
        bucket = Client(local_s3(mock_server)).bucket('bucket')
        objects = bucket.list(prefix='k')
        first = next(objects)
        self.assertEqual('k1', first.key)
        self.assertEqual(1, len(mock_server.sent))
        self.assertEqual(['k2', 'k3'], [obj.key for obj in objects])
        self.assertEqual(2, len(mock_server.sent))
        self.assertEqual(11, first.size)
        self.assertEqual('5eb63bbbe01eeed093cb22bb8f5acdc3', first.etag)

    def test_list_stops_on_cancel(self):
        mock_server = MockConnection()
        mock_server.mock_add_request(
            MockResponse('GET', 'http://localhost:9000/bucket', {},
                         200, content=_page(['k1'], is_truncated=True)),
        )
        cancel = mock.Mock()
        cancel.is_set.side_effect = [False, True]
        bucket = Client(local_s3(mock_server)).bucket('bucket')
        self.assertEqual(['k1'],
                         [obj.key for obj in bucket.list(cancel=cancel)])
        self.assertEqual(1, len(mock_server.sent))
