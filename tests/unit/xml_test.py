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

from unittest import TestCase

from s3wire.datatypes import ListBucketResult, Part
from s3wire.xml import Element, SubElement, find, findtext, getbytes, parse


class XmlTest(TestCase):
    def test_namespaced_and_plain_documents(self):
        for xmlns in ('', ' xmlns="http://s3.amazonaws.com/doc/2006-03-01/"'):
            element = parse(
                f'<ListBucketResult{xmlns}><Name>b</Name>'
                '<IsTruncated>false</IsTruncated>'
                '<Contents><Key>k</Key><Size>3</Size></Contents>'
                '<CommonPrefixes><Prefix>p/</Prefix></CommonPrefixes>'
                '</ListBucketResult>'.encode()
            )
            result = ListBucketResult.fromxml(element, '/')
            self.assertEqual('b', result.bucket)
            self.assertEqual(['k'], [key.key for key in result.keys])
            self.assertEqual(3, result.keys[0].size)
            self.assertEqual(['p'], result.common_prefixes)

    def test_malformed_document(self):
        with self.assertRaises(ValueError):
            parse(b'<ListBucketResult>')

    def test_findtext(self):
        element = parse(b'<Part><PartNumber>1</PartNumber><ETag/></Part>')
        self.assertEqual('', findtext(element, 'ETag'))
        self.assertIsNone(findtext(element, 'Size'))
        self.assertEqual('x', findtext(element, 'Size', default='x'))
        with self.assertRaises(ValueError):
            find(element, 'Size', strict=True)

    def test_missing_required_element(self):
        with self.assertRaises(ValueError):
            Part.fromxml(parse(b'<Part><ETag>"e"</ETag></Part>'))

    def test_getbytes(self):
        element = Element('Delete')
        SubElement(element, 'Quiet', 'true')
        self.assertEqual(
            b'<Delete xmlns="http://s3.amazonaws.com/doc/2006-03-01/">'
            b'<Quiet>true</Quiet></Delete>',
            getbytes(element),
        )
