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

import json
import os
from datetime import datetime, timedelta, timezone
from unittest import TestCase, mock

from s3wire.credentials import (Credentials, EnvAWSProvider, IamAwsProvider,
                                SessionProvider, StaticProvider)


class CredentialsTest(TestCase):
    def test_credentials_get(self):
        credentials = Credentials(
            access_key="minio",
            secret_key="minio123",
            session_token="session",
        )
        self.assertEqual(credentials.access_key, "minio")
        self.assertEqual(credentials.secret_key, "minio123")
        self.assertEqual(credentials.session_token, "session")
        self.assertFalse(credentials.is_expired())

    def test_empty_keys(self):
        with self.assertRaises(ValueError):
            Credentials("", "minio123")
        with self.assertRaises(ValueError):
            Credentials("minio", "")

    def test_empty_session_token_is_dropped(self):
        self.assertIsNone(Credentials("minio", "minio123", "").session_token)

    def test_expiry(self):
        past = datetime.now(timezone.utc) - timedelta(minutes=1)
        self.assertTrue(Credentials("a", "b", expiration=past).is_expired())
        future = datetime.now(timezone.utc) + timedelta(hours=1)
        self.assertFalse(
            Credentials("a", "b", expiration=future).is_expired(),
        )
        naive = datetime(2099, 1, 1)
        self.assertEqual(
            timezone.utc,
            Credentials("a", "b", expiration=naive).expiration.tzinfo,
        )


class StaticProviderTest(TestCase):
    def test_static_credentials(self):
        provider = StaticProvider("minio", "minio123")
        self.assertIs(provider.retrieve(), provider.sign_context())
        self.assertEqual("minio", provider.sign_context().access_key)
        self.assertIsNone(provider.sign_context().session_token)


class SessionProviderTest(TestCase):
    def test_session_token(self):
        provider = SessionProvider("minio", "minio123", "session")
        self.assertEqual("session", provider.sign_context().session_token)

    def test_refresh_on_expiry(self):
        expired = Credentials(
            "old", "old-secret", "old-token",
            datetime.now(timezone.utc) - timedelta(minutes=1),
        )
        fresh = Credentials(
            "new", "new-secret", "new-token",
            datetime.now(timezone.utc) + timedelta(hours=1),
        )
        refresh = mock.Mock(side_effect=[expired, fresh])
        provider = SessionProvider(refresh=refresh)
        self.assertEqual("old", provider.sign_context().access_key)
        self.assertEqual("new", provider.sign_context().access_key)
        self.assertEqual("new", provider.sign_context().access_key)
        self.assertEqual(2, refresh.call_count)

    def test_keys_or_refresh_required(self):
        with self.assertRaises(ValueError):
            SessionProvider("minio")


class EnvAWSProviderTest(TestCase):
    @mock.patch.dict(os.environ, {
        "AWS_ACCESS_KEY_ID": "access",
        "AWS_SECRET_ACCESS_KEY": "secret",
        "AWS_SESSION_TOKEN": "token",
    }, clear=True)
    def test_env_credentials(self):
        credentials = EnvAWSProvider().retrieve()
        self.assertEqual("access", credentials.access_key)
        self.assertEqual("secret", credentials.secret_key)
        self.assertEqual("token", credentials.session_token)

    @mock.patch.dict(os.environ, {}, clear=True)
    def test_missing_env_credentials(self):
        with self.assertRaises(ValueError):
            EnvAWSProvider().retrieve()


class IamAwsProviderTest(TestCase):
    def test_imds_credentials(self):
        def response(data, status=200):
            return mock.Mock(status=status, data=data)

        http_client = mock.Mock()
        http_client.urlopen.side_effect = [
            response(b"imds-token"),
            response(b"role\n"),
            response(json.dumps({
                "Code": "Success",
                "AccessKeyId": "accessKey",
                "SecretAccessKey": "secret",
                "Token": "token",
                "Expiration": "2099-11-27T19:41:25Z",
            }).encode()),
        ]
        provider = IamAwsProvider(http_client=http_client)
        credentials = provider.retrieve()
        self.assertEqual("accessKey", credentials.access_key)
        self.assertEqual("secret", credentials.secret_key)
        self.assertEqual("token", credentials.session_token)
        self.assertEqual(
            datetime(2099, 11, 27, 19, 41, 25, tzinfo=timezone.utc),
            credentials.expiration,
        )
        self.assertIs(credentials, provider.retrieve())

        calls = http_client.urlopen.call_args_list
        self.assertEqual(
            ("PUT", "http://169.254.169.254/latest/api/token"),
            calls[0].args,
        )
        self.assertEqual(
            ("GET", "http://169.254.169.254/latest/meta-data/iam/"
                    "security-credentials/role"),
            calls[2].args,
        )
        self.assertEqual({"X-aws-ec2-metadata-token": "imds-token"},
                         calls[2].kwargs["headers"])

    def test_imds_failure(self):
        http_client = mock.Mock()
        http_client.urlopen.return_value = mock.Mock(status=404, data=b"")
        with self.assertRaises(ValueError):
            IamAwsProvider(http_client=http_client).retrieve()
