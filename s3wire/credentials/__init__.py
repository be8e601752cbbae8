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

"""Credential module."""

# pylint: disable=unused-import,useless-import-alias
from .credentials import Credentials as Credentials
from .providers import EnvAWSProvider as EnvAWSProvider
from .providers import IamAwsProvider as IamAwsProvider
from .providers import Provider as Provider
from .providers import SessionProvider as SessionProvider
from .providers import StaticProvider as StaticProvider
