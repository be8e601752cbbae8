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

# pylint: disable=too-many-lines,too-many-public-methods
# pylint: disable=too-many-arguments,too-many-positional-arguments

"""
Simple Storage Service (aka S3) engine and its legacy interface.

Every operation goes through the same pipeline: request builder, region
resolution, signing (exactly once, right before dispatch), transport,
response wrapper, error policy and response parser.
"""

from __future__ import absolute_import, annotations

import dataclasses
import logging
import os
import urllib.request
from datetime import datetime, timedelta
from typing import Any, BinaryIO, Optional, TextIO, Type, Union
from urllib.parse import urlunsplit

import certifi
import urllib3
from urllib3.exceptions import HTTPError as TransportError
from urllib3.util import Retry, Timeout

from . import time
from .bucket import Bucket, Buckets
from .credentials import (Credentials, IamAwsProvider, Provider,
                          SessionProvider, StaticProvider)
from .datatypes import (ListBucketResult, ObjectValue, Response,
                        parse_response)
from .error import (ErrorKind, InvalidResponseError, NetworkError, S3Error,
                    ValidationError)
from .handler import ErrorHandler, Legacy, get_handler_class
from .helpers import (_DEFAULT_USER_AGENT, CancelSignal, headers_to_strings,
                      is_cancelled, sha256_hash)
from .operations import (CreateBucketRequest, DeleteBucketRequest,
                         DeleteObjectRequest, GetBucketLocationRequest,
                         GetObjectRequest, HeadObjectRequest, HttpRequest,
                         ListBucketsRequest, ListObjectsRequest, Operation,
                         PutObjectRequest, Request)
from .signer import UNSIGNED_PAYLOAD, presign_v2, presign_v4, sign_v2, sign_v4
from .vendor import (AMAZON_S3_HOST, DEFAULT_REGION, RegionMap,
                     SignatureScheme, Vendor, bucket_location_to_region)

_LOGGER = logging.getLogger(__name__)

_DOWNLOAD_CHUNK_SIZE = 1024 * 1024
_MAX_PRESIGN_EXPIRY = timedelta(days=7)

# Operations addressed to a fixed region, never to the bucket's region.
_UNREGIONED_OPERATIONS = frozenset([
    Operation.LIST_BUCKETS,
    Operation.GET_BUCKET_LOCATION,
])

# Request settings accepted by add_key() besides metadata.
_CONF_ARGS = frozenset(["acl_short", "content_type", "storage_class",
                        "encryption"])


def _create_http_client(
        timeout: float,
        retry: bool,
        keep_alive_cache_size: int,
        use_https: bool,
        host: str,
) -> urllib3.PoolManager:
    """Create pooled HTTP client honouring proxies of the environment."""
    if retry:
        # Backoff doubles from 1 up to 32 seconds over six attempts.
        retries = Retry(
            total=6,
            backoff_factor=1,
            backoff_max=32,
            status_forcelist=[500, 502, 503, 504],
            allowed_methods=None,
            raise_on_status=False,
        )
    else:
        retries = Retry(total=0, raise_on_status=False)

    kwargs: dict[str, Any] = {
        "maxsize": keep_alive_cache_size,
        "timeout": Timeout(timeout),
        "cert_reqs": "CERT_REQUIRED",
        "ca_certs": os.environ.get("SSL_CERT_FILE") or certifi.where(),
        "retries": retries,
    }

    proxies = urllib.request.getproxies_environment()
    proxy = proxies.get("https" if use_https else "http")
    if proxy and not urllib.request.proxy_bypass_environment(
            host.split(":")[0], proxies,
    ):
        return urllib3.ProxyManager(proxy, **kwargs)
    return urllib3.PoolManager(**kwargs)


def _to_bytes(value: Union[str, bytes, BinaryIO]) -> Union[bytes, BinaryIO]:
    return value.encode() if isinstance(value, str) else value


def _remove_file(path: str):
    try:
        os.remove(path)
    except FileNotFoundError:
        pass


class S3:
    """
    Simple Storage Service (aka S3) engine; also the legacy interface.

    Under the default :class:`s3wire.handler.Legacy` error policy failed
    operations return a falsy value and leave the failure in `err`,
    `errstr` and `last_error`. This state is shared by all callers of one
    engine, so share an engine between threads only with
    :class:`s3wire.handler.Confess`.
    """

    def __init__(
            self,
            authorization: Optional[Provider] = None,
            vendor: Optional[Vendor] = None,
            timeout: float = 30,
            retry: bool = False,
            keep_alive_cache_size: int = 10,
            error_handler_class: Optional[
                Union[str, Type[ErrorHandler]]
            ] = None,
            http_client: Optional[urllib3.PoolManager] = None,
            *,
            access_key: Optional[str] = None,
            secret_key: Optional[str] = None,
            session_token: Optional[str] = None,
            use_iam_role: bool = False,
            host: Optional[str] = None,
            secure: Optional[bool] = None,
            use_virtual_host: Optional[bool] = None,
            signature_scheme: Optional[Union[str, SignatureScheme]] = None,
            region: Optional[str] = None,
    ):
        """
        Initializes a new S3 engine.

        Args:
            authorization (Optional[Provider], default=None):
                Credentials provider; anonymous requests are sent unsigned.

            vendor (Optional[Vendor], default=None):
                Service deployment; Amazon S3 when not given.

            timeout (float, default=30):
                Connect and read timeout in seconds.

            retry (bool, default=False):
                Retry network failures and 5xx responses with
                exponential backoff up to 32 seconds.

            keep_alive_cache_size (int, default=10):
                Connections kept alive per host.

            error_handler_class (Optional[str | Type[ErrorHandler]]):
                Error policy, :class:`Legacy` when not given.

            http_client (Optional[urllib3.PoolManager], default=None):
                Customized HTTP client.

        The keyword-only arguments are shortcuts building `authorization`
        and `vendor`.

        Example:
            >>> s3 = S3(access_key="ACCESS-KEY", secret_key="SECRET-KEY")
            >>> s3 = S3(
            ...     access_key="ACCESS-KEY",
            ...     secret_key="SECRET-KEY",
            ...     host="localhost:9000",
            ...     secure=False,
            ...     error_handler_class="Confess",
            ... )
        """
        if http_client is not None and not hasattr(http_client, "urlopen"):
            raise TypeError(
                "HTTP client should be urllib3.PoolManager like object, "
                f"got {type(http_client).__name__}",
            )

        self._vendor = self._make_vendor(
            vendor, host, secure, use_virtual_host, signature_scheme, region,
        )
        if authorization is None:
            if access_key:
                if secret_key is None:
                    raise ValueError(
                        "secret key must be provided with access key",
                    )
                authorization = (
                    SessionProvider(access_key, secret_key, session_token)
                    if session_token
                    else StaticProvider(access_key, secret_key)
                )
            elif use_iam_role:
                authorization = IamAwsProvider()
        self._provider = authorization
        self._signature_scheme = self._vendor.default_signature_scheme()
        self._region_map = RegionMap()
        self._user_agent = _DEFAULT_USER_AGENT
        self._trace_stream: Optional[TextIO] = None

        self.err: Optional[str] = None
        self.errstr: Optional[str] = None
        self.last_error: Optional[S3Error] = None

        self._http = http_client or _create_http_client(
            timeout, retry, keep_alive_cache_size,
            self._vendor.use_https, self._vendor.host,
        )
        self.error_handler = get_handler_class(
            error_handler_class, Legacy,
        )(self)

    @staticmethod
    def _make_vendor(
            vendor: Optional[Vendor],
            host: Optional[str],
            secure: Optional[bool],
            use_virtual_host: Optional[bool],
            signature_scheme: Optional[Union[str, SignatureScheme]],
            region: Optional[str],
    ) -> Vendor:
        overrides: dict[str, Any] = {
            key: value for key, value in (
                ("host", host),
                ("use_https", secure),
                ("use_virtual_host", use_virtual_host),
                ("signature_scheme", signature_scheme),
                ("region", region),
            ) if value is not None
        }
        if vendor is not None:
            return dataclasses.replace(vendor, **overrides)
        if "use_virtual_host" not in overrides:
            overrides["use_virtual_host"] = (
                overrides.get("host", AMAZON_S3_HOST) == AMAZON_S3_HOST
            )
        return Vendor(**overrides)

    def __enter__(self) -> S3:
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def close(self):
        """Release pooled connections."""
        self._http.clear()

    @property
    def vendor(self) -> Vendor:
        """Get vendor."""
        return self._vendor

    @property
    def signature_scheme(self) -> SignatureScheme:
        """Get signature scheme requests are signed with."""
        return self._signature_scheme

    @property
    def authorization(self) -> Optional[Provider]:
        """Get credentials provider."""
        return self._provider

    def set_app_info(self, app_name: str, app_version: str):
        """
        Set your application name and version to user agent header.

        Example:
            >>> s3.set_app_info("my_app", "1.0.2")
        """
        if not (app_name and app_version):
            raise ValueError("Application name/version cannot be empty.")
        self._user_agent = f"{_DEFAULT_USER_AGENT} {app_name}/{app_version}"

    def trace_on(self, stream: TextIO):
        """
        Enable http trace.

        Args:
            stream (TextIO):
                Stream for writing HTTP call tracing.

        Example:
            >>> s3.trace_on(sys.stdout)
        """
        if not stream:
            raise ValueError('Input stream for trace output is invalid.')
        self._trace_stream = stream

    def trace_off(self):
        """Disable HTTP trace."""
        self._trace_stream = None

    def _trace_request(self, method: str, url, headers, body):
        stream = self._trace_stream
        if not stream:
            return
        stream.write("---------START-HTTP---------\n")
        query = ("?" + url.query) if url.query else ""
        stream.write(f"{method} {url.path}{query} HTTP/1.1\n")
        stream.write(headers_to_strings(headers, titled_key=True))
        stream.write("\n")
        if isinstance(body, bytes) and body:
            stream.write("\n")
            stream.write(body.decode(errors="replace"))
            stream.write("\n")
        stream.write("\n")

    def _trace_response(self, response: Response, method: str):
        stream = self._trace_stream
        if not stream:
            return
        stream.write(f"HTTP/1.1 {response.status}\n")
        stream.write(headers_to_strings(response.headers))
        stream.write("\n")
        if (
                method != "HEAD" and response.data and (
                    response.operation != Operation.GET_OBJECT or
                    response.is_error
                )
        ):
            stream.write("\n")
            stream.write(response.data.decode(errors="replace"))
            stream.write("\n")
        stream.write("----------END-HTTP----------\n")

    def _get_region(self, bucket_name: Optional[str] = None) -> str:
        """
        Return region of given bucket either from vendor, region cache or
        GetBucketLocation.
        """
        if self._vendor.region:
            return self._vendor.region

        if not bucket_name or self._provider is None:
            return DEFAULT_REGION

        region = self._region_map.get(bucket_name)
        if region:
            return region

        response = self._url_open(
            GetBucketLocationRequest(bucket_name).build(), DEFAULT_REGION,
        )
        if response.is_error:
            _LOGGER.debug(
                "location of bucket %s not resolved; %s",
                bucket_name, response.error(),
            )
            return DEFAULT_REGION
        region = parse_response(response)
        _LOGGER.debug("bucket %s is in region %s", bucket_name, region)
        self._region_map.set(bucket_name, region)
        return region

    def _request_region(self, request: HttpRequest) -> str:
        if self._signature_scheme != SignatureScheme.V4:
            return self._vendor.region or DEFAULT_REGION
        if request.region:
            return request.region
        if request.operation in _UNREGIONED_OPERATIONS:
            return self._vendor.region or DEFAULT_REGION
        return self._get_region(request.bucket_name)

    def _sign_context(
            self,
            bucket_name: Optional[str] = None,
            object_name: Optional[str] = None,
    ) -> Optional[Credentials]:
        """Get credentials of the provider; None for anonymous access."""
        if self._provider is None:
            return None
        try:
            return self._provider.sign_context()
        except (ValueError, KeyError, TransportError) as exc:
            raise S3Error(
                ErrorKind.AUTHENTICATION,
                f"credentials not available; {exc}",
                bucket_name=bucket_name,
                object_name=object_name,
            ) from exc

    def _url_open(
            self,
            request: HttpRequest,
            region: str,
            filename: Optional[str] = None,
    ) -> Response:
        """Sign and execute HTTP request."""
        url = self._vendor.build_url(
            request.bucket_name, request.object_name, request.query_params,
        )

        headers = request.headers.copy()
        headers["Host"] = url.netloc
        headers["User-Agent"] = self._user_agent
        body = request.body
        if request.content_length is not None:
            headers["Content-Length"] = str(request.content_length)
        elif request.method in ["PUT", "POST"]:
            headers["Content-Length"] = "0"

        date = time.utcnow()
        credentials = self._sign_context(
            request.bucket_name, request.object_name,
        )
        if self._signature_scheme == SignatureScheme.V4:
            headers["x-amz-date"] = time.to_amz_date(date)
            if body is None:
                content_sha256 = sha256_hash(b"")
            elif self._vendor.use_https and not isinstance(body, bytes):
                content_sha256 = UNSIGNED_PAYLOAD
            else:
                content_sha256 = request.content_sha256 or sha256_hash(body)
            headers["x-amz-content-sha256"] = content_sha256
            if credentials is not None:
                if credentials.session_token:
                    headers["x-amz-security-token"] = (
                        credentials.session_token
                    )
                sign_v4(
                    request.method, url, region, headers, credentials,
                    content_sha256, date,
                )
        else:
            headers["Date"] = time.to_http_header(date)
            if credentials is not None:
                if credentials.session_token:
                    headers["x-amz-security-token"] = (
                        credentials.session_token
                    )
                sign_v2(
                    request.method, url, headers, credentials,
                    request.bucket_name
                    if self._vendor.is_virtual_host_style(request.bucket_name)
                    else None,
                )

        self._trace_request(request.method, url, headers, body)

        preload_content = filename is None
        try:
            http_response = self._http.urlopen(
                request.method,
                urlunsplit(url),
                body=body,
                headers=headers,
                preload_content=preload_content,
                redirect=False,
            )
        except TransportError as exc:
            raise NetworkError(
                f"{request.method} {url.path} failed; {exc}",
                request.bucket_name,
                request.object_name,
            ) from exc

        if preload_content:
            response = Response.from_http(
                request.operation, http_response,
                request.bucket_name, request.object_name,
                is_copy="x-amz-copy-source" in request.headers,
            )
        else:
            response = self._download(request, http_response, filename)
        self._trace_response(response, request.method)
        return response

    @staticmethod
    def _download(
            request: HttpRequest,
            http_response: Any,
            filename: Optional[str],
    ) -> Response:
        """
        Stream successful response body into file. The body is written to
        a part file renamed to `filename` once complete; a failed download
        leaves no file behind.
        """
        try:
            if 200 <= http_response.status <= 299:
                part_file = f"{filename}.part.s3wire"
                try:
                    with open(part_file, "wb") as file:
                        for chunk in http_response.stream(
                                _DOWNLOAD_CHUNK_SIZE,
                        ):
                            file.write(chunk)
                    os.replace(part_file, str(filename))
                except BaseException:
                    _remove_file(part_file)
                    raise
                data = b""
            else:
                data = http_response.read()
        except TransportError as exc:
            raise NetworkError(
                f"download of {request.object_name} failed; {exc}",
                request.bucket_name,
                request.object_name,
            ) from exc
        except OSError as exc:
            raise S3Error(
                ErrorKind.UNKNOWN,
                f"unable to write {filename}; {exc}",
                bucket_name=request.bucket_name,
                object_name=request.object_name,
            ) from exc
        finally:
            http_response.release_conn()
        return Response(
            request.operation, http_response.status, http_response.headers,
            data, request.bucket_name, request.object_name,
        )

    def perform_operation(
            self,
            request: Request,
            error_handler: Optional[ErrorHandler] = None,
            filename: Optional[str] = None,
    ) -> Optional[Response]:
        """
        Build, sign and send request of one operation and apply the error
        policy. Returns the response, or None if the policy soft-failed.
        """
        error_handler = error_handler or self.error_handler
        try:
            http_request = request.build()
            response = self._url_open(
                http_request, self._request_region(http_request), filename,
            )
        except S3Error as exc:
            error_handler.fail(exc)
            return None
        if not error_handler.handle_error(response):
            return None
        return response

    def execute(
            self,
            request: Request,
            error_handler: Optional[ErrorHandler] = None,
            filename: Optional[str] = None,
            **options: Any,
    ) -> Any:
        """
        Perform operation and parse its response into the typed result
        of the operation. Returns None if the error policy soft-failed.
        """
        error_handler = error_handler or self.error_handler
        response = self.perform_operation(request, error_handler, filename)
        if response is None:
            return None
        try:
            return parse_response(response, **options)
        except InvalidResponseError as exc:
            error_handler.fail(exc)
            return None

    def fail(
            self,
            error: S3Error,
            error_handler: Optional[ErrorHandler] = None,
    ):
        """Report error detected by the caller through the error policy."""
        (error_handler or self.error_handler).fail(error)

    def buckets(self) -> Optional[Buckets]:
        """
        List buckets owned by the authenticated account.

        Returns:
            Optional[Buckets]:
                Owner and buckets, None on soft failure.

        Example:
            >>> result = s3.buckets()
            >>> for bucket in result.buckets:
            ...     print(bucket.name, bucket.creation_date)
        """
        result = self.execute(ListBucketsRequest())
        if result is None:
            return None
        return Buckets(
            result.owner_id,
            result.owner_display_name,
            [
                Bucket(
                    self, info.name,
                    owner_id=result.owner_id,
                    owner_display_name=result.owner_display_name,
                    creation_date=info.creation_date,
                )
                for info in result.buckets
            ],
        )

    def add_bucket(
            self,
            bucket: str,
            acl_short: Optional[str] = None,
            location_constraint: Optional[str] = None,
            error_handler: Optional[ErrorHandler] = None,
    ) -> Optional[Bucket]:
        """
        Create a bucket. Creating a bucket the account already owns
        succeeds; a bucket owned by another account is a Conflict.

        Example:
            >>> bucket = s3.add_bucket("my-bucket", location_constraint="EU")
        """
        location = location_constraint or self._vendor.region
        if not self.execute(
                CreateBucketRequest(bucket, acl_short, location),
                error_handler,
        ):
            return None
        if self._signature_scheme == SignatureScheme.V4:
            self._region_map.set(
                bucket, bucket_location_to_region(location),
            )
        return self.bucket(bucket)

    def bucket(self, bucket: str) -> Bucket:
        """Get handle of bucket; nothing is sent to the service."""
        return Bucket(self, bucket)

    def delete_bucket(
            self,
            bucket: Union[str, Bucket],
            error_handler: Optional[ErrorHandler] = None,
    ) -> bool:
        """
        Delete a bucket. Deleting a bucket which still has keys fails with
        a Conflict error and is never retried.
        """
        name = bucket.bucket if isinstance(bucket, Bucket) else bucket
        if not self.execute(DeleteBucketRequest(name), error_handler):
            return False
        self._region_map.remove(name)
        return True

    def list_bucket(
            self,
            bucket: str,
            prefix: Optional[str] = None,
            delimiter: Optional[str] = None,
            max_keys: Optional[int] = None,
            marker: Optional[str] = None,
    ) -> Optional[ListBucketResult]:
        """
        List one page of keys in a bucket.

        Args:
            bucket (str):
                Name of the bucket.

            prefix (Optional[str], default=None):
                List keys starting with this prefix only.

            delimiter (Optional[str], default=None):
                Roll up keys sharing a prefix up to this delimiter into
                `common_prefixes`.

            max_keys (Optional[int], default=None):
                Maximum keys of the page; the service caps it at 1000.

            marker (Optional[str], default=None):
                List keys after this key.

        Returns:
            Optional[ListBucketResult]:
                The page, None on soft failure.
        """
        return self.execute(
            ListObjectsRequest(bucket, prefix, delimiter, max_keys, marker),
            delimiter=delimiter,
        )

    def list_bucket_all(
            self,
            bucket: str,
            prefix: Optional[str] = None,
            delimiter: Optional[str] = None,
            max_keys: Optional[int] = None,
            marker: Optional[str] = None,
            cancel: Optional[CancelSignal] = None,
    ) -> Optional[ListBucketResult]:
        """
        List all keys in a bucket by following markers page by page.

        Without NextMarker in a truncated page the last listed key is the
        next marker. When `cancel` is set between two requests, the keys
        gathered so far are returned with `is_truncated` left true.

        Example:
            >>> stop = threading.Event()
            >>> result = s3.list_bucket_all("my-bucket", cancel=stop)
            >>> keys = [key.key for key in result.keys]
        """
        keys = []
        common_prefixes = []
        next_marker = marker
        is_truncated = True
        while is_truncated:
            if is_cancelled(cancel):
                _LOGGER.debug(
                    "listing of bucket %s cancelled after %d keys",
                    bucket, len(keys),
                )
                break
            result = self.list_bucket(
                bucket, prefix, delimiter, max_keys, next_marker,
            )
            if result is None:
                return None
            keys.extend(result.keys)
            common_prefixes.extend(result.common_prefixes)
            is_truncated = result.is_truncated
            if not is_truncated:
                break
            page_marker = result.continuation_marker()
            if not page_marker or page_marker == next_marker:
                _LOGGER.debug(
                    "truncated listing of bucket %s has no usable marker",
                    bucket,
                )
                is_truncated = False
                break
            next_marker = page_marker

        return ListBucketResult(
            bucket=bucket,
            prefix=prefix,
            marker=marker,
            next_marker=next_marker if is_truncated else None,
            max_keys=max_keys,
            is_truncated=is_truncated,
            keys=keys,
            common_prefixes=common_prefixes,
        )

    def add_key(
            self,
            bucket: str,
            key: str,
            value: Union[str, bytes, BinaryIO],
            **conf: Any,
    ) -> bool:
        """
        Store value under key. `conf` takes `acl_short`, `content_type`,
        `storage_class`, `encryption`, `x_amz_meta_*` metadata and other
        headers like `content_encoding` or `cache_control`.
        """
        args: dict[str, Any] = {}
        metadata = {}
        headers = {}
        for name, item in conf.items():
            if name in _CONF_ARGS:
                args[name] = item
            elif name.replace("-", "_").lower().startswith("x_amz_meta_"):
                metadata[name.replace("_", "-").lower()] = item
            else:
                headers[name.replace("_", "-")] = item
        return bool(self.execute(PutObjectRequest(
            bucket, key, _to_bytes(value),
            metadata=metadata, headers=headers, **args,
        )))

    def get_key(
            self,
            bucket: str,
            key: str,
            method: str = "GET",
            filename: Optional[str] = None,
            range: Optional[str] = None,  # pylint: disable=redefined-builtin
    ) -> Optional[ObjectValue]:
        """
        Fetch value of key, or only its metadata with method HEAD. With
        `filename` the value is written to that file instead of memory.
        """
        method = method.upper()
        if method == "HEAD":
            return self.execute(HeadObjectRequest(bucket, key))
        if method != "GET":
            self.fail(ValidationError(f"unsupported method {method}"))
            return None
        return self.execute(
            GetObjectRequest(bucket, key, range), filename=filename,
        )

    def head_key(self, bucket: str, key: str) -> Optional[ObjectValue]:
        """Fetch metadata of key."""
        return self.get_key(bucket, key, method="HEAD")

    def delete_key(self, bucket: str, key: str) -> bool:
        """Delete key; deleting a missing key succeeds."""
        return bool(self.execute(DeleteObjectRequest(bucket, key)))

    def presign(
            self,
            bucket: str,
            key: str,
            method: str = "GET",
            expires: timedelta = timedelta(days=7),
            request_date: Optional[datetime] = None,
            query_params: Optional[dict[str, Optional[str]]] = None,
            error_handler: Optional[ErrorHandler] = None,
    ) -> Optional[str]:
        """
        Get a presigned URL of key, signed with the scheme of the vendor.

        Args:
            bucket (str):
                Name of the bucket.

            key (str):
                Key in the bucket.

            method (str, default="GET"):
                HTTP method the URL allows.

            expires (timedelta, default=timedelta(days=7)):
                Validity of the URL, from one second up to seven days.

            request_date (Optional[datetime], default=None):
                Request time to base the URL on, instead of the current
                time.

            query_params (Optional[dict], default=None):
                Extra query parameters like `response-content-type`.

        Returns:
            Optional[str]:
                Presigned URL, None on soft failure.

        Example:
            >>> url = s3.presign(
            ...     "my-bucket", "my-key", expires=timedelta(hours=2),
            ... )
        """
        try:
            request = GetObjectRequest(bucket, key).build()
            if not timedelta(seconds=1) <= expires <= _MAX_PRESIGN_EXPIRY:
                raise ValidationError(
                    "expires must be between 1 second to 7 days",
                )
            credentials = self._sign_context(bucket, key)
            if credentials is None:
                raise ValidationError("presigned URL needs credentials")
            url = self._vendor.build_url(
                request.bucket_name, request.object_name, query_params,
            )
            date = request_date or time.utcnow()
            if self._signature_scheme == SignatureScheme.V4:
                url = presign_v4(
                    method.upper(), url, self._get_region(bucket),
                    credentials, date, int(expires.total_seconds()),
                )
            else:
                url = presign_v2(
                    method.upper(), url, credentials, date + expires,
                    bucket if self._vendor.is_virtual_host_style(bucket)
                    else None,
                )
        except S3Error as exc:
            self.fail(exc, error_handler)
            return None
        return urlunsplit(url)
