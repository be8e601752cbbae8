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
Error policies deciding what a failed operation does to the caller.

:class:`Legacy` records the failure on the engine (``err``, ``errstr`` and
``last_error``) and lets the operation return a falsy value. The recorded
state is shared per engine and is not thread-safe; use :class:`Confess`
when an engine is shared between threads.

:class:`Confess` raises the :class:`s3wire.error.S3Error`.
"""

from __future__ import absolute_import, annotations

import logging
from abc import ABCMeta, abstractmethod
from typing import Any, Optional, Type, Union

from .datatypes import Response
from .error import S3Error

_LOGGER = logging.getLogger(__name__)


class ErrorHandler:
    """Error policy bound to one engine."""
    __metaclass__ = ABCMeta

    def __init__(self, s3: Any):
        self._s3 = s3

    @property
    def s3(self) -> Any:
        """Get engine this policy reports to."""
        return self._s3

    def handle_error(self, response: Response) -> bool:
        """Check response; return True on success, else fail() it."""
        error = response.error()
        if error is None:
            return True
        self.fail(error)
        return False

    @abstractmethod
    def fail(self, error: S3Error):
        """Report failed operation."""


class Legacy(ErrorHandler):
    """Soft-fail policy recording errors on the engine."""

    def fail(self, error: S3Error):
        _LOGGER.debug("soft failure: %s", error)
        self._s3.err = error.code or str(error.kind)
        self._s3.errstr = error.message
        self._s3.last_error = error


class Confess(ErrorHandler):
    """Policy raising every error."""

    def fail(self, error: S3Error):
        raise error


ErrorPolicy = ErrorHandler
SoftFail = Legacy
RaiseOnError = Confess

_HANDLERS: dict[str, Type[ErrorHandler]] = {
    "legacy": Legacy,
    "confess": Confess,
    "softfail": Legacy,
    "raiseonerror": Confess,
}


def get_handler_class(
        value: Optional[Union[str, Type[ErrorHandler]]],
        default: Type[ErrorHandler],
) -> Type[ErrorHandler]:
    """Resolve error policy given by class or by name."""
    if value is None:
        return default
    if isinstance(value, str):
        try:
            return _HANDLERS[value.lower()]
        except KeyError as exc:
            raise ValueError(f"unknown error handler {value}") from exc
    if not issubclass(value, ErrorHandler):
        raise ValueError(f"{value} is not an error handler class")
    return value
