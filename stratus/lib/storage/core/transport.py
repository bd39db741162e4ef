# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# SPDX-License-Identifier: Apache-2.0

"""
Transport for a single HTTP exchange.

The transport reports the exchange to a :py:class:`ResponseHandler` in network order:
the response head, then each body chunk, then completion (or an error at any point).
"""

import abc
import dataclasses
import logging
from typing import Any, Dict, Iterator, Mapping, Protocol

import requests

from . import credentials


logger = logging.getLogger(__name__)


DEFAULT_CHUNK_SIZE = 64 * 1024


@dataclasses.dataclass(frozen=True)
class ResponseHead:
    """
    Status line and headers of a response. Header names are lower-cased.
    """
    status_code: int
    reason: str = ''
    headers: Dict[str, str] = dataclasses.field(default_factory=dict)

    @classmethod
    def create(cls, status_code: int, reason: str = '',
               headers: Mapping[str, str] | None = None) -> 'ResponseHead':
        return cls(
            status_code=status_code,
            reason=reason or '',
            headers={key.lower(): value for key, value in (headers or {}).items()},
        )


class ResponseHandler(Protocol):
    """
    Receives the events of one exchange.
    """

    def on_response(self, response: ResponseHead) -> bool:
        """
        Called once the response head is received. Returns whether the body should be read.
        """
        ...

    def on_data(self, chunk: bytes) -> None:
        ...

    def on_complete(self) -> None:
        ...

    def on_error(self, error: Exception) -> None:
        ...


class Exchange(abc.ABC):
    """
    One in-flight HTTP exchange.
    """

    @abc.abstractmethod
    def start(self) -> None:
        """
        Sends the request and dispatches the response to the handler.
        """
        pass

    @abc.abstractmethod
    def pause(self) -> None:
        pass

    @abc.abstractmethod
    def resume(self) -> None:
        pass

    @abc.abstractmethod
    def close(self) -> None:
        """
        Closes the connection. No handler event is dispatched afterwards.
        """
        pass


class Transport(abc.ABC):
    """
    Creates exchanges.
    """

    @abc.abstractmethod
    def open(
        self,
        context: credentials.SigningContext,
        method: str,
        path: str,
        headers: Mapping[str, Any],
        body: bytes | None,
        handler: ResponseHandler,
    ) -> Exchange:
        pass


class RequestsExchange(Exchange):
    """
    Exchange driven by a streaming ``requests`` response.

    The body is pumped chunk by chunk into the handler until the exchange is paused,
    closed or the body is exhausted.
    """

    def __init__(
        self,
        session: requests.Session,
        request_args: Dict[str, Any],
        handler: ResponseHandler,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        self._session = session
        self._request_args = request_args
        self._handler = handler
        self._chunk_size = chunk_size
        self._response: requests.Response | None = None
        self._chunks: Iterator[bytes] | None = None
        self._paused = False
        self._closed = False
        self._pumping = False

    @property
    def closed(self) -> bool:
        return self._closed

    def start(self) -> None:
        try:
            response = self._session.request(stream=True, **self._request_args)
        except requests.RequestException as error:
            self.close()
            self._handler.on_error(error)
            return

        self._response = response
        logger.debug('Received %s %s', response.status_code, response.reason)
        head = ResponseHead.create(response.status_code, response.reason, response.headers)
        try:
            read_body = self._handler.on_response(head)
        except Exception:
            self.close()
            raise
        if not read_body or self._closed:
            self.close()
            return

        self._chunks = response.iter_content(chunk_size=self._chunk_size)
        self._pump()

    def _pump(self) -> None:
        # Resuming from a data callback continues the running loop
        if self._pumping or self._chunks is None:
            return
        self._pumping = True
        try:
            while not self._paused and not self._closed:
                try:
                    chunk = next(self._chunks)
                except StopIteration:
                    self.close()
                    self._handler.on_complete()
                    return
                except requests.RequestException as error:
                    self.close()
                    self._handler.on_error(error)
                    return
                if not chunk:
                    continue
                try:
                    self._handler.on_data(chunk)
                except Exception:
                    self.close()
                    raise
        finally:
            self._pumping = False

    def pause(self) -> None:
        self._paused = True

    def resume(self) -> None:
        if not self._paused:
            return
        self._paused = False
        if not self._closed:
            self._pump()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._response is not None:
            self._response.close()


class RequestsTransport(Transport):
    """
    Default transport, sending requests to the authentication host with ``requests``.
    """

    def __init__(self, session: requests.Session | None = None,
                 chunk_size: int = DEFAULT_CHUNK_SIZE):
        self._session = session or requests.Session()
        self._chunk_size = chunk_size

    def open(
        self,
        context: credentials.SigningContext,
        method: str,
        path: str,
        headers: Mapping[str, Any],
        body: bytes | None,
        handler: ResponseHandler,
    ) -> RequestsExchange:
        request_headers = {
            key: ','.join(value) if isinstance(value, (list, tuple)) else str(value)
            for key, value in headers.items()
        }
        request_args = {
            'method': method,
            'url': f'{context.base_url()}{path}',
            'headers': request_headers,
            'data': body,
            'timeout': context.timeout,
            'allow_redirects': False,
        }
        return RequestsExchange(self._session, request_args, handler, self._chunk_size)
