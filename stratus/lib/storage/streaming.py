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
Stream adapters over a raw request, for transferring blob contents.

:py:class:`DownloadStream` emits ``data`` events with ``(chunk, meta)``;
:py:class:`UploadStream` buffers writes and sends them in a single request on ``end()``.
Both emit exactly one terminal ``end`` or ``error`` event.
"""

import codecs
import enum
import logging
from typing import Any, Callable, Dict, Iterator, List

from .core import events, header, request as request_module, transport
from ..utils import stratus_errors


logger = logging.getLogger(__name__)


ERROR_STATUS = 400


def _error_sink(*args: Any) -> None:
    # pylint: disable=unused-argument
    pass


##########################
#     Stream schemas     #
##########################


class StreamState(enum.Enum):
    """
    Caller driven state of a stream. The terminal outcome is tracked by the request.
    """
    OPEN = 'OPEN'
    ENDING = 'ENDING'
    DESTROY_PENDING = 'DESTROY_PENDING'
    DESTROYED = 'DESTROYED'


EndFn = Callable[[transport.ResponseHead | None], Any]


class _RequestStream(events.EventEmitter):
    """
    Shared plumbing of the stream adapters: body handling, terminal event forwarding and
    teardown.
    """

    _state: StreamState
    _buf: List[bytes]

    def __init__(
        self,
        request: request_module.RawRequest,
        error_fn: request_module.ErrorFn | None = None,
        end_fn: EndFn | None = None,
    ):
        super().__init__()
        self._request = request
        self._state = StreamState.OPEN
        self._buf = []

        if end_fn is not None:
            request.results_fn = lambda data, req, response: end_fn(response)
        if error_fn is not None:
            request.error_fn = error_fn

        request.set_body_consumer(self)
        request.on('end', self._on_request_end)
        request.on('error', self._on_request_error)

    @property
    def request(self) -> request_module.RawRequest:
        return self._request

    @property
    def state(self) -> StreamState:
        return self._state

    @property
    def response(self) -> transport.ResponseHead | None:
        return self._request.response

    def _on_request_end(self, results: Any, meta: header.ResponseMeta) -> None:
        self.emit('end', results, meta)

    def _on_request_error(self, error: Exception) -> None:
        self.emit('error', error)

    def on_body_data(self, chunk: bytes) -> None:
        self._buf.append(chunk)

    def on_body_complete(self) -> None:
        self._request.complete_body(self._buf)

    def destroy(self) -> None:
        """
        Detaches every listener and closes the connection. No event is emitted afterwards.
        """
        if self._state == StreamState.DESTROYED:
            return
        self._state = StreamState.DESTROYED
        logger.debug('Destroying %s', type(self).__name__)

        for event in ('data', 'end', 'error'):
            self.remove_all_listeners(event)
            self._request.remove_all_listeners(event)
        self.on('error', _error_sink)
        self._request.on('error', _error_sink)

        self._request.close()

    def _destroy_on_outcome(self) -> None:
        self._state = StreamState.DESTROY_PENDING
        self._request.on('end', lambda results, meta: self.destroy())
        self._request.on('error', lambda error: self.destroy())


class DownloadStream(_RequestStream):
    """
    Readable stream of a blob body.

    Body chunks are emitted as ``data`` events only while there is a ``data`` listener and
    the response is not an error; otherwise they are kept to build the error message.

    Args:
        request: The raw GET request of the blob.
        error_fn: Error handler of the request.
        end_fn: Builds the ``end`` results from the response head.
    """

    def __init__(
        self,
        request: request_module.RawRequest,
        error_fn: request_module.ErrorFn | None = None,
        end_fn: EndFn | None = None,
    ):
        super().__init__(request, error_fn=error_fn, end_fn=end_fn)
        self._decoder: codecs.IncrementalDecoder | None = None
        self._meta: header.ResponseMeta | None = None

    @property
    def readable(self) -> bool:
        return self._state != StreamState.DESTROYED and not self._request.settled

    def set_encoding(self, encoding: str) -> None:
        """
        Emits decoded strings instead of bytes.
        """
        self._decoder = codecs.getincrementaldecoder(encoding)(errors='replace')

    def pause(self) -> None:
        self._request.pause()

    def resume(self) -> None:
        self._request.resume()

    def on_body_data(self, chunk: bytes) -> None:
        response = self._request.response
        is_error = response is not None and response.status_code >= ERROR_STATUS
        if self.listener_count('data') == 0 or is_error:
            self._buf.append(chunk)
            return

        if self._meta is None:
            self._meta = self._request.response_meta()
        data: bytes | str = chunk
        if self._decoder is not None:
            data = self._decoder.decode(chunk)
            if not data:
                return
        self.emit('data', data, self._meta)

    def on_body_complete(self) -> None:
        if self._decoder is not None and self.listener_count('data') > 0:
            tail = self._decoder.decode(b'', final=True)
            if tail:
                self.emit('data', tail, self._meta or self._request.response_meta())
        super().on_body_complete()

    def end(self) -> None:
        """
        Sends the request, unless the stream was destroyed (or is pending destruction).
        """
        if self._state != StreamState.OPEN:
            return
        self._state = StreamState.ENDING
        self._request.end()

    def destroy_soon(self) -> None:
        """
        Destroys the stream once the request reaches its terminal outcome.
        """
        if self._state in (StreamState.DESTROY_PENDING, StreamState.DESTROYED):
            return
        if self._request.settled:
            self.destroy()
        else:
            self._destroy_on_outcome()

    def iter_chunks(self) -> Iterator[bytes | str]:
        """
        Sends the request and yields the body chunks. Raises the error of a failed
        request.
        """
        chunks: List[bytes | str] = []
        outcome: Dict[str, Any] = {}

        def _on_data(chunk: bytes | str, meta: header.ResponseMeta) -> None:
            # pylint: disable=unused-argument
            chunks.append(chunk)
            self.pause()

        def _on_end(results: Any, meta: header.ResponseMeta) -> None:
            # pylint: disable=unused-argument
            outcome['results'] = results

        def _on_error(error: Exception) -> None:
            outcome['error'] = error

        self.on('data', _on_data)
        self.on('end', _on_end)
        self.on('error', _on_error)
        self.end()
        try:
            while True:
                while chunks:
                    yield chunks.pop(0)
                if 'error' in outcome:
                    raise outcome['error']
                if 'results' in outcome or self._state == StreamState.DESTROYED:
                    return
                self.resume()
                if not chunks and not outcome:
                    raise stratus_errors.StratusDataStorageError(
                        'Download stopped before completion.')
        finally:
            self.remove_listener('data', _on_data)
            self.remove_listener('end', _on_end)
            self.remove_listener('error', _on_error)

    def __iter__(self) -> Iterator[bytes | str]:
        return self.iter_chunks()


class UploadStream(_RequestStream):
    """
    Writable stream of a blob body.

    Chunked transfer encoding is not supported by the storage services, so writes are
    accumulated in memory and sent with ``end()``.

    Args:
        request: The raw PUT request of the blob.
        error_fn: Error handler of the request.
        end_fn: Builds the ``end`` results from the response head.
    """

    _write_buf: bytearray

    def __init__(
        self,
        request: request_module.RawRequest,
        error_fn: request_module.ErrorFn | None = None,
        end_fn: EndFn | None = None,
    ):
        super().__init__(request, error_fn=error_fn, end_fn=end_fn)
        self._write_buf = bytearray()

    @property
    def writable(self) -> bool:
        return (self._state in (StreamState.OPEN, StreamState.DESTROY_PENDING) and
                self._request.state == request_module.RequestState.CREATED)

    @property
    def readable(self) -> bool:
        return False

    def _add_to_buffer(self, value: Any, encoding: str) -> None:
        if value is None:
            return
        if isinstance(value, str):
            value = value.encode(encoding)
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise stratus_errors.StratusUsageError(
                f'Unknown value type: {type(value).__name__}')
        self._write_buf += value

    def write(self, value: bytes | str, encoding: str = 'utf-8') -> bool:
        """
        Appends a value to the body. Returns whether the stream is still writable; writes
        to a stream that is no longer writable are dropped.
        """
        if self.writable:
            self._add_to_buffer(value, encoding)
        return self.writable

    def end(self, value: bytes | str | None = None, encoding: str = 'utf-8') -> None:
        """
        Appends a final value and sends the body. Calling it more than once has no effect.
        """
        if not self.writable:
            return
        self._add_to_buffer(value, encoding)
        if self._state == StreamState.OPEN:
            self._state = StreamState.ENDING

        body = bytes(self._write_buf)
        self._request.set_header('content-length', len(body))
        self._request.end(body)

    def destroy_soon(self) -> None:
        """
        Destroys the stream right away if the body was already sent, otherwise once the
        request reaches its terminal outcome.
        """
        if self._state in (StreamState.DESTROY_PENDING, StreamState.DESTROYED):
            return
        if self._state == StreamState.ENDING or self._request.settled:
            self.destroy()
        else:
            self._destroy_on_outcome()
