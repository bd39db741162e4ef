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
Cloud request lifecycles.

Every request wraps one exchange and produces exactly one terminal event:

* ``end`` with ``(results, meta)`` on success, where ``meta`` is a
  :py:class:`~stratus.lib.storage.core.header.ResponseMeta`.
* ``error`` with ``(error,)`` on failure.

A request is configured first and only sent on :py:meth:`Request.end`. Any outcome signaled
after the terminal one is ignored.
"""

import dataclasses
import enum
import logging
from typing import Any, Callable, Dict, List, Mapping, Protocol

from . import credentials, errors, events, header, signer, transport as transport_module
from . import xml_parser
from ...utils import common, stratus_errors


logger = logging.getLogger(__name__)


SUCCESS_STATUS = 200
NO_CONTENT_STATUS = 204


class RequestState(enum.Enum):
    """
    Lifecycle state of a request. Transitions only move forward.
    """
    CREATED = 'CREATED'
    SENT = 'SENT'
    AWAITING_HEADERS = 'AWAITING_HEADERS'
    COLLECTING_BODY = 'COLLECTING_BODY'
    ENDED = 'ENDED'
    ERRORED = 'ERRORED'

    def is_terminal(self) -> bool:
        return self in (RequestState.ENDED, RequestState.ERRORED)


@dataclasses.dataclass(frozen=True)
class Recovered:
    """
    Returned by an error handler to complete a request successfully with ``results``.
    """
    results: Any = None


ResultsFn = Callable[[Any, 'Request', transport_module.ResponseHead | None], Any]
ErrorFn = Callable[[Exception, 'Request', transport_module.ResponseHead | None],
                   'Exception | Recovered | None']


class BodyConsumer(Protocol):
    """
    Takes over body handling of a raw request (e.g. a stream adapter).
    """

    def on_body_data(self, chunk: bytes) -> None:
        ...

    def on_body_complete(self) -> None:
        ...


class Request(events.EventEmitter):
    """
    Abstract base request.
    """

    _state: RequestState

    def __init__(self):
        super().__init__()
        self._state = RequestState.CREATED

    @property
    def state(self) -> RequestState:
        return self._state

    @property
    def settled(self) -> bool:
        return self._state.is_terminal()

    def _advance(self, expected: RequestState, new: RequestState) -> bool:
        """
        Moves to ``new`` only if the request is in the ``expected`` state.
        """
        if self._state != expected:
            return False
        self._state = new
        return True

    def end(self, *args: Any) -> None:
        """
        Sends the request. Calling it more than once has no effect.
        """
        if not self._advance(RequestState.CREATED, RequestState.SENT):
            logger.debug('%s already sent, ignoring end()', type(self).__name__)
            return
        self._end(*args)

    def _end(self, *args: Any) -> None:
        raise stratus_errors.StratusUsageError('Not implemented.')

    def _meta(self, response: transport_module.ResponseHead | None) -> header.ResponseMeta:
        # pylint: disable=unused-argument
        return header.ResponseMeta()

    def _settle(self, state: RequestState, outcome: str) -> bool:
        if self._state.is_terminal():
            logger.warning(
                '%s already %s, ignoring %s outcome',
                type(self).__name__, self._state.value, outcome)
            return False
        self._state = state
        return True

    def succeed(
        self,
        results: Any = None,
        response: transport_module.ResponseHead | None = None,
        meta: header.ResponseMeta | None = None,
    ) -> bool:
        """
        Emits the terminal ``end`` event. Returns False if the request already settled.
        """
        if not self._settle(RequestState.ENDED, 'success'):
            return False
        logger.debug('%s ended', type(self).__name__)
        self.emit('end', results, meta if meta is not None else self._meta(response))
        return True

    def fail(self, error: Exception) -> bool:
        """
        Emits the terminal ``error`` event. Returns False if the request already settled.
        """
        if not self._settle(RequestState.ERRORED, 'error'):
            return False
        logger.debug('%s failed: %s', type(self).__name__, error)
        self.emit('error', error)
        return True


class DummyRequest(Request):
    """
    Request without network access.

    Args:
        end_fn: Called with the request on ``end()``. It is responsible for settling the
                request. Defaults to a success with the ``results_fn()`` results.
        results_fn: Results of the default ``end_fn``.
    """

    def __init__(
        self,
        end_fn: Callable[['DummyRequest'], None] | None = None,
        results_fn: Callable[[], Any] | None = None,
    ):
        super().__init__()
        self._end_fn = end_fn
        self._results_fn = results_fn

    def _end(self, *args: Any) -> None:
        if self._end_fn is not None:
            self._end_fn(self)
        else:
            self.succeed(self._results_fn() if self._results_fn else None)


class RawRequest(Request):
    """
    Authenticated request with header-level control.

    Query parameters are merged into the path and the headers are signed once, at
    construction. The response body is read and discarded unless a body consumer (e.g. a
    stream) is attached; the body of an error response is kept to build the error message.
    """

    def __init__(
        self,
        context: credentials.SigningContext,
        method: str = 'GET',
        path: str = '/',
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, Any] | None = None,
        cloud_headers: Mapping[str, Any] | None = None,
        metadata: Mapping[str, Any] | None = None,
        results_fn: ResultsFn | None = None,
        error_fn: ErrorFn | None = None,
        transport: transport_module.Transport | None = None,
    ):
        super().__init__()
        self.context = context
        self.method = method.upper()
        self.path = header.merge_params(path or '/', params)
        self.results_fn = results_fn
        self.error_fn = error_fn
        self.response: transport_module.ResponseHead | None = None

        self._headers = signer.sign(
            self.method,
            self.path,
            header.assemble_headers(context.provider, headers, cloud_headers, metadata),
            context)
        self._transport = transport or transport_module.RequestsTransport()
        self._translator = context.provider.translator()
        self._exchange: transport_module.Exchange | None = None
        self._consumer: BodyConsumer | None = None
        self._buffer: List[bytes] = []
        self._closed = False

    @property
    def headers(self) -> Mapping[str, Any]:
        return dict(self._headers)

    def set_header(self, name: str, value: Any) -> None:
        """
        Sets a header after signing. Only for headers outside of the string to sign
        (e.g. ``content-length``).
        """
        if self._state != RequestState.CREATED:
            raise stratus_errors.StratusUsageError(f'Cannot set header {name} after end().')
        self._headers[name.lower()] = str(value)

    def set_body_consumer(self, consumer: BodyConsumer) -> None:
        self._consumer = consumer

    def _end(self, *args: Any) -> None:
        body: bytes | None = args[0] if args else None
        self._advance(RequestState.SENT, RequestState.AWAITING_HEADERS)
        logger.debug(
            'Sending %s %s (host=%s)', self.method, self.path, self._headers.get('host'))
        self._exchange = self._transport.open(
            self.context, self.method, self.path, self._headers, body, self)
        self._exchange.start()

    def pause(self) -> None:
        if self._exchange is not None:
            self._exchange.pause()

    def resume(self) -> None:
        if self._exchange is not None:
            self._exchange.resume()

    def close(self) -> None:
        """
        Closes the connection. No further transport event is handled.
        """
        if self._closed:
            return
        self._closed = True
        if self._exchange is not None:
            self._exchange.close()

    def _meta(self, response: transport_module.ResponseHead | None) -> header.ResponseMeta:
        if response is None:
            return header.ResponseMeta()
        return header.split_headers(self.context.provider, response.headers)

    def response_meta(self) -> header.ResponseMeta:
        """
        Returns the split headers of the received response (empty before headers arrive).
        """
        return self._meta(self.response)

    #####################
    # Transport events  #
    #####################

    def on_response(self, response: transport_module.ResponseHead) -> bool:
        if self._closed or self.settled:
            return False
        self.response = response
        self.emit('response', response)

        # Nothing to read, complete without touching the body
        no_content = (
            response.status_code == NO_CONTENT_STATUS or
            (response.status_code == SUCCESS_STATUS and
             response.headers.get('content-length') == '0'))
        if no_content:
            self.handle_results(None, response)
            return False

        return self._advance(RequestState.AWAITING_HEADERS, RequestState.COLLECTING_BODY)

    def on_data(self, chunk: bytes) -> None:
        if self._closed or self._state != RequestState.COLLECTING_BODY:
            return
        if self._consumer is not None:
            self._consumer.on_body_data(chunk)
        else:
            self._buffer.append(chunk)

    def on_complete(self) -> None:
        if self._closed or self._state != RequestState.COLLECTING_BODY:
            return
        if self._consumer is not None:
            self._consumer.on_body_complete()
        else:
            self.complete_body(self._buffer)

    def on_error(self, error: Exception) -> None:
        if self._closed:
            return
        self.handle_error(error)

    #####################
    # Outcome handling  #
    #####################

    def complete_body(self, buffers: List[bytes]) -> None:
        """
        Settles the request from the full response body.
        """
        response = self.response
        if response is not None and response.status_code == SUCCESS_STATUS:
            self._handle_body(buffers, response)
        else:
            error = errors.CloudError(common.buffers_to_str(buffers), response=response)
            self.handle_error(error, response)

    def _handle_body(
        self,
        buffers: List[bytes],
        response: transport_module.ResponseHead,
    ) -> None:
        # pylint: disable=unused-argument
        self.handle_results(None, response)

    def handle_results(
        self,
        data: Any,
        response: transport_module.ResponseHead | None,
    ) -> bool:
        """
        Applies the results transform and emits the terminal ``end`` event.
        """
        if self.settled:
            return self.succeed(data, response)
        results = self.results_fn(data, self, response) if self.results_fn else data
        return self.succeed(results, response)

    def handle_error(
        self,
        error: Exception,
        response: transport_module.ResponseHead | None = None,
    ) -> bool:
        """
        Translates a response error and emits the terminal ``error`` event, unless the
        error handler recovers from it.

        Transport errors (raised before or while reading a response) are not translated.
        """
        if self.settled:
            return self.fail(error)
        if isinstance(error, errors.CloudError) and response is not None:
            translated = self._translator.translate(error, self.method, response)
            if translated is not None:
                error = translated

        if self.error_fn is not None:
            outcome = self.error_fn(error, self, response)
            if isinstance(outcome, Recovered):
                return self.succeed(outcome.results, response)
            if outcome is not None:
                error = outcome
        return self.fail(error)


class BufferedRequest(RawRequest):
    """
    Request accumulating the whole response body, passed as bytes to ``results_fn``.
    """

    def _handle_body(
        self,
        buffers: List[bytes],
        response: transport_module.ResponseHead,
    ) -> None:
        self.handle_results(b''.join(buffers), response)


class StructuredRequest(BufferedRequest):
    """
    Request parsing the response body before passing it to ``results_fn``. A body that
    cannot be parsed is an error outcome.
    """

    def __init__(self, *args: Any, parser: xml_parser.Parser | None = None, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self._parser = parser or xml_parser.parse

    def _handle_body(
        self,
        buffers: List[bytes],
        response: transport_module.ResponseHead,
    ) -> None:
        try:
            data = self._parser(b''.join(buffers))
        except xml_parser.StructuredParseError as error:
            self.handle_error(error, response)
            return
        except Exception as error:  # pylint: disable=broad-except
            parse_error = xml_parser.StructuredParseError(
                f'Cannot parse response body: {error}')
            parse_error.__cause__ = error
            self.handle_error(parse_error, response)
            return
        self.handle_results(data, response)


def execute(req: Request) -> Any:
    """
    Ends a request and returns its results, raising its error on failure.

    The default transport completes the exchange within ``end()``, so this is a blocking
    call for requests that are not paused by a listener.
    """
    outcome: Dict[str, Any] = {}

    def _on_end(results: Any, meta: header.ResponseMeta) -> None:
        outcome['results'] = results
        outcome['meta'] = meta

    def _on_error(error: Exception) -> None:
        outcome['error'] = error

    req.on('end', _on_end)
    req.on('error', _on_error)
    req.end()

    if 'error' in outcome:
        raise outcome['error']
    if 'results' not in outcome:
        raise stratus_errors.StratusDataStorageError(
            f'{type(req).__name__} did not complete.')
    return outcome['results']
