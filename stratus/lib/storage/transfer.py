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
Helpers piping blob streams to and from local files.

A transfer is a request of its own: it is configured first and only started on ``end()``.
It emits a single ``error`` (the first failing side wins, both sides are torn down) or a
single ``end`` once both the cloud and the local side completed.
"""

import contextlib
import functools
import logging
from typing import Any, BinaryIO

from . import streaming
from .core import header, request
from ..utils import stratus_errors


logger = logging.getLogger(__name__)


DEFAULT_CHUNK_SIZE = 64 * 1024


class FileTransfer(request.DummyRequest):
    """
    Request piping a blob stream to or from a local file.
    """

    def __init__(self, stream: streaming.DownloadStream | streaming.UploadStream,
                 filename: str):
        super().__init__(end_fn=self._start)
        self.stream = stream
        self.filename = filename

    def _start(self, req: request.DummyRequest) -> None:
        # pylint: disable=unused-argument
        raise stratus_errors.StratusUsageError('Not implemented.')

    def _fail(self, error: Exception) -> None:
        if self.settled:
            return
        logger.debug('Transfer of %s failed: %s', self.filename, error)
        self.stream.destroy()
        self.fail(error)


class _DownloadTransfer(FileTransfer):

    stream: streaming.DownloadStream

    def __init__(self, stream: streaming.DownloadStream, filename: str):
        super().__init__(stream, filename)
        self._sink: BinaryIO | None = None

    def _close_sink(self) -> None:
        if self._sink is not None and not self._sink.closed:
            self._sink.close()

    def _fail(self, error: Exception) -> None:
        if self.settled:
            return
        # The first error is reported, closing the sink must not replace it
        with contextlib.suppress(OSError):
            self._close_sink()
        super()._fail(error)

    def _on_data(self, chunk: bytes | str, meta: header.ResponseMeta) -> None:
        # pylint: disable=unused-argument
        if self._sink is None:
            return
        try:
            self._sink.write(chunk.encode('utf-8') if isinstance(chunk, str) else chunk)
        except OSError as error:
            self._fail(error)

    def _on_end(self, results: Any, meta: header.ResponseMeta) -> None:
        try:
            self._close_sink()
        except OSError as error:
            self._fail(error)
            return
        self.succeed(results, meta=meta)

    def _start(self, req: request.DummyRequest) -> None:
        if self.stream.state != streaming.StreamState.OPEN or self.stream.request.settled:
            self._fail(stratus_errors.StratusUsageError(
                'Download stream was already ended or destroyed.'))
            return
        try:
            self._sink = open(self.filename, 'wb')  # pylint: disable=consider-using-with
        except OSError as error:
            self._fail(error)
            return

        self.stream.on('data', self._on_data)
        self.stream.on('end', self._on_end)
        self.stream.on('error', self._fail)
        self.stream.end()


class _UploadTransfer(FileTransfer):

    stream: streaming.UploadStream

    def __init__(self, stream: streaming.UploadStream, filename: str, chunk_size: int):
        super().__init__(stream, filename)
        self._chunk_size = chunk_size

    def _on_end(self, results: Any, meta: header.ResponseMeta) -> None:
        self.succeed(results, meta=meta)

    def _start(self, req: request.DummyRequest) -> None:
        if not self.stream.writable:
            self._fail(stratus_errors.StratusUsageError(
                'Upload stream was already ended or destroyed.'))
            return
        self.stream.on('end', self._on_end)
        self.stream.on('error', self._fail)
        try:
            with open(self.filename, 'rb') as source:
                for chunk in iter(functools.partial(source.read, self._chunk_size), b''):
                    if not self.stream.write(chunk):
                        self._fail(stratus_errors.StratusUsageError(
                            'Upload stream stopped accepting data.'))
                        return
        except OSError as error:
            self._fail(error)
            return
        self.stream.end()


def download_to_file(stream: streaming.DownloadStream, filename: str) -> FileTransfer:
    """
    Returns a transfer writing the body of a download stream to a local file.
    """
    return _DownloadTransfer(stream, filename)


def upload_from_file(
    stream: streaming.UploadStream,
    filename: str,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> FileTransfer:
    """
    Returns a transfer sending the contents of a local file through an upload stream.
    """
    return _UploadTransfer(stream, filename, chunk_size)
