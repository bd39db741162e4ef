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
Blob (object) operations.
"""

import dataclasses
import datetime
import urllib.parse
from typing import TYPE_CHECKING, Any, Dict, Mapping

from . import streaming, transfer
from .core import errors, request, transport
from ..utils import stratus_errors

if TYPE_CHECKING:
    from .container import Container


@dataclasses.dataclass(frozen=True)
class BlobResult:
    """
    Result of a blob operation.

    :ivar Blob blob: The blob.
    :ivar bool not_found: Whether a deleted blob did not exist.
    """
    blob: 'Blob'
    not_found: bool = False


class Blob:
    """
    A named object in a container.
    """

    def __init__(
        self,
        container: 'Container',
        name: str,
        created: datetime.datetime | str | None = None,
        last_modified: datetime.datetime | str | None = None,
        size: int | str | None = None,
        etag: str | None = None,
    ):
        if container is None:
            raise stratus_errors.StratusUsageError('No container object.')
        if not name:
            raise stratus_errors.StratusUsageError('No blob name.')
        self.container = container
        self.name = name
        self.created = created
        self.last_modified = last_modified
        self.size = int(size) if size not in (None, '') else None
        self.etag = etag.strip('"') if etag else None

    def __repr__(self) -> str:
        return f'Blob(container={self.container.name!r}, name={self.name!r})'

    @property
    def path(self) -> str:
        return '/' + urllib.parse.quote(self.name, safe='/~')

    def _request_args(
        self,
        method: str,
        headers: Mapping[str, Any] | None = None,
        cloud_headers: Mapping[str, Any] | None = None,
        metadata: Mapping[str, Any] | None = None,
    ) -> Dict[str, Any]:
        connection = self.container.connection
        return {
            'context': connection.context,
            'method': method,
            'path': self.path,
            'headers': {**(headers or {}), 'host': self.container.host},
            'cloud_headers': cloud_headers,
            'metadata': metadata,
            'transport': connection.transport,
        }

    def _results(self, data: Any = None, req: Any = None, response: Any = None) -> BlobResult:
        # pylint: disable=unused-argument
        return BlobResult(blob=self)

    def get(self, headers: Mapping[str, Any] | None = None) -> streaming.DownloadStream:
        """
        Returns a stream of the blob contents. The ``end`` results are a
        :py:class:`BlobResult`, ``meta`` carries the blob metadata.
        """
        return streaming.DownloadStream(
            request.RawRequest(**self._request_args('GET', headers)),
            end_fn=lambda response: self._results())

    def get_to_file(self, filename: str,
                    headers: Mapping[str, Any] | None = None) -> transfer.FileTransfer:
        """
        Returns a request downloading the blob to a local file.
        """
        return transfer.download_to_file(self.get(headers=headers), filename)

    def head(self, headers: Mapping[str, Any] | None = None) -> request.BufferedRequest:
        """
        Returns a request for the blob headers and metadata (in the ``end`` meta).
        """
        return request.BufferedRequest(
            results_fn=self._results,
            **self._request_args('HEAD', headers))

    def put(
        self,
        headers: Mapping[str, Any] | None = None,
        cloud_headers: Mapping[str, Any] | None = None,
        metadata: Mapping[str, Any] | None = None,
    ) -> streaming.UploadStream:
        """
        Returns a stream writing the blob contents, sent on ``end()``.
        """
        return streaming.UploadStream(
            request.RawRequest(**self._request_args('PUT', headers, cloud_headers, metadata)),
            end_fn=lambda response: self._results())

    def put_from_file(
        self,
        filename: str,
        headers: Mapping[str, Any] | None = None,
        cloud_headers: Mapping[str, Any] | None = None,
        metadata: Mapping[str, Any] | None = None,
    ) -> transfer.FileTransfer:
        """
        Returns a request uploading a local file to the blob.
        """
        stream = self.put(headers=headers, cloud_headers=cloud_headers, metadata=metadata)
        return transfer.upload_from_file(stream, filename)

    def delete(self, headers: Mapping[str, Any] | None = None) -> request.BufferedRequest:
        """
        Returns a request deleting the blob. Deleting a missing blob succeeds with
        ``not_found`` set.
        """
        def _error_fn(
            error: Exception,
            req: request.Request,
            response: transport.ResponseHead | None,
        ) -> Exception | request.Recovered:
            # pylint: disable=unused-argument
            if isinstance(error, errors.CloudError) and error.is_not_found():
                return request.Recovered(BlobResult(blob=self, not_found=True))
            return error

        return request.BufferedRequest(
            results_fn=self._results,
            error_fn=_error_fn,
            **self._request_args('DELETE', headers))
