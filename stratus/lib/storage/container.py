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
Container (bucket) operations.

Containers are addressed virtual-hosted style, through a ``host: <name>.<auth_host>``
header.
"""

import dataclasses
import datetime
from typing import TYPE_CHECKING, Any, Dict, List, Mapping

from . import blob as blob_module
from . import streaming, transfer
from .core import errors, request, transport, xml_parser
from ..utils import stratus_errors

if TYPE_CHECKING:
    from .connection import Connection


DEFAULT_MAX_RESULTS = 1000


###########################
#     Result schemas      #
###########################


@dataclasses.dataclass(frozen=True)
class ContainerResult:
    """
    Result of a container operation.

    :ivar Container container: The container.
    :ivar bool already_created: Whether the container already existed (create / validate).
    :ivar bool not_found: Whether a deleted container did not exist.
    """
    container: 'Container'
    already_created: bool = False
    not_found: bool = False


@dataclasses.dataclass(frozen=True)
class BlobListResult:
    """
    One page of a blob listing.

    :ivar List[Blob] blobs: Blobs of the page.
    :ivar List[str] dir_names: Pseudo-directories (common prefixes) of the page.
    :ivar bool has_next: Whether more results follow the last blob of the page.
    """
    blobs: List[blob_module.Blob] = dataclasses.field(default_factory=list)
    dir_names: List[str] = dataclasses.field(default_factory=list)
    has_next: bool = False


class Container:
    """
    A named storage namespace.
    """

    def __init__(
        self,
        connection: 'Connection',
        name: str,
        created: datetime.datetime | str | None = None,
    ):
        if connection is None:
            raise stratus_errors.StratusUsageError('No connection object.')
        if not name:
            raise stratus_errors.StratusUsageError('No container name.')
        self.connection = connection
        self.name = name
        self.created = created

    def __repr__(self) -> str:
        return f'Container(name={self.name!r})'

    @property
    def host(self) -> str:
        return f'{self.name}.{self.connection.context.auth_host}'

    def _request_args(
        self,
        method: str,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, Any] | None = None,
    ) -> Dict[str, Any]:
        return {
            'context': self.connection.context,
            'method': method,
            'path': '/',
            'params': params,
            'headers': {**(headers or {}), 'content-length': 0, 'host': self.host},
            'transport': self.connection.transport,
        }

    def get(self, validate: bool = False, create: bool = False) -> request.Request:
        """
        Returns a request for the container.

        Args:
            validate: Check that the container exists with an empty listing.
            create: Create the container. Creating a container already owned by the
                    account succeeds with ``already_created`` set, when the provider
                    reports it.
        """
        if create:
            def _error_fn(
                error: Exception,
                req: request.Request,
                response: transport.ResponseHead | None,
            ) -> Exception | request.Recovered:
                # pylint: disable=unused-argument
                if (self.connection.context.provider.reports_already_owned and
                        isinstance(error, errors.CloudError) and
                        error.is_already_owned_by_you()):
                    return request.Recovered(
                        ContainerResult(container=self, already_created=True))
                return error

            return request.BufferedRequest(
                results_fn=lambda data, req, response: ContainerResult(container=self),
                error_fn=_error_fn,
                **self._request_args('PUT'))

        if validate:
            return request.BufferedRequest(
                results_fn=lambda data, req, response: ContainerResult(
                    container=self, already_created=True),
                **self._request_args('GET', params={'max-keys': 0}))

        return request.DummyRequest(results_fn=lambda: ContainerResult(container=self))

    def put(self) -> request.Request:
        """ Returns a request creating the container. """
        return self.get(create=True)

    def delete(self, headers: Mapping[str, Any] | None = None) -> request.BufferedRequest:
        """
        Returns a request deleting the container. Deleting a missing (or invalidly named)
        container succeeds with ``not_found`` set.
        """
        def _error_fn(
            error: Exception,
            req: request.Request,
            response: transport.ResponseHead | None,
        ) -> Exception | request.Recovered:
            # pylint: disable=unused-argument
            if isinstance(error, errors.CloudError) and (
                    error.is_not_found() or error.is_invalid_name()):
                return request.Recovered(ContainerResult(container=self, not_found=True))
            return error

        return request.BufferedRequest(
            results_fn=lambda data, req, response: ContainerResult(container=self),
            error_fn=_error_fn,
            **self._request_args('DELETE', headers=headers))

    def _blob_list(self, result: Any) -> BlobListResult:
        result = result if isinstance(result, dict) else {}
        blobs = [
            blob_module.Blob(
                self,
                item.get('Key'),
                last_modified=item.get('LastModified'),
                size=item.get('Size'),
                etag=item.get('ETag'))
            for item in xml_parser.as_list(result.get('Contents'))
        ]
        dir_names = [
            item.get('Prefix')
            for item in xml_parser.as_list(result.get('CommonPrefixes'))
            if isinstance(item, dict)
        ]
        return BlobListResult(
            blobs=blobs,
            dir_names=dir_names,
            has_next=str(result.get('IsTruncated', '')).lower() == 'true')

    def get_blobs(
        self,
        prefix: str | None = None,
        delimiter: str | None = None,
        marker: str | None = None,
        max_results: int = DEFAULT_MAX_RESULTS,
        headers: Mapping[str, Any] | None = None,
    ) -> request.StructuredRequest:
        """
        Returns a request listing one page of blobs. Pass the name of the last blob of a
        page as ``marker`` to get the next page.
        """
        params: Dict[str, Any] = {'max-keys': max_results or DEFAULT_MAX_RESULTS}
        if prefix:
            params['prefix'] = prefix
        if delimiter:
            params['delimiter'] = delimiter
        if marker:
            params['marker'] = marker

        return request.StructuredRequest(
            results_fn=lambda data, req, response: self._blob_list(data),
            **self._request_args('GET', params=params, headers=headers))

    def blob(self, name: str) -> blob_module.Blob:
        return blob_module.Blob(self, name)

    def get_blob(self, name: str) -> streaming.DownloadStream:
        return self.blob(name).get()

    def get_blob_to_file(self, name: str, filename: str) -> transfer.FileTransfer:
        return self.blob(name).get_to_file(filename)

    def head_blob(self, name: str) -> request.BufferedRequest:
        return self.blob(name).head()

    def put_blob(self, name: str, **kwargs: Any) -> streaming.UploadStream:
        return self.blob(name).put(**kwargs)

    def put_blob_from_file(self, name: str, filename: str, **kwargs: Any) -> transfer.FileTransfer:
        return self.blob(name).put_from_file(filename, **kwargs)

    def del_blob(self, name: str) -> request.BufferedRequest:
        return self.blob(name).delete()
