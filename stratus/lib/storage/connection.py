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
Connection to a storage account, the entry point of the object model.
"""

import dataclasses
import logging
from typing import Any, List

from . import container as container_module
from .core import credentials, errors, request, transport as transport_module, xml_parser


logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class ContainerListResult:
    """
    Containers owned by the account.
    """
    containers: List[container_module.Container] = dataclasses.field(default_factory=list)


class Connection:
    """
    Account level operations. Every request of the object model is created with the
    connection signing context and transport.
    """

    def __init__(
        self,
        context: credentials.SigningContext,
        transport: transport_module.Transport | None = None,
    ):
        self.context = context
        self.transport = transport or transport_module.RequestsTransport()

    def __repr__(self) -> str:
        return (f'Connection(provider={self.context.provider.name!r}, '
                f'auth_host={self.context.auth_host!r})')

    def translate_error(
        self,
        error: Exception,
        req: request.RawRequest,
        response: transport_module.ResponseHead | None,
    ) -> errors.CloudError | None:
        """
        Returns the provider translation of an error, or None if no rule matches.
        """
        return self.context.provider.translator().translate(error, req.method, response)

    def _container_list(self, result: Any) -> ContainerListResult:
        buckets = result.get('Buckets') if isinstance(result, dict) else None
        items = xml_parser.as_list(buckets.get('Bucket')) if isinstance(buckets, dict) else []
        return ContainerListResult(containers=[
            container_module.Container(self, item.get('Name'), created=item.get('CreationDate'))
            for item in items
        ])

    def get_containers(self) -> request.StructuredRequest:
        """
        Returns a request listing the containers of the account.
        """
        return request.StructuredRequest(
            self.context,
            method='GET',
            path='/',
            headers={'content-length': 0},
            results_fn=lambda data, req, response: self._container_list(data),
            transport=self.transport)

    def container(self, name: str) -> container_module.Container:
        return container_module.Container(self, name)

    def get_container(self, name: str, validate: bool = False,
                      create: bool = False) -> request.Request:
        return self.container(name).get(validate=validate, create=create)

    def put_container(self, name: str) -> request.Request:
        return self.container(name).put()

    def del_container(self, name: str) -> request.BufferedRequest:
        return self.container(name).delete()
