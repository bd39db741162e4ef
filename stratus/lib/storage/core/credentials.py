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
Resolved credentials used to sign and send requests.
"""

from typing import Any, Dict

import pydantic

from . import provider as provider_module
from ...utils import stratus_errors


DEFAULT_TIMEOUT = 5
HTTPS_PORT = 443
HTTP_PORT = 80


def _is_truthy(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ('true', '1', 'yes')
    return bool(value)


class SigningContext(pydantic.BaseModel, frozen=True, extra='forbid'):
    """
    Credentials and endpoint of one storage account. Immutable once constructed.
    """
    account: str = pydantic.Field(
        ...,
        description='The account (access key id) used to sign requests',
    )
    secret_key: pydantic.SecretStr = pydantic.Field(
        ...,
        description='The secret key used to sign requests',
    )
    provider: Any = pydantic.Field(
        default=provider_module.AWS,
        description='The provider descriptor (or its name)',
    )
    auth_host: str = pydantic.Field(
        ...,
        description='The authentication host, defaults to the provider authentication host',
    )
    ssl: bool = pydantic.Field(
        default=False,
        description='Whether requests are sent over HTTPS',
    )
    port: int = pydantic.Field(
        ...,
        description='The port requests are sent to, defaults to 443 with SSL and 80 otherwise',
    )
    timeout: float = pydantic.Field(
        default=DEFAULT_TIMEOUT,
        description='The transport timeout in seconds',
    )

    @pydantic.model_validator(mode='before')
    @classmethod
    def _resolve_defaults(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        values: Dict[str, Any] = dict(data)

        if not values.get('account'):
            raise stratus_errors.StratusUsageError('No account given.')
        secret_key = values.get('secret_key')
        if isinstance(secret_key, pydantic.SecretStr):
            secret_key = secret_key.get_secret_value()
        if not secret_key:
            raise stratus_errors.StratusUsageError('No secret key given.')

        provider = provider_module.get_provider(values.get('provider') or provider_module.AWS)
        values['provider'] = provider
        if not values.get('auth_host'):
            values['auth_host'] = provider.default_auth_host

        ssl = _is_truthy(values.get('ssl', False))
        values['ssl'] = ssl
        if values.get('port') in (None, ''):
            values['port'] = HTTPS_PORT if ssl else HTTP_PORT
        return values

    @pydantic.field_validator('provider')
    @classmethod
    def _validate_provider(cls, value: Any) -> provider_module.Provider:
        return provider_module.get_provider(value)

    @property
    def scheme(self) -> str:
        return 'https' if self.ssl else 'http'

    def base_url(self) -> str:
        """
        Returns the URL of the authentication host, omitting the port if it is the
        default one for the scheme.
        """
        default_port = HTTPS_PORT if self.ssl else HTTP_PORT
        if self.port == default_port:
            return f'{self.scheme}://{self.auth_host}'
        return f'{self.scheme}://{self.auth_host}:{self.port}'
