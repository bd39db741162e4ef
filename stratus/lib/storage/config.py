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
Resolves a storage account configuration from an object, the environment or a YAML file.
"""

import os
from typing import Any, Dict, Mapping

import pydantic
import yaml

from . import connection as connection_module
from .core import credentials, provider as provider_module, transport as transport_module
from ..utils import stratus_errors


STRATUS_CONFIG_OVERRIDE = 'STRATUS_CONFIG_DIR'

ENV_PROVIDER = 'STRATUS_PROVIDER'
ENV_ACCOUNT = 'STRATUS_ACCOUNT'
ENV_SECRET_KEY = 'STRATUS_SECRET_KEY'
ENV_AUTH_URL = 'STRATUS_AUTH_URL'
ENV_SSL = 'STRATUS_SSL'
ENV_PORT = 'STRATUS_PORT'
ENV_TIMEOUT = 'STRATUS_TIMEOUT'


def get_client_config_dir() -> str:
    """ Get path of directory where config files are stored """
    override_dir = os.getenv(STRATUS_CONFIG_OVERRIDE)
    xdg_config = os.getenv('XDG_CONFIG_HOME')

    if override_dir is not None:
        return override_dir
    if xdg_config is not None:
        return f'{xdg_config}/stratus'
    return os.path.expanduser('~/.config/stratus')


def get_default_config_file() -> str:
    return os.path.join(get_client_config_dir(), 'config.yaml')


class Configuration(pydantic.BaseModel, frozen=True, extra='forbid'):
    """
    Storage account configuration.
    """
    provider: str = pydantic.Field(
        ...,
        description='The storage provider name (aws or google)',
    )
    account: str = pydantic.Field(
        default='',
        description='The account (access key id)',
    )
    secret_key: pydantic.SecretStr = pydantic.Field(
        default=pydantic.SecretStr(''),
        description='The secret key',
    )
    auth_host: str | None = pydantic.Field(
        default=None,
        description='The authentication host, defaults to the provider authentication host',
    )
    ssl: bool = pydantic.Field(
        default=False,
        description='Whether to use HTTPS',
    )
    port: int | None = pydantic.Field(
        default=None,
        description='The port, defaults to 443 with SSL and 80 otherwise',
    )
    timeout: float = pydantic.Field(
        default=credentials.DEFAULT_TIMEOUT,
        description='The transport timeout in seconds',
    )

    @pydantic.field_validator('provider', mode='before')
    @classmethod
    def _validate_provider(cls, value: Any) -> str:
        return provider_module.get_provider(value or '').name

    @pydantic.model_validator(mode='after')
    def _validate_credentials(self) -> 'Configuration':
        if not self.account:
            raise stratus_errors.StratusUsageError('No account name.')
        if not self.secret_key.get_secret_value():
            raise stratus_errors.StratusUsageError('No secret key.')
        return self

    @classmethod
    def from_obj(cls, options: Mapping[str, Any]) -> 'Configuration':
        """
        Creates a configuration from a mapping. ``auth_url`` is accepted as an alias of
        ``auth_host``.
        """
        values = dict(options)
        if 'auth_url' in values:
            values.setdefault('auth_host', values.pop('auth_url'))
        return cls(**values)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> 'Configuration':
        """
        Creates a configuration from the ``STRATUS_*`` environment variables.
        """
        environ = os.environ if environ is None else environ
        values: Dict[str, Any] = {
            'provider': environ.get(ENV_PROVIDER),
            'account': environ.get(ENV_ACCOUNT, ''),
            'secret_key': environ.get(ENV_SECRET_KEY, ''),
            'auth_host': environ.get(ENV_AUTH_URL) or None,
            'ssl': environ.get(ENV_SSL, '').strip().lower() == 'true',
        }
        if environ.get(ENV_PORT):
            values['port'] = environ[ENV_PORT]
        if environ.get(ENV_TIMEOUT):
            values['timeout'] = environ[ENV_TIMEOUT]
        return cls(**values)

    @classmethod
    def from_file(cls, path: str) -> 'Configuration':
        """
        Creates a configuration from a YAML mapping.
        """
        try:
            with open(os.path.expanduser(path), 'r', encoding='utf-8') as file:
                data = yaml.safe_load(file)
        except FileNotFoundError as error:
            raise stratus_errors.StratusUserError(f'Config file not found: {path}') from error
        except yaml.YAMLError as error:
            raise stratus_errors.StratusUserError(f'Invalid config file {path}: {error}') \
                from error
        if not isinstance(data, dict):
            raise stratus_errors.StratusUserError(f'Config file {path} must be a mapping')
        return cls.from_obj(data)

    def is_aws(self) -> bool:
        return self.provider == provider_module.AWS.name

    def is_google(self) -> bool:
        return self.provider == provider_module.GOOGLE.name

    def signing_context(self) -> credentials.SigningContext:
        return credentials.SigningContext(
            account=self.account,
            secret_key=self.secret_key,
            provider=self.provider,
            auth_host=self.auth_host,
            ssl=self.ssl,
            port=self.port,
            timeout=self.timeout,
        )

    def connection(
        self,
        transport: transport_module.Transport | None = None,
    ) -> connection_module.Connection:
        return connection_module.Connection(self.signing_context(), transport=transport)
