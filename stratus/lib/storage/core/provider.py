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
Provider descriptors for the supported S3-compatible storage services.

A provider is configuration only: the signer, the request lifecycle and the error
translator are shared, and consume a :py:class:`Provider` value.
"""

import dataclasses
import re
from typing import Dict, Pattern, Tuple

from . import errors
from ...utils import stratus_errors


#######################
#   Provider Schema   #
#######################


@dataclasses.dataclass(frozen=True, kw_only=True)
class Provider:
    """
    Describes how a storage service differs from the shared engine defaults.
    """
    name: str
    scheme_id: str
    header_prefix: str
    metadata_prefix: str
    default_auth_host: str
    error_rules: Tuple[errors.ErrorRule, ...]
    # Whether the service distinguishes "already owned by you" from "owned by another"
    # when creating a container.
    reports_already_owned: bool = False
    custom_header_pattern: Pattern[str] = dataclasses.field(init=False, repr=False)

    def __post_init__(self):
        object.__setattr__(
            self,
            'custom_header_pattern',
            re.compile('^' + re.escape(self.header_prefix), re.IGNORECASE))

    def translator(self) -> errors.ErrorTranslator:
        return errors.ErrorTranslator(self.error_rules)


#####################
#   Error Tables    #
#####################


CONTAINER_NOT_FOUND_MESSAGE = 'Container not found.'
CONTAINER_NOT_EMPTY_MESSAGE = 'Container not empty.'
CONTAINER_INVALID_NAME_MESSAGE = 'Invalid container name.'
CONTAINER_OTHER_OWNER_MESSAGE = 'Container already owned by another.'
CONTAINER_ALREADY_OWNED_BY_YOU_MESSAGE = 'Container already owned by you.'
BLOB_NOT_FOUND_MESSAGE = 'Blob not found.'
NOT_FOUND_MESSAGE = 'Resource not found.'


_AWS_ERROR_RULES = (
    errors.error_rule(
        'CONTAINER_NOT_FOUND', 404, 'NoSuchBucket', CONTAINER_NOT_FOUND_MESSAGE,
        errors.ErrorKind.NOT_FOUND,
        error_html='Not Found',
        html_message=NOT_FOUND_MESSAGE),
    errors.error_rule(
        'CONTAINER_NOT_EMPTY', 409, 'BucketNotEmpty', CONTAINER_NOT_EMPTY_MESSAGE,
        errors.ErrorKind.NOT_EMPTY),
    errors.error_rule(
        'CONTAINER_INVALID_NAME', 400, 'InvalidBucketName', CONTAINER_INVALID_NAME_MESSAGE,
        errors.ErrorKind.INVALID_NAME,
        method_kinds={
            'GET': (errors.ErrorKind.NOT_FOUND, errors.ErrorKind.INVALID_NAME),
        }),
    errors.error_rule(
        'CONTAINER_OTHER_OWNER', 409, 'BucketAlreadyExists', CONTAINER_OTHER_OWNER_MESSAGE,
        errors.ErrorKind.NOT_OWNER),
    errors.error_rule(
        'BLOB_NOT_FOUND', 404, 'NoSuchKey', BLOB_NOT_FOUND_MESSAGE,
        errors.ErrorKind.NOT_FOUND,
        error_html='Not Found',
        html_message=NOT_FOUND_MESSAGE),
)


_GOOGLE_ERROR_RULES = (
    _AWS_ERROR_RULES[0],
    _AWS_ERROR_RULES[1],
    _AWS_ERROR_RULES[2],
    errors.error_rule(
        'CONTAINER_OTHER_OWNER', 409, 'BucketNameUnavailable', CONTAINER_OTHER_OWNER_MESSAGE,
        errors.ErrorKind.NOT_OWNER),
    errors.error_rule(
        'CONTAINER_ALREADY_OWNED_BY_YOU', 409, 'BucketAlreadyOwnedByYou',
        CONTAINER_ALREADY_OWNED_BY_YOU_MESSAGE,
        errors.ErrorKind.ALREADY_OWNED_BY_YOU),
    _AWS_ERROR_RULES[4],
)


AWS = Provider(
    name='aws',
    scheme_id='AWS',
    header_prefix='x-amz-',
    metadata_prefix='x-amz-meta-',
    default_auth_host='s3.amazonaws.com',
    error_rules=_AWS_ERROR_RULES,
    reports_already_owned=False,
)


GOOGLE = Provider(
    name='google',
    scheme_id='GOOG1',
    header_prefix='x-goog-',
    metadata_prefix='x-goog-meta-',
    default_auth_host='commondatastorage.googleapis.com',
    error_rules=_GOOGLE_ERROR_RULES,
    reports_already_owned=True,
)


PROVIDERS: Dict[str, Provider] = {
    AWS.name: AWS,
    GOOGLE.name: GOOGLE,
}


def get_provider(provider: 'str | Provider') -> Provider:
    """
    Resolves a provider descriptor from its name. Descriptors are returned as is.
    """
    if isinstance(provider, Provider):
        return provider
    try:
        return PROVIDERS[str(provider).strip().lower()]
    except KeyError as error:
        valid = ', '.join(PROVIDERS.keys())
        raise stratus_errors.StratusUserError(
            f'Unknown provider: "{provider}". Valid providers are: {valid}') from error
