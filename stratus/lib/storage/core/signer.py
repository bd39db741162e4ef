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
Request signing shared by every provider (HMAC-SHA1 header authentication).

The string to sign is formed by the HTTP method, the ``content-md5``, ``content-type`` and
``date`` header values, the canonical custom headers and the canonical resource, separated
by newlines. Providers only differ by their custom header pattern, scheme id and
authentication host.
"""

import base64
import hashlib
import hmac
import urllib.parse
from typing import Any, Dict, Mapping

from . import credentials
from ...utils import common


def normalize_headers(
    headers: Mapping[str, Any] | None,
    context: credentials.SigningContext,
) -> Dict[str, Any]:
    """
    Lower-cases header names and fills in the ``date`` and ``host`` defaults.
    """
    result = {key.lower(): value for key, value in (headers or {}).items()}
    if not result.get('date'):
        result['date'] = common.http_date()
    if not result.get('host'):
        result['host'] = context.auth_host
    return result


def canonical_headers(headers: Mapping[str, Any], context: credentials.SigningContext) -> str:
    """
    Returns the sorted ``name:value`` lines of the provider custom headers.
    """
    lines = []
    for key, value in headers.items():
        if not context.provider.custom_header_pattern.match(key):
            continue
        if isinstance(value, (list, tuple)):
            value = ','.join(str(item) for item in value)
        lines.append(f'{key.lower()}:{value}')
    return '\n'.join(sorted(lines))


def canonical_resource(
    path: str,
    headers: Mapping[str, Any],
    context: credentials.SigningContext,
) -> str:
    """
    Returns the resource path, prefixed by the bucket name for virtual-hosted requests.
    The query string is not part of the resource.
    """
    resource = urllib.parse.urlsplit(path or '/').path
    host = str(headers.get('host') or '')
    suffix = f'.{context.auth_host}'
    if host.endswith(suffix) and len(host) > len(suffix):
        bucket = host[:-len(suffix)]
        resource = f'/{bucket}{resource}'
    return resource


def string_to_sign(
    method: str,
    path: str,
    headers: Mapping[str, Any],
    context: credentials.SigningContext,
) -> str:
    parts = [
        method.upper(),
        str(headers.get('content-md5') or ''),
        str(headers.get('content-type') or ''),
        str(headers.get('date') or ''),
    ]
    custom_headers = canonical_headers(headers, context)
    if custom_headers:
        parts.append(custom_headers)
    resource = canonical_resource(path, headers, context)
    if resource:
        parts.append(resource)
    return '\n'.join(parts)


def get_signature(secret_key: str, value: str) -> str:
    digest = hmac.new(secret_key.encode('utf-8'), value.encode('utf-8'), hashlib.sha1).digest()
    return base64.b64encode(digest).decode('ascii')


def sign(
    method: str,
    path: str,
    headers: Mapping[str, Any] | None,
    context: credentials.SigningContext,
) -> Dict[str, Any]:
    """
    Returns a copy of the headers with the ``authorization`` header added.

    Args:
        method: HTTP method.
        path: Request path, with any query parameters already merged in.
        headers: Outgoing headers. Names are lower-cased in the result.
        context: Credentials and provider of the request.
    """
    signed = normalize_headers(headers, context)
    signature = get_signature(
        context.secret_key.get_secret_value(),
        string_to_sign(method, path or '/', signed, context))
    signed['authorization'] = f'{context.provider.scheme_id} {context.account}:{signature}'
    return signed
