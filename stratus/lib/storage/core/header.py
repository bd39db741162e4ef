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
Outgoing header assembly and incoming header splitting.
"""

import dataclasses
import urllib.parse
from typing import Any, Dict, List, Mapping, Tuple

from . import provider as provider_module


HeaderValue = str | List[str]


@dataclasses.dataclass(frozen=True)
class ResponseMeta:
    """
    Response headers split by prefix. Prefixes are stripped from metadata and cloud header
    names.
    """
    headers: Dict[str, str] = dataclasses.field(default_factory=dict)
    cloud_headers: Dict[str, str] = dataclasses.field(default_factory=dict)
    metadata: Dict[str, str] = dataclasses.field(default_factory=dict)


def _header_value(value: Any) -> HeaderValue:
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value]
    return str(value)


def assemble_headers(
    provider: provider_module.Provider,
    headers: Mapping[str, Any] | None = None,
    cloud_headers: Mapping[str, Any] | None = None,
    metadata: Mapping[str, Any] | None = None,
) -> Dict[str, HeaderValue]:
    """
    Builds the outgoing header map. Metadata is added first, then cloud headers, then raw
    headers, so that a later group overrides an earlier one on a name collision.
    """
    result: Dict[str, HeaderValue] = {}
    for key, value in (metadata or {}).items():
        result[f'{provider.metadata_prefix}{key}'.lower()] = _header_value(value)
    for key, value in (cloud_headers or {}).items():
        result[f'{provider.header_prefix}{key}'.lower()] = _header_value(value)
    for key, value in (headers or {}).items():
        result[key.lower()] = _header_value(value)
    return result


def split_headers(
    provider: provider_module.Provider,
    headers: Mapping[str, str] | None,
) -> ResponseMeta:
    """
    Splits response headers into metadata, cloud headers and plain headers. The metadata
    prefix is the longer one and is tested first.
    """
    meta = ResponseMeta()
    for key, value in (headers or {}).items():
        name = key.lower()
        if name.startswith(provider.metadata_prefix):
            meta.metadata[name[len(provider.metadata_prefix):]] = value
        elif name.startswith(provider.header_prefix):
            meta.cloud_headers[name[len(provider.header_prefix):]] = value
        else:
            meta.headers[name] = value
    return meta


def merge_params(path: str, params: Mapping[str, Any] | None) -> str:
    """
    Merges query parameters into a path. Parameters with a None value are dropped;
    parameters already on the path are kept and overridden by name.
    """
    if not params:
        return path
    parts = urllib.parse.urlsplit(path)
    query: List[Tuple[str, str]] = [
        (key, value)
        for key, value in urllib.parse.parse_qsl(parts.query, keep_blank_values=True)
        if key not in params
    ]
    for key, value in params.items():
        if value is None:
            continue
        query.append((key, str(value)))
    return urllib.parse.urlunsplit(
        (parts.scheme, parts.netloc, parts.path, urllib.parse.urlencode(query), parts.fragment))
