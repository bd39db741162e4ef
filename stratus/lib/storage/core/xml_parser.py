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
Default byte to structured-object parser for XML response bodies.

A parser is any callable ``parse(data: bytes) -> Any`` that raises
:py:class:`StructuredParseError` when the body cannot be parsed.
"""

from typing import Any, Callable, Dict, List
from xml.etree import ElementTree as ET

from ...utils import stratus_errors


Parser = Callable[[bytes], Any]


class StructuredParseError(stratus_errors.StratusDataStorageError):
    """
    Raised when a response body cannot be parsed into a structured object.
    """
    pass


def _local_name(tag: str) -> str:
    # Drop the "{namespace}" qualifier of S3 response elements
    return tag.rsplit('}', 1)[-1]


def _element_to_value(element: ET.Element) -> Any:
    children = list(element)
    if not children:
        return (element.text or '').strip()

    result: Dict[str, Any] = {}
    for child in children:
        name = _local_name(child.tag)
        value = _element_to_value(child)
        if name in result:
            existing = result[name]
            if isinstance(existing, list):
                existing.append(value)
            else:
                result[name] = [existing, value]
        else:
            result[name] = value
    return result


def parse(data: bytes | str | None) -> Any:
    """
    Parses an XML document into nested dicts.

    The root element is dropped, leaf elements become their stripped text, and repeated
    sibling elements are collected into a list (a single occurrence is not wrapped).
    """
    if not data:
        raise StructuredParseError('Empty response body.')
    try:
        root = ET.fromstring(data)
    except ET.ParseError as error:
        raise StructuredParseError(f'Invalid XML response: {error}') from error
    return _element_to_value(root)


def as_list(value: Any) -> List[Any]:
    """
    Upgrades a parsed value to a list of a single element if not already a list.
    """
    if value is None or value == '':
        return []
    return value if isinstance(value, list) else [value]


def extract_error_code(body: str | bytes | None) -> str | None:
    """
    Returns the ``<Code>`` of an S3 style ``<Error>`` document, or None if the body does
    not carry one.
    """
    if not body:
        return None
    if isinstance(body, str):
        body = body.encode('utf-8')
    try:
        root = ET.fromstring(body)
    except ET.ParseError:
        return None
    if _local_name(root.tag) == 'Code':
        return (root.text or '').strip() or None
    for element in root.iter():
        if _local_name(element.tag) == 'Code':
            return (element.text or '').strip() or None
    return None
