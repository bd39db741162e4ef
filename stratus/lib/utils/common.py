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
Common utilities.
"""

import datetime
import email.utils
import math
import os
from typing import Iterable, List

import texttable


JSON_INDENT_SIZE = 2


def current_time() -> datetime.datetime:
    """ Returns the current time in UTC. """
    return datetime.datetime.now(datetime.timezone.utc)


def http_date(when: datetime.datetime | None = None) -> str:
    """
    Formats a time as an RFC 1123 HTTP date (e.g. ``Tue, 27 Mar 2007 19:36:42 GMT``).
    """
    when = when or current_time()
    return email.utils.format_datetime(when.astimezone(datetime.timezone.utc), usegmt=True)


def buffers_to_str(
    buffers: Iterable[bytes | str],
    encoding: str = 'utf-8',
    errors: str = 'replace',
) -> str:
    """
    Decodes a sequence of byte/str chunks and joins them into a single string.

    Chunks are joined before decoding so that multi-byte characters split across chunk
    boundaries decode correctly.
    """
    raw = bytearray()
    for buf in buffers:
        if isinstance(buf, str):
            raw += buf.encode(encoding)
        else:
            raw += buf
    return raw.decode(encoding, errors=errors)


def storage_convert(b: int) -> str:
    """
    Helper function for converting bytes into string format
    Args:
        b: byte value to convert

    Return:
        string format for bytes
    """
    if b < 0:
        raise ValueError('Byte value cannot be negative')
    if b == 0:
        return '0 B'

    sizes = ['B', 'KiB', 'MiB', 'GiB', 'TiB']
    if b > 1023:
        exponent = min(math.floor(math.log(b, 1024)), len(sizes) - 1)
        size = f'{b / math.pow(1024, exponent):.1f} {sizes[exponent]}'
    else:
        size = f'{b} B'
    return size


def stratus_table(header: List[str], fit_width=False) -> texttable.Texttable:
    """
    returns texttable object with common format for all CLI's

    Args:
        header: for the table header and column

    Returns:
        texttable: Return a textable object with common formatting
    """
    table = texttable.Texttable(max_width=0)
    table.set_deco(texttable.Texttable.HEADER)
    table.set_chars(['', '', '', '='])
    table.header(header)
    table.set_header_align(['l' for _ in header])
    if fit_width:
        try:
            table.set_max_width(os.get_terminal_size().columns)
        except OSError:
            pass
    return table
