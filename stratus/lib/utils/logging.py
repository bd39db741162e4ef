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
Logging utilities.
"""

import datetime
import enum
import logging
import os
from typing import List, Optional
from typing_extensions import Self, assert_never

import pydantic


class LoggingLevel(enum.IntEnum):
    """
    Logging level enum.
    """
    CRITICAL = logging.CRITICAL
    ERROR = logging.ERROR
    WARNING = logging.WARNING
    INFO = logging.INFO
    DEBUG = logging.DEBUG

    # Aliases
    FATAL = CRITICAL
    WARN = WARNING

    @classmethod
    def parse(cls, value: str | int) -> Self:
        match value:
            case str() as s:
                if s.isdigit():
                    return cls(int(s))
                else:
                    try:
                        return cls.__members__[s.strip().upper()]
                    except KeyError as error:
                        valid_levels = ', '.join(cls.__members__.keys())
                        raise ValueError(
                            f'Invalid logging level: "{s}". Valid levels are: {valid_levels}',
                        ) from error
            case int():
                return cls(value)
            case _ as unreachable:
                assert_never(unreachable)


class LoggingConfig(pydantic.BaseModel):
    """Manages the logging configuration"""
    log_level: LoggingLevel = pydantic.Field(
        default=LoggingLevel.INFO,
        description='The level of logging errors messages to record.')
    log_dir: Optional[str] = pydantic.Field(
        default=None,
        description='The directory to write logs to.')
    log_name: str = pydantic.Field(
        default='',
        description='The name of the log file.')
    transport_log_level: LoggingLevel = pydantic.Field(
        default=LoggingLevel.WARNING,
        description='The level of HTTP transport (urllib3) messages to record.')

    @pydantic.field_validator('log_level', 'transport_log_level', mode='before')
    @classmethod
    def _parse_logging_levels(cls, v) -> LoggingLevel:
        return LoggingLevel.parse(v)


class ServiceFormatter(logging.Formatter):
    """
    Formats log records. Time is formatted in ISO 8601 format including milliseconds.
    """

    def formatTime(self, record, datefmt=None):
        # pylint: disable=unused-argument
        # pylint: disable=invalid-name
        """
        Format the time of the record in ISO 8601 format including milliseconds.
        """
        return datetime.datetime.fromtimestamp(record.created).astimezone().isoformat(
            timespec='milliseconds')


def init_logger(
    name: str,
    config: LoggingConfig,
    default_handler: logging.Handler | None = None,
    extra_handlers: Optional[List] = None,
):
    handlers: List[logging.Handler] = [default_handler or logging.StreamHandler()]
    if config.log_dir is not None:
        os.makedirs(config.log_dir, exist_ok=True)

        # Add a timestamp to the filename to make it easier to associate the log file with
        # the invocation.
        now = datetime.datetime.now()
        timestamp = now.isoformat(sep='_', timespec='seconds').replace(':', '-')
        log_name = config.log_name if config.log_name else name
        # FileHandler is thread-safe but not process-safe.
        pid = os.getpid()
        file_path = os.path.join(config.log_dir, f'{timestamp}_{pid}_{log_name}.txt')

        handlers.append(logging.FileHandler(file_path, encoding='utf-8'))
    if extra_handlers:
        handlers += extra_handlers

    formatter = ServiceFormatter(f'%(asctime)s {name} [%(levelname)s] %(module)s: %(message)s')
    for handler in handlers:
        # Handlers configured by the caller keep their own format
        if handler.formatter is None:
            handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(config.log_level.name)
    for handler in handlers:
        root_logger.addHandler(handler)

    # Connection pool chatter is only useful when debugging the transport itself
    logging.getLogger('urllib3').setLevel(config.transport_log_level.name)
