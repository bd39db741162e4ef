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
Entry point of the stratus CLI.
"""

import argparse
import logging
import os
import sys
from typing import List

import pydantic
import requests

from stratus.cli import main_parser
from stratus.lib.storage import config as storage_config
from stratus.lib.utils import logging as logging_utils, stratus_errors


logger = logging.getLogger(__name__)


def configure_logging(
    log_level: logging_utils.LoggingLevel = logging_utils.LoggingLevel.WARNING,
    log_dir: str | None = None,
):
    """
    Configure the logging for the CLI. Stratus logs are written to the console at the user
    specified level, other libraries only log errors. With a log directory, every record at
    the user specified level is also written to a timestamped file there.
    """
    class ConsoleLoggerFilter(logging.Filter):
        def filter(self, record) -> bool:
            if record.name.startswith('stratus.'):
                return record.levelno >= log_level.value
            return record.levelno >= logging.ERROR

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level.name)
    console_handler.setFormatter(logging.Formatter('%(message)s'))
    console_handler.addFilter(ConsoleLoggerFilter())

    logging_utils.init_logger(
        'stratus',
        logging_utils.LoggingConfig(log_level=log_level, log_dir=log_dir),
        default_handler=console_handler)


def load_configuration(args: argparse.Namespace) -> storage_config.Configuration:
    """
    Loads the configuration from the --config file, the user config file or the
    environment, in that order.
    """
    if args.config:
        return storage_config.Configuration.from_file(args.config)
    default_file = storage_config.get_default_config_file()
    if os.path.isfile(default_file):
        logger.debug('Using configuration file %s', default_file)
        return storage_config.Configuration.from_file(default_file)
    return storage_config.Configuration.from_env()


def main(argv: List[str] | None = None):
    parser = main_parser.create_cli_parser()

    try:
        args = parser.parse_args(argv)
    except argparse.ArgumentError as e:
        print(f'An error occurred while parsing the arguments: {e}')
        sys.exit(1)

    configure_logging(args.log_level, args.log_dir)
    logger.debug('Running stratus CLI command: %s',
                 ' '.join(sys.argv[1:] if argv is None else argv))

    if not hasattr(args, 'func'):
        parser.print_help()
        sys.exit(0)

    exit_code = 0
    try:
        connection = load_configuration(args).connection()
        args.func(connection, args)
    except stratus_errors.StratusError as e:
        logger.error('Error: %s', e.message or type(e).__name__)
        if e.status_code:
            logger.error('Status code: %s', e.status_code)
        exit_code = 1
    except pydantic.ValidationError as e:
        logger.error('Invalid configuration: %s', e)
        exit_code = 1
    except requests.RequestException as e:
        logger.error('Cannot connect to the storage service, with error: %s', e)
        exit_code = 1
    except OSError as e:
        logger.error('Local file error: %s', e)
        exit_code = 1
    except KeyboardInterrupt:
        exit_code = 3
    sys.exit(exit_code)


if __name__ == '__main__':
    main()
