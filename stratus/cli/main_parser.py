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
Main parser for the CLI.
"""

import argparse

from stratus.cli import blob, container
from stratus.lib.utils import logging as logging_utils


PARSERS = (
    container.setup_parser,
    blob.setup_parser,
)


def create_cli_parser() -> argparse.ArgumentParser:
    """
    Create the CLI argument parser for the stratus client.
    """
    parser = argparse.ArgumentParser(
        prog='stratus',
        description='Stratus manages containers and blobs of S3-compatible object storage '
                    'services (Amazon S3 and Google Cloud Storage).',
    )
    parser.add_argument('--log-level',
                        type=logging_utils.LoggingLevel.parse,
                        default=logging_utils.LoggingLevel.WARNING)
    parser.add_argument('--log-dir',
                        default=None,
                        help='Directory to also write the logs to, one file per invocation.')
    parser.add_argument('--config', '-c',
                        dest='config',
                        default=None,
                        help='YAML configuration file. Defaults to the user config file if it '
                             'exists, otherwise the STRATUS_* environment variables.')

    subparsers = parser.add_subparsers(dest='module')
    for setup in PARSERS:
        setup(subparsers)

    return parser
