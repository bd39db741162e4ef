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
CLI commands for containers.
"""

import argparse
import json

from stratus.lib.storage import Connection, execute
from stratus.lib.utils import common


def setup_parser(parser: argparse._SubParsersAction):
    """
    Configures parser to manage containers.

    Args:
        parser: The parser to be configured.
    """
    container_parser = parser.add_parser('container',
        help='Command to manage containers (buckets).')
    subparsers = container_parser.add_subparsers(dest='command')
    subparsers.required = True

    list_parser = subparsers.add_parser('list',
                                        help='List the containers of the account',
                                        epilog='Ex. stratus container list')
    list_parser.add_argument('--format-type', '-t',
                             dest='format_type',
                             choices=('json', 'text'), default='text',
                             help='Specify the output format type (Default text).')
    list_parser.set_defaults(func=_list_containers)

    create_parser = subparsers.add_parser('create',
                                          help='Create a container',
                                          epilog='Ex. stratus container create my-bucket')
    create_parser.add_argument('name', help='Name of the container.')
    create_parser.set_defaults(func=_create_container)

    delete_parser = subparsers.add_parser('delete',
                                          help='Delete an empty container',
                                          epilog='Ex. stratus container delete my-bucket')
    delete_parser.add_argument('name', help='Name of the container.')
    delete_parser.set_defaults(func=_delete_container)


def _list_containers(connection: Connection, args: argparse.Namespace):
    """
    List the containers of the account
    Args:
        args: Parsed command line arguments.
    """
    result = execute(connection.get_containers())
    containers = sorted(result.containers, key=lambda item: item.name)
    if args.format_type == 'json':
        output = {'containers': [
            {'name': item.name, 'created': item.created} for item in containers
        ]}
        print(json.dumps(output, indent=common.JSON_INDENT_SIZE))
    else:
        table = common.stratus_table(header=['Container', 'Created'])
        for item in containers:
            table.add_row([item.name, item.created or '-'])
        print(f'{table.draw()}\n')


def _create_container(connection: Connection, args: argparse.Namespace):
    result = execute(connection.put_container(args.name))
    if result.already_created:
        print(f'Container {args.name} already exists')
    else:
        print(f'Created container {args.name}')


def _delete_container(connection: Connection, args: argparse.Namespace):
    result = execute(connection.del_container(args.name))
    if result.not_found:
        print(f'Container {args.name} not found')
    else:
        print(f'Deleted container {args.name}')
