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
CLI commands for blobs.
"""

import argparse
import json
import mimetypes

from stratus.lib.storage import Connection, execute
from stratus.lib.utils import common


def setup_parser(parser: argparse._SubParsersAction):
    """
    Configures parser to manage blobs.

    Args:
        parser: The parser to be configured.
    """
    blob_parser = parser.add_parser('blob',
        help='Command to manage blobs (objects) of a container.')
    subparsers = blob_parser.add_subparsers(dest='command')
    subparsers.required = True

    list_parser = subparsers.add_parser('list',
                                        help='List the blobs of a container',
                                        epilog='Ex. stratus blob list my-bucket --prefix logs/')
    list_parser.add_argument('container', help='Name of the container.')
    list_parser.add_argument('--prefix', '-p', default=None,
                             help='Only list blobs starting with the prefix.')
    list_parser.add_argument('--delimiter', '-d', default=None,
                             help='Group blob names sharing a prefix up to the delimiter.')
    list_parser.add_argument('--marker', '-m', default=None,
                             help='List blobs after this blob name.')
    list_parser.add_argument('--max-results', type=int, default=1000,
                             help='Maximum number of blobs to list (Default 1000).')
    list_parser.add_argument('--format-type', '-t',
                             dest='format_type',
                             choices=('json', 'text'), default='text',
                             help='Specify the output format type (Default text).')
    list_parser.set_defaults(func=_list_blobs)

    download_parser = subparsers.add_parser('download',
                                            help='Download a blob to a local file',
                                            epilog='Ex. stratus blob download my-bucket '
                                                   'data.txt ./data.txt')
    download_parser.add_argument('container', help='Name of the container.')
    download_parser.add_argument('name', help='Name of the blob.')
    download_parser.add_argument('file', help='Local file to write.')
    download_parser.set_defaults(func=_download_blob)

    upload_parser = subparsers.add_parser('upload',
                                          help='Upload a local file to a blob',
                                          epilog='Ex. stratus blob upload my-bucket '
                                                 'data.txt ./data.txt')
    upload_parser.add_argument('container', help='Name of the container.')
    upload_parser.add_argument('name', help='Name of the blob.')
    upload_parser.add_argument('file', help='Local file to read.')
    upload_parser.add_argument('--content-type', default=None,
                               help='Content type of the blob. Guessed from the file name '
                                    'by default.')
    upload_parser.set_defaults(func=_upload_blob)

    delete_parser = subparsers.add_parser('delete',
                                          help='Delete a blob',
                                          epilog='Ex. stratus blob delete my-bucket data.txt')
    delete_parser.add_argument('container', help='Name of the container.')
    delete_parser.add_argument('name', help='Name of the blob.')
    delete_parser.set_defaults(func=_delete_blob)


def _list_blobs(connection: Connection, args: argparse.Namespace):
    """
    List the blobs of a container
    Args:
        args: Parsed command line arguments.
    """
    result = execute(connection.container(args.container).get_blobs(
        prefix=args.prefix,
        delimiter=args.delimiter,
        marker=args.marker,
        max_results=args.max_results))
    if args.format_type == 'json':
        output = {
            'blobs': [
                {
                    'name': item.name,
                    'size': item.size,
                    'last_modified': item.last_modified,
                    'etag': item.etag,
                }
                for item in result.blobs
            ],
            'dir_names': result.dir_names,
            'has_next': result.has_next,
        }
        print(json.dumps(output, indent=common.JSON_INDENT_SIZE))
    else:
        table = common.stratus_table(header=['Name', 'Size', 'Last Modified'])
        for dir_name in result.dir_names:
            table.add_row([dir_name, '-', '-'])
        for item in result.blobs:
            size = common.storage_convert(item.size) if item.size is not None else '-'
            table.add_row([item.name, size, item.last_modified or '-'])
        print(f'{table.draw()}\n')
        if result.has_next:
            print('More blobs are available, use --marker with the last name to continue')


def _download_blob(connection: Connection, args: argparse.Namespace):
    blob = connection.container(args.container).blob(args.name)
    execute(blob.get_to_file(args.file))
    print(f'Downloaded {args.container}/{args.name} to {args.file}')


def _upload_blob(connection: Connection, args: argparse.Namespace):
    content_type = args.content_type or mimetypes.guess_type(args.file)[0]
    headers = {'content-type': content_type} if content_type else None
    blob = connection.container(args.container).blob(args.name)
    execute(blob.put_from_file(args.file, headers=headers))
    print(f'Uploaded {args.file} to {args.container}/{args.name}')


def _delete_blob(connection: Connection, args: argparse.Namespace):
    result = execute(connection.container(args.container).del_blob(args.name))
    if result.not_found:
        print(f'Blob {args.container}/{args.name} not found')
    else:
        print(f'Deleted {args.container}/{args.name}')
