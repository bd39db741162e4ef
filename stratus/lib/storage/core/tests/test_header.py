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
Unit tests for the header module.
"""

import unittest

from stratus.lib.storage.core import header, provider


class TestHeader(unittest.TestCase):
    """
    Tests header assembly and splitting.
    """

    def test_assemble_order(self):
        """
        Test that raw headers override cloud headers, which override metadata.
        """
        headers = header.assemble_headers(
            provider.AWS,
            headers={'X-Amz-Meta-Color': 'raw', 'Content-Type': 'text/plain'},
            cloud_headers={'meta-color': 'cloud', 'ACL': 'private'},
            metadata={'Color': 'meta', 'size': 3},
        )
        self.assertEqual(headers, {
            'x-amz-meta-color': 'raw',
            'x-amz-meta-size': '3',
            'x-amz-acl': 'private',
            'content-type': 'text/plain',
        })

    def test_assemble_google_prefixes(self):
        headers = header.assemble_headers(
            provider.GOOGLE, cloud_headers={'acl': 'private'}, metadata={'a': 'b'})
        self.assertEqual(headers, {'x-goog-acl': 'private', 'x-goog-meta-a': 'b'})

    def test_split_headers(self):
        meta = header.split_headers(provider.AWS, {
            'Content-Length': '10',
            'x-amz-meta-color': 'blue',
            'x-amz-request-id': '1234',
            'ETag': '"abc"',
        })
        self.assertEqual(meta.metadata, {'color': 'blue'})
        self.assertEqual(meta.cloud_headers, {'request-id': '1234'})
        self.assertEqual(meta.headers, {'content-length': '10', 'etag': '"abc"'})

    def test_split_headers_empty(self):
        meta = header.split_headers(provider.AWS, None)
        self.assertEqual(meta, header.ResponseMeta())

    def test_merge_params(self):
        self.assertEqual(header.merge_params('/', {'max-keys': 0}), '/?max-keys=0')
        self.assertEqual(header.merge_params('/a', None), '/a')
        self.assertEqual(
            header.merge_params('/?prefix=a', {'prefix': 'b/c', 'marker': None}),
            '/?prefix=b%2Fc',
        )
        self.assertEqual(
            header.merge_params('/?acl=', {'max-keys': 10}),
            '/?acl=&max-keys=10',
        )


if __name__ == '__main__':
    unittest.main()
