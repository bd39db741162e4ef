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
Unit tests for the stratus CLI.
"""

import contextlib
import io
import json
import logging
import os
import tempfile
import unittest
from unittest import mock

from stratus.cli import cli, main_parser
from stratus.lib.storage import connection as connection_module
from stratus.lib.storage.core.tests import fake_transport
from stratus.lib.utils import logging as logging_utils, stratus_errors


LIST_ALL_MY_BUCKETS_RESULT = (
    b'<ListAllMyBucketsResult><Buckets>'
    b'<Bucket><Name>zeta</Name><CreationDate>2024-02-01T00:00:00.000Z</CreationDate></Bucket>'
    b'<Bucket><Name>alpha</Name><CreationDate>2024-01-01T00:00:00.000Z</CreationDate></Bucket>'
    b'</Buckets></ListAllMyBucketsResult>'
)


LIST_BUCKET_RESULT = (
    b'<ListBucketResult><IsTruncated>true</IsTruncated>'
    b'<Contents><Key>a.txt</Key><Size>2048</Size></Contents>'
    b'<CommonPrefixes><Prefix>logs/</Prefix></CommonPrefixes>'
    b'</ListBucketResult>'
)


class TestParser(unittest.TestCase):
    """
    Tests the CLI argument parser.
    """

    def setUp(self):
        self.parser = main_parser.create_cli_parser()

    def test_defaults(self):
        args = self.parser.parse_args(['container', 'list'])
        self.assertEqual(args.log_level, logging_utils.LoggingLevel.WARNING)
        self.assertIsNone(args.config)
        self.assertEqual(args.format_type, 'text')
        self.assertIsNone(args.log_dir)

    def test_blob_list(self):
        args = self.parser.parse_args([
            '--log-level', 'debug', '-c', 'config.yaml',
            'blob', 'list', 'bucket', '-p', 'logs/', '-d', '/', '--max-results', '10', '-t',
            'json'])
        self.assertEqual(args.log_level, logging_utils.LoggingLevel.DEBUG)
        self.assertEqual(args.config, 'config.yaml')
        self.assertEqual(args.container, 'bucket')
        self.assertEqual(args.prefix, 'logs/')
        self.assertEqual(args.delimiter, '/')
        self.assertEqual(args.max_results, 10)
        self.assertEqual(args.format_type, 'json')

    def test_log_dir(self):
        args = self.parser.parse_args(['--log-dir', '/tmp/stratus', 'container', 'list'])
        self.assertEqual(args.log_dir, '/tmp/stratus')

    def test_missing_command(self):
        with contextlib.redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit):
                self.parser.parse_args(['blob'])


class TestCommands(unittest.TestCase):
    """
    Tests the command handlers against a scripted transport.
    """

    def _run(self, argv, **kwargs):
        transport = fake_transport.FakeTransport(**kwargs)
        connection = connection_module.Connection(fake_transport.make_context(), transport)
        args = main_parser.create_cli_parser().parse_args(argv)
        output = io.StringIO()
        with contextlib.redirect_stdout(output):
            args.func(connection, args)
        return output.getvalue(), transport

    def test_list_containers_json(self):
        output, _ = self._run(
            ['container', 'list', '-t', 'json'], chunks=[LIST_ALL_MY_BUCKETS_RESULT])
        self.assertEqual(
            [item['name'] for item in json.loads(output)['containers']], ['alpha', 'zeta'])

    def test_list_containers_text(self):
        output, _ = self._run(['container', 'list'], chunks=[LIST_ALL_MY_BUCKETS_RESULT])
        self.assertLess(output.index('alpha'), output.index('zeta'))

    def test_create_container(self):
        output, transport = self._run(
            ['container', 'create', 'bucket'], headers={'Content-Length': '0'})
        self.assertIn('Created container bucket', output)
        self.assertEqual(transport.sent[0].method, 'PUT')

    def test_delete_missing_container(self):
        output, _ = self._run(
            ['container', 'delete', 'bucket'],
            status_code=404, reason='Not Found',
            chunks=[fake_transport.error_body('NoSuchBucket')])
        self.assertIn('Container bucket not found', output)

    def test_list_blobs(self):
        output, transport = self._run(
            ['blob', 'list', 'bucket', '-t', 'json'], chunks=[LIST_BUCKET_RESULT])
        result = json.loads(output)
        self.assertEqual(result['blobs'][0]['name'], 'a.txt')
        self.assertEqual(result['blobs'][0]['size'], 2048)
        self.assertEqual(result['dir_names'], ['logs/'])
        self.assertTrue(result['has_next'])
        self.assertEqual(transport.sent[0].headers['host'], 'bucket.s3.amazonaws.com')

    def test_list_blobs_text(self):
        output, _ = self._run(['blob', 'list', 'bucket'], chunks=[LIST_BUCKET_RESULT])
        self.assertIn('2.0 KiB', output)
        self.assertIn('logs/', output)
        self.assertIn('--marker', output)

    def test_download_and_upload(self):
        with tempfile.TemporaryDirectory() as tmp_dir:
            path = os.path.join(tmp_dir, 'data.txt')
            output, _ = self._run(
                ['blob', 'download', 'bucket', 'data.txt', path], chunks=[b'contents'])
            self.assertIn('Downloaded bucket/data.txt', output)
            with open(path, 'rb') as file:
                self.assertEqual(file.read(), b'contents')

            output, transport = self._run(
                ['blob', 'upload', 'bucket', 'copy.txt', path],
                headers={'Content-Length': '0'})
            self.assertIn('Uploaded', output)
            sent = transport.sent[0]
            self.assertEqual(sent.path, '/copy.txt')
            self.assertEqual(sent.body, b'contents')
            self.assertEqual(sent.headers['content-type'], 'text/plain')

    def test_delete_blob(self):
        output, _ = self._run(
            ['blob', 'delete', 'bucket', 'a.txt'], status_code=204, reason='No Content')
        self.assertIn('Deleted bucket/a.txt', output)


class TestConfigureLogging(unittest.TestCase):
    """
    Tests the CLI logging setup.
    """

    def setUp(self):
        root_logger = logging.getLogger()
        urllib3_logger = logging.getLogger('urllib3')
        saved = (root_logger.level, list(root_logger.handlers), urllib3_logger.level)

        def _restore():
            for handler in root_logger.handlers:
                if handler not in saved[1]:
                    handler.close()
            root_logger.setLevel(saved[0])
            root_logger.handlers[:] = saved[1]
            urllib3_logger.setLevel(saved[2])

        self.addCleanup(_restore)
        self._saved_handlers = saved[1]

    def _new_handlers(self):
        return [handler for handler in logging.getLogger().handlers
                if handler not in self._saved_handlers]

    def test_console_only(self):
        cli.configure_logging(logging_utils.LoggingLevel.INFO)
        handlers = self._new_handlers()
        self.assertEqual(len(handlers), 1)
        self.assertNotIsInstance(handlers[0].formatter, logging_utils.ServiceFormatter)
        self.assertEqual(logging.getLogger().level, logging.INFO)
        self.assertEqual(logging.getLogger('urllib3').level, logging.WARNING)

    def test_log_dir(self):
        with tempfile.TemporaryDirectory() as tmp_dir:
            log_dir = os.path.join(tmp_dir, 'logs')
            cli.configure_logging(logging_utils.LoggingLevel.DEBUG, log_dir)
            logging.getLogger('stratus.cli.cli').debug('written to file')

            handlers = self._new_handlers()
            self.assertEqual(len(handlers), 2)
            file_handler = handlers[1]
            self.assertIsInstance(file_handler, logging.FileHandler)
            self.assertIsInstance(file_handler.formatter, logging_utils.ServiceFormatter)
            file_handler.close()

            log_files = os.listdir(log_dir)
            self.assertEqual(len(log_files), 1)
            self.assertTrue(log_files[0].endswith('_stratus.txt'))
            with open(os.path.join(log_dir, log_files[0]), encoding='utf-8') as file:
                self.assertIn('written to file', file.read())

    def test_console_filter(self):
        """
        Test that only stratus records pass the console below the error level.
        """
        cli.configure_logging(logging_utils.LoggingLevel.DEBUG)
        console_handler = self._new_handlers()[0]
        stratus_record = logging.LogRecord(
            'stratus.cli.cli', logging.DEBUG, __file__, 0, 'message', None, None)
        other_record = logging.LogRecord(
            'urllib3.connectionpool', logging.WARNING, __file__, 0, 'message', None, None)
        self.assertTrue(console_handler.filter(stratus_record))
        self.assertFalse(console_handler.filter(other_record))


class TestMain(unittest.TestCase):
    """
    Tests the CLI exit codes.
    """

    def setUp(self):
        patcher = mock.patch.object(cli, 'configure_logging')
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_no_command(self):
        with contextlib.redirect_stdout(io.StringIO()):
            with self.assertRaises(SystemExit) as context:
                cli.main([])
        self.assertEqual(context.exception.code, 0)

    def test_success(self):
        transport = fake_transport.FakeTransport(status_code=204, reason='No Content')
        connection = connection_module.Connection(fake_transport.make_context(), transport)
        configuration = mock.Mock()
        configuration.connection.return_value = connection
        with mock.patch.object(cli, 'load_configuration', return_value=configuration):
            with contextlib.redirect_stdout(io.StringIO()):
                with self.assertRaises(SystemExit) as context:
                    cli.main(['blob', 'delete', 'bucket', 'a.txt'])
        self.assertEqual(context.exception.code, 0)

    def test_cloud_error(self):
        transport = fake_transport.FakeTransport(
            status_code=409, reason='Conflict',
            chunks=[fake_transport.error_body('BucketNotEmpty')])
        connection = connection_module.Connection(fake_transport.make_context(), transport)
        configuration = mock.Mock()
        configuration.connection.return_value = connection
        with mock.patch.object(cli, 'load_configuration', return_value=configuration):
            with self.assertLogs('stratus.cli.cli', level='ERROR') as logs:
                with self.assertRaises(SystemExit) as context:
                    cli.main(['container', 'delete', 'bucket'])
        self.assertEqual(context.exception.code, 1)
        self.assertIn('Container not empty.', logs.output[0])

    def test_configuration_error(self):
        with mock.patch.object(
                cli, 'load_configuration',
                side_effect=stratus_errors.StratusUserError('Unknown provider')):
            with self.assertLogs('stratus.cli.cli', level='ERROR'):
                with self.assertRaises(SystemExit) as context:
                    cli.main(['container', 'list'])
        self.assertEqual(context.exception.code, 1)

    def test_load_configuration_from_env(self):
        environ = {
            'STRATUS_CONFIG_DIR': '/nonexistent/stratus',
            'STRATUS_PROVIDER': 'google',
            'STRATUS_ACCOUNT': 'a',
            'STRATUS_SECRET_KEY': 'b',
        }
        args = main_parser.create_cli_parser().parse_args(['container', 'list'])
        with mock.patch.dict(os.environ, environ, clear=True):
            self.assertTrue(cli.load_configuration(args).is_google())


if __name__ == '__main__':
    unittest.main()
