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
Unit tests for error translation.
"""

import unittest

from stratus.lib.storage.core import errors, provider, transport
from stratus.lib.storage.core.tests import fake_transport
from stratus.lib.utils import stratus_errors


def _response(status_code: int, reason: str = '') -> transport.ResponseHead:
    return transport.ResponseHead.create(status_code, reason)


def _error(code: str | None, status_code: int, reason: str = '') -> errors.CloudError:
    body = fake_transport.error_body(code).decode('utf-8') if code else ''
    return errors.CloudError(body, response=_response(status_code, reason))


class TestErrorTranslator(unittest.TestCase):
    """
    Tests the provider error tables.
    """

    def setUp(self):
        self.aws = provider.AWS.translator()
        self.google = provider.GOOGLE.translator()

    def _translate(self, translator, code, status_code, method='GET', reason=''):
        error = _error(code, status_code, reason)
        return translator.translate(error, method, error.response)

    def test_no_such_key(self):
        translated = self._translate(self.aws, 'NoSuchKey', 404)
        self.assertIsNotNone(translated)
        self.assertTrue(translated.is_not_found())
        self.assertFalse(translated.is_invalid_name())
        self.assertEqual(translated.message, provider.BLOB_NOT_FOUND_MESSAGE)
        self.assertEqual(translated.status_code, 404)

    def test_invalid_bucket_name_on_get(self):
        """
        Test that the GET override of an invalid container name is both not found and
        invalid name.
        """
        translated = self._translate(self.aws, 'InvalidBucketName', 400, method='GET')
        self.assertTrue(translated.is_not_found())
        self.assertTrue(translated.is_invalid_name())

    def test_invalid_bucket_name_on_put(self):
        translated = self._translate(self.aws, 'InvalidBucketName', 400, method='PUT')
        self.assertFalse(translated.is_not_found())
        self.assertTrue(translated.is_invalid_name())

    def test_no_such_bucket(self):
        translated = self._translate(self.aws, 'NoSuchBucket', 404)
        self.assertTrue(translated.is_not_found())
        self.assertEqual(translated.message, provider.CONTAINER_NOT_FOUND_MESSAGE)

    def test_not_empty(self):
        translated = self._translate(self.aws, 'BucketNotEmpty', 409, method='DELETE')
        self.assertTrue(translated.is_not_empty())
        self.assertEqual(translated.kinds, frozenset({errors.ErrorKind.NOT_EMPTY}))

    def test_reason_phrase_without_body(self):
        """
        Test that a response without an error body (e.g. HEAD) matches on the reason phrase.
        """
        translated = self._translate(self.aws, None, 404, method='HEAD', reason='Not Found')
        self.assertTrue(translated.is_not_found())
        self.assertEqual(translated.message, provider.NOT_FOUND_MESSAGE)

    def test_reason_phrase_message_is_neutral(self):
        """
        Test that a bodiless 404 does not claim a missing container when a blob is missing.
        """
        for translator in (self.aws, self.google):
            translated = self._translate(translator, None, 404, method='HEAD', reason='Not Found')
            self.assertNotEqual(translated.message, provider.CONTAINER_NOT_FOUND_MESSAGE)
            self.assertEqual(translated.message, provider.NOT_FOUND_MESSAGE)

    def test_status_mismatch(self):
        self.assertIsNone(self._translate(self.aws, 'NoSuchKey', 400))

    def test_unmatched_code(self):
        self.assertIsNone(self._translate(self.aws, 'AccessDenied', 403))
        self.assertIsNone(self._translate(self.aws, None, 500, reason='Internal Server Error'))

    def test_no_response(self):
        self.assertIsNone(self.aws.translate(errors.CloudError('boom'), 'GET', None))

    def test_other_owner(self):
        self.assertTrue(self._translate(self.aws, 'BucketAlreadyExists', 409).is_not_owner())
        self.assertIsNone(self._translate(self.aws, 'BucketNameUnavailable', 409))
        self.assertTrue(
            self._translate(self.google, 'BucketNameUnavailable', 409).is_not_owner())

    def test_already_owned_by_you(self):
        translated = self._translate(self.google, 'BucketAlreadyOwnedByYou', 409, method='PUT')
        self.assertTrue(translated.is_already_owned_by_you())
        self.assertFalse(translated.is_not_owner())
        self.assertIsNone(self._translate(self.aws, 'BucketAlreadyOwnedByYou', 409))

    def test_rule_order(self):
        self.assertEqual(
            [rule.name for rule in provider.AWS.error_rules],
            [
                'CONTAINER_NOT_FOUND',
                'CONTAINER_NOT_EMPTY',
                'CONTAINER_INVALID_NAME',
                'CONTAINER_OTHER_OWNER',
                'BLOB_NOT_FOUND',
            ],
        )
        self.assertEqual(
            [rule.name for rule in provider.GOOGLE.error_rules],
            [
                'CONTAINER_NOT_FOUND',
                'CONTAINER_NOT_EMPTY',
                'CONTAINER_INVALID_NAME',
                'CONTAINER_OTHER_OWNER',
                'CONTAINER_ALREADY_OWNED_BY_YOU',
                'BLOB_NOT_FOUND',
            ],
        )

    def test_first_match_wins(self):
        """
        Test that an earlier rule shadows a later one with the same signature.
        """
        translator = errors.ErrorTranslator([
            errors.error_rule('GENERAL', 404, 'NoSuchKey', 'general', errors.ErrorKind.NOT_FOUND),
            errors.error_rule('SPECIFIC', 404, 'NoSuchKey', 'specific',
                              errors.ErrorKind.INVALID_NAME),
        ])
        error = _error('NoSuchKey', 404)
        translated = translator.translate(error, 'GET', error.response)
        self.assertEqual(translated.message, 'general')

    def test_translated_error_keeps_cause(self):
        error = _error('NoSuchKey', 404)
        translated = self.aws.translate(error, 'GET', error.response)
        self.assertIs(translated.error, error)
        self.assertIs(translated.response, error.response)


class TestCloudError(unittest.TestCase):
    """
    Tests the cloud error predicates.
    """

    def test_kinds(self):
        error = errors.CloudError(
            'message', kinds=[errors.ErrorKind.NOT_FOUND, 'INVALID_NAME'])
        self.assertTrue(error.is_not_found())
        self.assertTrue(error.is_invalid_name())
        self.assertFalse(error.is_not_empty())
        self.assertFalse(error.is_not_owner())
        self.assertFalse(error.is_already_owned_by_you())

    def test_no_kinds(self):
        error = errors.CloudError('message')
        self.assertEqual(error.kinds, frozenset())
        self.assertIsNone(error.status_code)
        self.assertIsInstance(error, stratus_errors.StratusDataStorageError)

    def test_status_code_from_response(self):
        error = errors.CloudError('message', response=_response(503, 'Slow Down'))
        self.assertEqual(error.status_code, 503)

    def test_message_from_error(self):
        error = errors.CloudError(error=ValueError('bad'))
        self.assertEqual(error.message, 'bad')

    def test_unknown_kind(self):
        with self.assertRaises(stratus_errors.StratusUsageError):
            errors.CloudError('message', kinds=['NOT_A_KIND'])


if __name__ == '__main__':
    unittest.main()
