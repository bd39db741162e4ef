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
Cloud errors and provider error translation.

A :py:class:`CloudError` is raised (or emitted) only for a failed cloud operation, so that
calling code can make intelligent retry / failure handling decisions. Programming errors
(missing parameters, invalid input) are reported with
:py:class:`~stratus.lib.utils.stratus_errors.StratusUsageError` instead.
"""

import dataclasses
import enum
import logging
from typing import TYPE_CHECKING, Any, FrozenSet, Iterable, Mapping, Sequence

from . import xml_parser
from ...utils import stratus_errors

if TYPE_CHECKING:
    from .transport import ResponseHead


logger = logging.getLogger(__name__)


class ErrorKind(enum.Enum):
    """
    Named classification of a cloud error. A single error may carry several kinds.
    """
    NOT_FOUND = 'NOT_FOUND'
    NOT_EMPTY = 'NOT_EMPTY'
    INVALID_NAME = 'INVALID_NAME'
    NOT_OWNER = 'NOT_OWNER'
    ALREADY_OWNED_BY_YOU = 'ALREADY_OWNED_BY_YOU'


def _to_kinds(kinds: ErrorKind | str | Iterable[ErrorKind | str] | None) -> FrozenSet[ErrorKind]:
    if kinds is None:
        return frozenset()
    if isinstance(kinds, (ErrorKind, str)):
        kinds = [kinds]
    try:
        return frozenset(ErrorKind(kind) for kind in kinds)
    except ValueError as error:
        raise stratus_errors.StratusUsageError(f'Unknown error kind: {error}') from error


class CloudError(stratus_errors.StratusDataStorageError):
    """
    A failed cloud operation.

    :ivar str message: Error message (the response body for untranslated errors).
    :ivar int | None status_code: HTTP status code of the offending response, if any.
    :ivar FrozenSet[ErrorKind] kinds: Error classifications that apply to this error.
    :ivar Exception | None error: The underlying error that was translated, if any.
    :ivar ResponseHead | None response: The offending response, if any.
    """

    kinds: FrozenSet[ErrorKind]
    error: Exception | None
    response: 'ResponseHead | None'

    def __init__(
        self,
        message: str | None = None,
        *,
        error: Exception | None = None,
        kinds: ErrorKind | str | Iterable[ErrorKind | str] | None = None,
        response: 'ResponseHead | None' = None,
    ):
        if not message and error is not None:
            message = getattr(error, 'message', None) or str(error)
        super().__init__(
            message or '',
            status_code=response.status_code if response is not None else None,
        )
        self.kinds = _to_kinds(kinds)
        self.error = error
        self.response = response
        if error is not None:
            self.__cause__ = error

    def __repr__(self) -> str:
        kinds = ','.join(sorted(kind.value for kind in self.kinds))
        return (f'CloudError(status_code={self.status_code}, kinds=[{kinds}], '
                f'message={self.message!r})')

    def is_kind(self, kind: ErrorKind | str) -> bool:
        """ Returns True if the error carries the given kind. """
        try:
            return ErrorKind(kind) in self.kinds
        except ValueError as error:
            raise stratus_errors.StratusUsageError(f'Unknown error kind: {kind}') from error

    def is_not_found(self) -> bool:
        return self.is_kind(ErrorKind.NOT_FOUND)

    def is_not_empty(self) -> bool:
        return self.is_kind(ErrorKind.NOT_EMPTY)

    def is_invalid_name(self) -> bool:
        return self.is_kind(ErrorKind.INVALID_NAME)

    def is_not_owner(self) -> bool:
        return self.is_kind(ErrorKind.NOT_OWNER)

    def is_already_owned_by_you(self) -> bool:
        return self.is_kind(ErrorKind.ALREADY_OWNED_BY_YOU)


@dataclasses.dataclass(frozen=True, kw_only=True, slots=True)
class ErrorRule:
    """
    A provider specific error signature and the error kinds it translates to.

    :ivar str name: Rule identifier (e.g. ``CONTAINER_NOT_FOUND``).
    :ivar int status_code: HTTP status code of a matching response.
    :ivar str error_code: Provider error code (``<Code>`` of the error body).
    :ivar str | None error_html: Reason phrase matched when the body carries no error code
                                 (e.g. responses to HEAD requests).
    :ivar str message: Message of the translated error.
    :ivar str | None html_message: Message used instead when the rule matched on the reason
                                   phrase only.
    :ivar FrozenSet[ErrorKind] kinds: Default kinds of the translated error.
    :ivar Mapping[str, FrozenSet[ErrorKind]] method_kinds: Kinds overriding the default for a
                                                           specific HTTP method.
    """

    name: str
    status_code: int
    error_code: str
    message: str
    kinds: FrozenSet[ErrorKind]
    error_html: str | None = None
    html_message: str | None = None
    method_kinds: Mapping[str, FrozenSet[ErrorKind]] = dataclasses.field(default_factory=dict)

    def matches(self, response: 'ResponseHead', error_code: str | None) -> bool:
        if response.status_code != self.status_code:
            return False
        if error_code is not None:
            return error_code == self.error_code
        return self.error_html is not None and response.reason == self.error_html

    def kinds_for(self, method: str) -> FrozenSet[ErrorKind]:
        return self.method_kinds.get(method.upper(), self.kinds)


def error_rule(
    name: str,
    status_code: int,
    error_code: str,
    message: str,
    kinds: ErrorKind | Iterable[ErrorKind],
    *,
    error_html: str | None = None,
    html_message: str | None = None,
    method_kinds: Mapping[str, Iterable[ErrorKind]] | None = None,
) -> ErrorRule:
    """
    Convenience constructor for :py:class:`ErrorRule`.
    """
    return ErrorRule(
        name=name,
        status_code=status_code,
        error_code=error_code,
        message=message,
        kinds=_to_kinds(kinds),
        error_html=error_html,
        html_message=html_message,
        method_kinds={
            method.upper(): _to_kinds(method_kind)
            for method, method_kind in (method_kinds or {}).items()
        },
    )


class ErrorTranslator:
    """
    Translates failed responses into cloud errors using an ordered rule table.

    Rules are evaluated first-match-wins, so a more specific rule must be placed before a
    more general one sharing its status code.
    """

    _rules: Sequence[ErrorRule]

    def __init__(self, rules: Sequence[ErrorRule]):
        self._rules = tuple(rules)

    @property
    def rules(self) -> Sequence[ErrorRule]:
        return self._rules

    def translate(
        self,
        error: Exception,
        method: str,
        response: 'ResponseHead | None',
    ) -> CloudError | None:
        """
        Returns the translated error of the first matching rule, or None when no rule
        matches (or there is no response to match against).
        """
        if response is None:
            return None

        body: Any = getattr(error, 'message', None) or str(error)
        error_code = xml_parser.extract_error_code(body)

        for rule in self._rules:
            if rule.matches(response, error_code):
                logger.debug(
                    'Translated %s response (code=%s) with rule %s',
                    response.status_code, error_code, rule.name)
                message = rule.message
                if error_code is None and rule.html_message is not None:
                    message = rule.html_message
                return CloudError(
                    message,
                    error=error,
                    kinds=rule.kinds_for(method),
                    response=response,
                )
        return None
