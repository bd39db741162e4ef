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
Error hierarchy shared by the storage library and the CLI.
"""


class StratusError(Exception):
    """
    Base class for all errors raised by stratus.
    """

    message: str
    status_code: int | None

    def __init__(self, message: str = '', status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class StratusUsageError(StratusError):
    """
    Raised for programming errors (e.g. missing required parameters or calling an abstract
    operation). Always raised synchronously, never delivered through an error event.
    """
    pass


class StratusUserError(StratusError):
    """
    Raised when user supplied input (configuration, CLI arguments) is invalid.
    """
    pass


class StratusDataStorageError(StratusError):
    """
    Raised when a storage operation fails.
    """
    pass
