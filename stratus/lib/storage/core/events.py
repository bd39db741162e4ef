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
Listener registry for requests and streams.
"""

import collections
from typing import Any, Callable, Dict, List


Listener = Callable[..., Any]


class EventEmitter:
    """
    Minimal named-event listener registry.

    Listeners are invoked synchronously in registration order. Emitting ``error`` with no
    registered error listener raises the error, so failures are never silently dropped.
    """

    _listeners: Dict[str, List[Listener]]

    def __init__(self):
        self._listeners = collections.defaultdict(list)

    def on(self, event: str, listener: Listener) -> 'EventEmitter':
        """
        Registers a listener for an event. Returns self to allow chaining.
        """
        self._listeners[event].append(listener)
        return self

    def once(self, event: str, listener: Listener) -> 'EventEmitter':
        """
        Registers a listener that is removed after its first invocation.
        """
        def _once(*args: Any) -> Any:
            self.remove_listener(event, _once)
            return listener(*args)

        return self.on(event, _once)

    def remove_listener(self, event: str, listener: Listener) -> None:
        try:
            self._listeners[event].remove(listener)
        except ValueError:
            pass

    def remove_all_listeners(self, event: str | None = None) -> None:
        if event is None:
            self._listeners.clear()
        else:
            self._listeners.pop(event, None)

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, ()))

    def emit(self, event: str, *args: Any) -> bool:
        """
        Invokes every listener of an event.

        Returns whether any listener was invoked.
        """
        listeners = list(self._listeners.get(event, ()))
        if not listeners:
            if event == 'error' and args and isinstance(args[0], BaseException):
                raise args[0]
            return False
        for listener in listeners:
            listener(*args)
        return True
