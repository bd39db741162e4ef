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
The storage module provides a client for S3-compatible object storage services.

It includes the request/stream engine (signing, request lifecycles, stream adapters and
error translation) and a container/blob object model on top of it.
"""

from .blob import Blob, BlobResult
from .config import Configuration
from .connection import Connection, ContainerListResult
from .container import BlobListResult, Container, ContainerResult
from .core.credentials import SigningContext
from .core.errors import CloudError, ErrorKind, ErrorTranslator
from .core.header import ResponseMeta
from .core.provider import AWS, GOOGLE, Provider, get_provider
from .core.request import (
    BufferedRequest,
    DummyRequest,
    RawRequest,
    Recovered,
    Request,
    RequestState,
    StructuredRequest,
    execute,
)
from .streaming import DownloadStream, StreamState, UploadStream
from .transfer import FileTransfer, download_to_file, upload_from_file
