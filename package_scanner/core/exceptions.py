# Copyright 2026 Cisco Systems, Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# SPDX-License-Identifier: Apache-2.0

"""Content Package Scanner exceptions.

This module defines custom exceptions for Content Package Scanner operations.
All exceptions inherit from PackageScannerError for easy catching.

Example:
    >>> from package_scanner.core.scanner import PackageScanner
    >>> from package_scanner.core.exceptions import PackageLoadError
    >>>
    >>> scanner = PackageScanner()
    >>>
    >>> try:
    ...     result = scanner.scan_package("path/to/package.zip")
    ... except PackageLoadError as e:
    ...     print(f"Failed to load package: {e}")
"""


class PackageScannerError(Exception):
    """Base exception for all Content Package Scanner errors."""

    pass


class PackageLoadError(PackageScannerError):
    """Raised when unable to load a content package.

    This can indicate:
    - Missing jcr_root directory
    - Corrupted or unreadable package archive
    - Archive entries escaping the extraction directory
    - File system errors
    """

    pass


class ArchiveInspectionError(PackageScannerError):
    """Raised when a nested archive cannot be inspected.

    This typically indicates:
    - Missing package descriptor
    - Malformed properties XML
    - Descriptor exceeding the configured size limit

    Never escapes NestedArchiveInspector's public methods.
    """

    pass


class PolicyConfigurationError(PackageScannerError, ValueError):
    """Raised when a policy value has the wrong shape.

    For banned sub-package entries this means anything other than exactly
    one ``:`` separating a non-empty group and a non-empty name.
    """

    pass
