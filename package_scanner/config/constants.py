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

"""
Constants for the Content Package Scanner.
"""

from pathlib import Path

try:
    from .._version import __version__ as PACKAGE_VERSION
except Exception:  # pragma: no cover
    PACKAGE_VERSION = "0.0.0-dev"


class PackageScannerConstants:
    """Constants used throughout the scanner."""

    VERSION = PACKAGE_VERSION

    # Project paths
    PACKAGE_ROOT = Path(__file__).parent.parent

    # Resource paths
    DATA_DIR = PACKAGE_ROOT / "data"
    DEFAULT_POLICY_PATH = DATA_DIR / "default_policy.yaml"

    # Content package layout
    JCR_ROOT = "jcr_root"
    PROPERTIES_PATH = "META-INF/vault/properties.xml"
    SUBPACKAGE_SUFFIX = ".zip"
    LEGACY_PACKAGE_ROOT = "/etc/packages/"

    # Descriptor property keys
    PROP_GROUP = "group"
    PROP_NAME = "name"
    PROP_VERSION = "version"
    PROP_PATH = "path"

    # Default values
    DEFAULT_SEVERITY = "ERROR"
    DEFAULT_MAX_DESCRIPTOR_BYTES = 1024 * 1024
    DEFAULT_MAX_TOTAL_SIZE_BYTES = 500 * 1024 * 1024
    DEFAULT_MAX_FILE_COUNT = 100_000

    # Message templates
    MSG_BANNED_SUBPACKAGE = "Found banned sub-package, group: {group}, name: {name}"
    MSG_INVALID_BANNED_ENTRY = "Incorrect configuration of banned package: {entry}"
