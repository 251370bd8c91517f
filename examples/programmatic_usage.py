#!/usr/bin/env python3
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
Programmatic usage example - using Content Package Scanner as a Python library.

This example demonstrates:
1. Building a policy with banned sub-packages in code
2. Scanning a package and reading the messages
3. Checking a single nested archive without a full scan
"""

import sys
from pathlib import Path

from package_scanner import NestedArchiveInspector, PackageScanner, ScanPolicy
from package_scanner.core.models import Severity


def main(argv: list[str]) -> int:
    if len(argv) < 2:
        print(f"Usage: {argv[0]} PACKAGE [GROUP:NAME ...]")
        return 1

    package_path = Path(argv[1])
    banned = argv[2:] or ["org.example:plugin"]

    policy = ScanPolicy.default()
    policy.banned_subpackages.entries = banned

    scanner = PackageScanner(policy=policy)
    print(f"Scanning package: {package_path}")
    print(f"Banned sub-packages: {', '.join(banned)}\n")

    result = scanner.scan_package(package_path)

    print(f"Package: {result.package_name} ({result.coordinate or 'no descriptor'})")
    print(f"Valid: {result.is_valid}")
    for message in result.get_messages_by_severity(Severity.ERROR):
        print(f"  {message.node_path}: {message.message}")

    # Inspect a standalone sub-package archive directly
    if package_path.suffix == ".zip":
        coordinate = NestedArchiveInspector().resolve_coordinate(package_path.parent, Path(package_path.name))
        print(f"\nArchive coordinate: {coordinate}")

    return 0 if result.is_valid else 1


if __name__ == "__main__":
    sys.exit(main(sys.argv))
