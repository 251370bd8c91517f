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
Core scanner engine for running validators over content packages.
"""

from __future__ import annotations

import logging
import time
import zipfile
from pathlib import Path

from .exceptions import PackageLoadError
from .loader import LoadedPackage, PackageLoader
from .models import Report, ScanResult, ValidationMessage
from .scan_policy import ScanPolicy
from .validator_factory import build_validators
from .validators.base import BaseValidator

logger = logging.getLogger(__name__)


class PackageScanner:
    """Main scanner that walks a package and runs every validator per node."""

    def __init__(
        self,
        validators: list[BaseValidator] | None = None,
        policy: ScanPolicy | None = None,
        is_sub_package: bool = False,
    ):
        """
        Initialize scanner with validators.

        Args:
            validators: List of validators to use. If None, builds them from the policy.
            policy: Scan policy. If None, loads built-in defaults.
            is_sub_package: True when the scanned packages are themselves
                sub-packages of an enclosing package.
        """
        self.policy = policy or ScanPolicy.default()
        self.is_sub_package = is_sub_package
        if validators is None:
            validators = build_validators(self.policy, is_sub_package=is_sub_package)
        self.validators: list[BaseValidator] = validators
        self.loader = PackageLoader(policy=self.policy)

    def scan_package(self, package_path: str | Path) -> ScanResult:
        """
        Validate a single content package.

        Args:
            package_path: Extracted package directory or package ``.zip``

        Returns:
            ScanResult with all validation messages

        Raises:
            PackageLoadError: If the package cannot be loaded
        """
        package_path = Path(package_path)
        start_time = time.time()

        package = self.loader.load(package_path)
        try:
            result = self._scan_loaded_package(package)
        finally:
            self.loader.cleanup()

        result.scan_duration_seconds = time.time() - start_time
        return result

    def _scan_loaded_package(self, package: LoadedPackage) -> ScanResult:
        messages: list[ValidationMessage] = []
        nodes_checked = 0

        for node in package.iter_nodes():
            nodes_checked += 1
            for validator in self.validators:
                try:
                    found = validator.check(node, self.is_sub_package)
                except Exception as e:
                    logger.exception("Validator %s failed on %s: %s", validator.get_id(), node.node_path, e)
                    continue
                messages.extend(found or [])

        for validator in self.validators:
            try:
                messages.extend(validator.finalize() or [])
            except Exception as e:
                logger.exception("Validator %s failed to finalize: %s", validator.get_id(), e)

        logger.info(
            "Scanned %s: %d nodes, %d messages",
            package.source,
            nodes_checked,
            len(messages),
        )
        return ScanResult(
            package_name=package.name,
            package_path=str(package.source),
            messages=messages,
            coordinate=package.coordinate,
            validators_used=[v.get_id() for v in self.validators],
            nodes_checked=nodes_checked,
        )

    def scan_directory(self, packages_directory: str | Path, recursive: bool = False) -> Report:
        """
        Validate every content package found in a directory.

        Args:
            packages_directory: Directory containing package zips or extracted packages
            recursive: Search subdirectories as well

        Returns:
            Report with one ScanResult per package that could be loaded
        """
        packages_directory = Path(packages_directory)
        if not packages_directory.is_dir():
            raise PackageLoadError(f"Directory does not exist: {packages_directory}")

        report = Report()
        for package_path in self._find_packages(packages_directory, recursive):
            try:
                report.add_scan_result(self.scan_package(package_path))
            except PackageLoadError as e:
                logger.warning("Skipping %s: %s", package_path, e)
        return report

    def _find_packages(self, directory: Path, recursive: bool) -> list[Path]:
        root_marker = self.policy.package_layout.root_marker
        suffix = self.policy.package_layout.subpackage_suffix
        found: list[Path] = []

        candidates = directory.rglob("*") if recursive else directory.iterdir()
        for path in sorted(candidates):
            if path.is_dir():
                if (path / root_marker).is_dir():
                    found.append(path)
            elif path.name.endswith(suffix) and zipfile.is_zipfile(path):
                found.append(path)

        # Nothing below an extracted package is itself a top-level package
        extracted_roots = [p for p in found if p.is_dir()]
        return [p for p in found if not any(root in p.parents for root in extracted_roots)]

    def add_validator(self, validator: BaseValidator):
        """Add a validator to the scanner."""
        self.validators.append(validator)

    def list_validators(self) -> list[str]:
        """Get ids of all active validators."""
        return [v.get_id() for v in self.validators]


def scan_package(
    package_path: str | Path,
    validators: list[BaseValidator] | None = None,
    policy: ScanPolicy | None = None,
) -> ScanResult:
    """
    Convenience function to validate a single package.

    Args:
        package_path: Extracted package directory or package ``.zip``
        validators: Optional list of validators
        policy: Optional scan policy

    Returns:
        ScanResult
    """
    return PackageScanner(validators=validators, policy=policy).scan_package(package_path)


def scan_directory(
    packages_directory: str | Path,
    recursive: bool = False,
    validators: list[BaseValidator] | None = None,
    policy: ScanPolicy | None = None,
) -> Report:
    """
    Convenience function to validate every package in a directory.

    Args:
        packages_directory: Directory containing packages
        recursive: Search recursively
        validators: Optional list of validators
        policy: Optional scan policy

    Returns:
        Report with results from all packages
    """
    return PackageScanner(validators=validators, policy=policy).scan_directory(packages_directory, recursive)
