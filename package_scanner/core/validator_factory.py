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
Centralized validator construction.

Every entry point (CLI, PackageScanner fallback, tests) builds validators
through :func:`build_validators` so that all of them honour the active
``ScanPolicy`` the same way.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from .extractors.nested_archive import ArchiveLimits, NestedArchiveInspector
from .scan_policy import ScanPolicy
from .validators.banned_subpackage import VALIDATOR_ID as BANNED_SUBPACKAGE_ID
from .validators.banned_subpackage import BannedSubPackageValidator
from .validators.base import BaseValidator

logger = logging.getLogger(__name__)

# Validator id -> one-line description, used by ``list-validators``
AVAILABLE_VALIDATORS: dict[str, str] = {
    BANNED_SUBPACKAGE_ID: "Rejects embedded sub-packages whose group:name is on the banned list",
}


def build_inspector(policy: ScanPolicy) -> NestedArchiveInspector:
    """Build a nested archive inspector using the policy's layout and limits."""
    return NestedArchiveInspector(
        limits=ArchiveLimits(
            root_marker=policy.package_layout.root_marker,
            properties_path=policy.package_layout.properties_path,
            max_descriptor_bytes=policy.archive_limits.max_descriptor_bytes,
        )
    )


def build_validators(
    policy: ScanPolicy,
    *,
    is_sub_package: bool = False,
    extra_banned_subpackages: Iterable[str] | None = None,
) -> list[BaseValidator]:
    """Build every validator enabled by *policy*.

    Args:
        policy: The active scan policy.
        is_sub_package: True when the package being validated is itself a
            sub-package of another package.
        extra_banned_subpackages: ``group:name`` entries added on top of the
            policy's list (e.g. from ``--ban`` on the command line).

    Returns:
        A list of validator instances with *policy* applied.
    """
    validators: list[BaseValidator] = []

    banned = policy.banned_subpackages
    if banned.enabled:
        entries = list(banned.entries)
        if extra_banned_subpackages:
            entries.extend(extra_banned_subpackages)
        validators.append(
            BannedSubPackageValidator(
                severity=banned.severity,
                is_sub_package=is_sub_package,
                banned_subpackages=entries,
                inspector=build_inspector(policy),
                subpackage_suffix=policy.package_layout.subpackage_suffix,
            )
        )
    else:
        logger.debug("Banned sub-package validator disabled by policy %s", policy.policy_name)

    return validators
