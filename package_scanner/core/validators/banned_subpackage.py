# Copyright 2026 Cisco Systems, Inc. and its affiliates
# SPDX-License-Identifier: Apache-2.0

"""Banned sub-package check.

Rejects a package that embeds a sub-package whose declared ``group:name``
appears in the policy's banned list. Only the outermost package is checked;
when the host pipeline recurses into sub-packages this validator is inert.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from ...config.constants import PackageScannerConstants
from ..exceptions import PolicyConfigurationError
from ..extractors.nested_archive import NestedArchiveInspector
from ..models import BannedEntry, NodeContext, Severity, ValidationMessage
from .base import BaseValidator

logger = logging.getLogger(__name__)

VALIDATOR_ID = "banned-subpackage"


def is_subpackage_path(node_path: str, suffix: str = PackageScannerConstants.SUBPACKAGE_SUFFIX) -> bool:
    """Any node whose path ends with the archive suffix is a sub-package candidate."""
    return node_path.endswith(suffix)


def parse_banned_entries(raw_entries: Iterable[str]) -> tuple[tuple[BannedEntry, ...], tuple[str, ...]]:
    """Split raw ``group:name`` strings into parsed entries and malformed leftovers.

    Both results keep configuration order with duplicates removed.
    """
    entries: dict[BannedEntry, None] = {}
    malformed: dict[str, None] = {}
    for raw in raw_entries:
        try:
            entries[BannedEntry.parse(raw)] = None
        except PolicyConfigurationError:
            malformed[raw] = None
    return tuple(entries), tuple(malformed)


class BannedSubPackageValidator(BaseValidator):
    """Reports embedded sub-packages whose coordinate is on the banned list."""

    def __init__(
        self,
        severity: Severity,
        is_sub_package: bool,
        banned_subpackages: Iterable[str],
        inspector: NestedArchiveInspector | None = None,
        subpackage_suffix: str = PackageScannerConstants.SUBPACKAGE_SUFFIX,
    ):
        super().__init__(VALIDATOR_ID)
        self.severity = severity
        self.is_sub_package = is_sub_package
        self.inspector = inspector or NestedArchiveInspector()
        self.subpackage_suffix = subpackage_suffix
        self.banned_entries, self.malformed_entries = parse_banned_entries(banned_subpackages)

        for raw in self.malformed_entries:
            logger.debug("Banned sub-package entry %r is not of the form group:name", raw)

    def check(self, node_context: NodeContext, is_sub_package_context: bool = False) -> list[ValidationMessage]:
        if self.is_sub_package or is_sub_package_context:
            return []  # not relevant for sub packages
        if not is_subpackage_path(node_context.node_path, self.subpackage_suffix):
            return []

        # Malformed entries are reported again for every candidate path
        messages = [
            self._message(PackageScannerConstants.MSG_INVALID_BANNED_ENTRY.format(entry=raw), node_context)
            for raw in self.malformed_entries
        ]
        if not self.banned_entries:
            return messages

        coordinate = self.inspector.resolve_coordinate(node_context.base_path, node_context.file_path)
        if coordinate is None:
            return messages

        for entry in self.banned_entries:
            if coordinate.matches(entry):
                text = PackageScannerConstants.MSG_BANNED_SUBPACKAGE.format(group=entry.group, name=entry.name)
                messages.append(self._message(text, node_context))
        return messages

    def _message(self, text: str, node_context: NodeContext) -> ValidationMessage:
        return ValidationMessage(
            severity=self.severity,
            message=text,
            node_path=node_context.node_path,
            validator_id=self.validator_id,
        )
