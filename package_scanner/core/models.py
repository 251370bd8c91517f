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
Data models for content packages and validation messages.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

from .exceptions import PolicyConfigurationError


class Severity(str, Enum):
    """Severity levels for validation messages."""

    ERROR = "ERROR"
    WARN = "WARN"
    INFO = "INFO"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    @classmethod
    def parse(cls, value: "str | Severity") -> "Severity":
        """Parse a case-insensitive severity name (``warning`` is accepted for WARN)."""
        if isinstance(value, Severity):
            return value
        normalized = str(value).strip().upper()
        if normalized == "WARNING":
            normalized = "WARN"
        try:
            return cls(normalized)
        except ValueError:
            valid = ", ".join(s.value for s in cls)
            raise ValueError(f"Unknown severity '{value}'. Valid values: {valid}") from None


_SEVERITY_RANK = {Severity.INFO: 0, Severity.WARN: 1, Severity.ERROR: 2}


@dataclass(frozen=True)
class ValidationMessage:
    """A single finding emitted by a validator."""

    severity: Severity
    message: str
    # Where and by whom the message was raised; not part of equality
    node_path: str | None = field(default=None, compare=False)
    validator_id: str | None = field(default=None, compare=False)

    def to_dict(self) -> dict[str, Any]:
        """Convert message to dictionary."""
        return {
            "severity": self.severity.value,
            "message": self.message,
            "node_path": self.node_path,
            "validator_id": self.validator_id,
        }


@dataclass(frozen=True)
class NodeContext:
    """A single candidate entry of the package being validated.

    ``node_path`` is the logical repository path (``/apps/install/x.zip``),
    ``file_path`` is relative to ``base_path``, the extracted ``jcr_root``
    directory.
    """

    node_path: str
    file_path: Path
    base_path: Path

    @property
    def resolved_path(self) -> Path:
        return self.base_path / self.file_path


@dataclass(frozen=True)
class BannedEntry:
    """A ``group:name`` pair that must never appear as a sub-package."""

    group: str
    name: str

    @classmethod
    def parse(cls, raw: str) -> "BannedEntry":
        """Parse ``group:name``; anything else raises PolicyConfigurationError."""
        parts = raw.split(":")
        if len(parts) != 2 or not parts[0] or not parts[1]:
            raise PolicyConfigurationError(f"Incorrect configuration of banned package: {raw}")
        return cls(group=parts[0], name=parts[1])

    def __str__(self) -> str:
        return f"{self.group}:{self.name}"


@dataclass(frozen=True)
class PackageCoordinate:
    """Identity of a content package as declared by its descriptor."""

    group: str
    name: str
    version: str | None = None

    def matches(self, entry: BannedEntry) -> bool:
        return self.group == entry.group and self.name == entry.name

    def __str__(self) -> str:
        if self.version:
            return f"{self.group}:{self.name}:{self.version}"
        return f"{self.group}:{self.name}"

    def to_dict(self) -> dict[str, Any]:
        return {"group": self.group, "name": self.name, "version": self.version}


@dataclass
class ScanResult:
    """Results from validating a single content package."""

    package_name: str
    package_path: str
    messages: list[ValidationMessage] = field(default_factory=list)
    coordinate: PackageCoordinate | None = None
    validators_used: list[str] = field(default_factory=list)
    nodes_checked: int = 0
    scan_duration_seconds: float = 0.0
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def is_valid(self) -> bool:
        """A package is valid when no validator reported an ERROR."""
        return not any(m.severity == Severity.ERROR for m in self.messages)

    @property
    def max_severity(self) -> Severity | None:
        """Get the highest severity reported, or None when there are no messages."""
        if not self.messages:
            return None
        return max((m.severity for m in self.messages), key=lambda s: s.rank)

    def get_messages_by_severity(self, severity: Severity) -> list[ValidationMessage]:
        """Get all messages of a specific severity."""
        return [m for m in self.messages if m.severity == severity]

    def to_dict(self) -> dict[str, Any]:
        """Convert scan result to dictionary."""
        max_severity = self.max_severity
        return {
            "package_name": self.package_name,
            "package_path": self.package_path,
            "coordinate": self.coordinate.to_dict() if self.coordinate else None,
            "is_valid": self.is_valid,
            "max_severity": max_severity.value if max_severity else None,
            "messages_count": len(self.messages),
            "messages": [m.to_dict() for m in self.messages],
            "nodes_checked": self.nodes_checked,
            "validators_used": self.validators_used,
            "scan_duration_seconds": self.scan_duration_seconds,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class Report:
    """Aggregated report from scanning one or more packages."""

    scan_results: list[ScanResult] = field(default_factory=list)
    total_packages_scanned: int = 0
    total_messages: int = 0
    error_count: int = 0
    warn_count: int = 0
    info_count: int = 0
    valid_count: int = 0
    timestamp: datetime = field(default_factory=datetime.now)

    def add_scan_result(self, result: ScanResult):
        """Add a scan result and update counters."""
        self.scan_results.append(result)
        self.total_packages_scanned += 1
        self.total_messages += len(result.messages)

        for message in result.messages:
            if message.severity == Severity.ERROR:
                self.error_count += 1
            elif message.severity == Severity.WARN:
                self.warn_count += 1
            elif message.severity == Severity.INFO:
                self.info_count += 1

        if result.is_valid:
            self.valid_count += 1

    def to_dict(self) -> dict[str, Any]:
        """Convert report to dictionary."""
        return {
            "summary": {
                "total_packages_scanned": self.total_packages_scanned,
                "total_messages": self.total_messages,
                "valid_packages": self.valid_count,
                "messages_by_severity": {
                    "error": self.error_count,
                    "warn": self.warn_count,
                    "info": self.info_count,
                },
                "timestamp": self.timestamp.isoformat(),
            },
            "results": [result.to_dict() for result in self.scan_results],
        }
