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
Scan policy: banned sub-packages, package layout, and archive limits.

A ``ScanPolicy`` captures which sub-packages an organisation refuses to ship,
at what severity violations are reported, and what the scanner should treat
as a content package.

Usage
-----
    from package_scanner.core.scan_policy import ScanPolicy

    # Load built-in defaults
    policy = ScanPolicy.default()

    # Load an org policy (merges on top of defaults)
    policy = ScanPolicy.from_yaml("my_policy.yaml")

    # Dump the current (including default) policy for editing
    policy.to_yaml("generated_policy.yaml")

Validators receive the policy through ``build_validators``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from ..config.constants import PackageScannerConstants
from .models import Severity

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Where the built-in default policy lives (ships with the package)
# ---------------------------------------------------------------------------
_DATA_DIR = PackageScannerConstants.DATA_DIR
_DEFAULT_POLICY_PATH = PackageScannerConstants.DEFAULT_POLICY_PATH

# Named preset policies
_PRESET_POLICIES: dict[str, Path] = {
    "balanced": _DEFAULT_POLICY_PATH,
    "permissive": _DATA_DIR / "permissive_policy.yaml",
}


# ---------------------------------------------------------------------------
# Data classes for each policy section
# ---------------------------------------------------------------------------


@dataclass
class BannedSubPackagesPolicy:
    """Sub-packages that must not be embedded, as raw ``group:name`` strings.

    Entries are kept verbatim so that malformed ones can be reported at scan
    time instead of disappearing at load time.
    """

    enabled: bool = True
    severity: Severity = Severity.ERROR
    entries: list[str] = field(default_factory=list)


@dataclass
class PackageLayoutPolicy:
    """What makes a file a sub-package candidate and an archive a package."""

    subpackage_suffix: str = PackageScannerConstants.SUBPACKAGE_SUFFIX
    root_marker: str = PackageScannerConstants.JCR_ROOT
    properties_path: str = PackageScannerConstants.PROPERTIES_PATH


@dataclass
class ArchiveLimitsPolicy:
    """Safety limits for reading package archives."""

    # Largest properties.xml read from a nested archive
    max_descriptor_bytes: int = PackageScannerConstants.DEFAULT_MAX_DESCRIPTOR_BYTES
    # Outer package extraction limits
    max_total_size_bytes: int = PackageScannerConstants.DEFAULT_MAX_TOTAL_SIZE_BYTES
    max_file_count: int = PackageScannerConstants.DEFAULT_MAX_FILE_COUNT


# ---------------------------------------------------------------------------
# The top-level policy object
# ---------------------------------------------------------------------------


@dataclass
class ScanPolicy:
    """Organisational scan policy."""

    policy_name: str = "default"
    policy_version: str = "1.0"

    banned_subpackages: BannedSubPackagesPolicy = field(default_factory=BannedSubPackagesPolicy)
    package_layout: PackageLayoutPolicy = field(default_factory=PackageLayoutPolicy)
    archive_limits: ArchiveLimitsPolicy = field(default_factory=ArchiveLimitsPolicy)

    # -----------------------------------------------------------------------
    # Construction helpers
    # -----------------------------------------------------------------------

    @classmethod
    def default(cls) -> ScanPolicy:
        """Load the built-in default policy that ships with the package."""
        return cls.from_yaml(_DEFAULT_POLICY_PATH)

    @classmethod
    def from_preset(cls, name: str) -> ScanPolicy:
        """Load a named preset policy: ``balanced`` or ``permissive``."""
        name_lower = name.lower()
        if name_lower not in _PRESET_POLICIES:
            raise ValueError(f"Unknown preset '{name}'. Available: {', '.join(sorted(_PRESET_POLICIES))}")
        return cls.from_yaml(_PRESET_POLICIES[name_lower])

    @classmethod
    def preset_names(cls) -> list[str]:
        """Return available preset policy names."""
        return sorted(_PRESET_POLICIES.keys())

    @classmethod
    def from_yaml(cls, path: str | Path) -> ScanPolicy:
        """
        Load a policy from a YAML file.

        The YAML is first merged on top of the built-in defaults so that
        users only need to specify the sections they want to override.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Policy file not found: {path}")

        with open(path) as fh:
            raw: dict[str, Any] = yaml.safe_load(fh) or {}
        if not isinstance(raw, dict):
            raise ValueError(f"Policy file must contain a mapping: {path}")

        is_default = path.resolve() == _DEFAULT_POLICY_PATH.resolve()
        if is_default:
            policy = cls._from_dict(raw)
        else:
            default_raw = cls._load_default_raw()
            merged = cls._deep_merge(default_raw, raw)
            policy = cls._from_dict(merged)

        logger.debug(
            "Loaded policy %s with %d banned sub-package entries",
            policy.policy_name,
            len(policy.banned_subpackages.entries),
        )
        return policy

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ScanPolicy:
        """Build a policy from a mapping merged on top of the built-in defaults."""
        return cls._from_dict(cls._deep_merge(cls._load_default_raw(), data))

    def to_yaml(self, path: str | Path) -> None:
        """Dump the full policy to a YAML file for editing."""
        data = self._to_dict()
        with open(path, "w") as fh:
            fh.write("# Content Package Scanner - Scan Policy\n")
            fh.write("# List banned sub-packages as 'group:name' under banned_subpackages.entries.\n")
            fh.write("# Only include sections you want to override; omitted sections\n")
            fh.write("# will use the built-in defaults.\n\n")
            yaml.dump(data, fh, default_flow_style=False, sort_keys=False, width=120)

    # -----------------------------------------------------------------------
    # Internal parsing
    # -----------------------------------------------------------------------

    @classmethod
    def _load_default_raw(cls) -> dict[str, Any]:
        if _DEFAULT_POLICY_PATH.exists():
            with open(_DEFAULT_POLICY_PATH) as fh:
                return yaml.safe_load(fh) or {}
        return {}

    @staticmethod
    def _deep_merge(base: dict, override: dict) -> dict:
        """Recursively merge *override* into *base*.

        Lists in the override **replace** the base list.
        """
        result = dict(base)
        for key, val in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(val, dict):
                result[key] = ScanPolicy._deep_merge(result[key], val)
            else:
                result[key] = val
        return result

    @classmethod
    def _from_dict(cls, d: dict[str, Any]) -> ScanPolicy:
        bs = d.get("banned_subpackages") or {}
        pl = d.get("package_layout") or {}
        al = d.get("archive_limits") or {}

        entries = bs.get("entries") or []
        if isinstance(entries, str):
            entries = [entries]

        return cls(
            policy_name=d.get("policy_name", "default"),
            policy_version=str(d.get("policy_version", "1.0")),
            banned_subpackages=BannedSubPackagesPolicy(
                enabled=bs.get("enabled", True),
                severity=Severity.parse(bs.get("severity", PackageScannerConstants.DEFAULT_SEVERITY)),
                entries=[str(e) for e in entries],
            ),
            package_layout=PackageLayoutPolicy(
                subpackage_suffix=pl.get("subpackage_suffix", PackageScannerConstants.SUBPACKAGE_SUFFIX),
                root_marker=pl.get("root_marker", PackageScannerConstants.JCR_ROOT),
                properties_path=pl.get("properties_path", PackageScannerConstants.PROPERTIES_PATH),
            ),
            archive_limits=ArchiveLimitsPolicy(
                max_descriptor_bytes=al.get(
                    "max_descriptor_bytes", PackageScannerConstants.DEFAULT_MAX_DESCRIPTOR_BYTES
                ),
                max_total_size_bytes=al.get(
                    "max_total_size_bytes", PackageScannerConstants.DEFAULT_MAX_TOTAL_SIZE_BYTES
                ),
                max_file_count=al.get("max_file_count", PackageScannerConstants.DEFAULT_MAX_FILE_COUNT),
            ),
        )

    def _to_dict(self) -> dict[str, Any]:
        return {
            "policy_name": self.policy_name,
            "policy_version": self.policy_version,
            "banned_subpackages": {
                "enabled": self.banned_subpackages.enabled,
                "severity": self.banned_subpackages.severity.value,
                "entries": list(self.banned_subpackages.entries),
            },
            "package_layout": {
                "subpackage_suffix": self.package_layout.subpackage_suffix,
                "root_marker": self.package_layout.root_marker,
                "properties_path": self.package_layout.properties_path,
            },
            "archive_limits": {
                "max_descriptor_bytes": self.archive_limits.max_descriptor_bytes,
                "max_total_size_bytes": self.archive_limits.max_total_size_bytes,
                "max_file_count": self.archive_limits.max_file_count,
            },
        }
