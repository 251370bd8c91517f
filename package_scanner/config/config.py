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
Configuration class for the Content Package Scanner.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from ..core.models import Severity
from ..core.scan_policy import ScanPolicy


def _split_entries(value: str | None) -> list[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


@dataclass
class Config:
    """
    Runtime configuration for the Content Package Scanner.

    Explicit values win; anything left unset is read from the environment.
    """

    # Policy preset name or path to a policy YAML
    policy: str | None = None

    # Banned sub-packages added on top of the policy (group:name)
    banned_subpackages: list[str] = field(default_factory=list)
    severity: str | None = None

    # Output Options
    output_format: str = "summary"
    log_level: str = "WARNING"
    log_file: str | None = None

    def __post_init__(self):
        """Load configuration from environment variables if not provided."""

        if self.policy is None:
            self.policy = os.getenv("PACKAGE_SCANNER_POLICY")

        if not self.banned_subpackages:
            self.banned_subpackages = _split_entries(os.getenv("PACKAGE_SCANNER_BANNED_SUBPACKAGES"))

        if self.severity is None:
            self.severity = os.getenv("PACKAGE_SCANNER_SEVERITY")

        if self.output_format == "summary":
            if env_format := os.getenv("PACKAGE_SCANNER_OUTPUT_FORMAT"):
                self.output_format = env_format

        if self.log_level == "WARNING":
            if env_level := os.getenv("PACKAGE_SCANNER_LOG_LEVEL"):
                self.log_level = env_level.upper()

        if self.log_file is None:
            self.log_file = os.getenv("PACKAGE_SCANNER_LOG_FILE")

    def load_policy(self) -> ScanPolicy:
        """Load the configured policy (preset name or YAML path) with overrides applied."""
        if not self.policy:
            policy = ScanPolicy.default()
        elif self.policy.lower() in ScanPolicy.preset_names():
            policy = ScanPolicy.from_preset(self.policy)
        else:
            policy = ScanPolicy.from_yaml(self.policy)
        return self.apply_to_policy(policy)

    def apply_to_policy(self, policy: ScanPolicy) -> ScanPolicy:
        """Overlay extra banned entries and severity onto *policy* in place."""
        for entry in self.banned_subpackages:
            if entry not in policy.banned_subpackages.entries:
                policy.banned_subpackages.entries.append(entry)
        if self.severity:
            policy.banned_subpackages.severity = Severity.parse(self.severity)
        return policy

    @classmethod
    def from_env(cls) -> "Config":
        """
        Create configuration from environment variables.

        Returns:
            Config instance with values from environment
        """
        return cls()

    @classmethod
    def from_file(cls, config_file: Path) -> "Config":
        """
        Load configuration from .env file.

        Args:
            config_file: Path to .env file

        Returns:
            Config instance
        """
        if config_file.exists():
            load_dotenv(config_file, override=True)

        return cls.from_env()
