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
Base validator interface for content package validation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..models import NodeContext, ValidationMessage


class BaseValidator(ABC):
    """Abstract base class for all package validators.

    The scanner calls :meth:`check` once per node of the package and
    :meth:`finalize` once after the last node.
    """

    def __init__(self, validator_id: str):
        """
        Initialize validator.

        Args:
            validator_id: Identifier attached to every message this validator emits
        """
        self.validator_id = validator_id

    @abstractmethod
    def check(self, node_context: NodeContext, is_sub_package_context: bool = False) -> list[ValidationMessage]:
        """
        Validate a single node.

        Args:
            node_context: The node being validated
            is_sub_package_context: True when the enclosing validation run
                is itself operating inside a sub-package

        Returns:
            List of validation messages (empty when nothing was found)
        """
        pass

    def finalize(self) -> list[ValidationMessage]:
        """Emit messages that depend on the whole run. Stateless validators return nothing."""
        return []

    def get_id(self) -> str:
        """Get the validator identifier."""
        return self.validator_id
