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
Inspection of content packages embedded inside another package.

A sub-package is opened in place with :mod:`zipfile` (central-directory
random access), checked for the ``jcr_root`` marker, and its
``META-INF/vault/properties.xml`` descriptor is parsed without extracting
anything to disk.
"""

import io
import logging
import zipfile
import zlib
from dataclasses import dataclass
from pathlib import Path

from defusedxml import DefusedXmlException
from defusedxml.ElementTree import ParseError

from ...config.constants import PackageScannerConstants
from ..exceptions import ArchiveInspectionError
from ..models import PackageCoordinate
from ..package_properties import coordinate_from_properties, parse_properties_xml

logger = logging.getLogger(__name__)

# Everything a corrupt, truncated, encrypted or non-package archive can raise;
# ValueError covers undecodable UTF-8 entry names in local headers
_INSPECTION_ERRORS = (
    OSError,
    EOFError,
    RuntimeError,
    NotImplementedError,
    ValueError,
    zipfile.BadZipFile,
    zlib.error,
    ParseError,
    DefusedXmlException,
    ArchiveInspectionError,
)


@dataclass
class ArchiveLimits:
    """Layout and safety limits for nested archive inspection."""

    root_marker: str = PackageScannerConstants.JCR_ROOT
    properties_path: str = PackageScannerConstants.PROPERTIES_PATH
    max_descriptor_bytes: int = PackageScannerConstants.DEFAULT_MAX_DESCRIPTOR_BYTES


class NestedArchiveInspector:
    """
    Resolves the coordinate declared by a nested content package.

    Every public method returns ``None`` instead of raising: a ``.zip`` file
    inside a package need not be a package at all, and a broken one must not
    abort validation of the rest of the outer package. Handles are opened and
    closed per call and never shared.
    """

    def __init__(self, limits: ArchiveLimits | None = None, log: logging.Logger | None = None):
        self.limits = limits or ArchiveLimits()
        self.logger = log or logger

    def resolve_coordinate(self, base_path: Path, relative_file_path: Path | str) -> PackageCoordinate | None:
        """
        Resolve the coordinate of the archive at ``base_path / relative_file_path``.

        Args:
            base_path: Directory the package tree was extracted into
            relative_file_path: Path of the candidate archive below ``base_path``

        Returns:
            The declared coordinate, or None if the file is not a readable
            content package.
        """
        archive_path = Path(base_path) / relative_file_path
        try:
            with zipfile.ZipFile(archive_path, "r") as zf:
                return self.inspect(zf, str(archive_path))
        except _INSPECTION_ERRORS as e:
            self.logger.warning("Could not open sub archive for file path %s: %s", archive_path, e)
            return None

    def resolve_coordinate_from_bytes(self, data: bytes, label: str = "<memory>") -> PackageCoordinate | None:
        """Resolve the coordinate of an archive held in memory (e.g. read from an outer zip)."""
        try:
            with zipfile.ZipFile(io.BytesIO(data), "r") as zf:
                return self.inspect(zf, label)
        except _INSPECTION_ERRORS as e:
            self.logger.warning("Could not open sub archive %s: %s", label, e)
            return None

    def inspect(self, zf: zipfile.ZipFile, label: str) -> PackageCoordinate | None:
        """Inspect an already open archive.

        Returns None when the root marker is absent. Descriptor problems raise
        ArchiveInspectionError; the ``resolve_*`` wrappers turn those into None.
        """
        names = zf.namelist()
        if not self.has_root_marker(names):
            self.logger.debug(
                "ZIP entry %s is no subpackage as it is lacking the mandatory %s entry",
                label,
                self.limits.root_marker,
            )
            return None

        props = parse_properties_xml(self._read_descriptor(zf, label))
        coordinate = coordinate_from_properties(props)
        if coordinate is None:
            raise ArchiveInspectionError(f"Package properties of {label} declare neither name nor path")

        self.logger.debug("Sub archive %s declares %s", label, coordinate)
        return coordinate

    def has_root_marker(self, names: list[str]) -> bool:
        """Check whether any entry is, or lives below, the root marker directory."""
        marker = self.limits.root_marker.strip("/")
        prefix = marker + "/"
        for name in names:
            normalized = name.lstrip("/")
            if normalized == marker or normalized.startswith(prefix):
                return True
        return False

    def _read_descriptor(self, zf: zipfile.ZipFile, label: str) -> bytes:
        try:
            info = zf.getinfo(self.limits.properties_path)
        except KeyError:
            raise ArchiveInspectionError(f"{label} has no {self.limits.properties_path}") from None

        if info.file_size > self.limits.max_descriptor_bytes:
            raise ArchiveInspectionError(
                f"{self.limits.properties_path} in {label} is {info.file_size} bytes "
                f"(limit: {self.limits.max_descriptor_bytes})"
            )

        # file_size comes from the central directory; cap the actual read too
        with zf.open(info) as fh:
            data = fh.read(self.limits.max_descriptor_bytes + 1)
        if len(data) > self.limits.max_descriptor_bytes:
            raise ArchiveInspectionError(f"{self.limits.properties_path} in {label} exceeds its declared size")
        return data
