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
Content package loader.

Loads an extracted package directory or a package ``.zip`` and exposes the
nodes below its ``jcr_root`` as :class:`NodeContext` objects.
"""

import logging
import shutil
import stat
import tempfile
import zipfile
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import unquote

from ..config.constants import PackageScannerConstants
from .exceptions import PackageLoadError
from .models import NodeContext, PackageCoordinate
from .package_properties import read_package_coordinate
from .scan_policy import ScanPolicy

logger = logging.getLogger(__name__)


def platform_to_repository_name(segment: str) -> str:
    """Map a file-system name back to its repository name.

    ``_jcr_content`` becomes ``jcr:content``, ``__foo`` becomes ``_foo`` and
    percent escapes are decoded.
    """
    if segment.startswith("__"):
        segment = segment[1:]
    elif segment.startswith("_") and segment.count("_") >= 2:
        prefix, _, local = segment[1:].partition("_")
        if prefix and local:
            segment = f"{prefix}:{local}"
    return unquote(segment)


@dataclass
class LoadedPackage:
    """A package ready to be walked by the scanner."""

    source: Path
    root: Path
    base_path: Path
    coordinate: PackageCoordinate | None = None
    extracted: bool = False

    @property
    def name(self) -> str:
        if self.coordinate:
            return self.coordinate.name
        name = self.source.name
        return name[: -len(".zip")] if name.endswith(".zip") else name

    def iter_nodes(self) -> Iterator[NodeContext]:
        """Yield a NodeContext for every file below ``jcr_root``, in path order."""
        for path in sorted(p for p in self.base_path.rglob("*") if p.is_file() or p.is_symlink()):
            relative = path.relative_to(self.base_path)
            node_path = "/" + "/".join(platform_to_repository_name(part) for part in relative.parts)
            yield NodeContext(node_path=node_path, file_path=relative, base_path=self.base_path)


class PackageLoader:
    """Loads content packages from directories or zip archives.

    Zip archives are extracted into temporary directories; call
    :meth:`cleanup` when done.
    """

    def __init__(self, policy: ScanPolicy | None = None):
        self.policy = policy or ScanPolicy.default()
        self._temp_dirs: list[str] = []

    def load(self, path: str | Path) -> LoadedPackage:
        """
        Load a content package.

        Args:
            path: Extracted package directory or package ``.zip``

        Returns:
            LoadedPackage rooted at the package directory

        Raises:
            PackageLoadError: If the package cannot be loaded
        """
        source = Path(path)
        if not source.exists():
            raise PackageLoadError(f"Package does not exist: {source}")

        if source.is_dir():
            root = source
            extracted = False
        elif zipfile.is_zipfile(source):
            root = self._extract(source)
            extracted = True
        else:
            raise PackageLoadError(f"Not a package directory or zip archive: {source}")

        base_path = root / self.policy.package_layout.root_marker
        if not base_path.is_dir():
            if extracted:
                self._discard(root)
            raise PackageLoadError(f"{self.policy.package_layout.root_marker} not found in {source}")

        coordinate = read_package_coordinate(root, self.policy.package_layout.properties_path)
        logger.debug("Loaded package %s (%s)", source, coordinate or "no descriptor")
        return LoadedPackage(
            source=source,
            root=root,
            base_path=base_path,
            coordinate=coordinate,
            extracted=extracted,
        )

    def cleanup(self) -> None:
        """Remove temporary extraction directories."""
        for temp_dir in self._temp_dirs:
            shutil.rmtree(temp_dir, ignore_errors=True)
        self._temp_dirs.clear()

    def _discard(self, root: Path) -> None:
        """Remove a single extraction that will not be handed out."""
        shutil.rmtree(root, ignore_errors=True)
        if str(root) in self._temp_dirs:
            self._temp_dirs.remove(str(root))

    @staticmethod
    def _is_zip_symlink(info: zipfile.ZipInfo) -> bool:
        """Check whether a ZIP entry encodes a symbolic link.

        ZIP archives store Unix file-mode bits in the upper 16 bits of
        ``external_attr``.  A symlink is indicated by the ``S_IFLNK`` flag.
        """
        unix_mode = (info.external_attr >> 16) & 0xFFFF
        return unix_mode != 0 and stat.S_ISLNK(unix_mode)

    def _extract(self, archive_path: Path) -> Path:
        """Extract a package archive after checking every entry."""
        limits = self.policy.archive_limits
        try:
            with zipfile.ZipFile(archive_path, "r") as zf:
                infos = zf.infolist()
                if len(infos) > limits.max_file_count:
                    raise PackageLoadError(
                        f"{archive_path} has {len(infos)} entries (limit: {limits.max_file_count})"
                    )
                total_size = sum(info.file_size for info in infos if not info.is_dir())
                if total_size > limits.max_total_size_bytes:
                    raise PackageLoadError(
                        f"{archive_path} expands to {total_size} bytes (limit: {limits.max_total_size_bytes})"
                    )

                for info in infos:
                    if ".." in Path(info.filename).parts or info.filename.startswith("/"):
                        raise PackageLoadError(f"Path traversal in {archive_path}: '{info.filename}'")
                    if self._is_zip_symlink(info):
                        raise PackageLoadError(f"Symlink entry in {archive_path}: '{info.filename}'")

                temp_dir = tempfile.mkdtemp(prefix="package_extract_")
                self._temp_dirs.append(temp_dir)
                zf.extractall(temp_dir)
        except (OSError, zipfile.BadZipFile) as e:
            raise PackageLoadError(f"Failed to extract {archive_path}: {e}") from e

        logger.debug("Extracted %s to %s", archive_path, temp_dir)
        return Path(temp_dir)
