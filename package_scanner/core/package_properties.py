# Copyright 2026 Cisco Systems, Inc. and its affiliates
# SPDX-License-Identifier: Apache-2.0

"""Package descriptor parsing.

A content package declares its identity in ``META-INF/vault/properties.xml``,
a Java XML properties document::

    <?xml version="1.0" encoding="UTF-8"?>
    <!DOCTYPE properties SYSTEM "http://java.sun.com/dtd/properties.dtd">
    <properties>
      <entry key="group">org.example</entry>
      <entry key="name">plugin</entry>
      <entry key="version">1.0.0</entry>
    </properties>

Older packages carry only a ``path`` entry such as
``/etc/packages/org.example/plugin-1.0.0.zip``; the coordinate is derived
from it in that case.
"""

from __future__ import annotations

import logging
from pathlib import Path

import defusedxml.ElementTree as ET
from defusedxml import DefusedXmlException

from ..config.constants import PackageScannerConstants
from .exceptions import ArchiveInspectionError
from .models import PackageCoordinate

logger = logging.getLogger(__name__)

_C = PackageScannerConstants


def parse_properties_xml(data: bytes) -> dict[str, str]:
    """Parse a Java XML properties document into a plain dict.

    The standard properties DOCTYPE is allowed; entity declarations and
    external references are refused.

    Raises:
        ArchiveInspectionError: The document is not well-formed, declares an
            unknown encoding or entities, or its root element is not ``<properties>``.
    """
    try:
        root = ET.fromstring(data, forbid_dtd=False, forbid_entities=True, forbid_external=True)
    except (ET.ParseError, DefusedXmlException, LookupError, ValueError) as e:
        raise ArchiveInspectionError(f"Malformed package properties: {e}") from e

    if root.tag != "properties":
        raise ArchiveInspectionError(f"Unexpected root element <{root.tag}> in package properties")

    props: dict[str, str] = {}
    for entry in root.iter("entry"):
        key = entry.get("key")
        if key is None:
            continue
        props[key] = entry.text or ""
    return props


def coordinate_from_legacy_path(path: str, version: str | None = None) -> PackageCoordinate | None:
    """Derive a coordinate from a legacy ``/etc/packages/<group>/<name>.zip`` path."""
    if path.startswith(_C.LEGACY_PACKAGE_ROOT):
        path = path[len(_C.LEGACY_PACKAGE_ROOT) :]
    if path.endswith(_C.SUBPACKAGE_SUFFIX):
        path = path[: -len(_C.SUBPACKAGE_SUFFIX)]

    group, _, name = path.rpartition("/")
    if version and name.endswith(f"-{version}"):
        name = name[: -(len(version) + 1)]
    if not name:
        return None
    return PackageCoordinate(group=group.strip("/"), name=name, version=version or None)


def coordinate_from_properties(props: dict[str, str]) -> PackageCoordinate | None:
    """Build the package coordinate from descriptor properties.

    Returns None when neither ``name`` nor a legacy ``path`` is present.
    """
    group = props.get(_C.PROP_GROUP)
    name = props.get(_C.PROP_NAME)
    version = props.get(_C.PROP_VERSION) or None

    if group is not None and name:
        return PackageCoordinate(group=group, name=name, version=version)

    legacy_path = props.get(_C.PROP_PATH)
    if legacy_path:
        return coordinate_from_legacy_path(legacy_path, version)
    return None


def read_package_coordinate(
    package_root: Path,
    properties_path: str = _C.PROPERTIES_PATH,
) -> PackageCoordinate | None:
    """Read the coordinate of an extracted package directory.

    Returns None when the descriptor is missing or unreadable.
    """
    descriptor = package_root / properties_path
    if not descriptor.is_file():
        logger.debug("No package descriptor at %s", descriptor)
        return None
    try:
        return coordinate_from_properties(parse_properties_xml(descriptor.read_bytes()))
    except (OSError, ArchiveInspectionError) as e:
        logger.warning("Could not read package descriptor %s: %s", descriptor, e)
        return None
