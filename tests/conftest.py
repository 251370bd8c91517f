# Copyright 2026 Cisco Systems, Inc. and its affiliates
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
Pytest configuration and shared fixtures.

This file is automatically loaded by pytest before running tests.
All fixtures defined here are available to every test module without
explicit imports.
"""

from __future__ import annotations

import textwrap
import zipfile
from pathlib import Path
from xml.sax.saxutils import escape, quoteattr

import pytest

from package_scanner.core.models import NodeContext
from package_scanner.core.scan_policy import ScanPolicy

PROPERTIES_DOCTYPE = '<!DOCTYPE properties SYSTEM "http://java.sun.com/dtd/properties.dtd">'


def _properties_xml(props: dict[str, str]) -> bytes:
    """Render a Java XML properties document."""
    entries = "\n".join(f"  <entry key={quoteattr(k)}>{escape(v)}</entry>" for k, v in props.items())
    return (
        '<?xml version="1.0" encoding="UTF-8" standalone="no"?>\n'
        f"{PROPERTIES_DOCTYPE}\n"
        f"<properties>\n{entries}\n</properties>\n"
    ).encode("utf-8")


# ---------------------------------------------------------------------------
# Factory fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def properties_xml():
    """Factory for ``META-INF/vault/properties.xml`` content.

    Usage::

        data = properties_xml(group="org.example", name="plugin", version="1.0")
    """

    def _make(**props: str) -> bytes:
        return _properties_xml(props)

    return _make


@pytest.fixture
def make_content_package():
    """Factory fixture for writing content package zips.

    Usage::

        path = make_content_package(tmp_path / "pkg.zip", group="org.example", name="plugin")

    ``jcr_root=False`` leaves out the root marker, ``properties=None`` leaves
    out the descriptor, ``properties=b"..."`` writes raw descriptor bytes.
    """

    def _make(
        path: Path,
        group: str = "org.example",
        name: str = "plugin",
        version: str | None = "1.0.0",
        jcr_root: bool = True,
        properties: bytes | None | str = "default",
        extra_entries: dict[str, bytes | str] | None = None,
    ) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            if jcr_root:
                zf.writestr("jcr_root/apps/example/.content.xml", "<jcr:root/>")
            if properties == "default":
                props = {"group": group, "name": name}
                if version is not None:
                    props["version"] = version
                zf.writestr("META-INF/vault/properties.xml", _properties_xml(props))
            elif properties is not None:
                zf.writestr("META-INF/vault/properties.xml", properties)
            for entry_name, content in (extra_entries or {}).items():
                zf.writestr(entry_name, content)
        return path

    return _make


@pytest.fixture
def make_package_tree(tmp_path: Path, make_content_package):
    """Factory fixture for an extracted outer package directory.

    Usage::

        root = make_package_tree({
            "apps/install/content.zip": {"group": "org.example", "name": "plugin"},
            "apps/install/asset.zip": b"not a zip",
            "apps/example/.content.xml": "<jcr:root/>",
        })

    Dict values become nested content packages, bytes/str are written as-is.
    """
    _counter = [0]

    def _make(
        nodes: dict[str, dict | bytes | str],
        group: str = "org.example.outer",
        name: str = "outer",
    ) -> Path:
        _counter[0] += 1
        root = tmp_path / f"package-{_counter[0]}"
        jcr_root = root / "jcr_root"
        jcr_root.mkdir(parents=True)
        meta = root / "META-INF" / "vault"
        meta.mkdir(parents=True)
        (meta / "properties.xml").write_bytes(_properties_xml({"group": group, "name": name, "version": "1.0"}))

        for rel_path, content in nodes.items():
            target = jcr_root / rel_path
            target.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, dict):
                make_content_package(target, **content)
            elif isinstance(content, bytes):
                target.write_bytes(content)
            else:
                target.write_text(content, encoding="utf-8")
        return root

    return _make


@pytest.fixture
def zip_package_tree(tmp_path: Path):
    """Zip an extracted package directory into a single package archive."""

    def _zip(root: Path, name: str = "outer.zip") -> Path:
        archive = tmp_path / name
        with zipfile.ZipFile(archive, "w") as zf:
            for path in sorted(root.rglob("*")):
                if path.is_file():
                    zf.write(path, path.relative_to(root).as_posix())
        return archive

    return _zip


@pytest.fixture
def make_node_context():
    """Build a NodeContext for a file below an extracted ``jcr_root``."""

    def _make(base_path: Path, rel_path: str) -> NodeContext:
        return NodeContext(node_path="/" + rel_path, file_path=Path(rel_path), base_path=base_path)

    return _make


@pytest.fixture
def make_policy(tmp_path: Path):
    """Factory fixture for creating :class:`ScanPolicy` from a YAML string.

    Usage::

        policy = make_policy('''
            banned_subpackages:
              entries:
                - org.example:plugin
        ''')
    """
    _counter = [0]

    def _make(yaml_str: str) -> ScanPolicy:
        _counter[0] += 1
        p = tmp_path / f"policy-{_counter[0]}.yaml"
        p.write_text(textwrap.dedent(yaml_str))
        return ScanPolicy.from_yaml(str(p))

    return _make
