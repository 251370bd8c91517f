# Copyright 2026 Cisco Systems, Inc. and its affiliates
# SPDX-License-Identifier: Apache-2.0

"""Tests for package loading."""

import stat
import tempfile
import zipfile
from pathlib import Path

import pytest

from package_scanner.core.exceptions import PackageLoadError
from package_scanner.core.loader import PackageLoader, platform_to_repository_name
from package_scanner.core.models import PackageCoordinate


@pytest.fixture
def loader():
    loader = PackageLoader()
    yield loader
    loader.cleanup()


class TestPlatformNames:
    @pytest.mark.parametrize(
        "segment,expected",
        [
            ("_jcr_content", "jcr:content"),
            ("_cq_dialog", "cq:dialog"),
            ("__private", "_private"),
            ("plain_name", "plain_name"),
            ("_single", "_single"),
            ("a%20b.zip", "a b.zip"),
        ],
    )
    def test_mapping(self, segment, expected):
        assert platform_to_repository_name(segment) == expected


class TestLoadDirectory:
    def test_load_extracted_package(self, loader, make_package_tree):
        root = make_package_tree({"apps/install/content.zip": {"name": "plugin"}}, group="org.outer", name="outer")

        package = loader.load(root)

        assert package.root == root
        assert package.base_path == root / "jcr_root"
        assert package.extracted is False
        assert package.coordinate == PackageCoordinate("org.outer", "outer", "1.0")
        assert package.name == "outer"

    def test_iter_nodes_sorted_with_repository_paths(self, loader, make_package_tree):
        root = make_package_tree(
            {
                "content/site/_jcr_content/.content.xml": "<jcr:root/>",
                "apps/install/content.zip": {"name": "plugin"},
            }
        )

        nodes = list(loader.load(root).iter_nodes())

        assert [n.node_path for n in nodes] == [
            "/apps/install/content.zip",
            "/content/site/jcr:content/.content.xml",
        ]
        assert nodes[0].file_path == Path("apps/install/content.zip")
        assert nodes[0].resolved_path.is_file()

    def test_missing_jcr_root(self, loader, tmp_path):
        (tmp_path / "not-a-package").mkdir()
        with pytest.raises(PackageLoadError, match="jcr_root not found"):
            loader.load(tmp_path / "not-a-package")

    def test_missing_path(self, loader, tmp_path):
        with pytest.raises(PackageLoadError, match="does not exist"):
            loader.load(tmp_path / "ghost")

    def test_plain_file_rejected(self, loader, tmp_path):
        path = tmp_path / "readme.txt"
        path.write_text("hello")
        with pytest.raises(PackageLoadError, match="Not a package"):
            loader.load(path)

    def test_descriptor_with_unknown_encoding(self, loader, make_package_tree):
        root = make_package_tree({})
        (root / "META-INF" / "vault" / "properties.xml").write_bytes(
            b'<?xml version="1.0" encoding="bogus-enc"?><properties/>'
        )

        package = loader.load(root)

        assert package.coordinate is None

    def test_name_without_descriptor(self, loader, tmp_path):
        (tmp_path / "bare" / "jcr_root").mkdir(parents=True)
        package = loader.load(tmp_path / "bare")
        assert package.coordinate is None
        assert package.name == "bare"


class TestLoadArchive:
    def test_load_zip(self, loader, make_package_tree, zip_package_tree):
        archive = zip_package_tree(make_package_tree({"apps/install/content.zip": {"name": "plugin"}}))

        package = loader.load(archive)

        assert package.extracted is True
        assert package.source == archive
        assert (package.base_path / "apps" / "install" / "content.zip").is_file()
        assert package.coordinate == PackageCoordinate("org.example.outer", "outer", "1.0")

    def test_cleanup_removes_extraction(self, make_content_package, tmp_path):
        loader = PackageLoader()
        package = loader.load(make_content_package(tmp_path / "pkg.zip"))
        assert package.root.exists()

        loader.cleanup()

        assert not package.root.exists()

    def test_name_falls_back_to_file_stem(self, loader, make_content_package, tmp_path):
        package = loader.load(make_content_package(tmp_path / "my-package.zip", properties=None))
        assert package.coordinate is None
        assert package.name == "my-package"

    def test_zip_without_jcr_root(self, loader, make_content_package, tmp_path, monkeypatch):
        created = []
        real_mkdtemp = tempfile.mkdtemp

        def tracking_mkdtemp(*args, **kwargs):
            created.append(real_mkdtemp(*args, **kwargs))
            return created[-1]

        monkeypatch.setattr(tempfile, "mkdtemp", tracking_mkdtemp)

        with pytest.raises(PackageLoadError, match="jcr_root not found"):
            loader.load(make_content_package(tmp_path / "pkg.zip", jcr_root=False))

        assert len(created) == 1
        assert not Path(created[0]).exists()
        assert loader._temp_dirs == []

    def test_path_traversal_rejected(self, loader, tmp_path):
        archive = tmp_path / "evil.zip"
        with zipfile.ZipFile(archive, "w") as zf:
            zf.writestr("jcr_root/ok.txt", "ok")
            zf.writestr("../escape.txt", "boom")

        with pytest.raises(PackageLoadError, match="Path traversal"):
            loader.load(archive)
        assert not (tmp_path.parent / "escape.txt").exists()

    def test_symlink_rejected(self, loader, tmp_path):
        archive = tmp_path / "link.zip"
        with zipfile.ZipFile(archive, "w") as zf:
            zf.writestr("jcr_root/ok.txt", "ok")
            info = zipfile.ZipInfo("jcr_root/link")
            info.external_attr = (stat.S_IFLNK | 0o777) << 16
            zf.writestr(info, "/etc/passwd")

        with pytest.raises(PackageLoadError, match="Symlink"):
            loader.load(archive)

    def test_file_count_limit(self, make_policy, make_content_package, tmp_path):
        policy = make_policy(
            """
            archive_limits:
              max_file_count: 1
            """
        )
        loader = PackageLoader(policy=policy)
        with pytest.raises(PackageLoadError, match="entries"):
            loader.load(make_content_package(tmp_path / "pkg.zip"))

    def test_total_size_limit(self, make_policy, make_content_package, tmp_path):
        policy = make_policy(
            """
            archive_limits:
              max_total_size_bytes: 10
            """
        )
        loader = PackageLoader(policy=policy)
        with pytest.raises(PackageLoadError, match="expands to"):
            loader.load(make_content_package(tmp_path / "pkg.zip"))
