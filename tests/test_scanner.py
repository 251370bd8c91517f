# Copyright 2026 Cisco Systems, Inc. and its affiliates
# SPDX-License-Identifier: Apache-2.0

"""End-to-end tests for the package scanner."""

import logging

import pytest

from package_scanner.core.exceptions import PackageLoadError
from package_scanner.core.models import PackageCoordinate, Severity, ValidationMessage
from package_scanner.core.scan_policy import ScanPolicy
from package_scanner.core.scanner import PackageScanner, scan_directory, scan_package
from package_scanner.core.validators.base import BaseValidator

BANNED_MESSAGE = "Found banned sub-package, group: org.example, name: plugin"


def _policy(*entries: str) -> ScanPolicy:
    return ScanPolicy.from_dict({"banned_subpackages": {"entries": list(entries)}})


class ExplodingValidator(BaseValidator):
    def __init__(self):
        super().__init__("exploding")

    def check(self, node_context, is_sub_package_context=False):
        raise RuntimeError("boom")


class CountingValidator(BaseValidator):
    def __init__(self):
        super().__init__("counting")
        self.paths = []

    def check(self, node_context, is_sub_package_context=False):
        self.paths.append(node_context.node_path)
        return []

    def finalize(self):
        return [ValidationMessage(Severity.INFO, f"checked {len(self.paths)} nodes", validator_id=self.validator_id)]


class TestScanPackage:
    def test_banned_subpackage_in_directory(self, make_package_tree):
        root = make_package_tree({"apps/install/content.zip": {"group": "org.example", "name": "plugin"}})

        result = PackageScanner(policy=_policy("org.example:plugin")).scan_package(root)

        assert result.messages == [ValidationMessage(Severity.ERROR, BANNED_MESSAGE)]
        assert result.messages[0].node_path == "/apps/install/content.zip"
        assert not result.is_valid
        assert result.coordinate == PackageCoordinate("org.example.outer", "outer", "1.0")
        assert result.validators_used == ["banned-subpackage"]

    def test_incorrect_configuration(self, make_package_tree):
        root = make_package_tree({"apps/install/content.zip": {"group": "org.example", "name": "plugin"}})

        result = scan_package(root, policy=_policy("wrong-config"))

        assert result.messages == [
            ValidationMessage(Severity.ERROR, "Incorrect configuration of banned package: wrong-config")
        ]

    def test_banned_subpackage_in_zip(self, make_package_tree, zip_package_tree):
        archive = zip_package_tree(
            make_package_tree(
                {
                    "apps/install/content.zip": {"group": "org.example", "name": "plugin"},
                    "apps/install/allowed.zip": {"group": "org.example", "name": "allowed"},
                    "apps/example/.content.xml": "<jcr:root/>",
                }
            )
        )

        result = scan_package(archive, policy=_policy("org.example:plugin"))

        assert [m.message for m in result.messages] == [BANNED_MESSAGE]
        assert result.nodes_checked == 3
        assert result.package_path == str(archive)
        assert result.scan_duration_seconds >= 0

    def test_clean_package(self, make_package_tree):
        root = make_package_tree({"apps/install/content.zip": {"group": "org.example", "name": "allowed"}})
        result = scan_package(root, policy=_policy("org.example:plugin"))
        assert result.messages == []
        assert result.is_valid

    def test_permissive_preset_keeps_package_valid(self, make_package_tree):
        root = make_package_tree({"apps/install/content.zip": {"group": "org.example", "name": "plugin"}})
        policy = ScanPolicy.from_preset("permissive")
        policy.banned_subpackages.entries = ["org.example:plugin"]

        result = scan_package(root, policy=policy)

        assert result.messages == [ValidationMessage(Severity.WARN, BANNED_MESSAGE)]
        assert result.is_valid

    def test_sub_package_scanner_is_inert(self, make_package_tree):
        root = make_package_tree({"apps/install/content.zip": {"group": "org.example", "name": "plugin"}})
        scanner = PackageScanner(policy=_policy("org.example:plugin", "wrong-config"), is_sub_package=True)
        assert scanner.scan_package(root).messages == []

    def test_disabled_validator(self, make_package_tree):
        root = make_package_tree({"apps/install/content.zip": {"group": "org.example", "name": "plugin"}})
        policy = ScanPolicy.from_dict({"banned_subpackages": {"enabled": False, "entries": ["org.example:plugin"]}})

        result = scan_package(root, policy=policy)

        assert result.messages == []
        assert result.validators_used == []

    def test_extraction_is_cleaned_up(self, make_package_tree, zip_package_tree):
        archive = zip_package_tree(make_package_tree({"apps/example/.content.xml": "<jcr:root/>"}))
        scanner = PackageScanner(policy=_policy())

        scanner.scan_package(archive)

        assert scanner.loader._temp_dirs == []

    def test_failed_load_leaves_no_extraction(self, tmp_path, make_content_package):
        scanner = PackageScanner(policy=_policy())

        with pytest.raises(PackageLoadError, match="jcr_root not found"):
            scanner.scan_package(make_content_package(tmp_path / "pkg.zip", jcr_root=False))

        assert scanner.loader._temp_dirs == []

    def test_unloadable_package(self, tmp_path):
        with pytest.raises(PackageLoadError):
            scan_package(tmp_path / "missing.zip")


class TestValidatorHandling:
    def test_failing_validator_does_not_abort_scan(self, make_package_tree, caplog):
        root = make_package_tree({"apps/install/content.zip": {"group": "org.example", "name": "plugin"}})
        scanner = PackageScanner(policy=_policy("org.example:plugin"))
        scanner.add_validator(ExplodingValidator())

        with caplog.at_level(logging.ERROR, logger="package_scanner"):
            result = scanner.scan_package(root)

        assert [m.message for m in result.messages] == [BANNED_MESSAGE]
        assert "Validator exploding failed" in caplog.text
        assert scanner.list_validators() == ["banned-subpackage", "exploding"]

    def test_every_node_checked_then_finalized(self, make_package_tree):
        root = make_package_tree(
            {
                "apps/install/content.zip": {"name": "plugin"},
                "apps/example/.content.xml": "<jcr:root/>",
            }
        )
        counting = CountingValidator()

        result = PackageScanner(validators=[counting]).scan_package(root)

        assert counting.paths == ["/apps/example/.content.xml", "/apps/install/content.zip"]
        assert [m.message for m in result.messages] == ["checked 2 nodes"]


class TestScanDirectory:
    def test_scan_directory(self, tmp_path, make_package_tree, zip_package_tree):
        make_package_tree({"apps/install/content.zip": {"group": "org.example", "name": "plugin"}})
        zip_package_tree(
            make_package_tree({"apps/install/other.zip": {"group": "org.example", "name": "other"}}),
            name="clean.zip",
        )
        (tmp_path / "notes.txt").write_text("not a package")

        report = scan_directory(tmp_path, policy=_policy("org.example:plugin"))

        # package-1, package-2 and clean.zip
        assert report.total_packages_scanned == 3
        assert report.error_count == 1
        assert report.valid_count == 2

    def test_recursive_skips_nested_subpackages(self, tmp_path, make_package_tree):
        make_package_tree({"apps/install/content.zip": {"group": "org.example", "name": "plugin"}})

        flat = scan_directory(tmp_path, policy=_policy("org.example:plugin"))
        deep = scan_directory(tmp_path, recursive=True, policy=_policy("org.example:plugin"))

        assert flat.total_packages_scanned == 1
        assert deep.total_packages_scanned == 1
        assert deep.error_count == 1

    def test_broken_archive_skipped(self, tmp_path, make_content_package):
        make_content_package(tmp_path / "no-root.zip", jcr_root=False)
        make_content_package(tmp_path / "good.zip")

        report = scan_directory(tmp_path, policy=_policy())

        assert [r.package_name for r in report.scan_results] == ["plugin"]

    def test_missing_directory(self, tmp_path):
        with pytest.raises(PackageLoadError):
            scan_directory(tmp_path / "nope")
