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
Content Package Scanner - policy checks for nested content packages.
"""

try:
    from ._version import __version__
except ImportError:
    __version__ = "0.0.0+unknown"

__author__ = "Cisco Systems, Inc."


def __getattr__(name: str):
    """Lazy-load public API symbols on first access.

    Keeps ``python -m package_scanner.cli.cli`` from importing the whole
    scanning stack before argument parsing.
    """
    _lazy_map = {
        "Config": (".config.config", "Config"),
        "PackageScannerConstants": (".config.constants", "PackageScannerConstants"),
        "PackageLoader": (".core.loader", "PackageLoader"),
        "BannedEntry": (".core.models", "BannedEntry"),
        "NodeContext": (".core.models", "NodeContext"),
        "PackageCoordinate": (".core.models", "PackageCoordinate"),
        "Report": (".core.models", "Report"),
        "ScanResult": (".core.models", "ScanResult"),
        "Severity": (".core.models", "Severity"),
        "ValidationMessage": (".core.models", "ValidationMessage"),
        "ScanPolicy": (".core.scan_policy", "ScanPolicy"),
        "PackageScanner": (".core.scanner", "PackageScanner"),
        "scan_package": (".core.scanner", "scan_package"),
        "scan_directory": (".core.scanner", "scan_directory"),
        "NestedArchiveInspector": (".core.extractors.nested_archive", "NestedArchiveInspector"),
        "BannedSubPackageValidator": (".core.validators.banned_subpackage", "BannedSubPackageValidator"),
    }
    if name in _lazy_map:
        module_path, attr = _lazy_map[name]
        import importlib

        mod = importlib.import_module(module_path, __package__)
        val = getattr(mod, attr)
        # Cache on the module so __getattr__ is only called once per symbol
        globals()[name] = val
        return val
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "PackageScanner",
    "scan_package",
    "scan_directory",
    "NodeContext",
    "PackageCoordinate",
    "BannedEntry",
    "ValidationMessage",
    "ScanResult",
    "Report",
    "Severity",
    "PackageLoader",
    "NestedArchiveInspector",
    "BannedSubPackageValidator",
    "ScanPolicy",
    "Config",
    "PackageScannerConstants",
]
