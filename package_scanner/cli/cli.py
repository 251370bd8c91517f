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

"""Command-line interface for the Content Package Scanner."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Callable
from pathlib import Path

from ..config.config import Config
from ..core.exceptions import PackageLoadError
from ..core.models import Report, ScanResult, Severity
from ..core.scan_policy import ScanPolicy
from ..core.scanner import PackageScanner
from ..core.validator_factory import AVAILABLE_VALIDATORS, build_validators
from ..logging_config import setup_logging

logger = logging.getLogger("package_scanner.cli")


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def _config_from_args(args: argparse.Namespace) -> Config:
    """Build a Config from CLI flags; unset flags fall back to the environment."""
    return Config(
        policy=getattr(args, "policy", None),
        banned_subpackages=list(getattr(args, "ban", None) or []),
        severity=getattr(args, "severity", None),
        output_format=getattr(args, "format", None) or "summary",
    )


def _load_policy(config: Config) -> ScanPolicy:
    """Load scan policy from the config or exit with an error."""
    try:
        policy = config.load_policy()
    except FileNotFoundError:
        print(f"Error: Policy file not found: {config.policy}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Error loading policy file: {e}", file=sys.stderr)
        sys.exit(1)
    logger.info("Using scan policy: %s", policy.policy_name)
    return policy


def _make_status_printer(args: argparse.Namespace) -> Callable[[str], None]:
    """Return a printer that sends to stderr when JSON output is active."""
    is_json = getattr(args, "format", "summary") == "json"

    def _print(msg: str) -> None:
        print(msg, file=sys.stderr if is_json else sys.stdout)

    return _print


def _format_output(args: argparse.Namespace, result_or_report: ScanResult | Report) -> str:
    """Generate the formatted output string for a scan result / report."""
    if getattr(args, "format", "summary") == "json":
        indent = None if args.compact else 2
        return json.dumps(result_or_report.to_dict(), indent=indent)
    if isinstance(result_or_report, Report):
        return _generate_multi_package_summary(result_or_report)
    return _generate_summary(result_or_report)


def _write_output(args: argparse.Namespace, output: str) -> None:
    """Write *output* to a file or stdout."""
    if args.output:
        with open(args.output, "w", encoding="utf-8") as fh:
            fh.write(output)
        print(f"Report saved to: {args.output}", file=sys.stderr)
    else:
        print(output)


def _build_scanner(args: argparse.Namespace) -> PackageScanner:
    config = _config_from_args(args)
    policy = _load_policy(config)
    validators = build_validators(policy)
    args.format = config.output_format
    return PackageScanner(validators=validators, policy=policy)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def scan_command(args: argparse.Namespace) -> int:
    """Handle the ``scan`` command for a single package."""
    package_path = Path(args.package)
    if not package_path.exists():
        print(f"Error: Package does not exist: {package_path}", file=sys.stderr)
        return 1

    scanner = _build_scanner(args)
    status = _make_status_printer(args)
    status(f"Scanning {package_path} with {', '.join(scanner.list_validators()) or 'no validators'}")

    try:
        result = scanner.scan_package(package_path)
    except PackageLoadError as e:
        print(f"Error loading package: {e}", file=sys.stderr)
        return 1

    _write_output(args, _format_output(args, result))

    if not result.is_valid and args.fail_on_findings:
        return 1
    return 0


def scan_all_command(args: argparse.Namespace) -> int:
    """Handle the ``scan-all`` command for a directory of packages."""
    packages_dir = Path(args.packages_directory)
    if not packages_dir.is_dir():
        print(f"Error: Directory does not exist: {packages_dir}", file=sys.stderr)
        return 1

    scanner = _build_scanner(args)
    report = scanner.scan_directory(packages_dir, recursive=args.recursive)
    if report.total_packages_scanned == 0:
        print(f"No content packages found in {packages_dir}", file=sys.stderr)

    _write_output(args, _format_output(args, report))

    if args.fail_on_findings and report.valid_count < report.total_packages_scanned:
        return 1
    return 0


def list_validators_command(_args: argparse.Namespace) -> int:
    """Handle the ``list-validators`` command."""
    print("Available validators:")
    for validator_id, description in AVAILABLE_VALIDATORS.items():
        print(f"  {validator_id:<20s} {description}")
    return 0


def generate_policy_command(args: argparse.Namespace) -> int:
    """Handle the ``generate-policy`` command."""
    policy = ScanPolicy.from_preset(args.preset)
    if args.ban:
        policy.banned_subpackages.entries.extend(args.ban)
    policy.to_yaml(args.output)
    print(f"Policy written to: {args.output}")
    return 0


def _generate_summary(result: ScanResult) -> str:
    lines = [
        "=" * 60,
        f"Package: {result.package_name}",
        "=" * 60,
    ]
    if result.coordinate:
        lines.append(f"Coordinate: {result.coordinate}")
    lines.extend(
        [
            f"Status: {'[OK] VALID' if result.is_valid else '[FAIL] VIOLATIONS FOUND'}",
            f"Nodes Checked: {result.nodes_checked}",
            f"Total Messages: {len(result.messages)}",
            f"Scan Duration: {result.scan_duration_seconds:.2f}s",
        ]
    )
    if result.messages:
        lines.append("")
        lines.append("Messages:")
        for message in result.messages:
            where = f" ({message.node_path})" if message.node_path else ""
            lines.append(f"  [{message.severity.value:>5s}] {message.message}{where}")
    return "\n".join(lines)


def _generate_multi_package_summary(report: Report) -> str:
    lines = [
        "=" * 60,
        "Content Package Validation Report",
        "=" * 60,
        f"Packages Scanned: {report.total_packages_scanned}",
        f"Valid Packages: {report.valid_count}",
        f"Total Messages: {report.total_messages}",
        "",
        "Messages by Severity:",
        f"  Error: {report.error_count}",
        f"   Warn: {report.warn_count}",
        f"   Info: {report.info_count}",
        "",
        "Individual Packages:",
    ]
    for r in report.scan_results:
        tag = "[OK]" if r.is_valid else "[FAIL]"
        lines.append(f"  {tag} {r.package_name} - {len(r.messages)} messages")
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Shared argparse helpers
# ---------------------------------------------------------------------------


def _severity_arg(value: str) -> str:
    try:
        return Severity.parse(value).value
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def _add_common_scan_flags(parser: argparse.ArgumentParser) -> None:
    """Add flags shared between ``scan`` and ``scan-all``."""
    parser.add_argument("--format", choices=["summary", "json"], default=None, help="Output format (default: summary)")
    parser.add_argument("--output", "-o", help="Output file path")
    parser.add_argument("--compact", action="store_true", help="Compact JSON output")
    parser.add_argument("--fail-on-findings", action="store_true", help="Exit with error if any ERROR message")
    parser.add_argument(
        "--policy",
        metavar="PRESET_OR_PATH",
        help="Scan policy: preset name (balanced, permissive) or path to custom YAML",
    )
    parser.add_argument(
        "--ban",
        action="append",
        metavar="GROUP:NAME",
        help="Ban a sub-package in addition to the policy's list (repeatable)",
    )
    parser.add_argument(
        "--severity",
        type=_severity_arg,
        metavar="LEVEL",
        help="Severity for banned sub-package messages (INFO, WARN, ERROR)",
    )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Content Package Scanner - validates content packages against a sub-package policy",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  package-scanner scan my-package.zip --ban org.example:plugin
  package-scanner scan path/to/extracted-package --policy my_policy.yaml --format json
  package-scanner scan-all /path/to/packages --recursive --fail-on-findings
  package-scanner generate-policy -o my_policy.yaml --ban org.example:plugin
  package-scanner list-validators
        """,
    )
    parser.add_argument("--log-level", default=None, help="Logging level (DEBUG, INFO, WARNING, ERROR)")
    parser.add_argument("--log-file", default=None, help="Also write DEBUG logs to this file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose log format with source locations")
    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    # -- scan --------------------------------------------------------------
    scan_p = subparsers.add_parser("scan", help="Scan a single content package")
    scan_p.add_argument("package", help="Path to package .zip or extracted package directory")
    _add_common_scan_flags(scan_p)

    # -- scan-all ----------------------------------------------------------
    scan_all_p = subparsers.add_parser("scan-all", help="Scan every content package in a directory")
    scan_all_p.add_argument("packages_directory", help="Directory containing packages")
    scan_all_p.add_argument("--recursive", "-r", action="store_true", help="Recursively search for packages")
    _add_common_scan_flags(scan_all_p)

    # -- list-validators ---------------------------------------------------
    subparsers.add_parser("list-validators", help="List available validators")

    # -- generate-policy ---------------------------------------------------
    gp_p = subparsers.add_parser("generate-policy", help="Generate a scan policy YAML")
    gp_p.add_argument("--output", "-o", default="scan_policy.yaml", help="Output file path")
    gp_p.add_argument("--preset", choices=ScanPolicy.preset_names(), default="balanced", help="Base preset")
    gp_p.add_argument("--ban", action="append", metavar="GROUP:NAME", help="Banned sub-package (repeatable)")

    # -- dispatch ----------------------------------------------------------
    args = parser.parse_args(argv)

    env_config = Config.from_env()
    setup_logging(
        level=args.log_level or ("DEBUG" if args.verbose else env_config.log_level),
        log_file=args.log_file or env_config.log_file,
        verbose=args.verbose,
    )

    if not args.command:
        parser.print_help()
        return 1

    dispatch = {
        "scan": scan_command,
        "scan-all": scan_all_command,
        "list-validators": list_validators_command,
        "generate-policy": generate_policy_command,
    }
    handler = dispatch.get(args.command)
    if handler:
        return handler(args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
