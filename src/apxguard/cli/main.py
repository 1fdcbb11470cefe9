#!/usr/bin/env python3
"""
APXGUARD CLI
------------
Primary interface for running Config Guard Lite over a workspace and
for deriving pull-request labels from a semantic diff.

Author: APX Guard Team
Date: 2026-10-19
"""

import sys
import json
import logging
import argparse
from dataclasses import asdict
from typing import List, Optional

from rich.panel import Panel

from apxguard.cli.formatter import GuardFormatter, console
from apxguard.core.engine import DEFAULT_LOCAL_ROOT, DEFAULT_REGISTRY_ROOT, GuardEngine
from apxguard.rules.labels import (
    DiffLoadError,
    collect_labels,
    has_blocking_security,
    load_scan_payload,
    load_semantic_diff,
    summarize_scan_result,
)

VERSION = "0.1.0"


class GuardCLI:
    """
    CLI wrapper that translates user commands into Engine actions.
    """

    def __init__(self):
        self.parser = argparse.ArgumentParser(
            prog="apxguard",
            description="APX Guard - Config Guard Lite extractor & semantic diff labeller",
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        self.formatter = GuardFormatter()
        self._setup_args()

    def _setup_args(self):
        """Configures the command-line flags and subcommands."""
        self.parser.add_argument("-v", "--version", action="version", version=f"apxguard v{VERSION}")
        self.parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
        subparsers = self.parser.add_subparsers(dest="command", metavar="Command")

        scan_parser = subparsers.add_parser("scan", help="🔍 Summarize config-guard packs")
        scan_parser.add_argument("--registry", default=DEFAULT_REGISTRY_ROOT,
                                 help=f"Registry root searched for pack.yaml (default: {DEFAULT_REGISTRY_ROOT})")
        scan_parser.add_argument("--local", default=DEFAULT_LOCAL_ROOT,
                                 help=f"Flat directory of local packs (default: {DEFAULT_LOCAL_ROOT})")
        scan_parser.add_argument("--json", action="store_true", help="Emit the report as JSON")

        labels_parser = subparsers.add_parser("labels", help="🏷  Derive labels from a semantic diff")
        labels_parser.add_argument("diff", help="Path to the semantic diff JSON")
        labels_parser.add_argument("--scan", help="Optional semantic-debt scan JSON to summarize")
        labels_parser.add_argument("--json", action="store_true", help="Emit labels as JSON")

    def print_header(self, subtitle: str):
        console.print(Panel.fit(
            f"[bold cyan]APX Guard v{VERSION}[/bold cyan]",
            title=f"[bold white]{subtitle}[/bold white]",
            border_style="cyan"
        ))

    def _run_scan(self, args: argparse.Namespace) -> int:
        report = GuardEngine(args.registry, args.local).run()

        if args.json:
            print(json.dumps(asdict(report) if report else None, indent=2))
            return 0

        self.print_header("Config Guard Lite")
        if report is None:
            console.print("\n[bold yellow]⚠️  No config-guard packs found.[/bold yellow]")
            return 0

        self.formatter.print_report_table(report)
        self.formatter.print_totals(report)
        return 0

    def _run_labels(self, args: argparse.Namespace) -> int:
        try:
            diff = load_semantic_diff(args.diff)
        except DiffLoadError as e:
            console.print(f"[bold red]Error:[/bold red] {e}")
            return 1

        labels = collect_labels(diff)
        blocking = has_blocking_security(diff)
        scan = summarize_scan_result(load_scan_payload(args.scan))
        if args.json:
            print(json.dumps({
                "labels": labels,
                "blocking_security": blocking,
                "scan": asdict(scan) if scan else None,
            }, indent=2))
        else:
            self.formatter.print_labels(labels, blocking)
            if scan:
                self.formatter.print_scan_summary(scan)
        return 0

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Primary routing entry point."""
        argv = sys.argv[1:] if argv is None else argv
        if not argv:
            self.print_header("Config Guard Lite")
            self.parser.print_help()
            return 0

        args = self.parser.parse_args(argv)
        logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

        if args.command == "scan":
            return self._run_scan(args)
        if args.command == "labels":
            return self._run_labels(args)

        self.parser.print_help()
        return 0


def main():
    """Application entry point with interrupt handling."""
    try:
        sys.exit(GuardCLI().run())
    except KeyboardInterrupt:
        console.print("\n[bold red]Terminated by user.[/bold red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
