#!/usr/bin/env python3
"""
KUBESHAPE CLI
-------------
Command-line front end over the codec engine:

    kubeshape type   --catalog FILE --api-version V --kind K
    kubeshape decode --catalog FILE [--ignore EXPR] [--unknown EXPR] [--complete]
                     [--plan] [-o tree|yaml] MANIFEST
    kubeshape audit  --catalog FILE MANIFEST [MANIFEST ...]

Author: KubeShape Team
Date: 2026-01-16
"""

import argparse
import logging
import sys
from dataclasses import replace
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax

from kubeshape.cli.formatter import ShapeFormatter
from kubeshape.codec.encoder import encode_object
from kubeshape.core.config import CodecSettings, load_settings
from kubeshape.core.engine import CodecEngine
from kubeshape.core.errors import KubeShapeError
from kubeshape.manifest.exporter import ManifestExporter
from kubeshape.manifest.loader import load_manifest_file
from kubeshape.schema.catalog import parse_gvk

# Global console for consistent styling across the application
console = Console()


class KubeShapeCLI:
    """
    CLI wrapper that translates user commands into Engine actions.
    """

    def __init__(self):
        self.parser = argparse.ArgumentParser(
            prog="kubeshape",
            description="KubeShape - Schema-driven codec for Kubernetes objects",
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        self.formatter = ShapeFormatter(console)
        self._setup_args()

    def _setup_args(self):
        """Configures the command-line flags and subcommands."""
        self.parser.add_argument("--version", action="version", version="kubeshape v0.1.0")
        self.parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
        subparsers = self.parser.add_subparsers(dest="command", metavar="Command")

        type_parser = subparsers.add_parser("type", help="Show the structural type of a kind")
        type_parser.add_argument("--catalog", required=True, help="OpenAPI v3 document (JSON or YAML)")
        type_parser.add_argument("--api-version", required=True, help="e.g. apps/v1")
        type_parser.add_argument("--kind", required=True, help="e.g. Deployment")

        decode_parser = subparsers.add_parser("decode", help="Decode manifests into typed trees")
        decode_parser.add_argument("path", help="Path to a YAML manifest")
        self._add_codec_args(decode_parser)
        decode_parser.add_argument("--plan", action="store_true",
                                   help="Narrow the manifest to its schema type instead of decoding")
        decode_parser.add_argument("-o", "--output", choices=["tree", "yaml"], default="tree",
                                   help="Render typed trees, or re-encode the documents as YAML")

        audit_parser = subparsers.add_parser("audit", help="Report which documents are fully known")
        audit_parser.add_argument("paths", nargs="+", help="YAML manifests")
        self._add_codec_args(audit_parser)

    def _add_codec_args(self, parser: argparse.ArgumentParser):
        parser.add_argument("--catalog", required=True, help="OpenAPI v3 document (JSON or YAML)")
        parser.add_argument("--config", help="Settings file (YAML)")
        parser.add_argument("--ignore", action="append", default=[], metavar="EXPR",
                            help="Additional path expression to drop (repeatable)")
        parser.add_argument("--unknown", action="append", default=[], metavar="EXPR",
                            help="Additional path expression to force unknown (repeatable)")
        parser.add_argument("--complete", action="store_true",
                            help="Expose every declared field, null when absent")

    def _settings(self, args: argparse.Namespace) -> CodecSettings:
        settings = load_settings(args.config) if args.config else CodecSettings()
        settings = settings.with_extra(ignore=tuple(args.ignore), unknown=tuple(args.unknown))
        if args.complete:
            settings = replace(settings, complete=True)
        return settings

    def _run_type(self, args: argparse.Namespace):
        engine = CodecEngine(args.catalog)
        gvk = parse_gvk(args.api_version, args.kind)
        derived = engine.catalog.derive(gvk)
        console.print(self.formatter.type_tree(derived, label=f"[bold cyan]{gvk.kind}[/bold cyan]"))

    def _run_decode(self, args: argparse.Namespace):
        engine = CodecEngine(args.catalog, self._settings(args))
        documents = load_manifest_file(args.path)

        if args.output == "yaml":
            if args.plan:
                objects = [encode_object(engine.plan_manifest(doc)) for doc in documents]
            else:
                objects = [engine.round_trip(doc) for doc in documents]
            console.print(Syntax(ManifestExporter().export(objects), "yaml"))
            return

        for index, doc in enumerate(documents):
            if args.plan:
                typed = engine.plan_manifest(doc)
            else:
                typed = engine.decode_manifest(doc, with_unknowns=True)
            kind = doc.get("kind", "object")
            console.print(self.formatter.value_tree(typed, label=f"[bold cyan]{kind} #{index}[/bold cyan]"))

    def _run_audit(self, args: argparse.Namespace):
        engine = CodecEngine(args.catalog, self._settings(args))
        reports = []
        for path in args.paths:
            reports.extend(engine.audit_file(path))

        self.formatter.print_final_table(reports)
        summary = engine.generate_summary(reports)
        console.print(Panel(
            f"[bold white]Summary Report[/bold white]\n"
            f"════════════════════════════════════════\n"
            f"Documents:      {summary['total_documents']}\n"
            f"Fully known:    [green]{summary['decoded']}[/green]\n"
            f"Pending:        [yellow]{summary['pending']}[/yellow]\n"
            f"Errors:         [red]{summary['errors']}[/red]",
            border_style="dim"
        ))
        return 1 if summary["errors"] else 0

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Primary routing entry point."""
        args = self.parser.parse_args(argv)
        logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

        handlers = {
            "type": self._run_type,
            "decode": self._run_decode,
            "audit": self._run_audit,
        }
        handler = handlers.get(args.command)
        if handler is None:
            self.parser.print_help()
            return 0

        try:
            return handler(args) or 0
        except (KubeShapeError, OSError) as e:
            console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
            return 1


def main():
    """Application entry point with interrupt handling."""
    try:
        sys.exit(KubeShapeCLI().run())
    except KeyboardInterrupt:
        console.print("\n[bold red]Terminated by user.[/bold red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
