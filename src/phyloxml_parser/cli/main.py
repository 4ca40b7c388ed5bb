"""Main CLI entry point for the phyloxml command-line tool.

Provides batch parsing of phyloXML files into JSON, CSV or text summaries
and a validate command reporting which files parse cleanly.
"""

import argparse
import json
import logging
import sys
import time
from concurrent.futures import ProcessPoolExecutor, as_completed
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from lxml import etree

from phyloxml_parser import __version__
from phyloxml_parser.api import PhyloXMLParser
from phyloxml_parser.shared import ConfigError, ParserConfig, PhyloXMLError
from phyloxml_parser.shared.logging import get_logger

PHYLOXML_SUFFIXES = {".xml", ".phyloxml"}
PRESETS = ["default", "normalized", "raw"]


class CLIConfig:
    """Configuration management for CLI operations."""

    def __init__(self) -> None:
        self.parser_config = ParserConfig.default()
        self.max_workers: Optional[int] = None  # Use system default
        self.output_format = "json"

    @classmethod
    def from_file(cls, config_path: Path) -> "CLIConfig":
        """Load CLI configuration from a JSON file.

        Recognized keys: ``parser_preset``, ``parser`` (a full ParserConfig
        dictionary, applied after the preset), ``max_workers`` and
        ``output_format``.
        """
        config = cls()
        if not config_path.exists():
            return config
        try:
            with config_path.open() as f:
                data = json.load(f)
            if "parser_preset" in data:
                config.parser_config = ParserConfig.preset(data["parser_preset"])
            if "parser" in data:
                config.parser_config = ParserConfig.from_dict(data["parser"])
            config.max_workers = data.get("max_workers", config.max_workers)
            config.output_format = data.get("output_format", config.output_format)
        except (OSError, ValueError, ConfigError) as e:
            print(f"Warning: Could not load config file: {e}", file=sys.stderr)
        return config


class ProgressTracker:
    """Progress tracking for long-running operations."""

    def __init__(self, total: int, description: str = "Processing") -> None:
        self.total = total
        self.completed = 0
        self.description = description
        self.start_time = time.time()
        self.last_update = 0.0

    def update(self, increment: int = 1) -> None:
        """Update progress and display if needed."""
        self.completed += increment
        current_time = time.time()

        # Update every second or on completion
        if current_time - self.last_update >= 1.0 or self.completed >= self.total:
            self._display_progress()
            self.last_update = current_time

    def _display_progress(self) -> None:
        if self.total == 0:
            return

        percentage = (self.completed / self.total) * 100
        progress_bar = "=" * int(percentage // 2)
        progress_bar += " " * (50 - len(progress_bar))

        print(f"\r{self.description}: [{progress_bar}] "
              f"{percentage:.1f}% ({self.completed}/{self.total})",
              end="", file=sys.stderr)

        if self.completed >= self.total:
            print(file=sys.stderr)


class PhyloXMLProcessor:
    """Core file processing logic for CLI operations."""

    def __init__(self, config: CLIConfig, show_progress: bool = True) -> None:
        self.config = config
        self.show_progress = show_progress
        self.logger = get_logger(__name__, None, "cli_processor")

    def process_single_file(self, file_path: Path) -> Dict[str, Any]:
        """Parse one file and summarize the outcome as a dictionary."""
        parser = PhyloXMLParser(self.config.parser_config)
        try:
            phylogenies = parser.parse(Path(file_path))
        except (PhyloXMLError, etree.XMLSyntaxError, OSError) as e:
            self.logger.warning(
                "Failed to process file",
                extra={"file": str(file_path), "error_type": type(e).__name__},
            )
            return {
                "file": str(file_path),
                "success": False,
                "error_type": type(e).__name__,
                "error": str(e),
                "phylogeny_count": len(parser.phylogenies),
                "processing_time_ms": parser.metrics.processing_time_ms,
                "diagnostics": [d.to_dict() for d in parser.diagnostics],
            }

        return {
            "file": str(file_path),
            "success": True,
            "phylogeny_count": len(phylogenies),
            "clade_count": sum(p.clade_count for p in phylogenies),
            "leaf_count": sum(p.leaf_count for p in phylogenies),
            "processing_time_ms": parser.metrics.processing_time_ms,
            "phylogenies": [p.to_dict() for p in phylogenies],
            "diagnostics": [d.to_dict() for d in parser.diagnostics],
        }

    def find_phyloxml_files(self, path: Path, recursive: bool = True) -> Iterator[Path]:
        """Find phyloXML files in path."""
        if path.is_file():
            if path.suffix.lower() in PHYLOXML_SUFFIXES:
                yield path
        elif path.is_dir():
            pattern = "**/*" if recursive else "*"
            for candidate in sorted(path.glob(pattern)):
                if candidate.is_file() and candidate.suffix.lower() in PHYLOXML_SUFFIXES:
                    yield candidate

    def batch_process(self, paths: List[Path], recursive: bool = True) -> List[Dict[str, Any]]:
        """Process multiple files, in parallel when more than one worker is allowed.

        Results are returned in the order the files were found.
        """
        all_files: List[Path] = []
        for path in paths:
            all_files.extend(self.find_phyloxml_files(path, recursive))

        if not all_files:
            return []

        progress = ProgressTracker(len(all_files), "Parsing phyloXML files")
        results: List[Optional[Dict[str, Any]]] = [None] * len(all_files)

        if len(all_files) == 1 or self.config.max_workers == 1:
            for index, file_path in enumerate(all_files):
                results[index] = self.process_single_file(file_path)
                if self.show_progress:
                    progress.update()
        else:
            with ProcessPoolExecutor(max_workers=self.config.max_workers) as executor:
                future_to_index = {
                    executor.submit(self.process_single_file, file_path): index
                    for index, file_path in enumerate(all_files)
                }
                for future in as_completed(future_to_index):
                    results[future_to_index[future]] = future.result()
                    if self.show_progress:
                        progress.update()

        return [result for result in results if result is not None]


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="phyloxml",
        description="Parse phyloXML documents into typed phylogenetic trees"
    )

    parser.add_argument("--version", action="version", version=__version__)

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Parse command
    parse_parser = subparsers.add_parser("parse", help="Parse phyloXML files")
    parse_parser.add_argument(
        "paths",
        nargs="+",
        type=Path,
        help="phyloXML files or directories to parse"
    )
    parse_parser.add_argument(
        "--recursive", "-r",
        action="store_true",
        help="Recursively process directories"
    )
    parse_parser.add_argument(
        "--format", "-f",
        choices=["json", "csv", "text"],
        default="json",
        help="Output format (default: json)"
    )
    parse_parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Output file (default: stdout)"
    )
    parse_parser.add_argument(
        "--config", "-c",
        type=Path,
        help="Configuration file path"
    )
    parse_parser.add_argument(
        "--preset",
        choices=PRESETS,
        help="Text handling preset (default: from config file, else default)"
    )
    parse_parser.add_argument(
        "--workers", "-w",
        type=int,
        help="Number of parallel workers"
    )

    # Validate command
    validate_parser = subparsers.add_parser("validate", help="Check that files parse")
    validate_parser.add_argument(
        "paths",
        nargs="+",
        type=Path,
        help="phyloXML files to validate"
    )
    validate_parser.add_argument(
        "--format", "-f",
        choices=["json", "text"],
        default="text",
        help="Output format"
    )

    # Global options
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Quiet output"
    )

    return parser


def format_results(results: List[Dict[str, Any]], format_type: str) -> str:
    """Format processing results for output."""
    if format_type == "csv":
        if not results:
            return ""

        lines = ["file,success,phylogenies,clades,leaves,time_ms,error"]
        for result in results:
            error = result.get("error_type", "")
            lines.append(
                f"{result['file']},{result['success']},{result.get('phylogeny_count', 0)},"
                f"{result.get('clade_count', 0)},{result.get('leaf_count', 0)},"
                f"{result.get('processing_time_ms', 0):.1f},{error}"
            )
        return "\n".join(lines)

    if format_type == "text":
        if not results:
            return "No results to display."

        successful = sum(1 for r in results if r.get("success", False))
        lines = [f"Processed {len(results)} files, {successful} successful", "-" * 60]

        for result in results:
            status = "✓" if result.get("success", False) else "✗"
            lines.append(f"{status} {result['file']}")
            if result.get("success", False):
                lines.append(
                    f"   Phylogenies: {result.get('phylogeny_count', 0)}, "
                    f"Clades: {result.get('clade_count', 0)}, "
                    f"Leaves: {result.get('leaf_count', 0)}, "
                    f"Time: {result.get('processing_time_ms', 0):.1f}ms"
                )
            else:
                lines.append(f"   {result.get('error_type')}: {result.get('error', '')}")
            for diagnostic in result.get("diagnostics", []):
                lines.append(f"   {diagnostic['severity']}: {diagnostic['message']}")
            lines.append("")

        return "\n".join(lines)

    return json.dumps(results, indent=2)


def cmd_parse(args: argparse.Namespace) -> int:
    """Handle parse command."""
    config = CLIConfig()
    if args.config and args.config.exists():
        config = CLIConfig.from_file(args.config)

    # Apply command-line overrides
    if args.preset:
        config.parser_config = ParserConfig.preset(args.preset)
    if args.workers:
        config.max_workers = args.workers
    config.output_format = args.format

    processor = PhyloXMLProcessor(config, show_progress=not args.quiet)
    try:
        results = processor.batch_process(args.paths, args.recursive)
    except KeyboardInterrupt:
        print("\nProcessing interrupted by user", file=sys.stderr)
        return 1

    formatted_output = format_results(results, args.format)

    if args.output:
        try:
            args.output.write_text(formatted_output, encoding="utf-8")
            print(f"Results written to {args.output}", file=sys.stderr)
        except OSError as e:
            print(f"Error writing output: {e}", file=sys.stderr)
            return 1
    else:
        print(formatted_output)

    if not results:
        return 1

    successful = sum(1 for r in results if r.get("success", False))
    return 0 if successful == len(results) else 1


def cmd_validate(args: argparse.Namespace) -> int:
    """Handle validate command."""
    processor = PhyloXMLProcessor(CLIConfig(), show_progress=False)
    results = []

    for path in args.paths:
        if not path.exists():
            results.append({
                "file": str(path),
                "valid": False,
                "error_type": "FileNotFoundError",
                "error": "File not found"
            })
            continue

        result = processor.process_single_file(path)
        validation_result = {
            "file": str(path),
            "valid": result["success"],
            "phylogeny_count": result.get("phylogeny_count", 0),
        }
        if not result["success"]:
            validation_result["error_type"] = result["error_type"]
            validation_result["error"] = result["error"]
        results.append(validation_result)

    if args.format == "json":
        print(json.dumps(results, indent=2))
    else:
        valid_count = sum(1 for r in results if r.get("valid", False))
        print(f"Validated {len(results)} files, {valid_count} valid")
        print("-" * 50)

        for result in results:
            status = "✓" if result.get("valid", False) else "✗"
            print(f"{status} {result['file']}")
            if not result.get("valid", False):
                print(f"   {result['error_type']}: {result['error']}")

    valid_count = sum(1 for r in results if r.get("valid", False))
    return 0 if valid_count == len(results) else 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    # Set up logging verbosity
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    elif args.quiet:
        logging.basicConfig(level=logging.ERROR)
    else:
        logging.basicConfig(level=logging.WARNING)

    try:
        if args.command == "parse":
            return cmd_parse(args)
        if args.command == "validate":
            return cmd_validate(args)
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return 130  # Standard exit code for SIGINT


if __name__ == "__main__":
    sys.exit(main())
