#!/usr/bin/env python3
"""
Capture Inspection Tool

Decodes the files written by TrailerCapture:
1. trailer_*.bin files are run through TrailerDecoder
2. document_*.gld files are run through the default GLD parser

A trailer file that decodes to no trailer, or a document that does not
parse, is reported as invalid.

Usage:
    python3 tools/inspect_captures.py <directory> [--hash-only]
    python3 tools/inspect_captures.py captures/  # Example
"""

import sys
from collections import defaultdict
from pathlib import Path
from typing import Dict, List, Optional

from gld_client.errors import RulesetParseError
from gld_client.protocol import ByteCursor
from gld_client.ruleset import parse_gld_document
from gld_client.trailer import TrailerDecoder, TrailerVariant


class CaptureResult:
    """Result of inspecting a single capture file"""

    def __init__(self, filename: str, kind: str, summary: str, is_valid: bool):
        self.filename = filename
        self.kind = kind
        self.summary = summary
        self.is_valid = is_valid

    def __repr__(self):
        status = "✓ VALID" if self.is_valid else "✗ INVALID"
        return f"{status} | {self.filename:40} | {self.kind:8} | {self.summary}"


class CaptureInspector:
    """Decodes captured trailers and documents"""

    def __init__(self, capture_dir: str, accept_numeric: bool = True):
        self.capture_dir = Path(capture_dir)
        self.decoder = TrailerDecoder(accept_numeric=accept_numeric)
        self.results: List[CaptureResult] = []
        self.variant_counts: Dict[str, int] = defaultdict(int)

    def inspect_trailer_file(self, filepath: Path) -> CaptureResult:
        trailer = self.decoder.decode(ByteCursor(filepath.read_bytes()))
        self.variant_counts[trailer.variant.value] += 1
        if trailer.variant is TrailerVariant.NONE:
            return CaptureResult(filepath.name, "trailer", "no recognized trailer", False)
        return CaptureResult(filepath.name, "trailer", f"{trailer.variant.value} {trailer.identifier}", True)

    def inspect_document_file(self, filepath: Path) -> CaptureResult:
        try:
            gld = parse_gld_document(filepath.read_text(encoding="utf-8"))
        except (RulesetParseError, UnicodeDecodeError) as e:
            return CaptureResult(filepath.name, "document", str(e), False)
        return CaptureResult(
            filepath.name, "document", f"version={gld.version} sections={len(gld.sections)}", True
        )

    def scan_directory(self) -> Optional[int]:
        """Inspect every capture file. Returns an exit code if there is nothing to do."""
        if not self.capture_dir.is_dir():
            print(f"Error: '{self.capture_dir}' is not a directory")
            return 1

        trailer_files = sorted(self.capture_dir.glob("trailer_*.bin"))
        document_files = sorted(self.capture_dir.glob("document_*.gld"))

        if not trailer_files and not document_files:
            print(f"No capture files found in '{self.capture_dir}'")
            return 0

        print(f"Inspecting {len(trailer_files)} trailers and {len(document_files)} documents "
              f"in '{self.capture_dir}'...\n")

        for filepath in trailer_files:
            self.results.append(self.inspect_trailer_file(filepath))
        for filepath in document_files:
            self.results.append(self.inspect_document_file(filepath))
        return None

    def print_results(self) -> None:
        print("=" * 100)
        print("CAPTURE RESULTS")
        print("=" * 100)

        for result in self.results:
            print(result)

        print("\n" + "=" * 100)
        print("SUMMARY")
        print("=" * 100)

        total = len(self.results)
        valid = sum(1 for r in self.results if r.is_valid)
        print(f"Total files inspected: {total}")
        print(f"Valid files:           {valid} ({100 * valid / total:.1f}%)")
        print(f"Invalid files:         {total - valid} ({100 * (total - valid) / total:.1f}%)")

        if self.variant_counts:
            print(f"\nTrailer variant distribution:")
            for variant, count in sorted(self.variant_counts.items()):
                print(f"  {variant:15}: {count:3}")

    def get_exit_code(self) -> int:
        return 1 if any(not r.is_valid for r in self.results) else 0


def main(argv=None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    hash_only = "--hash-only" in args
    args = [a for a in args if a != "--hash-only"]

    if len(args) != 1:
        print("Usage: python3 tools/inspect_captures.py <directory> [--hash-only]")
        print()
        print("Example:")
        print("  python3 tools/inspect_captures.py captures/")
        return 1

    inspector = CaptureInspector(args[0], accept_numeric=not hash_only)
    early_exit = inspector.scan_directory()
    if early_exit is not None:
        return early_exit
    inspector.print_results()
    return inspector.get_exit_code()


if __name__ == "__main__":
    sys.exit(main())
