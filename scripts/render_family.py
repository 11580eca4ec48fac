#!/usr/bin/env python3
"""
Render a genealogy document from the command line.

Either looks the DNI up in the civil registry (needs REGISTRY_* settings) or
renders a saved registry payload:

    python scripts/render_family.py --input scripts/sample_family.json --kind reporte --output reporte.pdf
    python scripts/render_family.py --dni 12345678 --kind arbol --output arbol.png
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from genealogia.clients import UpstreamUnavailable
from genealogia.services.reports import ReportKind, render_document, render_from_payload

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Render a genealogy tree, certificate or report")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--dni", help="DNI to look up in the registry")
    source.add_argument("--input", type=Path, help="saved registry JSON payload")
    parser.add_argument("--kind", choices=ReportKind.ALL, default=ReportKind.TREE)
    parser.add_argument("--output", type=Path, help="output file (default: generated name)")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


async def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format=LOG_FORMAT)

    try:
        if args.input:
            payload = json.loads(args.input.read_text(encoding="utf-8"))
            doc = await render_from_payload(payload, args.kind)
        else:
            doc = await render_document(args.dni, args.kind)
    except UpstreamUnavailable as e:
        print(f"Registry lookup failed: {e}", file=sys.stderr)
        return 1

    output = args.output or Path(doc.filename)
    output.write_bytes(doc.content)
    print(f"{doc.kind}: {len(doc.content)} bytes written to {output}")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
