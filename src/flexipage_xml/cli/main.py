"""Main CLI entry point for the flexipage-xml command-line tool.

``roundtrip`` reproduces the harness flow: load schema and document, print the
unmarshalled object and the validation report, then re-emit the XML.
``validate`` only reports validation events for one or more documents.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from flexipage_xml import __version__
from flexipage_xml.api.pipeline import (
    SAMPLE_RESOURCE,
    RoundTripPipeline,
    bundled_resource,
)
from flexipage_xml.shared import (
    FlexipageXMLError,
    PipelineConfig,
    configure_logging,
    get_logger,
)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_VALIDATION_EVENTS = 2


def load_config(args: argparse.Namespace) -> PipelineConfig:
    """Build the pipeline configuration from ``--config`` and flags."""
    config = PipelineConfig.default()
    if getattr(args, "config", None):
        config = PipelineConfig.from_json(args.config.read_text())
    if getattr(args, "compact", False):
        config = config.override(
            serialization__pretty_print=False,
            serialization__xml_declaration=False,
            serialization__standalone=None,
        )
    return config


def build_pipeline(args: argparse.Namespace) -> RoundTripPipeline:
    pipeline = RoundTripPipeline(load_config(args))
    if args.schema:
        pipeline.load_schema(args.schema)
    else:
        pipeline.use_bundled_schema()
    return pipeline


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="flexipage-xml",
        description="Validate, deserialize and re-serialize flexipage XML documents",
    )

    parser.add_argument("--version", action="version", version=__version__)
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

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    roundtrip_parser = subparsers.add_parser(
        "roundtrip", help="Deserialize a document, report validation events and re-emit it"
    )
    roundtrip_parser.add_argument(
        "document",
        nargs="?",
        type=Path,
        help="XML document (default: bundled sample)"
    )
    roundtrip_parser.add_argument(
        "--schema", "-s",
        type=Path,
        help="XSD schema (default: bundled schema)"
    )
    roundtrip_parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Write re-serialized XML to this file instead of stdout"
    )
    roundtrip_parser.add_argument(
        "--config", "-c",
        type=Path,
        help="Pipeline configuration JSON file"
    )
    roundtrip_parser.add_argument(
        "--compact",
        action="store_true",
        help="Emit single-line XML without declaration"
    )
    roundtrip_parser.add_argument(
        "--strict",
        action="store_true",
        help=f"Exit with status {EXIT_VALIDATION_EVENTS} when validation events were collected"
    )

    validate_parser = subparsers.add_parser("validate", help="Report validation events")
    validate_parser.add_argument(
        "paths",
        nargs="+",
        type=Path,
        help="XML documents to validate"
    )
    validate_parser.add_argument(
        "--schema", "-s",
        type=Path,
        help="XSD schema (default: bundled schema)"
    )
    validate_parser.add_argument(
        "--format", "-f",
        choices=["json", "text"],
        default="text",
        help="Output format"
    )

    return parser


def cmd_roundtrip(args: argparse.Namespace) -> int:
    """Handle roundtrip command."""
    pipeline = build_pipeline(args)

    if args.document:
        result = pipeline.round_trip(args.document)
    else:
        with bundled_resource(SAMPLE_RESOURCE) as stream:
            result = pipeline.round_trip(stream.read())

    print(f"Unmarshalled object: {result.document}")
    if result.has_events:
        print("Validation errors:")
        print(result.validation_report())

    if args.output:
        pipeline.serializer.write_file(result.document, args.output)
        print(f"Serialized document written to {args.output}", file=sys.stderr)
    else:
        print(result.output.decode(pipeline.config.serialization.encoding))

    if args.strict and result.has_events:
        return EXIT_VALIDATION_EVENTS
    return EXIT_OK


def validate_file(pipeline: RoundTripPipeline, path: Path) -> Dict[str, Any]:
    """Validate one document and describe the outcome."""
    try:
        result = pipeline.deserialize(path)
    except FlexipageXMLError as e:
        return {"file": str(path), "valid": False, "error": str(e), "events": []}
    except OSError as e:
        return {"file": str(path), "valid": False, "error": str(e), "events": []}
    return {
        "file": str(path),
        "valid": result.is_valid,
        "events": [event.to_dict() for event in result.events],
    }


def format_validation(results: List[Dict[str, Any]], format_type: str) -> str:
    """Format validation results for output."""
    if format_type == "json":
        return json.dumps(results, indent=2)

    valid_count = sum(1 for r in results if r["valid"])
    lines = [f"Validated {len(results)} files, {valid_count} valid", "-" * 50]
    for result in results:
        status = "✓" if result["valid"] else "✗"
        lines.append(f"{status} {result['file']}")
        if "error" in result:
            lines.append(f"   Error: {result['error']}")
        for event in result["events"]:
            lines.append(f"   [{event['line']}:{event['column']}] {event['message']}")
    return "\n".join(lines)


def cmd_validate(args: argparse.Namespace) -> int:
    """Handle validate command."""
    pipeline = build_pipeline(args)
    results = [validate_file(pipeline, path) for path in args.paths]
    print(format_validation(results, args.format))
    return EXIT_OK if all(r["valid"] for r in results) else EXIT_FAILURE


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return EXIT_FAILURE

    if args.verbose:
        configure_logging("DEBUG")
    elif args.quiet:
        configure_logging("ERROR")

    logger = get_logger(__name__, component="cli")
    try:
        if args.command == "roundtrip":
            return cmd_roundtrip(args)
        if args.command == "validate":
            return cmd_validate(args)
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return EXIT_FAILURE

    except FlexipageXMLError as e:
        logger.debug("Command failed", extra={"command": args.command}, exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE
    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
