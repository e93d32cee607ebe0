"""
Command-line interface for strokefit.

Fits Bezier curves to strokes read from a JSON points file and prints the
result to stdout.
"""

import argparse
import json
import math
import sys

import yaml

from strokefit.config import load_config, save_default_config
from strokefit.strokes.preprocess import PREPROCESS_MODES
from strokefit.tracer import configure_tracer, get_tracer

OUTPUT_FORMATS = ("json", "svg-path", "svg")


def main(argv=None):
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        prog="strokefit",
        description="strokefit: fit smooth cubic Bezier splines to pen and mouse strokes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Fit command
    fit_parser = subparsers.add_parser("fit", help="Fit curves to strokes in a JSON points file")
    fit_parser.add_argument(
        "--points", "-p",
        required=True,
        help="JSON file with a list of [x, y] points or a list of such lists",
    )
    fit_parser.add_argument(
        "--config", "-c",
        default=None,
        help="Path to YAML configuration file",
    )
    fit_parser.add_argument(
        "--mode",
        default=None,
        choices=PREPROCESS_MODES,
        help="Preprocessing mode (overrides config)",
    )
    fit_parser.add_argument(
        "--error", "-e",
        type=float,
        default=None,
        help="Maximum fitting error (overrides config)",
    )
    fit_parser.add_argument(
        "--format", "-f",
        default="json",
        choices=OUTPUT_FORMATS,
        help="Output format",
    )
    fit_parser.add_argument(
        "--stream",
        action="store_true",
        help="Fit incrementally, one point at a time, like a live stroke",
    )
    fit_parser.add_argument(
        "--trace",
        action="store_true",
        help="Enable runtime tracing",
    )
    fit_parser.add_argument(
        "--trace-level",
        default=None,
        choices=["ERROR", "WARN", "INFO", "DEBUG"],
        help="Trace log level",
    )
    fit_parser.add_argument(
        "--trace-file",
        default=None,
        help="Path to write trace logs",
    )
    fit_parser.add_argument(
        "--trace-json",
        action="store_true",
        help="Enable JSON trace output",
    )

    # Init config command
    init_parser = subparsers.add_parser("init-config", help="Create default config file")
    init_parser.add_argument(
        "--out", "-o",
        default="strokefit_config.yaml",
        help="Output path for config file",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "fit":
        return handle_fit(args)
    elif args.command == "init-config":
        return handle_init_config(args)

    return 0


def handle_fit(args):
    """Handle the fit command."""
    try:
        config = load_config(args.config)
    except (OSError, yaml.YAMLError) as e:
        print(f"\nError: {str(e)}", file=sys.stderr)
        return 1

    # Command-line flags win over the config file
    tracing = config.tracing
    configure_tracer(
        enabled=args.trace or tracing.enabled,
        level=args.trace_level or tracing.level,
        file_path=args.trace_file or tracing.file_path,
        json_output=args.trace_json or tracing.json_output,
    )

    tracer = get_tracer()

    try:
        from strokefit.pipeline import fit_strokes, replay_stroke

        if args.mode is not None:
            config.preprocess.mode = args.mode
        if args.error is not None:
            config.fit.max_error = args.error
            config.builder.max_error = args.error

        strokes = load_strokes(args.points)

        with tracer.span("cli_fit", module="cli", strokes=len(strokes)):
            if args.stream:
                results = [replay_stroke(points, config) for points in strokes]
            else:
                results = fit_strokes(strokes, config)

        print(format_results(results, args.format))
        return 0

    except Exception as e:
        tracer.event(f"Fit failed: {str(e)}", level="ERROR")
        print(f"\nError: {str(e)}", file=sys.stderr)
        return 1


def handle_init_config(args):
    """Handle the init-config command."""
    save_default_config(args.out)
    print(f"Default configuration saved to: {args.out}")
    return 0


def load_strokes(path):
    """
    Read strokes from a JSON file.

    Accepts a single stroke ([[x, y], ...]) or several ([[[x, y], ...], ...]).
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a JSON list of points")

    if data and isinstance(data[0], list) and data[0] and isinstance(data[0][0], list):
        return data
    return [data]


def format_results(results, fmt):
    """Render fitted strokes in one of OUTPUT_FORMATS."""
    from strokefit.export.svg_path import curves_to_svg_path, emit_curves_svg

    if fmt == "svg-path":
        return "\n".join(curves_to_svg_path(r.curves) for r in results)

    if fmt == "svg":
        max_x = max((r.bbox[2] for r in results if r.curves), default=0.0)
        max_y = max((r.bbox[3] for r in results if r.curves), default=0.0)
        width = max(1, math.ceil(max_x) + 10)
        height = max(1, math.ceil(max_y) + 10)
        return emit_curves_svg(results, width, height)

    return json.dumps([r.model_dump() for r in results], indent=2)


if __name__ == "__main__":
    sys.exit(main())
