"""
Command-line interface for framestack.

Usage:
    framestack stack frames/*.png --method median --out composite.png
    framestack stack --dir captures/ --method average --brightness 1.2 --report
    framestack adjust composite.png --out preview.png --contrast 1.3
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

from .buffer import FrameSet
from .cli_output import (
    Colors,
    RowProgress,
    print_banner,
    print_error,
    print_header,
    print_metric,
    print_path,
    print_stage,
    print_success,
    print_warning,
    setup_terminal,
)
from .config import AggregationMethod, StackConfig, StackResult, ToneParameters
from .errors import FrameStackError, StackCancelled
from .io import list_frames, read_frame, read_frames, write_frame
from .jobs import submit_stack
from .report import buffer_statistics, write_manifest
from .tone import adjust
from .utils import (
    adjusted_path,
    default_output_name,
    format_duration,
    get_platform_info,
    get_timestamp_iso,
    get_version,
)

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INTERRUPTED = 130


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for CLI."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-7s | %(message)s",
        datefmt="%H:%M:%S",
    )


def stack_files(
    paths: list[Path],
    output: str | Path | None = None,
    config: StackConfig | None = None,
    tone: ToneParameters | None = None,
    write_report: bool = False,
    quiet: bool = False,
    poll_interval: float = 0.1,
) -> StackResult:
    """
    Stack image files into one composite and write it to disk.

    Parameters
    ----------
    paths : list[Path]
        Frame files in capture order.
    output : str or Path, optional
        Composite file. Defaults to ``astro-stacked-<method>-<ms>.png`` in the
        current directory.
    config : StackConfig, optional
        Method and chunking; defaults to average.
    tone : ToneParameters, optional
        When given and not identity, an adjusted variant is also written
        (``<output>-adjusted.png``), derived from the unadjusted composite.
    write_report : bool, default False
        Write a JSON manifest next to the composite.
    quiet : bool, default False
        Suppress progress output.
    poll_interval : float, default 0.1
        Seconds between checks of the background job (keeps Ctrl+C responsive).

    Returns
    -------
    StackResult

    Raises
    ------
    FrameStackError
        On invalid frames or cancellation.
    """
    config = config or StackConfig()
    config.validate()
    method = config.method

    t_start = time.perf_counter()
    if not quiet:
        print_stage(f"Loading {len(paths)} frames")
    frames = FrameSet.build(read_frames(paths))

    if not quiet:
        print_stage(f"Stacking ({method.value})")
        print_metric("Frames", len(frames))
        print_metric("Size", f"{frames.width}x{frames.height}")

    t_stack = time.perf_counter()
    with RowProgress(frames.height, f"Stacking ({method.value})", disable=quiet) as progress:
        job = submit_stack(frames, method, chunk_rows=config.chunk_rows, progress=progress)
        try:
            while not job.done():
                time.sleep(poll_interval)
        except KeyboardInterrupt:
            job.cancel()
            raise
        composite = job.result()
    stack_time = time.perf_counter() - t_stack

    output = Path(output) if output is not None else Path(default_output_name(method.value))
    result = StackResult(
        inputs=[str(p) for p in paths],
        width=composite.width,
        height=composite.height,
        config=config,
        tone=tone if tone is not None and not tone.is_identity else None,
    )
    result.outputs["composite"] = str(write_frame(composite, output))

    if result.tone is not None:
        adjusted = adjust(composite, result.tone)
        result.outputs["adjusted"] = str(write_frame(adjusted, adjusted_path(output)))

    result.stats = {
        "stack_time_s": stack_time,
        "total_time_s": time.perf_counter() - t_start,
        **buffer_statistics(composite),
    }
    result.version = get_version()
    result.timestamp = get_timestamp_iso()
    result.platform = get_platform_info()

    if write_report:
        report_path = output.with_suffix(".json")
        result.outputs["manifest"] = str(report_path)
        write_manifest(result, report_path)

    return result


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog="framestack",
        description="Combine captured frames into one composite and adjust its tone",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"framestack {get_version()}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    def add_tone_options(p: argparse.ArgumentParser) -> None:
        p.add_argument(
            "--brightness",
            type=float,
            default=1.0,
            help="Brightness multiplier, > 0 (default: 1.0)",
        )
        p.add_argument(
            "--contrast",
            type=float,
            default=1.0,
            help="Contrast multiplier around mid-gray, > 0 (default: 1.0)",
        )
        p.add_argument(
            "--saturation",
            type=float,
            default=1.0,
            help="Saturation multiplier, >= 0; 0 gives grayscale (default: 1.0)",
        )

    # Stack command
    stack_parser = subparsers.add_parser(
        "stack",
        help="Stack frame images into one composite",
    )
    stack_parser.add_argument(
        "frames",
        nargs="*",
        type=str,
        help="Frame image files, in capture order",
    )
    stack_parser.add_argument(
        "--dir",
        type=str,
        default=None,
        help="Folder of frames to stack (PNG/JPEG, sorted by name)",
    )
    stack_parser.add_argument(
        "--method",
        "-m",
        choices=[m.value for m in AggregationMethod],
        default=AggregationMethod.AVERAGE.value,
        help="Aggregation method (default: average)",
    )
    stack_parser.add_argument(
        "--out",
        "-o",
        type=str,
        default=None,
        help="Output PNG (default: astro-stacked-<method>-<timestamp>.png)",
    )
    stack_parser.add_argument(
        "--chunk-rows",
        type=int,
        default=64,
        help="Rows per processing block (default: 64)",
    )
    stack_parser.add_argument(
        "--report",
        action="store_true",
        help="Write a JSON run manifest next to the output",
    )
    stack_parser.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Suppress progress output",
    )
    stack_parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )
    add_tone_options(stack_parser)

    # Adjust command
    adjust_parser = subparsers.add_parser(
        "adjust",
        help="Apply brightness/contrast/saturation to a composite",
    )
    adjust_parser.add_argument(
        "input",
        type=str,
        help="Original (unadjusted) composite image",
    )
    adjust_parser.add_argument(
        "--out",
        "-o",
        type=str,
        required=True,
        help="Output image",
    )
    adjust_parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )
    add_tone_options(adjust_parser)

    return parser


def _run_stack(args: argparse.Namespace) -> int:
    setup_terminal()

    paths = [Path(p) for p in args.frames]
    if args.dir is not None:
        paths.extend(list_frames(args.dir))

    if len(paths) == 0:
        print_error("No frames given. Pass frame files or --dir <folder>")
        return EXIT_ERROR

    missing = [p for p in paths if not p.is_file()]
    if missing:
        print_error(f"Frame not found: {missing[0]}")
        return EXIT_ERROR

    tone = ToneParameters(
        brightness=args.brightness,
        contrast=args.contrast,
        saturation=args.saturation,
    )
    config = StackConfig(method=args.method, chunk_rows=args.chunk_rows)

    if not args.quiet:
        print_banner(get_version())

    result = stack_files(
        paths,
        output=args.out,
        config=config,
        tone=tone,
        write_report=args.report,
        quiet=args.quiet,
    )

    if not args.quiet:
        print_header("Stacking complete")
        print_metric("Frames", len(result.inputs))
        print_metric("Method", config.method.value)
        print_metric("Time", format_duration(result.stats["stack_time_s"]))
        for label, path in result.outputs.items():
            print_path(label, path)
    return EXIT_OK


def _run_adjust(args: argparse.Namespace) -> int:
    setup_terminal()

    input_path = Path(args.input)
    if not input_path.is_file():
        print_error(f"Input file not found: {input_path}")
        return EXIT_ERROR

    params = ToneParameters(
        brightness=args.brightness,
        contrast=args.contrast,
        saturation=args.saturation,
    )
    if params.is_identity:
        print_warning("All tone parameters are 1.0; output will equal the input")

    source = read_frame(input_path)
    out = write_frame(adjust(source, params), args.out)
    print_success(f"Adjusted image written: {Colors.PATH}{out}{Colors.RESET}")
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    """Main entry point for CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_ERROR

    setup_logging(args.verbose)

    try:
        if args.command == "stack":
            return _run_stack(args)
        elif args.command == "adjust":
            return _run_adjust(args)
    except (KeyboardInterrupt, StackCancelled):
        if args.command == "stack":
            print_warning("Stacking cancelled")
        else:
            print_warning(f"{args.command.capitalize()} interrupted")
        return EXIT_INTERRUPTED
    except FrameStackError as e:
        print_error(str(e))
        logger.debug("Command failed", exc_info=True)
        return EXIT_ERROR
    except (OSError, ValueError) as e:
        print_error(f"{args.command} failed: {e}")
        logger.debug("Command failed", exc_info=True)
        return EXIT_ERROR

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
