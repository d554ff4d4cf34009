"""Command-line front door for lazyfind.

Parses CLI options, resolves the search command from arguments or config,
then prints entries as the file-external source streams them in.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Iterable

from . import config
from .source import BatchChannel, FileExternalSource, FindSource, ResolvedEntry, SearchRequest, SourceParams


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def _split_command(argv: list[str]) -> tuple[list[str], list[str]]:
    """Split ``argv`` at the first ``--`` into options and command tokens."""
    if "--" not in argv:
        return argv, []
    idx = argv.index("--")
    return argv[:idx], argv[idx + 1 :]


def format_entry(entry: ResolvedEntry, output: str) -> str:
    if output == "json":
        return json.dumps(entry.to_item(), ensure_ascii=False)
    if output == "long":
        mtime = "-" if entry.mtime_ms is None else str(entry.mtime_ms)
        return f"{entry.kind.value:<9} {entry.size:>12} {mtime:>14} {entry.word}"
    return entry.word


def write_batches(channel: BatchChannel, output: str, out=None) -> int:
    """Print every entry from ``channel`` until it closes; return entry count."""
    stream = out if out is not None else sys.stdout
    count = 0
    for batch in channel:
        _write_lines((format_entry(entry, output) for entry in batch), stream)
        count += len(batch)
    return count


def _write_lines(lines: Iterable[str], stream) -> None:
    for line in lines:
        stream.write(line)
        stream.write("\n")
    stream.flush()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lazyfind",
        description="Stream an external file-search command's output as classified entries.",
        epilog="Pass the command after --, e.g. lazyfind ~/src -- fd --type f",
    )
    parser.add_argument("path", nargs="?", default=None, help="Working directory. Defaults to current directory.")
    parser.add_argument(
        "--update-items",
        type=_positive_int,
        default=None,
        help="Entries per batch after the first one (default: from config).",
    )
    output = parser.add_mutually_exclusive_group()
    output.add_argument("--json", action="store_const", dest="output", const="json", help="Print one JSON item per line.")
    output.add_argument("--long", action="store_const", dest="output", const="long", help="Print kind, size and mtime.")
    parser.add_argument("--oneshot", action="store_true", help="Append the path to the command and skip stat calls.")
    parser.add_argument("--save", action="store_true", help="Persist the command and --update-items as defaults.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug details to stderr.")
    parser.set_defaults(output="plain")
    return parser


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and stream the configured command's results.

    Without a command on the command line the configured ``cmd`` is used;
    with neither, nothing is printed. Ctrl-C cancels the running search.
    """
    raw_args = list(sys.argv[1:] if argv is None else argv)
    option_args, cmd = _split_command(raw_args)
    parser = build_parser()
    args = parser.parse_args(option_args)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    configured = config.load_source_params()
    params = SourceParams(
        cmd=tuple(cmd) if cmd else configured.cmd,
        update_items=args.update_items if args.update_items is not None else configured.update_items,
    )
    if args.save:
        config.save_source_params(params)

    if args.oneshot:
        channel = FindSource().gather(params.cmd, args.path)
    else:
        channel = FileExternalSource().gather(SearchRequest.build(args.path, params.cmd, params.update_items))

    try:
        write_batches(channel, args.output)
    except KeyboardInterrupt:
        channel.cancel("interrupted")
        channel.wait_closed()
        raise SystemExit(130)


if __name__ == "__main__":
    main()
