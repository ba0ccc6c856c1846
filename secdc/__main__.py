"""Command-line entry point: compile one source file to an assembly listing."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from secdc import __version__
from secdc.compiler import compile_file
from secdc.config import CompilerOptions
from secdc.errors import SecdError

LOGGER = logging.getLogger("secdc.main")


class _ArgumentParser(argparse.ArgumentParser):
    # every failure exits with status 1
    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="secdc",
        description="Compile an S-expression program to SECD machine assembly.",
    )
    parser.add_argument("file", help="source file to compile")
    parser.add_argument("-o", "--output", help="write the listing here instead of stdout")
    parser.add_argument("--share-branches", action="store_true",
                        help="emit structurally identical conditional arms once")
    parser.add_argument("--no-comments", action="store_true",
                        help="leave comment lines out of the listing")
    parser.add_argument("--addresses", action="store_true",
                        help="prefix each instruction with its address")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: list[str] | None = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    parser = build_parser()
    if not argv:
        parser.print_usage(sys.stderr)
        return 1
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    options = CompilerOptions.from_env()
    if args.share_branches:
        options.share_branches = True
    if args.no_comments:
        options.comments = False
    if args.addresses:
        options.addresses = True

    path = Path(args.file)
    if not path.is_file():
        print(f"No such file: {args.file}", file=sys.stderr)
        return 1

    LOGGER.debug("compiling %s with %s", path, options)
    try:
        lines = compile_file(path, options)
    except SecdError as err:
        print(f"{path}: {err}", file=sys.stderr)
        return 1
    except OSError as err:
        print(f"Cannot read source file: {path} ({err.strerror})", file=sys.stderr)
        return 1

    listing = "\n".join(lines) + "\n"
    if args.output:
        try:
            Path(args.output).write_text(listing)
        except OSError as err:
            print(f"Cannot open output file: {args.output} ({err})", file=sys.stderr)
            return 1
    else:
        sys.stdout.write(listing)
    return 0


if __name__ == "__main__":
    sys.exit(main())
