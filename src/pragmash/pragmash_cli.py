"""
pragmash CLI Entrypoint.

This module provides the command-line interface for parsing pragmash scripts.
It supports dumping the block tree of a file or inline string, and interactive REPL mode.

Features:
    - Read source from `.pragmash` files or inline strings.
    - Parse into blocks and print them as an indented tree or as JSON.
    - Output to console or file.
    - Launch an interactive REPL with optional verbosity.

Example usage:
    pragmash hello.pragmash
    pragmash -s "echo hi" -f json
    pragmash loops.pragmash -o loops.json -f json
    pragmash --repl --verbose

Functions:
    run_pragmash(source: str, is_string: bool = False, fmt: str = "tree", out: Optional[str] = None,
                 pretty: bool = False) -> None:
        Executes the full pipeline (split → tokenize → parse → render → output).

    main() -> None:
        Parses CLI arguments and invokes the appropriate action (REPL or parse).
"""

import argparse
import json
import sys

from pragmash.pragmash_ast import Blocks, format_blocks
from pragmash.pragmash_parser import parse_program


def render(blocks: Blocks, fmt: str = "tree") -> str:
    """Render parsed blocks in the requested output format ('tree' or 'json')."""
    if fmt == "json":
        return json.dumps([b.to_dict() for b in blocks], indent=2)
    if fmt == "tree":
        return format_blocks(blocks)
    raise ValueError(f"Unsupported format: {fmt}")


def run_pragmash(
    source: str,
    is_string: bool = False,
    fmt: str = "tree",
    out: str | None = None,
    pretty: bool = False,
) -> None:
    """
    Parse a pragmash script and write its block tree.

    Args:
        source (str): The pragmash source code or path to a `.pragmash` file.
        is_string (bool): If True, treats `source` as raw code instead of a file path. Defaults to False.
        fmt (str): Output format ('tree' or 'json'). Defaults to 'tree'.
        out (str | None): Optional path to write the output. If None, prints to stdout.
        pretty (bool): If True, prints banners around the output. Defaults to False.

    Raises:
        ValueError: If `is_string` is False and the source does not end with '.pragmash'.
        SyntaxError: If the script fails to parse.
    """
    if not is_string and not source.endswith(".pragmash"):
        raise ValueError("Only .pragmash files are supported.")
    # 1. Read source
    if not is_string:
        with open(source, encoding="utf-8") as f:
            source = f.read()

    # 2. Parsing
    blocks = parse_program(source)

    # 3. Rendering
    text = render(blocks, fmt)

    # 4. Output result
    if pretty and not out:
        banner = "=" * 20
        print(f"{banner}\nParsed Blocks\n{banner}\n{text}\n{banner}\n")
    elif not out:
        print(text)

    # 5. Optional write to file
    if out:
        with open(out, "w", encoding="utf-8") as f:
            f.write(text + "\n")
        if pretty:
            print(f"(wrote to {out})")


def main() -> None:
    """
    Entry point for the pragmash CLI.

    Parses command-line arguments and dispatches to the appropriate mode:
    - Launches the REPL if no arguments are passed or `--repl` is specified.
    - Otherwise, parses the source and prints or writes the block tree.

    Supported flags:
        - `-s`, `--string`: Interpret source as a raw string instead of a file path.
        - `-f`, `--format`: Output format ('tree' or 'json'), default is 'tree'.
        - `-o`, `--out`: Write output to a file.
        - `-p`, `--pretty`: Show banners around the output.
        - `--repl`: Launch the interactive REPL.
        - `--verbose`: Enable verbose REPL mode.

    Parse errors are printed to stderr and exit with status 1.
    """
    if len(sys.argv) == 1:
        # No args passed: open REPL instead
        from pragmash.pragmash_repl import start_repl

        start_repl()
        return
    parser = argparse.ArgumentParser(prog="pragmash")
    parser.add_argument("source", nargs="?", help="Filename or raw source (with -s)")
    parser.add_argument(
        "-s", "--string", action="store_true", help="Interpret source as literal string"
    )
    parser.add_argument(
        "-f",
        "--format",
        dest="fmt",
        choices=("tree", "json"),
        default="tree",
        help="Output format (default: tree)",
    )
    parser.add_argument("-o", "--out", metavar="OUTFILE", help="Output to file")
    parser.add_argument(
        "-p", "--pretty", action="store_true", help="Show output with banners"
    )
    parser.add_argument(
        "--repl",
        action="store_true",
        help="Launch interactive REPL instead of parsing a script",
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Verbose REPL mode (if --repl)"
    )

    args = parser.parse_args()

    if args.repl or args.source is None:
        from pragmash.pragmash_repl import start_repl

        start_repl(fmt=args.fmt, verbose=args.verbose)
        return
    try:
        run_pragmash(
            source=args.source,
            is_string=args.string,
            fmt=args.fmt,
            out=args.out,
            pretty=args.pretty,
        )
    except SyntaxError as e:
        print(f"[error] >>> {e.msg}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__" and not any("pytest" in arg for arg in sys.argv):
    main()
