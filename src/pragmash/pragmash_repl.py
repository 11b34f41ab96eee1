"""
Interactive read-parse-print loop for pragmash.

Lines are buffered until they form a complete script: an open for/while body or a
trailing `\\` continuation keeps the REPL asking for more input with the `...> `
prompt. Each complete buffer is parsed and its blocks are printed.

Commands:
    verbose-mode    Toggle printing the JSON form after the tree.
    exit, quit      Leave the REPL.
"""

import io
import traceback

from pragmash.pragmash_cli import render
from pragmash.pragmash_parser import CLOSE_MARKER, parse_program

PROMPT = "pragmash> "
CONTINUATION_PROMPT = "...> "


def print_traceback() -> None:
    buf = io.StringIO()
    traceback.print_exc(file=buf)
    print("[error] >>>")
    print(buf.getvalue())


def needs_more_input(src: str, error: SyntaxError) -> bool:
    """True if `error` only means the buffered source is not finished yet."""
    msg = str(error.msg)
    if msg.startswith("Unexpected end of script after \\"):
        return True
    return msg.endswith(f"Missing {CLOSE_MARKER}.") and not src.endswith("\n\n")


def start_repl(fmt: str = "tree", verbose: bool = False) -> None:
    print("pragmash REPL. Type 'exit' to quit.")
    lines: list[str] = []
    while True:
        try:
            line = input(CONTINUATION_PROMPT if lines else PROMPT)
            if not lines:
                cmd = line.strip()
                if cmd in ("exit", "quit"):
                    break
                if cmd == "verbose-mode":
                    verbose = not verbose
                    print(f"[mode] >>> Verbose mode {'ON' if verbose else 'OFF'}")
                    continue
                if not cmd:
                    continue

            lines.append(line)
            src = "\n".join(lines)
            try:
                blocks = parse_program(src)
            except SyntaxError as e:
                if needs_more_input(src, e):
                    continue
                print(f"[error] >>> {e.msg}")
                lines = []
                continue
            except Exception:
                print_traceback()
                lines = []
                continue

            lines = []
            if blocks:
                print(render(blocks, fmt))
                if verbose and fmt != "json":
                    print(render(blocks, "json"))

        except (KeyboardInterrupt, EOFError):
            print("\nExiting pragmash REPL.")
            break


def main() -> None:
    start_repl()


if __name__ == "__main__":
    main()
