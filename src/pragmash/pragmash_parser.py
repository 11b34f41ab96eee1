"""
pragmash Block Parser

Parses the logical lines of a pragmash script into an ordered list of blocks.

Each logical line is tokenized on its own. A line whose first token is the literal
`for` or `while` opens a control block; every other non-blank line is a plain
command. Embedded command tokens are re-tokenized and parsed recursively, so an
argument can hold a full command to any depth.

Grammar
-------
- Command:      `name arg arg ...`
- For-loop:     `for value }` or `for key value }`, body lines, then a line starting with `}`
- While-loop:   `while cond... }`, body lines, then a line starting with `}`
- Sub-command:  any token written as `( ... )`

The same `}` symbol ends a control block header and starts the line that closes
its body.

Entry Points
------------
- `parse_program()`: Parse source text into a list of top-level blocks.
- `Parser.next_block()`: Parse the block starting at the current logical line.
- `tokens_to_command()` / `token_to_argument()`: Build commands from tokens.

Raises
------
SyntaxError
    Raised on the first malformed construct. Errors leaving `next_block` are
    prefixed with `Error at line N: `, where N is the original source line of the
    logical line being parsed.
    Nesting too deep for the interpreter stack fails with `Nesting too deep.`,
    prefixed with the top-level line that opened it.
"""

from __future__ import annotations

from pragmash.pragmash_ast import (
    Argument,
    Block,
    Blocks,
    Command,
    CommandBlock,
    ForBlock,
    Token,
    WhileBlock,
)
from pragmash.pragmash_lexer import Script, parse_script, tokenize

CLOSE_MARKER = "}"


def token_to_argument(token: Token) -> Argument:
    """Convert a token to an Argument, parsing embedded commands recursively."""
    if not token.command:
        return Argument.literal(token.text)
    return Argument.nested(tokens_to_command(tokenize(token.text)))


def tokens_to_command(tokens: list[Token]) -> Command:
    """
    Build a Command from a token list. The first token is the name.

    Raises:
        SyntaxError: If `tokens` is empty, or a nested command fails to tokenize.
    """
    if not tokens:
        raise SyntaxError("No tokens in command.")
    args = [token_to_argument(t) for t in tokens]
    return Command(args[0], args[1:])


def has_body_open_marker(tokens: list[Token]) -> bool:
    if len(tokens) <= 1:
        return False
    last = tokens[-1]
    return not last.command and last.text == CLOSE_MARKER


class Parser:
    """
    Cursor over the logical lines of a Script.

    The cursor only moves forward. Control blocks read their bodies by calling
    back into `next_block`, so nesting depth follows the input.

    Attributes
    ----------
    script : Script
        The logical lines being parsed.
    position : int
        Index of the next logical line to consume.
    """

    def __init__(self, script: Script) -> None:
        self.script: Script = script
        self.position: int = 0

    def at_end(self) -> bool:
        return self.position >= len(self.script.logical_lines)

    def current_line(self) -> str:
        return self.script.logical_lines[self.position]

    def error_prefix(self) -> str:
        return f"Error at line {self.script.line_number(self.position)}: "

    def parse(self) -> Blocks:
        """
        Parse every remaining line and return the top-level blocks.

        Nesting deeper than the interpreter stack allows is reported against the
        top-level line that opened it.
        """
        blocks: Blocks = []
        while not self.at_end():
            prefix = self.error_prefix()
            try:
                block = self.next_block()
            except RecursionError:
                raise SyntaxError(prefix + "Nesting too deep.") from None
            if block is not None:
                blocks.append(block)
        return blocks

    def next_block(self) -> Block | None:
        """
        Parse the block starting at the current line.

        Returns None for blank lines and at the end of input; callers skip it.
        """
        if self.at_end():
            return None

        prefix = self.error_prefix()
        try:
            tokens = tokenize(self.current_line())
        except SyntaxError as e:
            raise SyntaxError(prefix + str(e.msg)) from e
        self.position += 1

        if not tokens:
            return None

        try:
            first = tokens[0]
            if not first.command and first.text == "for":
                return self.read_for_loop(tokens)
            if not first.command and first.text == "while":
                return self.read_while_loop(tokens)
            return CommandBlock(tokens_to_command(tokens))
        except SyntaxError as e:
            raise SyntaxError(prefix + str(e.msg)) from e

    def read_block_body(self, allow_extra: bool = False) -> tuple[Block, ...]:
        """
        Read blocks until a line starting with the close marker.

        Raises:
            SyntaxError: If the close line has trailing tokens and `allow_extra`
                is False, or if input ends before a close line.
        """
        body: list[Block] = []
        while not self.at_end():
            try:
                tokens = tokenize(self.current_line())
            except SyntaxError:
                # next_block reports the tokenizer error with its line number.
                tokens = []
            if tokens and not tokens[0].command and tokens[0].text == CLOSE_MARKER:
                if not allow_extra and len(tokens) > 1:
                    raise SyntaxError(f"Unexpected tokens after {CLOSE_MARKER}.")
                self.position += 1
                return tuple(body)

            block = self.next_block()
            if block is not None:
                body.append(block)
        raise SyntaxError(f"Missing {CLOSE_MARKER}.")

    def read_header_arguments(self, tokens: list[Token]) -> list[Argument]:
        return [token_to_argument(t) for t in tokens[1:-1]]

    def read_for_loop(self, tokens: list[Token]) -> ForBlock:
        if not has_body_open_marker(tokens):
            raise SyntaxError("Missing { in for-loop.")
        if len(tokens) not in (3, 4):
            raise SyntaxError("Invalid number of arguments for for-loop.")

        args = self.read_header_arguments(tokens)
        body = self.read_block_body(False)
        if len(args) == 1:
            return ForBlock(None, args[0], body)
        return ForBlock(args[0], args[1], body)

    def read_while_loop(self, tokens: list[Token]) -> WhileBlock:
        if not has_body_open_marker(tokens):
            raise SyntaxError("Missing { in while-loop.")

        condition = self.read_header_arguments(tokens)
        body = self.read_block_body(False)
        return WhileBlock(condition, body)


def parse_program(source: str) -> Blocks:
    """Parse a full pragmash script and return its top-level blocks."""
    return Parser(parse_script(source)).parse()


__all__ = [
    "CLOSE_MARKER",
    "Parser",
    "has_body_open_marker",
    "parse_program",
    "token_to_argument",
    "tokens_to_command",
]
