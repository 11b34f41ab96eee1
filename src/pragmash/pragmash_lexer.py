"""
Lexical analysis for pragmash scripts.

This module provides the two collaborators the parser is built on:

Classes:
    Script: The logical lines of a source text plus the physical line each one started on.
    CharacterStream: Stream abstraction for reading characters of one logical line.
    Lexer: Converts a CharacterStream into a sequence of tokens.

Functions:
    parse_script(source): Split raw source into a Script, joining `\\` continuations.
    tokenize(line): Tokenize one logical line into a list of Token objects.

Token forms:
    - Bare words: any run of characters other than whitespace, `"`, `(` and `)`
    - Quoted strings: `"..."` with `\\n`, `\\t`, `\\r`, `\\"` and `\\\\` escapes
    - Embedded commands: `( ... )`, kept as unparsed source for the parser to re-tokenize
    - Comments: `#` at a token boundary runs to the end of the line

Raises:
    SyntaxError: On unterminated strings, unbalanced parentheses, or a dangling
    line continuation at the end of the script.

Example:
    >>> tokenize('echo "hi there" (add 1 2)')
    [Token('echo'), Token('hi there'), Token((add 1 2))]
"""

from pragmash.pragmash_ast import Token

ESCAPES = {"n": "\n", "t": "\t", "r": "\r", '"': '"', "\\": "\\"}
WHITESPACE = " \t\r\n"


class Script:
    """
    The logical lines of a script.

    Attributes:
        logical_lines (list[str]): Text of each logical line, continuations already joined.
        line_starts (list[int]): 1-based physical line number where each logical line starts.
    """

    def __init__(self, logical_lines: list[str], line_starts: list[int]) -> None:
        if len(logical_lines) != len(line_starts):
            raise ValueError("logical_lines and line_starts must have the same length")
        self.logical_lines = logical_lines
        self.line_starts = line_starts

    def __len__(self) -> int:
        return len(self.logical_lines)

    def __repr__(self) -> str:
        return f"Script({self.logical_lines!r}, {self.line_starts!r})"

    def line_number(self, index: int) -> int:
        """Returns the original source line number of the logical line at `index`."""
        return self.line_starts[index]


def parse_script(source: str) -> Script:
    """
    Split source text into logical lines.

    A physical line ending in a backslash is joined with the line after it, and the
    resulting logical line keeps the number of its first physical line.

    Raises:
        SyntaxError: If the last physical line ends in a continuation backslash.
    """
    lines: list[str] = []
    starts: list[int] = []
    pending: str | None = None
    pending_start = 0

    for number, raw in enumerate(source.split("\n"), start=1):
        if raw.endswith("\r"):
            raw = raw[:-1]
        if pending is None:
            pending, pending_start = "", number
        if raw.endswith("\\"):
            pending += raw[:-1]
            continue
        lines.append(pending + raw)
        starts.append(pending_start)
        pending = None

    if pending is not None:
        raise SyntaxError(
            f"Unexpected end of script after \\ on line {pending_start}."
        )
    return Script(lines, starts)


class CharacterStream:
    """
    A cursor over the characters of one logical line.

    Attributes:
        source (str): The input text.
        position (int): Current index in the source.
    """

    def __init__(self, source: str, position: int = 0) -> None:
        self.source = source
        self.position = position

    def next(self) -> str:
        """
        Consumes and returns the next character in the stream.

        Raises:
            Exception: If reading past the end of the source.
        """
        if self.position >= len(self.source):
            raise Exception(
                f"CharacterStreamError: Attempted to read past end of source at position=<{self.position}>"
            )
        char = self.source[self.position]
        self.position += 1
        return char

    def peek(self, offset: int = 0) -> str:
        """Returns the character at `offset` without advancing, or "" when out of bounds."""
        index = self.position + offset
        if index < 0 or index >= len(self.source):
            return ""
        return self.source[index]

    def end_of_file(self) -> bool:
        return self.position >= len(self.source)


class Lexer:
    """Lexical analyzer for a single logical line.

    Attributes:
        stream (CharacterStream): The source stream to tokenize.
    """

    def __init__(self, stream: CharacterStream) -> None:
        self.stream = stream

    def peek(self) -> str:
        return self.stream.peek()

    def advance(self) -> str:
        return self.stream.next()

    def skip_whitespace(self) -> None:
        """Skips whitespace and a trailing comment."""
        while not self.stream.end_of_file():
            if self.peek() in WHITESPACE:
                self.advance()
            elif self.peek() == "#":
                self.stream.position = len(self.stream.source)
            else:
                break

    def next_token(self) -> Token | None:
        """Consumes and returns the next Token, or None at the end of the line.

        Raises:
            SyntaxError: On an unterminated string or unbalanced parentheses.
        """
        self.skip_whitespace()
        if self.stream.end_of_file():
            return None

        ch = self.peek()
        if ch == '"':
            return Token(self.read_string())
        if ch == "(":
            return Token(self.read_command(), command=True)
        if ch == ")":
            raise SyntaxError("Unexpected ).")
        return Token(self.read_word())

    def read_word(self) -> str:
        word = ""
        while not self.stream.end_of_file() and self.peek() not in WHITESPACE + '"()':
            word += self.advance()
        return word

    def read_string(self) -> str:
        self.advance()  # opening quote
        val = ""
        while not self.stream.end_of_file():
            ch = self.advance()
            if ch == '"':
                return val
            if ch == "\\" and not self.stream.end_of_file():
                esc = self.advance()
                val += ESCAPES.get(esc, "\\" + esc)
            else:
                val += ch
        raise SyntaxError("Unterminated string.")

    def read_command(self) -> str:
        """Reads a parenthesized embedded command and returns its inner source."""
        self.advance()  # opening paren
        start = self.stream.position
        depth = 1
        while not self.stream.end_of_file():
            ch = self.peek()
            if ch == '"':
                self.read_string()
                continue
            self.advance()
            if ch == "(":
                depth += 1
            elif ch == ")":
                depth -= 1
                if depth == 0:
                    return self.stream.source[start : self.stream.position - 1]
        raise SyntaxError("Missing ).")


def tokenize(line: str) -> list[Token]:
    """Tokenize one logical line. Blank and comment-only lines yield an empty list."""
    lexer = Lexer(CharacterStream(line))
    tokens: list[Token] = []
    while True:
        tok = lexer.next_token()
        if tok is None:
            break
        tokens.append(tok)
    return tokens


__all__ = ["CharacterStream", "Lexer", "Script", "parse_script", "tokenize"]
