"""
Defines the syntax tree value types produced by the pragmash parser.

Classes:
    Token:
        One lexical unit of a logical line, either a literal word or the unparsed
        source of an embedded command.

    Argument:
        Exactly one of a literal text or a nested Command.

    Command:
        A name Argument followed by an ordered sequence of parameter Arguments.

    Block, CommandBlock, ForBlock, WhileBlock:
        The closed set of statement-level units a program is made of.

    ArgumentDict, CommandDict, BlockDict:
        TypedDict shapes returned by the `to_dict()` methods, suitable for JSON output.

Every value in this module is immutable once constructed. Sequences are stored as
tuples and attribute assignment raises AttributeError.

Example:
    cmd = Command(Argument.literal("echo"), [Argument.literal("hi")])
    block = CommandBlock(cmd)
"""

from __future__ import annotations

from typing import Any, Iterable, TypedDict

UNESCAPES = {"\n": "\\n", "\t": "\\t", "\r": "\\r", '"': '\\"', "\\": "\\\\"}


class _Frozen:
    # Subclasses define __reduce__ so copy and pickle rebuild through __init__.
    __slots__ = ()

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def _set(self, name: str, value: Any) -> None:
        object.__setattr__(self, name, value)


class Token(_Frozen):
    """Represents a single token of a logical line.

    Attributes:
        text (str): The literal text, or the inner source of an embedded command.
        command (bool): True if the token is an embedded command to be re-tokenized.
    """

    __slots__ = ("text", "command")

    text: str
    command: bool

    def __init__(self, text: str, command: bool = False) -> None:
        self._set("text", text)
        self._set("command", command)

    def __repr__(self) -> str:
        if self.command:
            return f"Token(({self.text}))"
        return f"Token({self.text!r})"

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Token)
            and self.text == other.text
            and self.command == other.command
        )

    def __hash__(self) -> int:
        return hash((self.text, self.command))

    def __reduce__(self) -> tuple[Any, ...]:
        return (type(self), (self.text, self.command))


class ArgumentDict(TypedDict, total=False):
    """Serialized form of an Argument: `text` for literals, `command` for nested commands."""

    text: str
    command: "CommandDict"


class CommandDict(TypedDict):
    """Serialized form of a Command."""

    name: ArgumentDict
    args: list[ArgumentDict]


class BlockDict(TypedDict, total=False):
    """
    Serialized form of a Block.

    Fields:
        kind (str): One of "command", "for", "while".
        command (CommandDict): Present for command blocks.
        key (ArgumentDict | None): Present for for blocks.
        value (ArgumentDict): Present for for blocks.
        condition (list[ArgumentDict]): Present for while blocks.
        body (list[BlockDict]): Present for for and while blocks.
    """

    kind: str
    command: CommandDict
    key: ArgumentDict | None
    value: ArgumentDict
    condition: list[ArgumentDict]
    body: list["BlockDict"]


class Argument(_Frozen):
    """
    A single argument: either literal text or a nested Command.

    Exactly one of `text` and `command` is set. Use `Argument.literal()` and
    `Argument.nested()` rather than passing both keywords by hand.

    Raises:
        ValueError: If both or neither of `text` and `command` are given.
    """

    __slots__ = ("text", "command")

    text: str | None
    command: Command | None

    def __init__(self, text: str | None = None, command: Command | None = None) -> None:
        if (text is None) == (command is None):
            raise ValueError("Argument needs exactly one of text or command")
        self._set("text", text)
        self._set("command", command)

    @classmethod
    def literal(cls, text: str) -> Argument:
        return cls(text=text)

    @classmethod
    def nested(cls, command: Command) -> Argument:
        return cls(command=command)

    @property
    def is_command(self) -> bool:
        return self.command is not None

    def __repr__(self) -> str:
        if self.command is not None:
            return f"Argument(command={self.command!r})"
        return f"Argument({self.text!r})"

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Argument):
            return False
        return self.text == other.text and self.command == other.command

    def __hash__(self) -> int:
        return hash((self.text, self.command))

    def __reduce__(self) -> tuple[Any, ...]:
        return (type(self), (self.text, self.command))

    def to_dict(self) -> ArgumentDict:
        if self.command is not None:
            return {"command": self.command.to_dict()}
        assert self.text is not None  # for mypy
        return {"text": self.text}

    def render(self) -> str:
        if self.command is not None:
            return f"({self.command.render()})"
        assert self.text is not None  # for mypy
        if self.text == "" or any(ch in self.text for ch in ' \t\n\r"()#\\'):
            escaped = "".join(UNESCAPES.get(ch, ch) for ch in self.text)
            return f'"{escaped}"'
        return self.text


class Command(_Frozen):
    """A command invocation: a name Argument plus ordered parameter Arguments."""

    __slots__ = ("name", "args")

    name: Argument
    args: tuple[Argument, ...]

    def __init__(self, name: Argument, args: Iterable[Argument] = ()) -> None:
        self._set("name", name)
        self._set("args", tuple(args))

    def __repr__(self) -> str:
        return f"Command(name={self.name!r}, args={list(self.args)!r})"

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Command)
            and self.name == other.name
            and self.args == other.args
        )

    def __hash__(self) -> int:
        return hash((self.name, self.args))

    def __reduce__(self) -> tuple[Any, ...]:
        return (Command, (self.name, self.args))

    def to_dict(self) -> CommandDict:
        return {
            "name": self.name.to_dict(),
            "args": [a.to_dict() for a in self.args],
        }

    def render(self) -> str:
        return " ".join(a.render() for a in (self.name, *self.args))


Condition = tuple[Argument, ...]
"""The header arguments of a while-loop. Opaque to the parser."""


class Block(_Frozen):
    """Base of the closed set {CommandBlock, ForBlock, WhileBlock}."""

    __slots__ = ()

    kind: str = ""

    def to_dict(self) -> BlockDict:  # pragma: no cover
        raise NotImplementedError

    def render_lines(self, indent: int = 0) -> list[str]:  # pragma: no cover
        raise NotImplementedError


class CommandBlock(Block):
    """A plain command statement."""

    __slots__ = ("command",)

    kind = "command"
    command: Command

    def __init__(self, command: Command) -> None:
        self._set("command", command)

    def __repr__(self) -> str:
        return f"CommandBlock({self.command!r})"

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, CommandBlock) and self.command == other.command

    def __hash__(self) -> int:
        return hash(("command", self.command))

    def __reduce__(self) -> tuple[Any, ...]:
        return (CommandBlock, (self.command,))

    def to_dict(self) -> BlockDict:
        return {"kind": self.kind, "command": self.command.to_dict()}

    def render_lines(self, indent: int = 0) -> list[str]:
        return [" " * indent + "command " + self.command.render()]


class ForBlock(Block):
    """
    A for-loop. `key` is only set when the header gave two arguments.

    Attributes:
        key (Argument | None): Optional loop key.
        value (Argument): Loop value, always present.
        body (tuple[Block, ...]): Child blocks in execution order.
    """

    __slots__ = ("key", "value", "body")

    kind = "for"
    key: Argument | None
    value: Argument
    body: tuple[Block, ...]

    def __init__(
        self, key: Argument | None, value: Argument, body: Iterable[Block] = ()
    ) -> None:
        self._set("key", key)
        self._set("value", value)
        self._set("body", tuple(body))

    def __repr__(self) -> str:
        return f"ForBlock(key={self.key!r}, value={self.value!r}, body={list(self.body)!r})"

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, ForBlock)
            and self.key == other.key
            and self.value == other.value
            and self.body == other.body
        )

    def __hash__(self) -> int:
        return hash(("for", self.key, self.value, self.body))

    def __reduce__(self) -> tuple[Any, ...]:
        return (ForBlock, (self.key, self.value, self.body))

    def to_dict(self) -> BlockDict:
        return {
            "kind": self.kind,
            "key": self.key.to_dict() if self.key is not None else None,
            "value": self.value.to_dict(),
            "body": [b.to_dict() for b in self.body],
        }

    def render_lines(self, indent: int = 0) -> list[str]:
        header = [a.render() for a in (self.key, self.value) if a is not None]
        lines = [" " * indent + "for " + " ".join(header)]
        for child in self.body:
            lines.extend(child.render_lines(indent + 2))
        return lines


class WhileBlock(Block):
    """A while-loop with an opaque Condition and a body."""

    __slots__ = ("condition", "body")

    kind = "while"
    condition: Condition
    body: tuple[Block, ...]

    def __init__(self, condition: Iterable[Argument], body: Iterable[Block] = ()) -> None:
        self._set("condition", tuple(condition))
        self._set("body", tuple(body))

    def __repr__(self) -> str:
        return f"WhileBlock(condition={list(self.condition)!r}, body={list(self.body)!r})"

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, WhileBlock)
            and self.condition == other.condition
            and self.body == other.body
        )

    def __hash__(self) -> int:
        return hash(("while", self.condition, self.body))

    def __reduce__(self) -> tuple[Any, ...]:
        return (WhileBlock, (self.condition, self.body))

    def to_dict(self) -> BlockDict:
        return {
            "kind": self.kind,
            "condition": [a.to_dict() for a in self.condition],
            "body": [b.to_dict() for b in self.body],
        }

    def render_lines(self, indent: int = 0) -> list[str]:
        header = " ".join(a.render() for a in self.condition)
        lines = [(" " * indent + "while " + header).rstrip()]
        for child in self.body:
            lines.extend(child.render_lines(indent + 2))
        return lines


Blocks = list[Block]
"""The ordered top-level result of a parse."""


def format_blocks(blocks: Iterable[Block]) -> str:
    """Render blocks as an indented tree listing, one block header per line."""
    lines: list[str] = []
    for block in blocks:
        lines.extend(block.render_lines())
    return "\n".join(lines)


__all__ = [
    "Argument",
    "ArgumentDict",
    "Block",
    "BlockDict",
    "Blocks",
    "Command",
    "CommandBlock",
    "CommandDict",
    "Condition",
    "ForBlock",
    "Token",
    "WhileBlock",
    "format_blocks",
]
