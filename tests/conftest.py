import os
from typing import Callable

import pytest
from hypothesis import settings
from hypothesis import strategies as st

from pragmash.pragmash_ast import Argument, Command, CommandBlock

settings.register_profile("ci", max_examples=200, deadline=None)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "default"))

# Bare words the tokenizer returns unchanged and the parser never treats specially.
KEYWORDS = {"for", "while", "}"}
words = st.text(
    alphabet=st.characters(
        exclude_characters=' \t\r\n"()#\\', exclude_categories=("Cs", "Zs", "Cc")
    ),
    min_size=1,
    max_size=8,
).filter(lambda w: w not in KEYWORDS)


def lit(text: str) -> Argument:
    return Argument.literal(text)


def cmd(name: str | Argument, *args: str | Argument) -> Command:
    def conv(a: str | Argument) -> Argument:
        return a if isinstance(a, Argument) else lit(a)

    return Command(conv(name), [conv(a) for a in args])


@pytest.fixture
def command_block() -> Callable[..., CommandBlock]:
    def make(name: str, *args: str | Argument) -> CommandBlock:
        return CommandBlock(cmd(name, *args))

    return make
