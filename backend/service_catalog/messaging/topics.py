"""AMQP topic-exchange binding semantics.

Words are dot separated. ``*`` matches exactly one word and ``#`` matches
zero or more words.
"""

from functools import lru_cache
from typing import Tuple


def topic_matches(binding_key: str, routing_key: str) -> bool:
    return _match(tuple(binding_key.split(".")), tuple(routing_key.split(".")))


@lru_cache(maxsize=256)
def _match(pattern: Tuple[str, ...], words: Tuple[str, ...]) -> bool:
    if not pattern:
        return not words
    head, rest = pattern[0], pattern[1:]
    if head == "#":
        return any(_match(rest, words[i:]) for i in range(len(words) + 1))
    if not words:
        return False
    if head == "*" or head == words[0]:
        return _match(rest, words[1:])
    return False
