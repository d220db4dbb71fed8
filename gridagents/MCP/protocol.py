"""
Wire format for the game server.

Every message is one line of UTF-8 text: a message type followed by its
arguments, all separated by ``|``. There is no escaping, so arguments can
contain neither ``|`` nor a newline.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

SEPARATOR = "|"


class ProtocolError(ValueError):
    """Raised for a message that cannot be decoded or encoded."""


@dataclass(frozen=True)
class Event:
    kind: str
    fields: Tuple[str, ...]

    def text(self, index: int, what: str) -> str:
        if index >= len(self.fields):
            raise ProtocolError(f"'{self.kind}' message is missing {what}")
        return self.fields[index].strip()

    def uint(self, index: int, what: str) -> int:
        return parse_uint(self.text(index, what), what)


def parse_uint(arg: str, what: str) -> int:
    arg = arg.strip()
    # int() alone would also take "+3", "1_0" and non-ASCII digits
    if not (arg.isascii() and arg.isdigit()):
        raise ProtocolError(f"Cannot parse {what}: \"{arg}\"")
    return int(arg)


def decode(line: str) -> Optional[Event]:
    """Split one received line into an Event. Blank lines give None."""
    line = line.rstrip("\r\n")
    if not line.strip():
        return None
    parts = line.split(SEPARATOR)
    return Event(kind=parts[0].strip(), fields=tuple(parts[1:]))


def encode(kind: str, *args: str) -> str:
    for arg in (kind,) + args:
        if SEPARATOR in arg or "\n" in arg or "\r" in arg:
            raise ProtocolError(f"Cannot send {arg!r}: '|' and newlines are not allowed")
    return SEPARATOR.join((kind,) + args) + "\n"


# ---------------------------------------------------------------------- #
# Inbound messages
# ---------------------------------------------------------------------- #
def game_args(event: Event) -> Tuple[int, int, int]:
    """(width, height, own_id) of a ``game`` message."""
    return (
        event.uint(0, "grid width"),
        event.uint(1, "grid height"),
        event.uint(2, "own player ID"),
    )


def player_args(event: Event) -> Tuple[int, str]:
    return event.uint(0, "player ID"), event.text(1, "player name")


def pos_args(event: Event) -> Tuple[int, int, int]:
    return (
        event.uint(0, "player ID"),
        event.uint(1, "position (x)"),
        event.uint(2, "position (y)"),
    )


def chat_args(event: Event) -> Tuple[int, str]:
    return event.uint(0, "player ID"), event.text(1, "chat text")


def die_args(event: Event) -> List[int]:
    """Player ids of a ``die`` message; the server may list several."""
    if not event.fields:
        raise ProtocolError("'die' message is missing player ID")
    return [event.uint(i, "player ID") for i in range(len(event.fields))]


def lose_args(event: Event) -> Tuple[int, int]:
    return event.uint(0, "amount of wins"), event.uint(1, "amount of losses")


# ---------------------------------------------------------------------- #
# Outbound messages
# ---------------------------------------------------------------------- #
def join_message(username: str, password: str) -> str:
    return encode("join", username, password)


def move_message(command: str) -> str:
    return encode("move", command)


def chat_message(text: str) -> str:
    return encode("chat", text)
