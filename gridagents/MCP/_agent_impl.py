from __future__ import annotations

from enum import Enum
from typing import Callable, Dict, List, Optional

from . import protocol
from .beam import select_direction
from .config import ClientConfig
from .protocol import Event
from .world import UNKNOWN_PLAYER, World


class ClientState(Enum):
    AWAITING_GAME = "awaiting_game"
    IN_EPOCH = "in_epoch"
    TERMINATED = "terminated"


class PlayerAgent:
    """
    Light-cycle agent nicknamed "MCP".

    Owns the world model and turns each received line into zero or more
    messages to send back. Moves are chosen by casting beams from our head
    and heading wherever the most free cells lie.
    """

    def __init__(self, config: ClientConfig, log: Callable[[str], None] = print) -> None:
        self.config = config
        self.log = log
        self.world = World(config.username)
        self.state = ClientState.AWAITING_GAME
        self.empty_messages = 0
        self.wins = 0
        self.losses = 0
        self._handlers: Dict[str, Callable[[Event], List[str]]] = {
            "error": self._on_error,
            "motd": self._on_motd,
            "game": self._on_game,
            "tick": self._on_tick,
            "player": self._on_player,
            "pos": self._on_pos,
            "chat": self._on_chat,
            "die": self._on_die,
            "lose": self._on_lose,
            "win": self._on_win,
        }

    @property
    def terminated(self) -> bool:
        return self.state is ClientState.TERMINATED

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #
    def opening(self) -> List[str]:
        """Messages to send right after connecting."""
        self.log("Sending JOIN to join next game")
        return [protocol.join_message(self.config.username, self.config.password)]

    def say(self, text: str) -> str:
        return protocol.chat_message(text)

    def handle(self, line: str) -> List[str]:
        """Apply one received line and return the replies it calls for."""
        if self.terminated:
            return []
        event = protocol.decode(line)
        if event is None:
            self.empty_messages += 1
            return []
        if self.config.verbose:
            self.log(f"Received message: {line.strip()}")
        if self.empty_messages > 0:
            self.log(f"Got {self.empty_messages} empty messages so far")

        handler = self._handlers.get(event.kind)
        if handler is None:
            return []
        return handler(event)

    def stop(self) -> None:
        self.state = ClientState.TERMINATED

    # ------------------------------------------------------------------ #
    # Handlers
    # ------------------------------------------------------------------ #
    def _on_error(self, event: Event) -> List[str]:
        detail = event.fields[0].strip() if event.fields else ""
        self.log(f"Server reported an error{': ' + detail if detail else ''}")
        self.stop()
        return []

    def _on_motd(self, event: Event) -> List[str]:
        self.log(f"MOTD: {event.text(0, 'message of the day')}")
        return []

    def _on_game(self, event: Event) -> List[str]:
        width, height, own_id = protocol.game_args(event)
        self.log("\nNew game has started!")
        self.world.start_epoch(width, height, own_id)
        self.state = ClientState.IN_EPOCH
        self.log(f"Grid is {width}x{height}, my ID is {own_id}")
        if self.config.greeting:
            return [self.say(self.config.greeting)]
        return []

    def _on_tick(self, event: Event) -> List[str]:
        if self.state is not ClientState.IN_EPOCH:
            self.log("Got a tick outside of a game, not moving")
            return []
        _, command = select_direction(self.world.snapshot())
        return [protocol.move_message(command)]

    def _on_player(self, event: Event) -> List[str]:
        player_id, name = protocol.player_args(event)
        self.log(f"Registering player {player_id} \"{name}\"")
        if self.world.register_player(player_id, name):
            self.log(f"Found my ID: {player_id}")
        return []

    def _on_pos(self, event: Event) -> List[str]:
        player_id, x, y = protocol.pos_args(event)
        self.world.claim(player_id, x, y)
        return []

    def _on_chat(self, event: Event) -> List[str]:
        player_id, text = protocol.chat_args(event)
        self.log(f"Player {player_id} ({self._display_name(player_id)}) said: \"{text}\"")
        return []

    def _on_die(self, event: Event) -> List[str]:
        for player_id in protocol.die_args(event):
            name = self._display_name(player_id)
            freed = self.world.remove_player(player_id)
            if player_id == self.world.me:
                self.log(f"I died, {freed} fields released")
            else:
                self.log(f"Player {player_id} ({name}) died, {freed} fields released")
        return []

    def _on_lose(self, event: Event) -> List[str]:
        self.wins, self.losses = protocol.lose_args(event)
        self.log(f"Lost. Won {self.wins} times, lost {self.losses} times.")
        self._end_epoch()
        return []

    def _on_win(self, event: Event) -> List[str]:
        self.wins += 1
        self.log("Won!")
        self._end_epoch()
        return []

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #
    def _end_epoch(self) -> None:
        # The server keeps broadcasting the running game after we are out,
        # so the grid stays alive until the next 'game' replaces it.
        self.state = ClientState.AWAITING_GAME

    def _display_name(self, player_id: int) -> str:
        if player_id == self.world.me:
            return f"\"{self.config.username}\""
        name: Optional[str] = self.world.players.get(player_id)
        return UNKNOWN_PLAYER if name is None else f"\"{name}\""
