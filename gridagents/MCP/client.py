"""
Command line client: connects to the game server and plays until told to stop.

The loop reads one line at a time, hands it to the PlayerAgent and sends
back whatever the agent replies. It ends when the server sends ``error``,
the connection closes, or the operator types ``quit`` on stdin. Typing
``quit`` is only noticed between two server messages.
"""
from __future__ import annotations

import argparse
import socket
import sys
import threading
from typing import Callable, List, Optional, TextIO

from .config import (
    DEFAULT_GREETING,
    DEFAULT_HOST,
    DEFAULT_PORT,
    PASSWORD_FILE,
    USERNAME_FILE,
    ConfigError,
    load_config,
)
from .protocol import ProtocolError
from .world import WorldStateError
from ._agent_impl import PlayerAgent

QUIT_WORDS = ("q", "quit", "exit")


class Connection:
    """TCP connection to the server; both directions are closed together."""

    def __init__(
        self,
        host: str,
        port: int,
        verbose: bool = True,
        log: Callable[[str], None] = print,
    ) -> None:
        self.host = host
        self.port = port
        self.verbose = verbose
        self.log = log
        self._sock: Optional[socket.socket] = None
        self._reader: Optional[TextIO] = None

    def __enter__(self) -> "Connection":
        self.log(f"Connecting to server {self.host}:{self.port}")
        self._sock = socket.create_connection((self.host, self.port))
        self._reader = self._sock.makefile("r", encoding="utf-8", newline="\n")
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        if self._reader is not None:
            self._reader.close()
            self._reader = None
        if self._sock is not None:
            self._sock.close()
            self._sock = None

    def send(self, msg: str) -> None:
        if self._sock is None:
            raise OSError("Not connected")
        if self.verbose:
            self.log(f"Sending msg: {msg.strip()}")
        self._sock.sendall(msg.encode("utf-8"))

    def receive(self) -> str:
        """Next line from the server, '' once the server has hung up."""
        if self._reader is None:
            raise OSError("Not connected")
        return self._reader.readline()


class StdinWatcher(threading.Thread):
    """Sets ``cancel`` when the operator types one of QUIT_WORDS."""

    def __init__(self, cancel: threading.Event, stream: Optional[TextIO] = None) -> None:
        super().__init__(name="stdin-watcher", daemon=True)
        self.cancel = cancel
        self.stream = stream if stream is not None else sys.stdin

    def run(self) -> None:
        for line in self.stream:
            if line.strip().lower() in QUIT_WORDS:
                self.cancel.set()
                return


def play(
    agent: PlayerAgent,
    receive: Callable[[], str],
    send: Callable[[str], None],
    cancel: Optional[threading.Event] = None,
) -> str:
    """Drive ``agent`` until it stops. Returns why the loop ended."""
    for msg in agent.opening():
        send(msg)

    while not agent.terminated:
        if cancel is not None and cancel.is_set():
            agent.log("Quit requested, leaving the game")
            agent.stop()
            return "cancelled"
        line = receive()
        if line == "":
            agent.log("Server closed the connection")
            agent.stop()
            return "closed"
        for reply in agent.handle(line):
            send(reply)
    return "error"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="MCP light-cycle bot")
    parser.add_argument("--host", type=str, default=DEFAULT_HOST,
                        help="Game server host")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT,
                        help="Game server port")
    parser.add_argument("--username-file", type=str, default=USERNAME_FILE,
                        help="File holding the username")
    parser.add_argument("--password-file", type=str, default=PASSWORD_FILE,
                        help="File holding the password")
    parser.add_argument("--username", type=str, default=None,
                        help="Username (overrides --username-file)")
    parser.add_argument("--password", type=str, default=None,
                        help="Password (overrides --password-file)")
    parser.add_argument("--greeting", type=str, default=DEFAULT_GREETING,
                        help="Chat line sent when a game starts ('' for none)")
    parser.add_argument("--quiet", action="store_true",
                        help="Do not echo every sent and received message")
    parser.add_argument("--no-stdin", action="store_true",
                        help="Do not watch stdin for 'quit'")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(
            username_file=args.username_file,
            password_file=args.password_file,
            username=args.username,
            password=args.password,
            host=args.host,
            port=args.port,
            greeting=args.greeting or None,
            verbose=not args.quiet,
        )
        print(f"I am {config.username}!")

        agent = PlayerAgent(config)
        cancel = threading.Event()
        if not args.no_stdin and sys.stdin is not None and sys.stdin.isatty():
            StdinWatcher(cancel).start()

        with Connection(config.host, config.port, verbose=config.verbose) as conn:
            reason = play(agent, conn.receive, conn.send, cancel)
    except (ConfigError, ProtocolError, WorldStateError, UnicodeDecodeError, OSError) as e:
        print(f"fatal: {e}", file=sys.stderr)
        return 1

    print(f"Stopped ({reason}). Won {agent.wins} times, lost {agent.losses} times.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
