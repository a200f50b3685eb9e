from __future__ import annotations

import asyncio
import sys
from pathlib import Path

from quiz.core.context import AppContext, PlayerMessage, Response
from quiz.engine import process_message
from quiz.game_def import Channel, DefinitionLoadError, load_game
from quiz.lock import ShardedLocks
from quiz.services.definitions import FileDefinitionsRepository
from quiz.services.sessions import InMemorySessionRepository
from quiz.session import PlayerId

CONSOLE_CHANNEL_ID = "console"
QUIT_COMMAND = ":q"


class ConsoleResponder:
    async def respond(self, response: Response) -> None:
        print(response.render(), flush=True)


def make_console_context(game_file: Path) -> AppContext:
    game = load_game(game_file)
    channel = Channel(name="console", channel_id=CONSOLE_CHANNEL_ID, token="", game_id=game.id)
    return AppContext(
        responder=ConsoleResponder(),
        sessions=InMemorySessionRepository(),
        definitions=FileDefinitionsRepository(games={game.id: game}, channels={channel.channel_id: channel}),
        locks=ShardedLocks(shards=1),
    )


async def _repl(ctx: AppContext) -> None:
    player_id = PlayerId(channel_id=CONSOLE_CHANNEL_ID, id="1")
    for line in sys.stdin:
        if line.strip() == QUIT_COMMAND:
            break
        await process_message(PlayerMessage(player_id=player_id, text=line), ctx=ctx)


def main() -> None:
    """Play a game definition in the terminal: `quiz-console deploy/data/game-1.json`."""

    if len(sys.argv) != 2:
        print("usage: quiz-console GAME_FILE", file=sys.stderr)
        raise SystemExit(2)

    try:
        ctx = make_console_context(Path(sys.argv[1]))
    except DefinitionLoadError as e:
        print(str(e), file=sys.stderr)
        raise SystemExit(1) from e

    asyncio.run(_repl(ctx))


if __name__ == "__main__":
    main()
