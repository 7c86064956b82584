"""Run the game server with uvicorn: python -m game.server"""

import uvicorn

from game.server.settings import GameServerSettings


def main() -> None:  # pragma: no cover
    settings = GameServerSettings()
    uvicorn.run("game.server.app:get_app", factory=True, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":  # pragma: no cover
    main()
