from __future__ import annotations

import logging

from .config import Config
from .adapters.memory_repo import build_repository
from .app.server import run_server
from .app.handlers import build_handler


def main() -> None:
    cfg = Config()
    logging.basicConfig(
        level=cfg.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    repository = build_repository(seed=cfg.seed)
    handler = build_handler(repository, cfg.route_prefix)
    run_server(handler, cfg.port, host=cfg.host)


if __name__ == "__main__":
    main()
