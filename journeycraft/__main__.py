# journeycraft/__main__.py
"""Module entry point: python -m journeycraft"""
import logging

from journeycraft import config
from journeycraft.api import create_app


def main() -> int:
    logging.basicConfig(
        level=config.get_log_level(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = create_app()
    app.run(host="0.0.0.0", port=config.get_port())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
