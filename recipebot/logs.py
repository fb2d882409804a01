import logging

from rich.logging import RichHandler

from config import Config, Env


def setup_logging(config: Config) -> None:
    if config.env == Env.prod:
        handler: logging.Handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
        )
    else:
        handler = RichHandler(rich_tracebacks=True)
        handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))

    logging.basicConfig(level=config.log_level.upper(), handlers=[handler], force=True)

    # Request urls carry the bot token.
    logging.getLogger("httpx").setLevel(logging.WARNING)
