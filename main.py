"""
Agenda Assistant — Entry Point.

`python main.py` starts the Telegram bot in long-polling mode.
"""

import logging

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
# python-telegram-bot logs every getUpdates request through httpx at INFO
logging.getLogger("httpx").setLevel(logging.WARNING)

from src.bot.telegram_bot import main as run_bot


def main() -> None:
    run_bot()


if __name__ == "__main__":
    main()
