"""
Plants Care Bot — Entry Point.

Single entry point: `python main.py` starts the Telegram bot and the
watering reminder scheduler. Logging is configured once, inside main().
"""

from src.bot.telegram_bot import main

if __name__ == "__main__":
    main()
