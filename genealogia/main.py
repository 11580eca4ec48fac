import asyncio
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode

from genealogia.config import settings
from genealogia.bot import router
from genealogia.clients import RegistryClient

# Configure logging
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
logger = logging.getLogger(__name__)


# Setup dedicated file logger for registry history
def setup_registry_logging(log_dir: Path = None):
    """Setup file logging for registry API responses"""
    log_dir = Path(log_dir or settings.LOG_DIR)
    log_dir.mkdir(parents=True, exist_ok=True)

    history_logger = logging.getLogger('registry.history')
    history_logger.setLevel(logging.DEBUG)
    # payloads carry names and DNIs: file only, never the console
    history_logger.propagate = False

    # File handler with rotation (10MB max, keep 5 backups)
    file_handler = RotatingFileHandler(
        log_dir / 'registry_history.log',
        maxBytes=10*1024*1024,  # 10MB
        backupCount=5,
        encoding='utf-8'
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    history_logger.addHandler(file_handler)

    logger.info(f"Registry history logging configured: {log_dir / 'registry_history.log'}")


def setup_logging():
    logging.basicConfig(
        level=logging.INFO,
        format=LOG_FORMAT
    )
    setup_registry_logging()


async def main():
    """Main entry point"""
    setup_logging()
    logger.info("Starting Genealogy Bot...")

    if not await RegistryClient().test_connection():
        logger.warning("Registry API not reachable at startup, lookups will fail until it is")

    bot = Bot(
        token=settings.TELEGRAM_BOT_TOKEN,
        default=DefaultBotProperties(parse_mode=ParseMode.HTML)
    )
    dp = Dispatcher()
    dp.include_router(router)

    # Start bot polling
    logger.info("Starting bot polling...")
    try:
        await dp.start_polling(bot, allowed_updates=dp.resolve_used_update_types())
    finally:
        await bot.session.close()


if __name__ == "__main__":
    asyncio.run(main())
