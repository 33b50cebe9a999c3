import logging

# Third-party loggers that are chatty at DEBUG/INFO
NOISY_LOGGERS = ("httpx", "httpcore", "openai", "google_genai", "uvicorn.access")


class EmojiFormatter(logging.Formatter):
    """
    Prefixes each record with an emoji for its level.
    """

    LEVEL_EMOJIS = {
        logging.DEBUG: "🐛",
        logging.INFO: "✅",
        logging.WARNING: "⚠️",
        logging.ERROR: "❌",
        logging.CRITICAL: "🔥",
    }

    def format(self, record):
        s = super().format(record)
        emoji = self.LEVEL_EMOJIS.get(record.levelno, "")
        return f"{emoji} {s}"


def setup_logging(level: str = "INFO"):
    """
    Configures the root logger with the EmojiFormatter.
    Call once at the process entry point, before the app is built.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(
        EmojiFormatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )

    # Replace handlers so repeated calls (e.g. reloads) don't duplicate output
    if root_logger.hasHandlers():
        root_logger.handlers.clear()
    root_logger.addHandler(console_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(root_logger.level, logging.WARNING))
