import uvicorn
from dotenv import load_dotenv

from bitlings.api import create_app
from bitlings.config import Settings
from bitlings.utils.logger_config import setup_logging

if __name__ == "__main__":
    load_dotenv()
    settings = Settings.from_env()
    setup_logging(settings.log_level)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_config=None)
