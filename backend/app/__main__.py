import uvicorn

from app.core.config import settings
from app.core.logging_setup import setup_logging


def main():
    setup_logging(settings.log_level)
    uvicorn.run("app.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
