import logging

import uvicorn

from midstring.config import settings


def run() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run("midstring.main:app", host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
