import logging

import uvicorn

from camflash.services.config import Settings

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def main():
    settings = Settings.from_env()
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
    logging.getLogger("camflash").info(
        "camflash starting on %s:%d (driver=%s)", settings.host, settings.port, settings.camera_driver
    )
    uvicorn.run(
        "camflash.services.api:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        ws_ping_interval=settings.ws_ping_interval_s,
    )


if __name__ == "__main__":
    main()
