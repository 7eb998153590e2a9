#!/usr/bin/env python3
import logging

import uvicorn

from report_builder.app import create_app
from report_builder.core.config import get_settings

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

# Create the FastAPI app
app = create_app(settings)


if __name__ == "__main__":
    logging.getLogger(__name__).info("Starting report builder on %s:%s", settings.api_host, settings.api_port)
    uvicorn.run("main:app", host=settings.api_host, port=settings.api_port)
