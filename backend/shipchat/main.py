import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shipchat.api.message import router as message_router
from shipchat.core.config import settings
from shipchat.utils.logger import get_logger, log_separator

logger = get_logger(__name__)

app = FastAPI(title="Shipment Intake Assistant")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(message_router)


def run():
    log_separator(logger)
    logger.info(f"🚀 Starting shipment intake API on {settings.API_HOST}:{settings.API_PORT}")
    logger.info(f"Max retries per field: {settings.MAX_RETRIES} | Log level: {settings.LOG_LEVEL}")
    log_separator(logger)
    uvicorn.run(
        "shipchat.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.API_RELOAD,
    )


if __name__ == "__main__":
    run()
