from contextlib import asynccontextmanager

from fastapi import (
    FastAPI,
)
from fastapi.middleware.cors import CORSMiddleware

from fieldvault.core import CryptoService
from fieldvault.routers import get_routers
from fieldvault.shared import Config, Logger, load_config
from fieldvault.shared.db import engine, init_db

logger = Logger(__name__).get_logger()

config = load_config()


def create_crypto_service(config: Config, environ=None) -> CryptoService:
    # Raises ConfigurationError; the app must not start without a key
    return CryptoService.from_config(config, environ)


# ================================================================================
#       FastAPI Setup
# ================================================================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.crypto = create_crypto_service(config)
    init_db(engine)
    logger.info("Field encryption ready")
    yield


app = FastAPI(title="fieldvault", lifespan=lifespan)

for router in get_routers():
    app.include_router(router)

origins = ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ================================================================================
#       Command Line
# ================================================================================
def welcome():
    # Log server banner
    for line in config.general.title.split("\n"):
        logger.info(line)

    logger.info("Starting field encryption server")


def main(argv=None):
    welcome()

    import uvicorn

    uvicorn.run(
        "fieldvault.main:app",
        host=config.network.host,
        port=config.network.port,
        reload=config.network.reload,
    )


if __name__ == "__main__":
    main()
