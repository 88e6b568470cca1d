from collections.abc import Iterator

from sqlalchemy import Engine
from sqlmodel import Session, SQLModel, create_engine

from fieldvault.models.schema import *  # noqa: F403 # SQLModel subclasses need to be in memory
from fieldvault.shared import Logger, load_config

logger = Logger(__name__).get_logger()

config = load_config()


def build_engine(database_uri: str) -> Engine:
    connect_args = {}
    if database_uri.startswith("sqlite"):
        # FastAPI serves sync handlers from a threadpool
        connect_args["check_same_thread"] = False
    return create_engine(database_uri, connect_args=connect_args)


def init_db(target: Engine) -> None:
    logger.debug("Creating tables on %s", target.url)
    SQLModel.metadata.create_all(target)


engine: Engine = build_engine(config.database.path)


def get_session() -> Iterator[Session]:
    with Session(engine) as session:
        yield session
