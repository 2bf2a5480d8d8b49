"""FastAPI WebSocket server for multiplayer Blackjack tables."""

import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, WebSocket, WebSocketDisconnect

from config import config
from handlers import dispatch
from logging_config import setup_logging
from room import Actor, TableManager
from routers.health import router as health_router, set_health_dependencies

# Configure logging based on environment
setup_logging(
    level=config.LOG_LEVEL,
    environment=config.ENVIRONMENT,
)
logger = logging.getLogger(__name__)

table_manager = TableManager()


async def _close_all_websockets():
    """Close all seated players' WebSocket connections gracefully."""
    for table in list(table_manager.tables.values()):
        for actor in table.active + table.queued:
            if actor.is_live:
                try:
                    await actor.websocket.close(code=1001, reason="Server shutting down")
                except Exception as e:
                    logger.debug(f"Closing actor {actor.id} failed: {e}")
                actor.close()
    logger.info("All WebSocket connections closed")


async def _shutdown_tables():
    """Stop every table's round loop and forget all tables."""
    await _close_all_websockets()
    for table in list(table_manager.tables.values()):
        if table.task is not None:
            table.task.cancel()
    table_manager.tables.clear()
    logger.info("All tables cleaned up")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    set_health_dependencies(table_manager=table_manager)
    logger.info(f"Blackjack server started (environment={config.ENVIRONMENT})")

    yield

    logger.info("Shutdown initiated...")
    await _shutdown_tables()
    logger.info("Shutdown complete")


app = FastAPI(
    title="Blackjack Tables",
    debug=config.DEBUG,
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(health_router)


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    await websocket.accept()

    actor = Actor(id=str(uuid.uuid4()), websocket=websocket)
    logger.debug(f"WebSocket connected as {actor.id}")

    try:
        while True:
            message = await websocket.receive_text()
            await dispatch(message, actor, table_manager=table_manager)
    except WebSocketDisconnect:
        logger.debug(f"WebSocket {actor.id} disconnected")
    finally:
        actor.close()
        table_manager.leave_table(actor)


def run():
    """Run the server using uvicorn."""
    import uvicorn

    logger.info(f"Starting Blackjack server on {config.HOST}:{config.PORT}")
    logger.info(f"Debug mode: {config.DEBUG}")

    uvicorn.run(
        "main:app",
        host=config.HOST,
        port=config.PORT,
        reload=config.DEBUG,
        log_level=config.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
