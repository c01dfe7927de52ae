from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware

from src.api.websocket import ChatWebSocketHandler
from src.core.dependencies import get_container
from src.core.logger import logger
from src.core.settings import settings

app = FastAPI(
    title="Jonda Chat API",
    description="Chat sessions with text and voice input over WebSocket",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.api.API_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "service": "jonda-chat",
        "version": "0.1.0",
        "active_sessions": get_container().get_session_manager().get_active_session_count(),
    }


@app.websocket("/ws/chat")
async def websocket_chat_endpoint(websocket: WebSocket):
    container = get_container()
    handler = ChatWebSocketHandler(
        websocket,
        reply_source=container.get_reply_source(),
        session_manager=container.get_session_manager(),
    )

    try:
        await handler.connect()
        await handler.handle_conversation()
    except WebSocketDisconnect:
        logger.info("Client disconnected")
    except Exception as e:
        logger.error(f"WebSocket error: {e}", exc_info=True)
        await handler.send_error(str(e))
    finally:
        await handler.disconnect()


@app.on_event("startup")
async def startup_event():
    logger.info("Starting Jonda Chat API...")
    logger.info(f"Reply source: {settings.chat.REPLY_SOURCE}")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Shutting down Jonda Chat API...")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.api.main:app",
        host=settings.api.API_HOST,
        port=settings.api.API_PORT,
        workers=settings.api.API_WORKERS,
        reload=True,
    )
