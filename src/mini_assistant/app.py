from typing import Any
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from mini_assistant.common.logging.logger import logger
from mini_assistant.config.app_config import get_service_settings
from mini_assistant.core.lifespan import lifespan
from mini_assistant.common.db.session import get_async_session_maker
from mini_assistant.api.routes.assistant import router as assistant_router

# disable FastAPI docs for production/deployment
is_local = get_service_settings().INCLUDE_DOCS
logger.info(f"is_local (include FastAPI docs?): {is_local}")

docs_config: dict[str, Any] = {
    "docs_url": "/docs" if is_local else None,
    "redoc_url": "/redoc" if is_local else None,
    "openapi_url": "/openapi.json" if is_local else None,
}

# main app, asgi entrypoint
app = FastAPI(
    title="Mini Assistant Service",
    description="Conversational assistant core: two-phase tool calling over device actions and document retrieval",
    version="0.1.0",
    lifespan=lifespan,
    **docs_config,
)

# add CORS middleware
# TODO: restrict allow_origins to the device client's origin once it is fixed
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# health endpoint
@app.get("/health")
async def health(request: Request):
    state = request.app.state
    checks: dict[str, str] = {
        "llm": "configured" if getattr(state, "llm_client", None) is not None else "missing credentials",
        "embeddings": "configured" if getattr(state, "text_embedding_client", None) is not None else "disabled",
    }

    chat_memory_engine = getattr(state, "chat_memory_engine", None)
    if chat_memory_engine is None:
        checks["chat_memory"] = "in-process"
    else:
        try:
            # simple test query to verify db connection
            async with get_async_session_maker(chat_memory_engine)() as session:
                await session.execute(text("SELECT 1"))
            checks["chat_memory"] = "connected"
        except Exception as e:
            logger.error(f"Chat memory health check failed: {e}")
            return {"status": "error", **checks, "chat_memory": "unable to connect to chat memory database"}

    return {"status": "ok", **checks}

app.include_router(assistant_router)
