from contextlib import asynccontextmanager, AsyncExitStack
from typing import Optional
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncEngine
from mini_assistant.config.app_config import get_service_settings, ServiceSettings, LLMBackend
from mini_assistant.common.logging.logger import logger
from mini_assistant.common.errors import MissingCredentialError
from mini_assistant.common.db.session import create_db_engine_context
from mini_assistant.common.db.crud.memory.chat_memory_crud import create_chat_memory_table
from mini_assistant.common.db.crud.documents.document_chunks_crud import create_document_chunk_table
# clients
from mini_assistant.common.services.llm_service.llm_client import TypedLLMClient, LLMProvider
from mini_assistant.common.services.llm_service.llm_client.google_genai_client import AsyncGenAIToolCallingClient
from mini_assistant.common.services.llm_service.llm_client.openai_compatible_client import AsyncOpenAICompatibleToolCallingClient
from mini_assistant.common.services.embedding_service.text_embedding.gemini_embedding_client import AsyncGenAITextEmbeddingClient
# device actions
from mini_assistant.common.services.device_actions.action_outbox import ActionOutbox
from mini_assistant.common.services.device_actions.notification_outbox import NotificationOutbox
# memory + retrieval
from mini_assistant.memory.chat_memory_store import InMemoryChatMemoryStore
from mini_assistant.memory.sql_chat_memory_store import SQLChatMemoryStore
from mini_assistant.memory.chunk_index import InMemoryChunkIndex
from mini_assistant.memory.pgvector_chunk_index import PgVectorChunkIndex
from mini_assistant.agent_service.retrieval_agent.retrieval_bridge import RetrievalBridge
# tools + orchestration
from mini_assistant.agent_service.tools.device_tools import DeviceActionTools
from mini_assistant.agent_service.tools.registry import build_assistant_tool_registry
from mini_assistant.agent_service.tools.dispatcher import ToolDispatcher
from mini_assistant.agent_service.orchestrator.session_manager import SessionManager, MemoryStoreFactory
from mini_assistant.agent_service.common.system_prompts.assistant_prompts import AssistantPrompts

def build_llm_client(settings: ServiceSettings, tool_declarations: list) -> TypedLLMClient:
    """
    Build the model backend selected by LLM_PROVIDER.
    Raises MissingCredentialError when the hosted backend is selected without an API key.
    """
    if settings.LLM_PROVIDER == LLMBackend.LOCAL_OPENAI:
        local_client = AsyncOpenAICompatibleToolCallingClient(
            model_name=settings.LOCAL_LLM_MODEL,
            base_url=settings.LOCAL_LLM_BASE_URL,
            api_key=settings.LOCAL_LLM_API_KEY,
            system_prompt=AssistantPrompts.assistant_system_prompt,
            tool_declarations=tool_declarations,
            temperature=settings.LLM_TEMPERATURE,
            top_p=settings.LLM_TOP_P,
        )
        return TypedLLMClient(provider=LLMProvider.LOCAL_OPENAI_COMPATIBLE, client=local_client)

    google_client = AsyncGenAIToolCallingClient(
        model_name=settings.GOOGLE_GENAI_MODEL,
        api_key=settings.GOOGLE_GENAI_API_KEY,
        system_prompt=AssistantPrompts.assistant_system_prompt,
        tool_declarations=tool_declarations,
        temperature=settings.LLM_TEMPERATURE,
        top_p=settings.LLM_TOP_P,
    )
    return TypedLLMClient(provider=LLMProvider.GOOGLE_GENAI, client=google_client)

def build_memory_store_factory(settings: ServiceSettings, chat_memory_engine: Optional[AsyncEngine]) -> MemoryStoreFactory:
    capacity = settings.CHAT_MEMORY_CAPACITY
    if chat_memory_engine is None:
        return lambda session_id: InMemoryChatMemoryStore(capacity=capacity)
    return lambda session_id: SQLChatMemoryStore(
        session_id=session_id,
        main_db_engine=chat_memory_engine,
        capacity=capacity,
    )

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manages the service's startup and shutdown events.
    Uses the AsyncExitStack to clean up resources.
    Register resources to the app state to be used as dependencies.

    NOTE:
    - Use stack.enter_async_context when the resource has __aenter__ and __aexit__ support
    - Stores and indexes fall back to in-process implementations when no database URL is configured
    """
    # default start up message
    logger.info("Starting Mini Assistant service!")

    # initialize resources during start up
    logger.info("Initializing service resources...")
    settings = get_service_settings()

    async with AsyncExitStack() as stack:

        # Chat memory engine (optional)
        chat_memory_engine: Optional[AsyncEngine] = None
        if settings.CHAT_MEMORY_DB_URL:
            chat_memory_engine = await stack.enter_async_context(
                create_db_engine_context(db_url=settings.CHAT_MEMORY_DB_URL)
            )
            await create_chat_memory_table(chat_memory_engine)
            logger.info("Chat memory database engine initialized.")
        else:
            logger.info("No CHAT_MEMORY_DB_URL set, chat memory is kept in-process.")
        app.state.chat_memory_engine = chat_memory_engine

        # Chunk index (optional pgvector)
        if settings.CHUNK_INDEX_DB_URL:
            chunk_index_engine = await stack.enter_async_context(
                create_db_engine_context(
                    db_url=settings.CHUNK_INDEX_DB_URL,
                    pool_size=settings.CHUNK_INDEX_POOL_SIZE,
                    max_overflow=settings.CHUNK_INDEX_MAX_OVERFLOW,
                )
            )
            await create_document_chunk_table(chunk_index_engine)
            app.state.chunk_index = PgVectorChunkIndex(main_db_engine=chunk_index_engine)
            logger.info("Chunk index (pgvector) initialized.")
        else:
            app.state.chunk_index = InMemoryChunkIndex()
            logger.info("Chunk index (in-process) initialized.")

        # Text embedding client (no need for resource clean up)
        if settings.GOOGLE_GENAI_API_KEY:
            app.state.text_embedding_client = AsyncGenAITextEmbeddingClient(
                model_name=settings.GOOGLE_GENAI_EMBEDDING_MODEL,
                embedding_size=settings.GOOGLE_GENAI_EMBEDDING_SIZE,
                api_key=settings.GOOGLE_GENAI_API_KEY,
            )
            logger.info("Text embedding client (GOOGLE GENAI) initialized.")
        else:
            app.state.text_embedding_client = None
            logger.warning("No GOOGLE_GENAI_API_KEY set, document retrieval is disabled.")

        # Device-facing outboxes, drained by the device client
        app.state.action_outbox = ActionOutbox()
        app.state.notification_outbox = NotificationOutbox()

        # Tools
        device_tools = DeviceActionTools(launcher=app.state.action_outbox)
        retrieval_bridge = RetrievalBridge(
            text_embedding_client=app.state.text_embedding_client,
            chunk_index=app.state.chunk_index,
            notifier=app.state.notification_outbox,
        )
        tool_registry = build_assistant_tool_registry(device_tools, retrieval_bridge)
        tool_dispatcher = ToolDispatcher(registry=tool_registry)
        logger.info(f"Tool registry initialized with tools: {tool_registry.names()}")

        # LLM client (no need for resource clean up)
        llm_client: Optional[TypedLLMClient] = None
        missing_client_reason = "No model backend is configured"
        try:
            llm_client = build_llm_client(settings, tool_registry.declarations())
            logger.info(f"LLM client ({settings.LLM_PROVIDER.value}) initialized.")
        except MissingCredentialError as e:
            # the service still starts; answering is refused until a key is configured
            missing_client_reason = str(e)
            logger.warning(f"LLM client unavailable: {e}")
        app.state.llm_client = llm_client

        app.state.session_manager = SessionManager(
            llm_client=llm_client,
            tool_dispatcher=tool_dispatcher,
            memory_store_factory=build_memory_store_factory(settings, chat_memory_engine),
            notifier=app.state.notification_outbox,
            answer_timeout=settings.ANSWER_TIMEOUT_SECONDS,
            missing_client_reason=missing_client_reason,
        )
        logger.info("Session manager initialized.")

        try:
            # lets FastAPI process requests during yield
            yield
        finally:
            logger.info("Shutting down service resources...")

        # The AsyncExitStack will automatically call the __aexit__ or registered cleanup
        # methods for all resources entered or pushed to it, in reverse order.
        logger.info("All global resources have been gracefully closed.")
