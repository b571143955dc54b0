from sqlalchemy import create_engine, text, Table
from sqlalchemy.engine import Engine

from dotenv import load_dotenv
import os
from pathlib import Path

# import all table models to register them with MainDB_Base.metadata
from mini_assistant.common.db.models.memory.chat_memory import ChatMemoryRecord
from mini_assistant.common.db.models.documents.document_chunks import DocumentChunk

# sync drivers for one-off scripts, keyed by the async driver used by the service
SYNC_DRIVERS = {
    "+asyncpg": "+psycopg2",
    "+aiosqlite": "",
}

def to_sync_url(db_url: str) -> str:
    for async_driver, sync_driver in SYNC_DRIVERS.items():
        if async_driver in db_url:
            return db_url.replace(async_driver, sync_driver, 1)
    return db_url

def reset_table(engine: Engine, table: Table, enable_pgvector: bool = False) -> None:
    with engine.begin() as conn:
        if enable_pgvector:
            conn.execute(text("CREATE EXTENSION IF NOT EXISTS vector"))
        table.drop(conn, checkfirst=True)
        table.create(conn)
    print(f"Table '{table.name}' reset.")

# NOTE: trouble shooting: if package imports do not work, install the project (pip install -e .) first
if __name__ == "__main__":
    # one-off script to reset db, by dropping then creating every configured table

    # load in the proper .env file, defaulted to .env.dev
    APP_ENV = os.getenv("APP_ENV", "dev")
    # This file is in scripts/db/, so we go up two levels to project root
    SERVICE_ROOT = Path(__file__).resolve().parents[2]
    env_file_path = SERVICE_ROOT / f".env.{APP_ENV}"

    # Load the .env file manually
    print(f"Loading env file from: {env_file_path}")
    load_dotenv(dotenv_path=env_file_path)

    CHAT_MEMORY_DB_URL = os.getenv("CHAT_MEMORY_DB_URL")
    CHUNK_INDEX_DB_URL = os.getenv("CHUNK_INDEX_DB_URL")

    if not CHAT_MEMORY_DB_URL and not CHUNK_INDEX_DB_URL:
        print("Neither CHAT_MEMORY_DB_URL nor CHUNK_INDEX_DB_URL is set, nothing to reset.")
        exit(0)

    try:
        if CHAT_MEMORY_DB_URL:
            reset_table(create_engine(to_sync_url(CHAT_MEMORY_DB_URL)), ChatMemoryRecord.__table__)
        if CHUNK_INDEX_DB_URL:
            reset_table(create_engine(to_sync_url(CHUNK_INDEX_DB_URL)), DocumentChunk.__table__, enable_pgvector=True)
    except Exception as e:
        print(f"Error resetting database: {e}")
        exit(1)

    print("All tables reset successfully!")
