import logging
from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError
from typing import Optional
from pool_deriver.utils.config import get_config

_client: Optional[MongoClient] = None
_db: Optional[Database] = None

logger = logging.getLogger(__name__)

def _build_uri(config: dict) -> Optional[str]:
    """Builds the MongoDB URI from config; an explicit `uri` wins over host/credentials."""
    if config.get('uri'):
        return config['uri']

    host = config.get('host')
    if not host:
        return None
    username = config.get('username')
    password = config.get('password')
    if username and password:
        return f"mongodb+srv://{username}:{password}@{host}/?retryWrites=true&w=majority"
    return f"mongodb://{host}"

def connect_to_mongo() -> None:
    """Establishes the inventory database connection using details from config."""
    global _client, _db
    if _client is not None and _db is not None:
        return # Already connected

    config = get_config().get('mongodb', {})
    db_name = config.get('name', 'pool_deriver')
    mongo_uri = _build_uri(config)

    if not mongo_uri:
        logger.error("MongoDB connection details (uri or host) missing in config.")
        return

    try:
        _client = MongoClient(mongo_uri, serverSelectionTimeoutMS=config.get('timeout_ms', 5000))
        # Ping the server to check connection
        _client.admin.command('ping')
        _db = _client[db_name]
        logger.info(f"Connected to MongoDB database '{db_name}'")
    except PyMongoError as e:
        logger.error(f"Error connecting to MongoDB: {e}")
        _client = None
        _db = None

def get_db() -> Optional[Database]:
    """Returns the database instance, connecting if necessary."""
    if _db is None:
        connect_to_mongo()
    return _db

def close_mongo_connection() -> None:
    """Closes the MongoDB connection."""
    global _client, _db
    if _client:
        _client.close()
        _client = None
        _db = None
        logger.info("MongoDB connection closed.")
