from pymongo import ASCENDING
from pymongo.collection import Collection
from typing import Optional, List
from pool_deriver.db.connection import get_db
from pool_deriver.db.models import ServerRecord, AttachDetachEvent

# --- Collection Names ---
SERVER_COLLECTION = "application_servers"
EVENT_COLLECTION = "pending_events"

# The event slot holds at most one document under this id
EVENT_SLOT_ID = "remote_event"

# --- Helper to get collections ---
def _get_collection(collection_name: str) -> Optional[Collection]:
    db = get_db()
    return db[collection_name] if db is not None else None

def _require_collection(collection_name: str) -> Collection:
    collection = _get_collection(collection_name)
    if collection is None:
        raise ConnectionError("Database connection not available")
    return collection

def ensure_indexes() -> None:
    """Creates the unique uuid index the inventory relies on."""
    collection = _require_collection(SERVER_COLLECTION)
    collection.create_index([("uuid", ASCENDING)], unique=True)
    collection.create_index([("pool_name", ASCENDING)])

# --- Application Server Operations ---

def add_server(record: ServerRecord) -> ServerRecord:
    """Adds an application server to the inventory.
       Raises DuplicateKeyError if the uuid already exists (due to unique index).
    """
    collection = _require_collection(SERVER_COLLECTION)
    result = collection.insert_one(record.model_dump())
    if not result.inserted_id:
        raise RuntimeError("Failed to insert application server into database")

    created = get_server(record.uuid)
    if not created:
        raise RuntimeError(f"Failed to retrieve newly created server with uuid {record.uuid}")
    return created

def get_server(uuid: str) -> Optional[ServerRecord]:
    """Retrieves an application server by its uuid."""
    collection = _get_collection(SERVER_COLLECTION)
    if collection is None: return None
    data = collection.find_one({"uuid": uuid}, {"_id": 0})
    return ServerRecord(**data) if data else None

def get_all_servers() -> List[ServerRecord]:
    """Retrieves every known application server, ordered by uuid.
       Raises ConnectionError when the inventory cannot be queried.
    """
    collection = _require_collection(SERVER_COLLECTION)
    return [ServerRecord(**data) for data in collection.find({}, {"_id": 0}).sort("uuid", ASCENDING)]

def get_servers_by_pool(pool_name: str) -> List[ServerRecord]:
    """Retrieves the application servers of one pool."""
    collection = _get_collection(SERVER_COLLECTION)
    if collection is None: return []
    cursor = collection.find({"pool_name": pool_name}, {"_id": 0}).sort("uuid", ASCENDING)
    return [ServerRecord(**data) for data in cursor]

def delete_server(uuid: str) -> bool:
    """Deletes an application server."""
    collection = _get_collection(SERVER_COLLECTION)
    if collection is None: return False
    result = collection.delete_one({"uuid": uuid})
    return result.deleted_count > 0

# --- Pending Event Operations ---

def put_pending_event(event: AttachDetachEvent) -> None:
    """Stores the event in the slot, replacing any event not yet consumed."""
    collection = _require_collection(EVENT_COLLECTION)
    document = event.model_dump()
    document["_id"] = EVENT_SLOT_ID
    collection.replace_one({"_id": EVENT_SLOT_ID}, document, upsert=True)

def peek_pending_event() -> Optional[AttachDetachEvent]:
    """Returns the pending event without consuming it."""
    collection = _require_collection(EVENT_COLLECTION)
    data = collection.find_one({"_id": EVENT_SLOT_ID}, {"_id": 0})
    return AttachDetachEvent.model_validate(data) if data else None

def take_pending_event() -> Optional[AttachDetachEvent]:
    """Reads and clears the pending event in one atomic operation."""
    collection = _require_collection(EVENT_COLLECTION)
    data = collection.find_one_and_delete({"_id": EVENT_SLOT_ID}, projection={"_id": 0})
    return AttachDetachEvent.model_validate(data) if data else None
