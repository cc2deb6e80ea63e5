import logging
from typing import Dict, Iterable, Optional
from pool_deriver.core.errors import MissingFieldError
from pool_deriver.db.models import ServerRecord, AttachDetachEvent, ApplicationAction

# pool_name -> server uuid -> record
PoolSnapshot = Dict[str, Dict[str, ServerRecord]]

logger = logging.getLogger(__name__)

def group_servers_by_pool(records: Iterable[ServerRecord]) -> PoolSnapshot:
    """Group inventory records into a snapshot, keeping the order they were read in."""
    snapshot: PoolSnapshot = {}
    for record in records:
        snapshot.setdefault(record.pool_name, {})[record.uuid] = record
    return snapshot

def validate_event(event: AttachDetachEvent) -> None:
    """Raises MissingFieldError if the event cannot be attributed to a pool member."""
    if not event.pool_name:
        raise MissingFieldError("pool_name")
    if not event.server_uuid:
        raise MissingFieldError("server_uuid")

def apply_event(snapshot: PoolSnapshot, event: Optional[AttachDetachEvent]) -> PoolSnapshot:
    """Return a copy of the snapshot with the attach/detach event merged in.

    The input snapshot is never modified. Validation happens before anything
    is copied, so a rejected event leaves no trace.
    """
    if event is None:
        return snapshot

    validate_event(event)
    merged = {pool: dict(servers) for pool, servers in snapshot.items()}

    if event.action == ApplicationAction.ATTACH:
        merged.setdefault(event.pool_name, {})[event.server_uuid] = event.to_record()
        logger.info(f"Attached server {event.server_uuid} to pool {event.pool_name}")
    elif event.action == ApplicationAction.DETACH:
        servers = merged.get(event.pool_name)
        if servers is not None and event.server_uuid in servers:
            del servers[event.server_uuid]
            logger.info(f"Detached server {event.server_uuid} from pool {event.pool_name}")
        else:
            logger.debug(f"Server {event.server_uuid} not in pool {event.pool_name}, nothing to detach")

    return merged
