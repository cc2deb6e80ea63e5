import logging
from typing import Any, Dict, Optional
from pool_deriver.core.deriver import PoolDeriver
from pool_deriver.core.errors import MissingFieldError
from pool_deriver.core.event_slot import EventSlot
from pool_deriver.core.render import render_attributes
from pool_deriver.core.snapshot import PoolSnapshot, group_servers_by_pool
from pool_deriver.db import collections as db
from pool_deriver.db.models import AttachDetachEvent, DerivationResult
from pool_deriver.utils.config import DeriverSettings

class ConfigurationRun:
    def __init__(self, slot: EventSlot, settings: Optional[DeriverSettings] = None):
        self.logger = logging.getLogger(__name__)
        self.slot = slot
        self.settings = settings if settings is not None else DeriverSettings.from_config()
        self.deriver = PoolDeriver(self.settings)

    def execute(self) -> Dict[str, Any]:
        """Run a derivation, consuming the pending attach/detach event."""
        snapshot = self._fetch_snapshot()
        event = self.slot.take()
        try:
            attributes = self._derive(snapshot, event)
        except MissingFieldError:
            # A malformed event would fail every run, so it stays consumed
            raise
        except ValueError:
            if event is not None:
                self.slot.put(event)
                self.logger.warning(f"Returned pending {event.action} event for server {event.server_uuid} to the slot")
            raise
        if event is not None:
            self.logger.info(f"Consumed pending {event.action} event for server {event.server_uuid}")
        return attributes

    def preview(self) -> Dict[str, Any]:
        """Run a derivation against the pending event without consuming it."""
        return self._derive(self._fetch_snapshot(), self.slot.peek())

    def _fetch_snapshot(self) -> PoolSnapshot:
        servers = db.get_all_servers()
        self.logger.debug(f"Fetched {len(servers)} application servers from inventory")
        return group_servers_by_pool(servers)

    def _derive(self, snapshot: PoolSnapshot, event: Optional[AttachDetachEvent]) -> Dict[str, Any]:
        try:
            result = self.deriver.derive(snapshot, event)
        except ValueError as e:
            self.logger.error(f"Derivation failed: {str(e)}")
            raise
        self._log_summary(result)
        return render_attributes(result)

    def _log_summary(self, result: DerivationResult) -> None:
        members = sum(1 for entries in result.backends.values() for entry in entries if not entry.disabled)
        self.logger.info(
            f"Derived {len(result.routing.rules)} ACLs and {len(result.backends)} backends "
            f"({members} servers), default backend '{result.routing.default_backend}'"
        )
