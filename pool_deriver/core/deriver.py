import logging
from typing import List, Optional, Sequence, Dict
from pool_deriver.core.errors import EmptyPoolListError
from pool_deriver.core.snapshot import PoolSnapshot, apply_event
from pool_deriver.db.models import (
    AttachDetachEvent, BackendEntry, DerivationResult, HealthCheck,
    RoutingRule, RoutingTable, ServerRecord
)
from pool_deriver.matchers.matcher_factory import MatcherFactory
from pool_deriver.utils.config import DeriverSettings

ACL_PREFIX = "acl_"

class PoolDeriver:
    """Derives HAProxy frontend ACLs and backend server lists from a pool snapshot.

    Every call recomputes the whole result from its arguments; the deriver
    keeps no state between runs.
    """

    def __init__(self, settings: DeriverSettings):
        self.settings = settings
        self.logger = logging.getLogger(__name__)

    def derive(self, snapshot: PoolSnapshot, event: Optional[AttachDetachEvent] = None,
               pools: Optional[Sequence[str]] = None) -> DerivationResult:
        """Merge the optional event into the snapshot and derive routing and backend tables.

        `pools` defaults to the configured pool list. Raises MissingFieldError for
        an event without pool name or server uuid and EmptyPoolListError when
        no pools are configured.
        """
        if pools is None:
            pools = self.settings.pools

        merged = apply_event(snapshot, event)

        if not pools:
            raise EmptyPoolListError()
        routing = RoutingTable(default_backend=pools[-1])
        backends: Dict[str, List[BackendEntry]] = {}

        for pool_name in pools:
            servers = merged.get(pool_name) or {}
            members = self._build_members(servers.values())

            if servers:
                routing.rules.append(RoutingRule(
                    acl_name=f"{ACL_PREFIX}{pool_name}",
                    match_expression=self._match_expression(servers.values()),
                    target_pool=pool_name
                ))

            backends[pool_name] = members

        dropped = [pool for pool in merged if pool not in pools]
        if dropped:
            self.logger.debug(f"Ignoring unconfigured pools: {', '.join(dropped)}")

        return DerivationResult(routing=routing, backends=backends)

    def _build_members(self, servers) -> List[BackendEntry]:
        """Build the backend member list for one pool."""
        members: List[BackendEntry] = []
        if self.settings.session_stickiness:
            # Cookie mode needs at least one server line for HAProxy to start
            members.append(BackendEntry.placeholder())

        for server in servers:
            members.append(self._backend_entry(server))
        return members

    def _backend_entry(self, server: ServerRecord) -> BackendEntry:
        entry = BackendEntry(
            identifier=server.uuid,
            address=server.address,
            health_check=HealthCheck(
                max_connections=self.settings.member_max_connections,
                enabled=self.settings.http_health_check_enabled
            )
        )
        if self.settings.session_stickiness:
            entry.affinity_cookie = entry.server_key.split(' ')[0]
        return entry

    def _match_expression(self, servers) -> str:
        """ACL condition for a pool. The last server carrying a vhost_path wins."""
        expression = ""
        for server in servers:
            if not server.vhost_path:
                continue
            expression = MatcherFactory.get_matcher(server.vhost_path).match_expression()
        return expression

def derive(pools: Sequence[str], snapshot: PoolSnapshot, event: Optional[AttachDetachEvent] = None,
           settings: Optional[DeriverSettings] = None) -> DerivationResult:
    """Functional entry point: derive with explicit pools and (optional) flags."""
    if settings is None:
        settings = DeriverSettings()
    return PoolDeriver(settings).derive(snapshot, event, pools=list(pools))
