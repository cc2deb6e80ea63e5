from typing import Dict, Any, List
from pool_deriver.db.models import BackendEntry, DerivationResult

FRONTEND_NAME = "all_requests"

def server_attributes(entry: BackendEntry) -> Dict[str, Any]:
    """Attribute hash for one `server` line of a backend section."""
    if entry.disabled:
        return {'disabled': True}

    check = entry.health_check
    attributes: Dict[str, Any] = {
        'inter': check.interval,
        'rise': check.rise_count,
        'fall': check.fall_count,
        'maxconn': check.max_connections
    }
    if check.enabled:
        attributes['check'] = True
    if entry.affinity_cookie is not None:
        attributes['cookie'] = entry.affinity_cookie
    return attributes

def render_attributes(result: DerivationResult) -> Dict[str, Any]:
    """Serialize a derivation into the attribute tree the haproxy.cfg template consumes.

    Servers are keyed by the composite "identifier ip:port" string, one
    single-key mapping per server, in member order.
    """
    frontend: Dict[str, Any] = {'default_backend': result.routing.default_backend}
    if result.routing.rules:
        frontend['acl'] = {rule.acl_name: rule.match_expression for rule in result.routing.rules}
        frontend['use_backend'] = {rule.target_pool: f"if {rule.acl_name}" for rule in result.routing.rules}

    backend: Dict[str, Any] = {}
    for pool_name, members in result.backends.items():
        servers: List[Dict[str, Any]] = [{entry.server_key: server_attributes(entry)} for entry in members]
        backend[pool_name] = {'server': servers}

    return {
        'frontend': {FRONTEND_NAME: frontend},
        'backend': backend
    }
