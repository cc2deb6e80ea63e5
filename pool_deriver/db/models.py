from typing import Optional, List, Dict
from pydantic import BaseModel, Field
from enum import Enum

# Health check defaults applied to every real backend member
CHECK_INTERVAL = 300
CHECK_RISE = 2
CHECK_FALL = 3

PLACEHOLDER_IDENTIFIER = "disabled-server"
PLACEHOLDER_ADDRESS = "127.0.0.1:1"

class ApplicationAction(str, Enum):
    ATTACH = "attach"
    DETACH = "detach"

class ServerRecord(BaseModel):
    uuid: str # Stable instance identifier, unique across the inventory
    bind_ip: str
    bind_port: int
    vhost_path: Optional[str] = None # Hostname or URI path served by the application
    pool_name: str # Load balancer pool the server belongs to

    class Config:
        frozen = True

    @property
    def address(self) -> str:
        return f"{self.bind_ip}:{self.bind_port}"

class AttachDetachEvent(BaseModel):
    """Out-of-band notification sent by an application server joining or leaving a pool.

    Accepts both the field names below and the payload keys used by the
    application servers (application_action, application_server_id, ...).
    """
    action: ApplicationAction = Field(alias="application_action")
    pool_name: Optional[str] = None
    server_uuid: Optional[str] = Field(default=None, alias="application_server_id")
    bind_ip: Optional[str] = Field(default=None, alias="application_bind_ip")
    bind_port: Optional[int] = Field(default=None, alias="application_bind_port")
    vhost_path: Optional[str] = None

    class Config:
        use_enum_values = True
        populate_by_name = True
        frozen = True

    def to_record(self) -> ServerRecord:
        return ServerRecord(
            uuid=self.server_uuid,
            bind_ip=self.bind_ip or "",
            bind_port=self.bind_port or 0,
            vhost_path=self.vhost_path,
            pool_name=self.pool_name,
        )

class HealthCheck(BaseModel):
    interval: int = CHECK_INTERVAL
    rise_count: int = CHECK_RISE
    fall_count: int = CHECK_FALL
    max_connections: Optional[int] = None
    enabled: bool = False

class BackendEntry(BaseModel):
    identifier: str
    address: str # ip:port
    health_check: HealthCheck = Field(default_factory=HealthCheck)
    affinity_cookie: Optional[str] = None
    disabled: bool = False

    @property
    def server_key(self) -> str:
        """Composite "identifier address" key used by the HAProxy template."""
        return f"{self.identifier} {self.address}"

    @classmethod
    def placeholder(cls) -> "BackendEntry":
        """Disabled entry that keeps a cookie-mode backend section non-empty."""
        return cls(
            identifier=PLACEHOLDER_IDENTIFIER,
            address=PLACEHOLDER_ADDRESS,
            health_check=HealthCheck(enabled=False),
            disabled=True,
        )

class RoutingRule(BaseModel):
    acl_name: str
    match_expression: str
    target_pool: str

class RoutingTable(BaseModel):
    default_backend: str
    rules: List[RoutingRule] = Field(default_factory=list)

    def rule_for(self, pool_name: str) -> Optional[RoutingRule]:
        for rule in self.rules:
            if rule.target_pool == pool_name:
                return rule
        return None

class DerivationResult(BaseModel):
    routing: RoutingTable
    backends: Dict[str, List[BackendEntry]] = Field(default_factory=dict)
