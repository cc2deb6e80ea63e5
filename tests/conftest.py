import pytest
import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from pool_deriver.db.models import ServerRecord, AttachDetachEvent, ApplicationAction
from pool_deriver.core.snapshot import group_servers_by_pool
from pool_deriver.utils.config import DeriverSettings


@pytest.fixture
def settings():
    """Returns deriver settings with health checks on and stickiness off"""
    return DeriverSettings(
        pools=["web", "api"],
        session_stickiness=False,
        http_health_check_enabled=True,
        member_max_connections=100
    )


@pytest.fixture
def sticky_settings(settings):
    """Returns the same settings with session stickiness enabled"""
    return settings.model_copy(update={"session_stickiness": True})


@pytest.fixture
def mock_servers():
    """Returns a list of inventory records spread over two pools"""
    return [
        ServerRecord(uuid="u1", bind_ip="10.0.0.1", bind_port=80, vhost_path="a.com", pool_name="web"),
        ServerRecord(uuid="u2", bind_ip="10.0.0.2", bind_port=80, vhost_path="a.com", pool_name="web"),
        ServerRecord(uuid="u3", bind_ip="10.0.1.1", bind_port=8080, vhost_path="/api", pool_name="api"),
    ]


@pytest.fixture
def mock_snapshot(mock_servers):
    """Returns the pool snapshot built from mock_servers"""
    return group_servers_by_pool(mock_servers)


@pytest.fixture
def attach_event():
    """Returns an attach event for a new web server"""
    return AttachDetachEvent(
        action=ApplicationAction.ATTACH,
        pool_name="web",
        server_uuid="u9",
        bind_ip="10.0.0.9",
        bind_port=8000,
        vhost_path="b.com"
    )

