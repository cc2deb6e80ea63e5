import logging
import requests
from typing import Any, Dict, Optional
from pool_deriver.db.models import ApplicationAction

class DeriverClient:
    """Used by an application server to tell its load balancer it joined or left a pool."""

    def __init__(self, base_url: str, timeout: int = 10):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.logger = logging.getLogger(__name__)

    def send_event(self, action: ApplicationAction, pool_name: str, server_uuid: str,
                   bind_ip: Optional[str] = None, bind_port: Optional[int] = None,
                   vhost_path: Optional[str] = None) -> Dict[str, Any]:
        """Post an attach/detach payload to the deriver API and return the queued event."""
        payload = {
            'application_action': ApplicationAction(action).value,
            'pool_name': pool_name,
            'application_server_id': server_uuid,
            'application_bind_ip': bind_ip,
            'application_bind_port': bind_port,
            'vhost_path': vhost_path
        }
        url = f"{self.base_url}/events/"
        try:
            response = requests.post(url, json=payload, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            self.logger.error(f"Error sending {payload['application_action']} event to {url}: {str(e)}")
            raise
        return response.json()

    def attach(self, pool_name: str, server_uuid: str, bind_ip: str, bind_port: int,
               vhost_path: Optional[str] = None) -> Dict[str, Any]:
        return self.send_event(ApplicationAction.ATTACH, pool_name, server_uuid, bind_ip, bind_port, vhost_path)

    def detach(self, pool_name: str, server_uuid: str) -> Dict[str, Any]:
        return self.send_event(ApplicationAction.DETACH, pool_name, server_uuid)

    def derive(self) -> Dict[str, Any]:
        """Ask the deriver to run, consuming the pending event."""
        url = f"{self.base_url}/config/"
        response = requests.post(url, timeout=self.timeout)
        response.raise_for_status()
        return response.json()
