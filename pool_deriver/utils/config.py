import yaml
import logging
from typing import Dict, Any, List
from pydantic import BaseModel, Field

CONFIG: Dict[str, Any] = {}

logger = logging.getLogger(__name__)

def load_config(path: str = 'config.yaml') -> None:
    """Loads configuration from a YAML file."""
    global CONFIG
    try:
        with open(path, 'r') as f:
            CONFIG = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.error(f"Configuration file '{path}' not found.")
        CONFIG = {}
    except yaml.YAMLError as e:
        logger.error(f"Error parsing configuration file '{path}': {e}")
        CONFIG = {}

def get_config() -> Dict[str, Any]:
    """Returns the loaded configuration."""
    if not CONFIG:
        load_config() # Load if not already loaded
    return CONFIG

class DeriverSettings(BaseModel):
    """Flags consumed by the pool deriver, read from the `haproxy` config section."""
    pools: List[str] = Field(default_factory=list) # Order matters: the last pool is the default backend
    session_stickiness: bool = False
    http_health_check_enabled: bool = Field(default=False, alias="http_chk")
    member_max_connections: int = 100

    class Config:
        populate_by_name = True
        frozen = True

    @classmethod
    def from_config(cls, config: Dict[str, Any] = None) -> "DeriverSettings":
        if config is None:
            config = get_config()
        return cls(**(config.get('haproxy') or {}))
