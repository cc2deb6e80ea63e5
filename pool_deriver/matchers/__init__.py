from abc import ABC, abstractmethod

class RequestMatcher(ABC):
    def __init__(self, vhost_path: str):
        self.vhost_path = vhost_path

    @abstractmethod
    def match_expression(self) -> str:
        """Returns the HAProxy ACL condition selecting requests for this vhost_path."""
        pass
