from enum import Enum
from typing import Dict, Type
from pool_deriver.matchers import RequestMatcher
from pool_deriver.matchers.path import PathMatcher
from pool_deriver.matchers.host import HostMatcher

PATH_SEPARATOR = "/"

class MatchKind(str, Enum):
    PATH = "path"
    HOST = "host"

class MatcherFactory:
    _matchers: Dict[MatchKind, Type[RequestMatcher]] = {
        MatchKind.PATH: PathMatcher,
        MatchKind.HOST: HostMatcher
    }

    @staticmethod
    def kind_for(vhost_path: str) -> MatchKind:
        """A vhost_path containing a path separator is a URI path, anything else a hostname."""
        return MatchKind.PATH if PATH_SEPARATOR in vhost_path else MatchKind.HOST

    @classmethod
    def get_matcher(cls, vhost_path: str) -> RequestMatcher:
        """
        Factory method to get the matcher for a vhost_path
        """
        if not vhost_path:
            raise ValueError("vhost_path is required to build a matcher")

        matcher_class = cls._matchers[cls.kind_for(vhost_path)]
        return matcher_class(vhost_path)
