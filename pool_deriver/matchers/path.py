from pool_deriver.matchers import RequestMatcher

class PathMatcher(RequestMatcher):
    def match_expression(self) -> str:
        """Match on the request URI path, e.g. '/index' for www.example.com/index."""
        return f"path_dom -i {self.vhost_path}"
