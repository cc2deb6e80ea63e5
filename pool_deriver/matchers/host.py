from pool_deriver.matchers import RequestMatcher

class HostMatcher(RequestMatcher):
    def match_expression(self) -> str:
        """Match on the Host header domain, so 'example.com' also covers 'test.example.com'."""
        return f"hdr_dom(host) -i -m dom {self.vhost_path}"
