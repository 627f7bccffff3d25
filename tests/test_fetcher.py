import threading
import time

import httpx

from research_feed.fetcher import fetch_html


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_returns_body_on_success(config):
    def handler(request):
        assert request.headers["User-Agent"] == config.user_agent
        return httpx.Response(200, text="<html>ok</html>")

    with _client(handler) as client:
        assert fetch_html("https://example.edu/", config, client=client) == "<html>ok</html>"


def test_non_2xx_is_empty(config):
    with _client(lambda request: httpx.Response(404, text="missing")) as client:
        assert fetch_html("https://example.edu/gone", config, client=client) == ""
    with _client(lambda request: httpx.Response(503, text="down")) as client:
        assert fetch_html("https://example.edu/down", config, client=client) == ""


def test_network_errors_are_empty(config):
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    def stall(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with _client(refuse) as client:
        assert fetch_html("https://example.edu/", config, client=client) == ""
    with _client(stall) as client:
        assert fetch_html("https://example.edu/", config, client=client) == ""


def test_deadline_exceeded_is_empty(config):
    config.crawl.timeout_seconds = 0.01

    def slow(request):
        time.sleep(0.05)
        return httpx.Response(200, text="too late")

    with _client(slow) as client:
        assert fetch_html("https://example.edu/", config, client=client) == ""


def test_cancel_before_request_skips_network(config):
    calls = []
    cancel = threading.Event()
    cancel.set()

    def handler(request):
        calls.append(request)
        return httpx.Response(200, text="body")

    with _client(handler) as client:
        assert fetch_html("https://example.edu/", config, client=client, cancel=cancel) == ""
    assert calls == []


def test_cancel_during_read_is_empty(config):
    cancel = threading.Event()

    def handler(request):
        cancel.set()
        return httpx.Response(200, text="body")

    with _client(handler) as client:
        assert fetch_html("https://example.edu/", config, client=client, cancel=cancel) == ""


def test_unsupported_url_is_empty(config):
    assert fetch_html("not a url", config) == ""


def test_unexpected_errors_are_empty(config):
    def bad_host(request):
        raise UnicodeError("encoding with 'idna' codec failed (label empty or too long)")

    with _client(bad_host) as client:
        assert fetch_html("https://" + "a" * 64 + ".example.edu/p", config, client=client) == ""


class _Drip(httpx.SyncByteStream):
    def __iter__(self):
        for _ in range(5):
            yield b"<p>slow</p>"
            time.sleep(0.2)


def test_slow_body_is_bounded_by_deadline(config):
    config.crawl.timeout_seconds = 0.3

    def handler(request):
        time.sleep(0.2)
        return httpx.Response(200, stream=_Drip())

    with _client(handler) as client:
        started = time.monotonic()
        assert fetch_html("https://example.edu/", config, client=client) == ""
        elapsed = time.monotonic() - started
    assert elapsed <= 0.3 + 0.2


def test_redirect_within_trusted_domains_is_followed(config):
    def handler(request):
        if request.url.path == "/old":
            return httpx.Response(301, headers={"Location": "https://lab.example.edu/new"})
        return httpx.Response(200, text="moved here")

    with _client(handler) as client:
        assert fetch_html("https://example.edu/old", config, client=client) == "moved here"


def test_redirect_to_untrusted_host_is_refused(config):
    seen = []

    def handler(request):
        seen.append(request.url.host)
        if request.url.host == "example.edu":
            return httpx.Response(302, headers={"Location": "http://169.254.169.254/latest"})
        return httpx.Response(200, text="metadata")

    with _client(handler) as client:
        assert fetch_html("https://example.edu/go", config, client=client) == ""
    assert seen == ["example.edu"]


def test_redirect_loop_is_empty(config):
    def handler(request):
        return httpx.Response(302, headers={"Location": "https://example.edu/again"})

    with _client(handler) as client:
        assert fetch_html("https://example.edu/again", config, client=client) == ""
