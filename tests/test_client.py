"""Tests for the Client facade."""

import pytest
from conftest import BODY, FINAL_HEADERS, FakeTransport, StaticDirectory

from curlwrap import Client, ClientSettings
from curlwrap.errors import (
    ConfigurationError,
    InvalidHeadersError,
    InvalidQueryError,
    MalformedHeaderError,
    ProxyUnavailableError,
    TranscodeError,
    TransportClosedError,
)
from curlwrap.options import NOT_SET, Option
from curlwrap.proxy import ProxyEndpoint, ProxyResolver


@pytest.fixture
def client(transport):
    with Client.create("http://site.ru/", transport=transport) as client:
        yield client


class TestLifecycle:
    """Tests for opening and closing the transport session."""

    def test_construction_opens_transport(self, transport):
        client = Client("http://site.ru/", transport=transport)
        assert transport.open_calls == 1
        assert client.host == "http://site.ru"
        client.close()

    def test_context_manager_closes(self, transport):
        with Client("http://site.ru", transport=transport) as client:
            assert not client.closed
        assert client.closed
        assert transport.close_calls == 1

    def test_closed_after_exception(self, transport):
        """Test that the session is released when the block raises."""
        with pytest.raises(InvalidQueryError):
            with Client("http://site.ru", transport=transport) as client:
                client.set_query("POST")
        assert transport.close_calls == 1

    def test_close_is_idempotent(self, transport):
        client = Client("http://site.ru", transport=transport)
        client.close()
        client.close()
        assert transport.close_calls == 1

    def test_use_after_close(self, transport):
        client = Client("http://site.ru", transport=transport)
        client.close()
        with pytest.raises(TransportClosedError):
            client.execute("page")
        with pytest.raises(TransportClosedError):
            client.set_follow()


class TestOptions:
    """Tests for raw and convenience setters."""

    def test_set_overwrites(self, client):
        client.set(Option.REFERER, "http://a/").set(Option.REFERER, "http://b/")
        assert client.get(Option.REFERER) == "http://b/"

    def test_unset_differs_from_false(self, client):
        """Test that a stored False is not reported as unset."""
        assert client.get(Option.SHOW_HEADERS) is NOT_SET
        client.set_show_headers(False)
        assert client.get(Option.SHOW_HEADERS) is False
        assert client.is_set(Option.SHOW_HEADERS)

    def test_setters_chain_and_reach_transport(self, client, transport):
        client.set_show_headers().set_follow().set_referer("http://site.ru/").set_user_agent()
        assert transport.options[Option.SHOW_HEADERS] is True
        assert transport.options[Option.FOLLOW_REDIRECTS] is True
        assert transport.options[Option.REFERER] == "http://site.ru/"
        assert "Mozilla/5.0" in transport.options[Option.USER_AGENT]

    def test_custom_headers_round_trip(self, client, transport):
        """Test that a header mapping is stored as 'Name: value' lines."""
        client.set_headers({"X-Test": "1"})
        assert client.get(Option.HTTP_HEADERS) == ["X-Test: 1"]
        assert transport.options[Option.HTTP_HEADERS] == ["X-Test: 1"]

    def test_headers_must_be_mapping(self, client):
        with pytest.raises(InvalidHeadersError):
            client.set_headers(["X-Test: 1"])
        assert client.get(Option.HTTP_HEADERS) is NOT_SET

    def test_disable_ssl(self, client, transport):
        client.set_disable_ssl()
        assert client.get(Option.SSL_VERIFY_PEER) is False
        assert client.get(Option.SSL_VERIFY_HOST) is False

    def test_failed_batch_leaves_nothing_applied(self, client, transport):
        """Test that multi-option setters are all-or-nothing."""
        transport.reject.add(Option.SSL_VERIFY_HOST)
        with pytest.raises(ConfigurationError):
            client.set_disable_ssl()
        assert client.get(Option.SSL_VERIFY_PEER) is NOT_SET
        assert Option.SSL_VERIFY_PEER not in transport.options

    def test_timeouts(self, client):
        client.set_timeout(total=10, connect=2)
        assert client.get(Option.TIMEOUT) == 10
        assert client.get(Option.CONNECT_TIMEOUT) == 2


class TestQuery:
    """Tests for set_query."""

    def test_post_mapping_is_form_encoded(self, client):
        client.set_query("POST", {"login": "user", "tags": ["a", "b"]})
        assert client.get(Option.REQUEST_METHOD) == "POST"
        assert client.get(Option.POST_FIELDS) == "login=user&tags=a&tags=b"

    def test_post_string_used_verbatim(self, client):
        client.set_query("POST", '{"a": 1}')
        assert client.get(Option.POST_FIELDS) == '{"a": 1}'

    def test_post_without_body(self, client):
        with pytest.raises(InvalidQueryError):
            client.set_query("POST")
        assert client.get(Option.REQUEST_METHOD) is NOT_SET

    def test_post_with_unsupported_body(self, client):
        with pytest.raises(InvalidQueryError):
            client.set_query("POST", 42)

    def test_put_without_body(self, client):
        client.set_query("PUT")
        assert client.get(Option.REQUEST_METHOD) == "PUT"

    def test_unknown_method_falls_back_to_get(self, client):
        client.set_query("POST", "a=1").set_query("DELETE")
        assert client.get(Option.REQUEST_METHOD) == "GET"
        assert client.get(Option.POST_FIELDS) is None


class TestCookies:
    """Tests for set_cookie."""

    def test_cookie_string(self, client):
        client.set_cookie("sid=abc")
        assert client.get(Option.COOKIE) == "sid=abc"
        assert client.get(Option.COOKIE_JAR) is NOT_SET

    def test_jar_creates_directory(self, client, tmp_path):
        jar = tmp_path / "cookies" / "site" / "jar.txt"
        client.set_cookie(jar=jar)
        assert jar.parent.is_dir()
        assert client.get(Option.COOKIE_FILE) == str(jar)
        assert client.get(Option.COOKIE_JAR) == str(jar)

    def test_nothing_given(self, client):
        with pytest.raises(ConfigurationError):
            client.set_cookie()


class TestProxy:
    """Tests for set_proxy."""

    def test_direct_proxy(self, client):
        client.set_proxy("192.168.1.1:8080")
        assert client.get(Option.PROXY) == "192.168.1.1:8080"
        assert client.get(Option.PROXY_TYPE) == "http"

    def test_auto_proxy(self, transport):
        candidates = [ProxyEndpoint("10.0.0.1", 3128), ProxyEndpoint("10.0.0.2", 8080)]
        resolver = ProxyResolver(StaticDirectory(candidates))
        with Client("http://site.ru", transport=transport, resolver=resolver) as client:
            client.set_proxy("auto")
            assert client.get(Option.PROXY) in {"10.0.0.1:3128", "10.0.0.2:8080"}

    def test_auto_proxy_without_candidates(self, transport):
        """Test that an empty directory fails instead of disabling the proxy."""
        resolver = ProxyResolver(StaticDirectory([]))
        with Client("http://site.ru", transport=transport, resolver=resolver) as client:
            with pytest.raises(ProxyUnavailableError):
                client.set_proxy("auto")
            assert client.get(Option.PROXY) is NOT_SET
            assert client.get(Option.PROXY_TYPE) is NOT_SET


class TestExecute:
    """Tests for execute()."""

    def test_builds_url_from_host(self, client, transport):
        client.execute("page/1")
        client.execute("/page/2")
        assert transport.performed == ["http://site.ru/page/1", "http://site.ru/page/2"]
        assert client.get(Option.URL) == "http://site.ru/page/2"

    def test_parses_redirect_chain(self, client):
        client.set_show_headers()
        response = client.execute("page/1")
        assert response.ok
        assert len(response.headers) == 2
        assert response.headers[0].status_code == 302
        assert response.headers[0].cookies == ["a=1", "b=2"]
        assert response.final.status_code == 200
        assert response.status_code == 200
        assert response.content == BODY

    def test_headers_hidden_returns_raw_output(self, client, redirect_output):
        data, _ = redirect_output
        response = client.execute("page/1")
        assert response.headers == ()
        assert response.content == data

    def test_info_snapshot(self, client):
        """Test that info is empty before the first call and immutable after."""
        assert dict(client.info) == {}
        response = client.execute("page/1")
        assert client.get_info()["url"] == "http://site.ru/page/1"
        assert response.info["header_size"] == client.info["header_size"]
        with pytest.raises(TypeError):
            client.info["url"] = "changed"

    def test_transport_error_does_not_raise(self):
        transport = FakeTransport(errno=7, error="Failed to connect")
        with Client("http://site.ru", transport=transport) as client:
            response = client.set_show_headers().execute("page")
        assert not response.ok
        assert response.errno == 7
        assert response.error == "Failed to connect"
        assert response.headers == ()
        assert response.content == b""

    def test_transcoding(self):
        text = "Привет"
        data = FINAL_HEADERS + text.encode("cp1251")
        transport = FakeTransport(data=data, header_size=len(FINAL_HEADERS))
        with Client("http://site.ru", transport=transport) as client:
            response = client.set_show_headers().execute("page", "windows-1251", "utf-8")
        assert response.content == text.encode("utf-8")
        assert response.charset == "utf-8"
        assert response.text == text
        assert response.headers[0].status_code == 200

    def test_single_charset_means_no_transcoding(self):
        data = "Привет".encode("cp1251")
        with Client("http://site.ru", transport=FakeTransport(data=data)) as client:
            response = client.execute("page", "windows-1251")
        assert response.content == data
        assert response.charset is None

    def test_transcoding_failure(self):
        with Client("http://site.ru", transport=FakeTransport(data=b"abc")) as client:
            with pytest.raises(TranscodeError):
                client.execute("page", "no-such-charset", "utf-8")

    def test_malformed_headers(self):
        """Test that a malformed header line aborts the call with a parse error."""
        data = b"HTTP/1.1 200 OK\r\nbroken\r\n\r\nbody"
        transport = FakeTransport(data=data, header_size=len(data) - 4)
        with Client("http://site.ru", transport=transport) as client:
            with pytest.raises(MalformedHeaderError):
                client.set_show_headers().execute("page")
            assert client.info["url"] == "http://site.ru/page"

    def test_request_alias(self, client):
        assert client.request("page").content == client.execute("page").content

    def test_as_dict(self, client):
        client.set_show_headers()
        result = client.execute("page/1").as_dict()
        assert result["errno"] == 0
        assert result["header"][0]["http_code"] == "HTTP/1.1 302 Found"
        assert result["header"][1]["Set-Cookie"] == ["c=3"]
        assert result["content"] == BODY


class TestFromSettings:
    """Tests for Client.from_settings."""

    def test_applies_settings(self, transport, tmp_path):
        settings = ClientSettings(
            host="http://site.ru/",
            show_headers=True,
            referer="http://site.ru/",
            headers={"X-Test": "1"},
            network={"follow_redirects": True, "verify_tls": False, "timeout": 5, "max_redirects": 4},
            cookies={"cookie": "sid=abc", "jar": tmp_path / "jar.txt"},
            query={"method": "POST", "form": {"a": "1"}},
        )
        with Client.from_settings(settings, transport=transport) as client:
            assert client.host == "http://site.ru"
            assert client.get(Option.SHOW_HEADERS) is True
            assert client.get(Option.FOLLOW_REDIRECTS) is True
            assert client.get(Option.MAX_REDIRECTS) == 4
            assert client.get(Option.HTTP_HEADERS) == ["X-Test: 1"]
            assert client.get(Option.SSL_VERIFY_PEER) is False
            assert client.get(Option.TIMEOUT) == 5
            assert client.get(Option.COOKIE) == "sid=abc"
            assert client.get(Option.POST_FIELDS) == "a=1"
            assert client.get(Option.PROXY) is NOT_SET

    def test_defaults_leave_options_unset(self, transport):
        with Client.from_settings(ClientSettings(host="http://site.ru"), transport=transport) as client:
            assert len(client.options) == 0

    def test_failure_closes_transport(self, transport):
        settings = ClientSettings(host="http://site.ru", network={"proxy": "auto"})
        resolver = ProxyResolver(StaticDirectory([]))
        with pytest.raises(ProxyUnavailableError):
            Client.from_settings(settings, transport=transport, resolver=resolver)
        assert transport.close_calls == 1
