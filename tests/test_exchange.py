from defender.exchange import Headers, Request, Response, canonical_header_key


def test_canonical_header_key():
    assert canonical_header_key("content-type") == "Content-Type"
    assert canonical_header_key("X-FORWARDED-FOR") == "X-Forwarded-For"
    assert canonical_header_key("bad key") == "bad key"


def test_headers_set_get_add_delete():
    headers = Headers()
    headers.set("user-agent", "a")
    headers.add("User-Agent", "b")
    assert headers.get("USER-AGENT") == "a"
    assert headers.get_all("user-agent") == ["a", "b"]
    headers.set("User-Agent", "c")
    assert headers.get_all("user-agent") == ["c"]
    headers.delete("user-agent")
    assert headers.get("user-agent") == ""
    assert len(headers) == 0


def test_headers_init_items_and_copy():
    headers = Headers({"accept": ["x", "y"], "host": "h"})
    assert dict(headers.items()) == {"Accept": ["x", "y"], "Host": ["h"]}
    clone = headers.copy()
    clone.add("accept", "z")
    assert headers.get_all("accept") == ["x", "y"]
    assert "ACCEPT" in clone


def test_request_helpers():
    request = Request(
        query="a=1&a=2&b=",
        headers=Headers({"Content-Type": "application/json; charset=utf-8", "User-Agent": "ua"}),
        body=b"abc",
    )
    assert request.query_args() == {"a": ["1", "2"], "b": [""]}
    assert request.content_type() == "application/json"
    assert request.user_agent() == "ua"
    assert request.content_length == 3


def test_request_context_values():
    request = Request()
    request.set("current_score", 5)
    request.set("name", "v")
    assert request.get_int("current_score") == 5
    assert request.get_int("name") == 0
    assert request.get_string("name") == "v"
    assert request.get_string("missing") == ""


def test_response_defaults():
    response = Response(body=b"hello")
    assert response.content_length == 5
    assert response.status_code == 200