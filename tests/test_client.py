import json
import logging

import httpx
import pytest

from tmac.client import BASE_URL, APIClient, FetchResult
from tmac.errors import DeserializationError, HTTPStatusError, TransportError, ValidationError
from tmac.models import Todo, User


def error_records(caplog):
    return [r for r in caplog.records if r.levelno == logging.ERROR]


class _UnreadableStream(httpx.SyncByteStream):
    def __iter__(self):
        raise httpx.ReadError("connection reset")


class TestFetchAgainstFakeApi:
    def test_fetch_users(self, api, fake_api):
        result = api.fetch_users()
        assert isinstance(result, FetchResult)
        assert result.ok
        assert result.skipped == 0
        assert [u.name for u in result.value] == ["Leanne Graham", "Ervin Howell", "Clementine Bauch"]
        assert all(isinstance(u, User) for u in result.value)
        assert result.value[0].todos == []
        assert fake_api.state.requested == ["/users"]

    def test_fetch_user_by_id(self, api, fake_api):
        result = api.fetch_user_by_id(1)
        assert result.ok
        assert result.value.id == 1
        assert result.value.email == "Sincere@april.biz"
        assert fake_api.state.requested == ["/users/1"]

    def test_fetch_missing_user_is_a_failed_result(self, api, caplog):
        result = api.fetch_user_by_id(999)
        assert not result.ok
        assert result.value is None
        assert isinstance(result.error, HTTPStatusError)
        assert result.error.status_code == 404
        assert result.error.reason == "Not Found"
        assert "Not Found" in result.error.body
        assert len(error_records(caplog)) == 1

    def test_fetch_todos(self, api, fake_api):
        result = api.fetch_todos()
        assert result.ok
        assert len(result.value) == 4
        assert all(isinstance(t, Todo) for t in result.value)
        assert [t.completed for t in result.value] == [False, True, True, False]
        assert fake_api.state.requested == ["/todos"]

    def test_fetch_todos_by_user_id_uses_user_path(self, api, fake_api):
        result = api.fetch_todos_by_user_id("1")
        assert result.ok
        assert [t.id for t in result.value] == [1, 2, 3]
        assert all(t.is_owned_by(1) for t in result.value)
        assert fake_api.state.requested == ["/users/1/todos"]

    def test_fetch_todos_by_numeric_user_id(self, api, fake_api):
        result = api.fetch_todos_by_user_id(2)
        assert [t.id for t in result.value] == [4]
        assert fake_api.state.requested == ["/users/2/todos"]

    def test_empty_list_is_a_successful_result(self, api):
        result = api.fetch_todos_by_user_id(3)
        assert result.ok
        assert result.value == []

    @pytest.mark.parametrize("user_id", ["abc", "", None, "nan", "1/2"])
    def test_invalid_user_id_fails_before_request(self, api, fake_api, user_id):
        with pytest.raises(ValidationError):
            api.fetch_todos_by_user_id(user_id)
        assert fake_api.state.requested == []

    def test_validation_error_is_a_value_error(self, api):
        with pytest.raises(ValueError, match="Invalid userId: abc"):
            api.fetch_todos_by_user_id("abc")


class TestFailures:
    def test_http_error_carries_status_and_body(self, mock_api, caplog):
        api = mock_api(lambda request: httpx.Response(500, text="Server error"))
        result = api.fetch_todos()
        assert not result.ok
        assert isinstance(result.error, HTTPStatusError)
        assert result.error.status_code == 500
        assert result.error.reason == "Internal Server Error"
        assert result.error.body == "Server error"
        assert "500" in str(result.error)
        errors = error_records(caplog)
        assert len(errors) == 1
        assert errors[0].getMessage().startswith("Error fetching todos")

    def test_network_failure_is_a_failed_result(self, mock_api, caplog):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        api = mock_api(refuse)
        result = api.fetch_users()
        assert not result.ok
        assert result.value is None
        assert isinstance(result.error, TransportError)
        assert isinstance(result.error.cause, httpx.ConnectError)
        assert len(error_records(caplog)) == 1

    def test_bad_content_encoding_is_a_transport_error(self, mock_api, caplog):
        api = mock_api(
            lambda request: httpx.Response(200, headers={"content-encoding": "gzip"}, content=b"not gzip")
        )
        result = api.fetch_todos()
        assert not result.ok
        assert isinstance(result.error, TransportError)
        assert isinstance(result.error.cause, httpx.DecodingError)
        assert len(error_records(caplog)) == 1

    def test_redirect_loop_is_a_transport_error(self):
        def loop(request):
            return httpx.Response(302, headers={"location": str(request.url)})

        http = httpx.Client(transport=httpx.MockTransport(loop), follow_redirects=True)
        with http:
            result = APIClient(base_url="http://testserver", http_client=http).fetch_users()
        assert isinstance(result.error, TransportError)
        assert isinstance(result.error.cause, httpx.TooManyRedirects)

    def test_timeout_is_a_transport_error(self, mock_api):
        def slow(request):
            raise httpx.ReadTimeout("timed out", request=request)

        result = mock_api(slow).fetch_user_by_id(1)
        assert isinstance(result.error, TransportError)

    def test_invalid_json_is_a_deserialization_error(self, mock_api):
        api = mock_api(lambda request: httpx.Response(200, text="<html>nope</html>"))
        result = api.fetch_todos()
        assert isinstance(result.error, DeserializationError)

    def test_non_array_payload_is_a_deserialization_error(self, mock_api):
        api = mock_api(lambda request: httpx.Response(200, json={"id": 1}))
        result = api.fetch_todos()
        assert isinstance(result.error, DeserializationError)

    def test_malformed_single_user_is_a_failed_result(self, mock_api, caplog):
        api = mock_api(lambda request: httpx.Response(200, json=None))
        result = api.fetch_user_by_id(1)
        assert isinstance(result.error, DeserializationError)
        assert len(error_records(caplog)) == 1

    def test_malformed_records_are_dropped_from_batch(self, mock_api, caplog):
        payload = [
            {"userId": 1, "id": 1, "title": "ok", "completed": True},
            None,
            "garbage",
            {"userId": 1, "id": 2, "title": "also ok", "completed": False},
        ]
        api = mock_api(lambda request: httpx.Response(200, json=payload))
        result = api.fetch_todos()
        assert result.ok
        assert [t.id for t in result.value] == [1, 2]
        assert result.skipped == 2
        assert len(error_records(caplog)) == 2

    def test_malformed_users_are_dropped_from_batch(self, mock_api):
        payload = [{"id": 1, "name": "a", "email": "a@example.com"}, None]
        result = mock_api(lambda request: httpx.Response(200, json=payload)).fetch_users()
        assert [u.id for u in result.value] == [1]
        assert result.skipped == 1


class TestHandleResponse:
    def test_success_returns_json(self):
        data = {"id": 1, "name": "Test"}
        assert APIClient().handle_response(httpx.Response(200, json=data)) == data

    def test_404_raises_with_status(self):
        with pytest.raises(HTTPStatusError, match="404"):
            APIClient().handle_response(httpx.Response(404, text="Resource not found"))

    def test_unreadable_body_still_reports_status(self):
        response = httpx.Response(503, stream=_UnreadableStream())
        with pytest.raises(HTTPStatusError) as exc_info:
            APIClient().handle_response(response)
        assert exc_info.value.status_code == 503
        assert exc_info.value.reason == "Service Unavailable"
        assert exc_info.value.body == ""

    def test_success_with_empty_list(self):
        assert APIClient().handle_response(httpx.Response(200, content=json.dumps([]).encode())) == []


class TestClientLifecycle:
    def test_defaults(self):
        api = APIClient()
        assert api.base_url == BASE_URL
        api.close()

    def test_trailing_slash_is_stripped(self):
        with APIClient(base_url="http://example.test/") as api:
            assert api.base_url == "http://example.test"

    def test_owned_client_is_closed(self):
        with APIClient(timeout=2.5) as api:
            assert api._http.timeout.connect == 2.5
        assert api._http.is_closed

    def test_injected_client_is_left_open(self):
        http = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200, json=[])))
        with APIClient(http_client=http):
            pass
        assert not http.is_closed
        http.close()
