from __future__ import annotations

import json
from typing import Any, ClassVar, Mapping

import anyio
import httpx
import pytest

from adapters.http_backend import (
    AV_USER_HEADER,
    HttpBackendService,
    build_multipart_body,
    describe_parameter,
    join_endpoint,
    make_json_request,
    make_url,
)
from core.domain.crud import CrudType, HttpMethod
from core.domain.models import (
    BackendRequest,
    MHelpArea,
    MHelpAreaList,
    MHelpAreasRequest,
    MLocation,
    MProfile,
    MProfilePicture,
    MProfileRequest,
)
from core.errors import EncodingError

ENDPOINT = "https://api.example.com/v1"


class _SearchRequest(BackendRequest):
    resource: ClassVar[str] = "search"

    reverse: bool = False

    def get_parameters(self, crud: CrudType) -> Mapping[str, Any]:
        items = [("q", "help me"), ("limit", 10), ("nearby", True)]
        if self.reverse:
            items.reverse()
        return dict(items)


class _OpaqueRequest(BackendRequest):
    resource: ClassVar[str] = "opaque"

    payload: Any = None


class _QuietProfileRequest(MProfileRequest):
    def can_request_login(self, crud: CrudType) -> bool:
        return False


PROFILE_JSON = {"username": "ana", "displayName": "Ana", "helpAreas": [{"situation": "Lost pet"}]}


class TestUrlBuilder:
    def test_join_endpoint_single_slash(self):
        assert join_endpoint("https://x.test/api/", "/profile") == "https://x.test/api/profile"
        assert join_endpoint("https://x.test/api", "profile") == "https://x.test/api/profile"

    def test_no_parameters_no_query(self):
        url = make_url(ENDPOINT, MProfileRequest(), HttpMethod.GET)
        assert url == f"{ENDPOINT}/profile"
        assert "?" not in url

    def test_one_entry_per_parameter_independent_of_order(self):
        first = httpx.URL(make_url(ENDPOINT, _SearchRequest(), HttpMethod.GET))
        second = httpx.URL(make_url(ENDPOINT, _SearchRequest(reverse=True), HttpMethod.GET))

        assert sorted(first.params.multi_items()) == sorted(second.params.multi_items())
        assert sorted(first.params.multi_items()) == [
            ("limit", "10"),
            ("nearby", "true"),
            ("q", "help me"),
        ]

    def test_values_are_percent_encoded(self):
        url = make_url(ENDPOINT, MHelpAreasRequest(username="ana maria"), HttpMethod.GET)
        assert url == f"{ENDPOINT}/helpareas?username=ana%20maria"

    def test_describe_parameter(self):
        assert describe_parameter(False) == "false"
        assert describe_parameter(None) == ""
        assert describe_parameter(CrudType.READ) == "read"
        assert describe_parameter(1.5) == "1.5"


class TestRequestEncoder:
    def test_bodyless_operation_sends_empty_object(self):
        request = MHelpAreasRequest(help_areas=[MHelpArea(situation="Flood")])
        http_request = make_json_request(ENDPOINT, request, HttpMethod.DELETE)
        assert http_request.content == b"{}"
        assert http_request.headers["Content-Type"] == "application/json"

    def test_profile_request_always_empty(self):
        for method in (HttpMethod.POST, HttpMethod.PUT, HttpMethod.DELETE):
            assert make_json_request(ENDPOINT, MProfileRequest(), method).content == b"{}"

    def test_body_is_request_json(self):
        location = MLocation(latitude=10.0, longitude=20.0, username="ana")
        http_request = make_json_request(ENDPOINT, location, HttpMethod.PUT)
        assert http_request.method == "PUT"
        assert str(http_request.url) == f"{ENDPOINT}/location"
        assert json.loads(http_request.content) == {"latitude": 10.0, "longitude": 20.0, "username": "ana"}

    def test_unserializable_request_raises(self):
        with pytest.raises(EncodingError):
            make_json_request(ENDPOINT, _OpaqueRequest(payload=object()), HttpMethod.POST)


class TestMultipart:
    def test_single_file_part(self):
        body = build_multipart_body(b"0123456789", "B")
        assert body == (
            b"--B\r\n"
            b'Content-Disposition: form-data; name="file"; filename="profile"\r\n'
            b"Content-Type: application/octet-stream\r\n\r\n"
            b"0123456789"
            b"\r\n--B--"
        )


@pytest.mark.anyio
async def test_read_profile_scenario(backend, recorder, login_events):
    recorder.body = PROFILE_JSON

    result = await backend.read(MProfileRequest(), MProfile)

    assert result.success
    assert result.value == MProfile(username="ana", display_name="Ana", help_areas=[MHelpArea(situation="Lost pet")])
    sent = recorder.last
    assert sent.method == "GET"
    assert str(sent.url) == f"{ENDPOINT}/profile"
    assert sent.content == b""
    assert "Content-Type" not in sent.headers
    assert login_events == []


@pytest.mark.anyio
async def test_read_profile_unauthorized_signals_login_once(backend, recorder, login_events):
    recorder.status_code = 401
    recorder.body = PROFILE_JSON

    result = await backend.read(MProfileRequest(), MProfile)

    assert result.success is False
    assert result.value is None
    assert login_events == ["unauthorized"]


@pytest.mark.anyio
async def test_unauthorized_without_login_flag_does_not_signal(backend, recorder, login_events):
    recorder.status_code = 401

    result = await backend.read(_QuietProfileRequest(), MProfile)

    assert not result.success
    assert login_events == []


@pytest.mark.anyio
async def test_malformed_json_is_failure_without_login(backend, recorder, login_events):
    recorder.body = b"{not json"

    result = await backend.read(MProfileRequest(), MProfile)

    assert not result.success
    assert login_events == []


@pytest.mark.anyio
async def test_empty_body_is_failure(backend, recorder):
    recorder.body = None

    result = await backend.read(MProfileRequest(), MProfile)

    assert not result.success


@pytest.mark.anyio
async def test_wrong_shape_is_failure(backend, recorder):
    recorder.body = {"unexpected": True}

    result = await backend.read(MProfileRequest(), MProfile)

    assert not result.success


@pytest.mark.anyio
async def test_transport_error_is_failure_without_login(backend, recorder, login_events):
    recorder.error = lambda request: httpx.ConnectError("connection refused", request=request)

    result = await backend.read(MProfileRequest(), MProfile)

    assert not result.success
    assert login_events == []


@pytest.mark.anyio
async def test_encoding_failure_never_reaches_network(backend, recorder):
    result = await backend.create(_OpaqueRequest(payload=object()), MProfile)

    assert not result.success
    assert recorder.requests == []


@pytest.mark.anyio
async def test_invalid_endpoint_is_failure_without_network(settings, user_auth, login_signal, recorder):
    broken = HttpBackendService(
        "http://[::1/api",
        user_auth,
        login_signal,
        settings=settings,
        transport=httpx.MockTransport(recorder),
    )

    assert not (await broken.read(MProfileRequest(), MProfile)).success
    assert not (await broken.create(MLocation(latitude=1.0, longitude=2.0, username="ana"), MLocation)).success
    assert not (await broken.upload_profile_picture(b"0123456789")).success
    assert recorder.requests == []


def test_invalid_url_is_an_encoding_error():
    with pytest.raises(EncodingError):
        make_json_request("http://[::1/api", MProfileRequest(), HttpMethod.DELETE)


@pytest.mark.anyio
async def test_local_auth_adds_user_header(backend, recorder):
    recorder.body = PROFILE_JSON

    await backend.read(MProfileRequest(), MProfile)

    assert recorder.last.headers[AV_USER_HEADER] == "ana"


@pytest.mark.anyio
async def test_live_auth_never_adds_user_header(backend, recorder, user_auth):
    user_auth.live_auth = True
    recorder.body = PROFILE_JSON

    await backend.read(MProfileRequest(), MProfile)

    assert AV_USER_HEADER not in recorder.last.headers


@pytest.mark.anyio
async def test_local_auth_without_username_has_no_header(backend, recorder, user_auth):
    user_auth.log_out()
    recorder.body = PROFILE_JSON

    await backend.read(MProfileRequest(), MProfile)

    assert AV_USER_HEADER not in recorder.last.headers


@pytest.mark.anyio
async def test_client_defaults_are_sent(backend, recorder, settings):
    recorder.body = PROFILE_JSON

    await backend.read(MProfileRequest(), MProfile)

    assert recorder.last.headers["User-Agent"] == settings.user_agent
    assert recorder.last.headers["Accept"] == "application/json"


@pytest.mark.anyio
@pytest.mark.parametrize(
    ("operation", "method"),
    [("create", "POST"), ("update", "PUT"), ("delete", "DELETE")],
)
async def test_json_operations_use_their_method(backend, recorder, operation, method):
    recorder.body = {"helpAreas": [{"situation": "Flood"}]}
    request = MHelpAreasRequest(help_areas=[MHelpArea(situation="Flood")])

    result = await getattr(backend, operation)(request, MHelpAreaList)

    assert result.success
    sent = recorder.last
    assert sent.method == method
    assert sent.headers["Content-Type"] == "application/json"
    expected = b"{}" if method == "DELETE" else b'{"helpAreas":[{"situation":"Flood"}]}'
    assert sent.content == expected


@pytest.mark.anyio
async def test_upload_scenario(backend, recorder, login_events):
    recorder.body = {"url": "https://cdn.example.com/profile.png"}
    payload = bytes(range(10))

    result = await backend.upload_profile_picture(payload)

    assert result.success
    assert result.value == MProfilePicture(url="https://cdn.example.com/profile.png")

    sent = recorder.last
    assert sent.method == "POST"
    assert str(sent.url) == f"{ENDPOINT}/upload"
    content_type = sent.headers["Content-Type"]
    assert content_type.startswith("multipart/form-data; boundary=")
    boundary = content_type.split("boundary=", 1)[1]
    assert sent.content == build_multipart_body(payload, boundary)
    assert sent.content.count(b"Content-Disposition") == 1
    assert sent.headers[AV_USER_HEADER] == "ana"
    assert login_events == []


@pytest.mark.anyio
async def test_upload_boundary_changes_per_call(backend, recorder):
    recorder.body = {"url": "https://cdn.example.com/profile.png"}

    await backend.upload_profile_picture(b"a")
    await backend.upload_profile_picture(b"b")

    first, second = (r.headers["Content-Type"] for r in recorder.requests)
    assert first != second


@pytest.mark.anyio
async def test_upload_unauthorized_always_signals(backend, recorder, login_events):
    recorder.status_code = 401

    result = await backend.upload_profile_picture(b"0123456789")

    assert not result.success
    assert login_events == ["unauthorized"]


@pytest.mark.anyio
async def test_concurrent_unauthorized_calls_each_signal(backend, recorder, login_events):
    recorder.status_code = 401
    results = []

    async def call() -> None:
        results.append(await backend.read(MProfileRequest(), MProfile))

    async with anyio.create_task_group() as tg:
        for _ in range(3):
            tg.start_soon(call)

    assert [r.success for r in results] == [False, False, False]
    assert login_events == ["unauthorized"] * 3


def test_backend_satisfies_protocol(backend):
    from core.interfaces.backend import BackendService

    assert isinstance(backend, BackendService)
    assert isinstance(backend, HttpBackendService)
