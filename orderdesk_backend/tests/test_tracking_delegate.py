"""
AfterShip ensure-then-fetch protocol.
"""
import json

import httpx
import pytest

from app.modules.shipping.tracking import AfterShipTrackingDelegate

TRACKING = {"tracking_number": "JT0001", "slug": "jnt", "tag": "InTransit", "checkpoints": []}


def make_delegate(handler) -> AfterShipTrackingDelegate:
    return AfterShipTrackingDelegate(
        api_key="as-key",
        base_url="https://aftership.test/v4",
        timeout=5.0,
        transport=httpx.MockTransport(handler),
    )


class Recorder:
    """Mock transport handler replaying scripted responses in order."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responses.pop(0)

    @property
    def calls(self):
        return [(r.method, r.url.path) for r in self.requests]


@pytest.mark.asyncio
async def test_unregistered_number_registers_then_fetches():
    recorder = Recorder(
        httpx.Response(404, json={"meta": {"code": 4004}}),
        httpx.Response(201, json={"meta": {"code": 201}, "data": {"tracking": TRACKING}}),
        httpx.Response(200, json={"meta": {"code": 200}, "data": {"tracking": TRACKING}}),
    )
    delegate = make_delegate(recorder)

    result = await delegate.track("JT0001", "jnt")
    await delegate.close()

    assert result.success is True
    assert result.data == {"tracking": TRACKING}
    assert recorder.calls == [
        ("GET", "/v4/trackings/jnt/JT0001"),
        ("POST", "/v4/trackings"),
        ("GET", "/v4/trackings/jnt/JT0001"),
    ]
    body = json.loads(recorder.requests[1].content)
    assert body == {
        "tracking": {
            "tracking_number": "JT0001",
            "slug": "jnt",
            "title": "Order JT0001",
            "language": "vi",
        }
    }
    assert all(r.headers["aftership-api-key"] == "as-key" for r in recorder.requests)


@pytest.mark.asyncio
async def test_registered_number_skips_registration():
    recorder = Recorder(
        httpx.Response(200, json={"data": {"tracking": TRACKING}}),
        httpx.Response(200, json={"data": {"tracking": TRACKING}}),
    )

    result = await make_delegate(recorder).track("JT0001", "jnt")

    assert result.success is True
    assert [method for method, _ in recorder.calls] == ["GET", "GET"]


@pytest.mark.asyncio
async def test_already_exists_counts_as_registered():
    recorder = Recorder(
        httpx.Response(404, json={}),
        httpx.Response(400, json={"meta": {"code": 4003, "message": "Tracking already exists."}}),
        httpx.Response(200, json={"data": {"tracking": TRACKING}}),
    )

    result = await make_delegate(recorder).track("JT0001", "jnt")

    assert result.success is True
    assert len(recorder.requests) == 3


@pytest.mark.asyncio
async def test_registration_failure_short_circuits():
    recorder = Recorder(
        httpx.Response(404, json={}),
        httpx.Response(401, json={"meta": {"code": 401, "message": "Invalid API key."}}),
    )

    result = await make_delegate(recorder).track("JT0001", "jnt")

    assert result.success is False
    assert result.error["status_code"] == 401
    assert len(recorder.requests) == 2


@pytest.mark.asyncio
async def test_check_failure_short_circuits():
    recorder = Recorder(httpx.Response(500, json={"meta": {"code": 500}}))

    result = await make_delegate(recorder).track("JT0001", "jnt")

    assert result.success is False
    assert len(recorder.requests) == 1


@pytest.mark.asyncio
async def test_network_error_normalized():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    result = await make_delegate(handler).track("JT0001", "jnt")

    assert result.success is False
    assert result.error["type"] == "network"


@pytest.mark.asyncio
async def test_tracking_number_cannot_inject_query():
    recorder = Recorder(
        httpx.Response(200, json={"data": {"tracking": TRACKING}}),
        httpx.Response(200, json={"data": {"tracking": TRACKING}}),
    )

    await make_delegate(recorder).track("ABC?x=1", "jnt")

    request = recorder.requests[0]
    assert request.url.raw_path == b"/v4/trackings/jnt/ABC%3Fx%3D1"
    assert request.url.query == b""
