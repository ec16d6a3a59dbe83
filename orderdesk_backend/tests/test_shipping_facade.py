"""
ShippingFacade dispatch: configuration failures, delegation and the
no-exception guarantee.
"""
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.modules.shipping.carriers.base import CarrierCall, OperationResult
from app.modules.shipping.facade import ShippingFacade, ShippingOperation

ALL_OPERATIONS = [
    (ShippingOperation.CREATE_SHIPMENT, {"order_number": "ORD-1", "recipient": {"name": "A", "phone": "1", "address": "x"}}),
    (ShippingOperation.TRACK_SHIPMENT, "TRK1"),
    (ShippingOperation.CANCEL_SHIPMENT, "TRK1"),
    (ShippingOperation.GET_PROVINCES, None),
    (ShippingOperation.GET_SERVICES, None),
    (ShippingOperation.CALCULATE_FEE, {"weight_grams": 500}),
]


@pytest.fixture
def executor():
    executor = MagicMock()
    executor.execute = AsyncMock(return_value=OperationResult.ok({"code": 200, "data": {}}))
    executor.close = AsyncMock()
    return executor


@pytest.fixture
def tracking_delegate():
    delegate = MagicMock()
    delegate.track = AsyncMock(return_value=OperationResult.ok({"tracking": {"tag": "InTransit"}}))
    delegate.close = AsyncMock()
    return delegate


@pytest.fixture
def facade(carrier_credentials, sender, executor, tracking_delegate):
    return ShippingFacade(
        credentials=carrier_credentials,
        sender=sender,
        executor=executor,
        tracking_delegate=tracking_delegate,
    )


class TestUnsupportedCarrier:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("carrier_id", ["fedex", "other", ""])
    @pytest.mark.parametrize("operation,payload", ALL_OPERATIONS)
    async def test_fails_without_network_call(self, facade, executor, tracking_delegate, carrier_id, operation, payload):
        result = await facade.execute(carrier_id, operation, payload)

        assert result.success is False
        assert "Unsupported carrier" in result.message
        assert result.error["code"] == "CARRIER_NOT_SUPPORTED"
        assert executor.execute.await_count == 0
        assert tracking_delegate.track.await_count == 0


class TestDispatch:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("carrier_id", ["ghn", "ghtk", "viettel_post", "jt_express"])
    @pytest.mark.parametrize("operation,payload", ALL_OPERATIONS)
    async def test_every_operation_returns_a_result(self, facade, carrier_id, operation, payload):
        result = await facade.execute(carrier_id, operation, payload)
        assert isinstance(result, OperationResult)
        assert result.success is True

    @pytest.mark.asyncio
    async def test_executor_receives_profile_key_and_call(self, facade, executor):
        await facade.execute("ghn", "getProvinces")

        profile, api_key, call = executor.execute.await_args.args
        assert profile.base_url == "https://online-gateway.ghn.vn/shiip/public-api"
        assert api_key == "ghn-token"
        assert call == CarrierCall("GET", "/master-data/province")

    @pytest.mark.asyncio
    async def test_snake_case_operation_names_accepted(self, facade, executor):
        result = await facade.execute("ghtk", "get_services")
        assert result.success is True
        assert executor.execute.await_args.args[2].path == "/services/shipment/services"

    @pytest.mark.asyncio
    async def test_unknown_operation(self, facade, executor):
        result = await facade.execute("ghn", "refundShipment")
        assert result.success is False
        assert result.error["code"] == "SHIPPING_OPERATION_NOT_SUPPORTED"
        executor.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_cancel_reason_forwarded(self, facade, executor):
        await facade.cancel_shipment("jt_express", "JT1", reason="Duplicate order")
        call = executor.execute.await_args.args[2]
        assert call.json == {"cancel_reason": "Duplicate order"}

    @pytest.mark.asyncio
    async def test_carrier_failure_passed_through(self, facade, executor):
        failure = OperationResult.failure("GHN returned HTTP 400", error={"status_code": 400})
        executor.execute.return_value = failure
        result = await facade.get_services("ghn")
        assert result is failure


class TestCredentials:

    @pytest.mark.asyncio
    async def test_missing_credential_is_not_connected(self, sender, executor):
        facade = ShippingFacade(credentials={"ghn": "ghn-token"}, sender=sender, executor=executor)

        result = await facade.get_provinces("ghtk")

        assert result.success is False
        assert "not connected" in result.message
        assert result.error["code"] == "CARRIER_NOT_CONFIGURED"
        executor.execute.assert_not_awaited()

    def test_empty_keys_dropped(self, sender, executor):
        facade = ShippingFacade(credentials={"ghn": "", "ghtk": "t"}, sender=sender, executor=executor)
        assert facade.credentials == {"ghtk": "t"}


class TestTrackingDelegation:

    @pytest.mark.asyncio
    async def test_jt_express_tracking_goes_to_aggregator(self, facade, executor, tracking_delegate):
        result = await facade.track_shipment("jt_express", "JT0001")

        assert result.success is True
        tracking_delegate.track.assert_awaited_once_with("JT0001", "jnt")
        executor.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_jt_express_tracking_without_jt_key_still_delegates(self, sender, executor, tracking_delegate):
        facade = ShippingFacade(credentials={}, sender=sender, executor=executor, tracking_delegate=tracking_delegate)
        result = await facade.track_shipment("jt_express", "JT0001")
        assert result.success is True

    @pytest.mark.asyncio
    async def test_aggregator_not_configured(self, carrier_credentials, sender, executor):
        facade = ShippingFacade(credentials=carrier_credentials, sender=sender, executor=executor)

        result = await facade.track_shipment("jt_express", "JT0001")

        assert result.success is False
        assert "not configured" in result.message
        assert result.data is None
        executor.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_native_carrier_tracking_not_delegated(self, facade, executor, tracking_delegate):
        await facade.track_shipment("ghn", "GHN1")
        tracking_delegate.track.assert_not_awaited()
        executor.execute.assert_awaited_once()


class TestNoExceptionEscapes:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("operation,payload", [
        (ShippingOperation.CREATE_SHIPMENT, {"order_number": "ORD-1"}),
        (ShippingOperation.CREATE_SHIPMENT, None),
        (ShippingOperation.CREATE_SHIPMENT, {"order_number": "ORD-1", "recipient": {"nickname": "x"}}),
        (ShippingOperation.CALCULATE_FEE, {"weight": "heavy"}),
        (ShippingOperation.TRACK_SHIPMENT, None),
        (ShippingOperation.CANCEL_SHIPMENT, {"tracking_number": ""}),
    ])
    async def test_invalid_payload(self, facade, executor, operation, payload):
        result = await facade.execute("ghn", operation, payload)
        assert result.success is False
        assert result.error["code"] in ("SHIPPING_INVALID_PAYLOAD",)
        executor.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unexpected_executor_error_is_contained(self, facade, executor):
        executor.execute.side_effect = RuntimeError("boom")
        result = await facade.get_provinces("viettel_post")
        assert result.success is False
        assert result.error["type"] == "RuntimeError"


class TestCarrierInfo:

    def test_flags(self, sender, executor):
        facade = ShippingFacade(credentials={"ghn": "k"}, sender=sender, executor=executor)
        info = {entry["id"]: entry for entry in facade.carrier_info()}

        assert set(info) == {"ghn", "ghtk", "viettel_post", "jt_express"}
        assert info["ghn"]["api_connected"] is True
        assert info["ghtk"]["api_connected"] is False
        assert info["jt_express"]["native_tracking"] is False
        assert info["jt_express"]["tracking_available"] is False

    @pytest.mark.asyncio
    async def test_close_releases_clients(self, facade, executor, tracking_delegate):
        await facade.close()
        executor.close.assert_awaited_once()
        tracking_delegate.close.assert_awaited_once()
