"""
Tests for action creation and short id collision handling
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from actionlink.actions.creation import create_action, validate_new_action
from actionlink.actions.resolver import resolve_action
from actionlink.core.exceptions import (
    IdentifierGenerationError,
    InvalidActionShapeError,
    InvalidAddressError,
    StoreUnavailableError,
    UnsupportedActionTypeError,
)
from actionlink.models.actions import NftSaleAction, TipAction

from conftest import CONTRACT, RECIPIENT, TIP_SHORT_ID, FakeActionStore


def _sequence(*ids):
    """Short id generator yielding the given ids in order"""
    pending = list(ids)
    return lambda num_bytes: pending.pop(0)


TIP_PAYLOAD = {
    "action_type": "tip",
    "recipient_address": RECIPIENT,
    "tip_amount_eth": "0.5",
}

NFT_PAYLOAD = {
    "action_type": "nft_sale",
    "contract_address": CONTRACT,
    "token_id": "9",
    "price": "12.5",
    "description": "Genesis drop",
}


class TestValidateNewAction:

    def test_server_columns_are_dropped(self):
        action = validate_new_action({**TIP_PAYLOAD, "id": 99, "short_id": "mine"})

        assert action.id is None
        assert action.short_id is None

    def test_bad_recipient_address(self):
        with pytest.raises(InvalidAddressError) as exc_info:
            validate_new_action({**TIP_PAYLOAD, "recipient_address": "0x1234"})

        assert exc_info.value.details["field"] == "recipient_address"

    def test_bad_contract_address(self):
        with pytest.raises(InvalidAddressError):
            validate_new_action({**NFT_PAYLOAD, "contract_address": "not-an-address"})

    def test_unknown_type(self):
        with pytest.raises(UnsupportedActionTypeError):
            validate_new_action({**TIP_PAYLOAD, "action_type": "swap"})

    def test_mixed_columns(self):
        with pytest.raises(InvalidActionShapeError):
            validate_new_action({**TIP_PAYLOAD, "token_id": "1"})

    def test_amount_above_uint256(self):
        with pytest.raises(InvalidActionShapeError):
            validate_new_action({**TIP_PAYLOAD, "tip_amount_eth": "1" + "0" * 80})

    def test_not_an_object(self):
        with pytest.raises(InvalidActionShapeError):
            validate_new_action("tip")


class TestCreateAction:

    async def test_creates_tip(self):
        store = FakeActionStore()
        now = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

        action = await create_action(store, TIP_PAYLOAD, generate=_sequence("newTipId0001"), now=now)

        assert isinstance(action, TipAction)
        assert action.short_id == "newTipId0001"
        assert action.id == 1
        assert action.created_at == now
        assert store.rows["newTipId0001"]["tip_amount_eth"] == "0.5"

    async def test_creates_nft_sale(self):
        store = FakeActionStore()

        action = await create_action(store, NFT_PAYLOAD)

        assert isinstance(action, NftSaleAction)
        assert len(action.short_id) == 12
        assert action.description == "Genesis drop"
        assert "recipient_address" not in store.rows[action.short_id]

    async def test_collision_regenerates(self, tip_row):
        store = FakeActionStore([tip_row])

        action = await create_action(
            store,
            TIP_PAYLOAD,
            generate=_sequence(TIP_SHORT_ID, "freshId00001")
        )

        assert action.short_id == "freshId00001"
        assert store.insert_attempts == [TIP_SHORT_ID, "freshId00001"]
        # existing row untouched
        assert store.rows[TIP_SHORT_ID]["tip_amount_eth"] == "1.5"

    async def test_gives_up_after_max_attempts(self, tip_row):
        store = FakeActionStore([tip_row])

        with pytest.raises(StoreUnavailableError):
            await create_action(
                store,
                TIP_PAYLOAD,
                max_attempts=3,
                generate=lambda num_bytes: TIP_SHORT_ID
            )

        assert len(store.insert_attempts) == 3

    async def test_invalid_payload_never_written(self):
        store = FakeActionStore()

        with pytest.raises(InvalidAddressError):
            await create_action(store, {**TIP_PAYLOAD, "recipient_address": "0xzz"})

        assert store.insert_attempts == []

    async def test_store_failure_propagates(self):
        store = AsyncMock()
        store.insert.side_effect = StoreUnavailableError()

        with pytest.raises(StoreUnavailableError):
            await create_action(store, TIP_PAYLOAD)

        assert store.insert.await_count == 1

    async def test_randomness_failure_propagates(self):
        def broken(num_bytes):
            raise IdentifierGenerationError("Randomness source unavailable")

        with pytest.raises(IdentifierGenerationError):
            await create_action(FakeActionStore(), TIP_PAYLOAD, generate=broken)

    @pytest.mark.parametrize("payload", [TIP_PAYLOAD, NFT_PAYLOAD])
    async def test_created_action_resolves_to_same_fields(self, payload):
        store = FakeActionStore()

        created = await create_action(store, payload)
        resolved = await resolve_action(store, created.short_id)

        assert resolved == created
        for field, value in payload.items():
            assert getattr(resolved, field) == value
