"""
Tests for action record validation and short id resolution
"""

import pytest

from actionlink.actions.resolver import parse_action_record, parse_action_type, resolve_action
from actionlink.core.exceptions import (
    ActionNotFoundError,
    InvalidActionShapeError,
    StoreUnavailableError,
    UnsupportedActionTypeError,
)
from actionlink.models.actions import ActionType, NftSaleAction, TipAction

from conftest import CONTRACT, NFT_SHORT_ID, RECIPIENT, TIP_SHORT_ID, FakeActionStore


# ============================================================================
# parse_action_record
# ============================================================================

class TestParseActionRecord:

    def test_tip_row(self, tip_row):
        action = parse_action_record(tip_row)

        assert isinstance(action, TipAction)
        assert action.recipient_address == RECIPIENT
        assert action.tip_amount_eth == "1.5"
        assert action.short_id == TIP_SHORT_ID

    def test_nft_row(self, nft_row):
        action = parse_action_record(nft_row)

        assert isinstance(action, NftSaleAction)
        assert action.contract_address == CONTRACT
        assert action.token_id == "42"
        assert action.price == "0.25"

    def test_numeric_token_id_accepted(self, nft_row):
        nft_row["token_id"] = 7
        assert parse_action_record(nft_row).token_id == "7"

    def test_empty_string_foreign_columns_ignored(self, tip_row):
        tip_row["contract_address"] = ""
        assert isinstance(parse_action_record(tip_row), TipAction)

    @pytest.mark.parametrize("action_type", ["swap", "", None, "TIP"])
    def test_unknown_type(self, tip_row, action_type):
        tip_row["action_type"] = action_type
        with pytest.raises(UnsupportedActionTypeError):
            parse_action_record(tip_row)

    def test_tip_with_nft_columns_rejected(self, tip_row):
        tip_row["contract_address"] = CONTRACT
        tip_row["price"] = "1"

        with pytest.raises(InvalidActionShapeError) as exc_info:
            parse_action_record(tip_row)

        assert exc_info.value.details["columns"] == ["contract_address", "price"]

    def test_nft_with_tip_columns_rejected(self, nft_row):
        nft_row["recipient_address"] = RECIPIENT
        with pytest.raises(InvalidActionShapeError):
            parse_action_record(nft_row)

    def test_missing_variant_field_rejected(self, tip_row):
        tip_row["tip_amount_eth"] = None

        with pytest.raises(InvalidActionShapeError) as exc_info:
            parse_action_record(tip_row)

        fields = [err["field"] for err in exc_info.value.details["errors"]]
        assert "tip_amount_eth" in fields

    @pytest.mark.parametrize("token_id", ["-1", "abc", "1.5", str(2 ** 256)])
    def test_bad_token_id_rejected(self, nft_row, token_id):
        nft_row["token_id"] = token_id
        with pytest.raises(InvalidActionShapeError):
            parse_action_record(nft_row)

    @pytest.mark.parametrize("price", ["0", "free", "0.0000000000000000001"])
    def test_bad_price_rejected(self, nft_row, price):
        nft_row["price"] = price
        with pytest.raises(InvalidActionShapeError):
            parse_action_record(nft_row)

    def test_non_mapping_rejected(self):
        with pytest.raises(InvalidActionShapeError):
            parse_action_record(["tip"])


class TestParseActionType:

    def test_known_values(self):
        assert parse_action_type("tip") is ActionType.TIP
        assert parse_action_type("nft_sale") is ActionType.NFT_SALE
        assert parse_action_type(ActionType.TIP) is ActionType.TIP

    def test_unknown_value(self):
        with pytest.raises(UnsupportedActionTypeError) as exc_info:
            parse_action_type("airdrop")

        assert exc_info.value.details == {"action_type": "airdrop"}


# ============================================================================
# resolve_action
# ============================================================================

class TestResolveAction:

    async def test_resolves_tip(self, store):
        action = await resolve_action(store, TIP_SHORT_ID)
        assert isinstance(action, TipAction)

    async def test_resolves_nft(self, store):
        action = await resolve_action(store, NFT_SHORT_ID)
        assert isinstance(action, NftSaleAction)

    async def test_resolution_is_repeatable(self, store):
        first = await resolve_action(store, TIP_SHORT_ID)
        second = await resolve_action(store, TIP_SHORT_ID)
        assert first == second

    async def test_unknown_short_id(self, store):
        with pytest.raises(ActionNotFoundError) as exc_info:
            await resolve_action(store, "doesNotExist")

        assert exc_info.value.status_code == 404

    async def test_malformed_short_id_never_reaches_store(self, store):
        store.fail_reads = True
        with pytest.raises(ActionNotFoundError):
            await resolve_action(store, "../etc/passwd")

    async def test_stored_row_with_unknown_type(self, tip_row):
        tip_row["action_type"] = "swap"
        store = FakeActionStore([tip_row])

        with pytest.raises(UnsupportedActionTypeError):
            await resolve_action(store, TIP_SHORT_ID)

    async def test_store_failure_propagates(self, store):
        store.fail_reads = True
        with pytest.raises(StoreUnavailableError):
            await resolve_action(store, TIP_SHORT_ID)
