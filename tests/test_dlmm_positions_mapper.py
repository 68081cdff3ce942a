from __future__ import annotations

import unittest

from app.infrastructure.mappers.dlmm_positions_mapper import PositionPayloadError, map_position_groups


def _position_info(*, positions: list[dict]) -> dict:
    return {
        "publicKey": "LbPair111",
        "lbPair": {"activeId": -1234, "binStep": 10},
        "tokenX": {"publicKey": "So11111111111111111111111111111111111111112", "decimal": 9},
        "tokenY": {"publicKey": "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v", "decimal": 6},
        "lbPairPositionsData": positions,
    }


def _lb_position(public_key: str) -> dict:
    return {
        "publicKey": public_key,
        "positionData": {
            "totalXAmount": "1000000000.5",
            "totalYAmount": "25000000",
            "lowerBinId": -1300,
            "upperBinId": -1231,
            "lastUpdatedAt": "1717000000",
            "feeX": "10",
            "feeY": "20",
            "totalClaimedFeeXAmount": "30",
            "totalClaimedFeeYAmount": "40",
        },
    }


class DlmmPositionsMapperTests(unittest.TestCase):
    def test_maps_pool_context_and_positions(self):
        groups = map_position_groups(
            {"LbPair111": _position_info(positions=[_lb_position("pos-a"), _lb_position("pos-b")])}
        )

        group = groups["LbPair111"]
        self.assertEqual(group.pool.token_x_mint, "So11111111111111111111111111111111111111112")
        self.assertEqual(group.pool.token_y_mint, "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v")
        self.assertEqual(group.pool.token_x_decimals, 9)
        self.assertEqual(group.pool.token_y_decimals, 6)
        self.assertEqual(group.pool.active_bin_id, -1234)
        self.assertEqual([pos.public_key for pos in group.positions], ["pos-a", "pos-b"])
        first = group.positions[0]
        self.assertEqual(first.lower_bin_id, -1300)
        self.assertEqual(first.upper_bin_id, -1231)
        self.assertEqual(first.total_x_amount, "1000000000.5")
        self.assertEqual(first.total_claimed_fee_y_amount, "40")

    def test_accepts_serialized_map_entries(self):
        groups = map_position_groups([["LbPair111", _position_info(positions=[])]])

        self.assertEqual(list(groups), ["LbPair111"])
        self.assertEqual(groups["LbPair111"].positions, ())

    def test_missing_field_raises(self):
        info = _position_info(positions=[_lb_position("pos-a")])
        del info["lbPairPositionsData"][0]["positionData"]["feeX"]

        with self.assertRaises(PositionPayloadError):
            map_position_groups({"LbPair111": info})

    def test_non_integer_decimals_raise(self):
        info = _position_info(positions=[])
        info["tokenX"]["decimal"] = "nine"

        with self.assertRaises(PositionPayloadError):
            map_position_groups({"LbPair111": info})

    def test_rejects_non_object_payload(self):
        with self.assertRaises(PositionPayloadError):
            map_position_groups("unexpected")
