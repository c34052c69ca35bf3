"""
Unit tests for the pricing engine (no Discord required).
Run: pytest tests/test_pricing.py -v
"""

import pytest

import config
from pricing import (
    FlatStepCost,
    RankLadder,
    TieredStepCost,
    compute_quote,
    format_robux,
    gross_from_net,
    policy_from_config,
)
from tickets_errors import ConfigurationMissing, InvalidRange, InvalidRank


class TestRankLadder:
    def test_default_ladder_has_twenty_ranks(self, ladder):
        assert len(ladder) == 20
        assert ladder.name_at(0) == "Bronze 1"
        assert ladder.name_at(19) == "Archnemesis"

    def test_index_of_unknown_rank(self, ladder):
        with pytest.raises(InvalidRank) as exc:
            ladder.index_of("Mythic 1")
        assert exc.value.rank == "Mythic 1"

    def test_duplicates_rejected(self):
        with pytest.raises(ConfigurationMissing):
            RankLadder(["A", "B", "A"])

    def test_empty_rejected(self):
        with pytest.raises(ConfigurationMissing):
            RankLadder([])

    def test_has_index(self, ladder):
        assert ladder.has_index(0)
        assert ladder.has_index(19)
        assert not ladder.has_index(20)
        assert not ladder.has_index(-1)
        assert not ladder.has_index("3")


class TestStepCostPolicies:
    def test_tiered_grows_by_increment(self, tiered):
        assert [tiered(i) for i in range(4)] == [100, 110, 120, 130]

    def test_flat_is_constant(self):
        flat = FlatStepCost(50)
        assert {flat(i) for i in range(19)} == {50}

    def test_policy_from_config_tiered(self):
        policy = policy_from_config({"policy": "tiered", "base": 200, "increment": 5})
        assert policy(0) == 200
        assert policy(2) == 210

    def test_policy_from_config_flat(self):
        policy = policy_from_config({"policy": "flat", "per_level": 50})
        assert policy(7) == 50

    def test_policy_from_config_unknown(self):
        with pytest.raises(ConfigurationMissing):
            policy_from_config({"policy": "auction"})

    def test_default_config_builds(self):
        assert policy_from_config(config.PRICING)(0) >= 0


class TestGrossPrice:
    def test_exact_division(self):
        assert gross_from_net(210, 0.30) == 300

    def test_rounds_up(self):
        assert gross_from_net(211, 0.30) == 302

    def test_no_fee(self):
        assert gross_from_net(123, 0) == 123

    @pytest.mark.parametrize("ratio", [1, 1.5, -0.1])
    def test_bad_fee_ratio(self, ratio):
        with pytest.raises(ConfigurationMissing):
            gross_from_net(100, ratio)


class TestComputeQuote:
    def test_single_step(self, ladder, tiered):
        quote = compute_quote("Bronze 1", "Bronze 2", ladder, tiered, 0.30)
        assert quote.step_count == 1
        assert quote.net_price == 100
        assert quote.gross_price == 143

    def test_two_steps(self, ladder, tiered):
        quote = compute_quote("Bronze 1", "Bronze 3", ladder, tiered, 0.30)
        assert quote.step_count == 2
        assert quote.net_price == 210
        assert quote.gross_price == 300
        assert quote.first_step_cost == 100
        assert quote.last_step_cost == 110

    def test_net_matches_closed_form(self, ladder, tiered):
        for from_index in range(len(ladder)):
            for to_index in range(from_index + 1, len(ladder)):
                quote = compute_quote(
                    ladder.name_at(from_index), ladder.name_at(to_index), ladder, tiered, 0.30
                )
                steps = to_index - from_index
                # sum of base + 10*i over [from, to)
                expected = 100 * steps + 10 * (from_index + to_index - 1) * steps // 2
                assert quote.net_price == expected

    def test_full_ladder_flat(self, ladder):
        quote = compute_quote("Bronze 1", "Archnemesis", ladder, FlatStepCost(50), 0.30)
        assert quote.step_count == 19
        assert quote.net_price == 950

    def test_same_rank_is_invalid_range(self, ladder, tiered):
        with pytest.raises(InvalidRange) as exc:
            compute_quote("Gold 2", "Gold 2", ladder, tiered, 0.30)
        assert exc.value.from_rank == "Gold 2"
        assert exc.value.to_rank == "Gold 2"

    def test_downward_is_invalid_range(self, ladder, tiered):
        with pytest.raises(InvalidRange) as exc:
            compute_quote("Nemesis", "Bronze 3", ladder, tiered, 0.30)
        assert "Nemesis → Bronze 3" in exc.value.user_message()

    def test_unknown_rank(self, ladder, tiered):
        with pytest.raises(InvalidRank):
            compute_quote("Bronze 1", "Legend", ladder, tiered, 0.30)

    def test_quote_is_immutable(self, ladder, tiered):
        quote = compute_quote("Bronze 1", "Bronze 3", ladder, tiered, 0.30)
        with pytest.raises(Exception):
            quote.net_price = 1


def test_format_robux():
    assert format_robux(1234567) == "1,234,567"
    assert format_robux(95) == "95"
