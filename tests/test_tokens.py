"""Quote token encode/decode and re-validation."""

import pytest

from pricing import compute_quote
from tickets_errors import MalformedToken
from tickets_tokens import (
    CONFIRM_PREFIX,
    OPEN_TICKET_PREFIX,
    PendingQuote,
    decode_token,
    encode_token,
)

SECRET = "test-secret"


@pytest.fixture
def quote(ladder, tiered):
    return compute_quote("Bronze 1", "Bronze 3", ladder, tiered, 0.30)


def _resign(payload):
    """Build a correctly signed token around an arbitrary payload"""
    from tickets_tokens import _sign
    return f"{payload}:{_sign(payload, SECRET)}"


class TestRoundTrip:
    def test_fields_survive(self, quote, ladder):
        token = encode_token(CONFIRM_PREFIX, quote, SECRET)
        pending = decode_token(token, ladder, SECRET)
        assert pending.kind == CONFIRM_PREFIX
        assert (pending.from_index, pending.to_index) == (0, 2)
        assert (pending.net_price, pending.gross_price, pending.step_count) == (210, 300, 2)

    def test_rebuilds_quote(self, quote, ladder, tiered):
        token = encode_token(OPEN_TICKET_PREFIX, quote, SECRET)
        rebuilt = decode_token(token, ladder, SECRET).to_quote(ladder, tiered)
        assert rebuilt == quote

    def test_large_prices_are_exact(self, ladder):
        pending = PendingQuote(OPEN_TICKET_PREFIX, 0, 2, 9007199254740993, 12867427506772847, 2)
        decoded = decode_token(encode_token(OPEN_TICKET_PREFIX, pending, SECRET), ladder, SECRET)
        assert decoded.net_price == 9007199254740993
        assert decoded.gross_price == 12867427506772847

    def test_fits_discord_custom_id(self, ladder, tiered):
        big = compute_quote("Bronze 1", "Archnemesis", ladder, tiered, 0.30)
        assert len(encode_token(OPEN_TICKET_PREFIX, big, SECRET)) <= 100


class TestMalformed:
    def test_wrong_field_count(self, ladder):
        with pytest.raises(MalformedToken):
            decode_token("price_confirm:0:2:210:300", ladder, SECRET)

    def test_old_unsigned_format(self, ladder):
        with pytest.raises(MalformedToken):
            decode_token("price_confirm:0:2:210:300:2", ladder, SECRET)

    @pytest.mark.parametrize("bad", ["nan", "inf", "-inf", "abc", "1.5", "", "1e2", " 1", "1_0", "+5", "\u0661"])
    def test_non_finite_or_non_integer_field(self, ladder, bad):
        with pytest.raises(MalformedToken):
            decode_token(_resign(f"price_confirm:0:2:{bad}:300:2"), ladder, SECRET)

    def test_tampered_price(self, quote, ladder):
        token = encode_token(CONFIRM_PREFIX, quote, SECRET)
        tampered = token.replace(":210:", ":10:")
        with pytest.raises(MalformedToken):
            decode_token(tampered, ladder, SECRET)

    def test_wrong_secret(self, quote, ladder):
        token = encode_token(CONFIRM_PREFIX, quote, SECRET)
        with pytest.raises(MalformedToken):
            decode_token(token, ladder, "other")

    def test_index_off_ladder(self, ladder):
        with pytest.raises(MalformedToken):
            decode_token(_resign("open_ticket:18:25:100:143:7"), ladder, SECRET)

    def test_inverted_range(self, ladder):
        with pytest.raises(MalformedToken):
            decode_token(_resign("open_ticket:5:2:100:143:-3"), ladder, SECRET)

    def test_step_count_mismatch(self, ladder):
        with pytest.raises(MalformedToken):
            decode_token(_resign("open_ticket:0:2:210:300:3"), ladder, SECRET)

    def test_unknown_kind(self, ladder):
        with pytest.raises(MalformedToken):
            decode_token(_resign("refund:0:2:210:300:2"), ladder, SECRET)

    def test_user_message_is_explicit(self, ladder):
        with pytest.raises(MalformedToken) as exc:
            decode_token("garbage", ladder, SECRET)
        assert "run /price again" in exc.value.user_message()
