"""Quote tokens carried in button custom ids

A token looks like ``price_confirm:0:2:210:300:2:<sig>`` and carries everything
needed to rebuild the quote, so nothing has to be kept in memory between
/price, Confirm and Open Ticket. Decoded values come back from the client and
are re-validated before use.
"""

import hashlib
import hmac
import re
from dataclasses import dataclass
from typing import Optional

from pricing import Quote, RankLadder, StepCostPolicy
from tickets_errors import MalformedToken

CONFIRM_PREFIX = "price_confirm"
OPEN_TICKET_PREFIX = "open_ticket"
CANCEL_ID = "price_cancel"

TOKEN_KINDS = (CONFIRM_PREFIX, OPEN_TICKET_PREFIX)
TOKEN_FIELDS = 7
SIGNATURE_LENGTH = 10

_INT_RE = re.compile(r"-?[0-9]+")


@dataclass(frozen=True)
class PendingQuote:
    kind: str
    from_index: int
    to_index: int
    net_price: int
    gross_price: int
    step_count: int

    def to_quote(self, ladder: RankLadder, policy: Optional[StepCostPolicy] = None) -> Quote:
        """Rebuild a Quote; step costs are recomputed only when a policy is given"""
        first = policy(self.from_index) if policy else 0
        last = policy(self.to_index - 1) if policy else 0
        return Quote(
            from_rank=ladder.name_at(self.from_index),
            to_rank=ladder.name_at(self.to_index),
            from_index=self.from_index,
            to_index=self.to_index,
            step_count=self.step_count,
            net_price=self.net_price,
            gross_price=self.gross_price,
            first_step_cost=first,
            last_step_cost=last,
        )


def _sign(payload: str, secret: str) -> str:
    digest = hmac.new(secret.encode("utf-8"), payload.encode("utf-8"), hashlib.sha256)
    return digest.hexdigest()[:SIGNATURE_LENGTH]


def encode_token(kind: str, quote, secret: str = "") -> str:
    """Encode a Quote (or PendingQuote) for the given button kind"""
    if kind not in TOKEN_KINDS:
        raise ValueError(f"Unknown token kind: {kind}")
    payload = ":".join(str(int(v)) for v in (
        quote.from_index,
        quote.to_index,
        quote.net_price,
        quote.gross_price,
        quote.step_count,
    ))
    payload = f"{kind}:{payload}"
    return f"{payload}:{_sign(payload, secret)}"


def _parse_int(raw: str, field: str) -> int:
    # Only the form encode_token writes; no floats, spaces or underscores
    if not _INT_RE.fullmatch(raw):
        raise MalformedToken(f"{field} is not a whole number: {raw!r}")
    return int(raw)


def decode_token(token: str, ladder: RankLadder, secret: str = "") -> PendingQuote:
    if not isinstance(token, str):
        raise MalformedToken("token is not a string")

    parts = token.split(":")
    if len(parts) != TOKEN_FIELDS:
        raise MalformedToken(f"expected {TOKEN_FIELDS} fields, got {len(parts)}")

    kind, *numbers, signature = parts
    if kind not in TOKEN_KINDS:
        raise MalformedToken(f"unknown token kind {kind!r}")

    payload = token.rsplit(":", 1)[0]
    expected = _sign(payload, secret)
    if not hmac.compare_digest(signature.encode("utf-8"), expected.encode("utf-8")):
        raise MalformedToken("signature mismatch")

    from_index, to_index, net, gross, steps = (
        _parse_int(raw, name)
        for raw, name in zip(numbers, ("from_index", "to_index", "net", "gross", "steps"))
    )

    if not (ladder.has_index(from_index) and ladder.has_index(to_index)):
        raise MalformedToken(f"rank index out of range: {from_index}, {to_index}")
    if to_index <= from_index:
        raise MalformedToken("target rank is not above current rank")
    if steps != to_index - from_index:
        raise MalformedToken(f"step count {steps} does not match {from_index}->{to_index}")
    if net < 0 or gross < 0:
        raise MalformedToken("negative price")

    return PendingQuote(kind, from_index, to_index, net, gross, steps)
