"""Error types for pricing and the ticket lifecycle"""


class BoostBotError(Exception):
    """Base class for every error the bot reports back to a user"""

    def user_message(self) -> str:
        return "❌ Something went wrong. Please try again."


class InvalidRank(BoostBotError):
    def __init__(self, rank):
        super().__init__(f"Unknown rank: {rank!r}")
        self.rank = rank

    def user_message(self) -> str:
        return f"❌ Invalid rank selection: **{self.rank}**. Please try again."


class InvalidRange(BoostBotError):
    def __init__(self, from_rank, to_rank):
        super().__init__(f"Target rank {to_rank!r} is not above {from_rank!r}")
        self.from_rank = from_rank
        self.to_rank = to_rank

    def user_message(self) -> str:
        return (
            "❌ Target rank must be higher than current.\n"
            f"You selected **{self.from_rank} → {self.to_rank}**."
        )


class MalformedToken(BoostBotError):
    def __init__(self, reason: str):
        super().__init__(f"Malformed quote token: {reason}")
        self.reason = reason

    def user_message(self) -> str:
        return "❌ Could not read the quote. Please run /price again."


class CooldownActive(BoostBotError):
    def __init__(self, remaining_seconds: int):
        super().__init__(f"Cooldown active for {remaining_seconds}s")
        self.remaining_seconds = remaining_seconds

    def user_message(self) -> str:
        return f"⏱️ Please wait **{self.remaining_seconds}s** before trying again."


class ProvisioningFailed(BoostBotError):
    def __init__(self, reason: str = ""):
        super().__init__(f"Ticket provisioning failed: {reason}")
        self.reason = reason

    def user_message(self) -> str:
        return "❌ Sorry, we couldn't create your ticket right now. Please try again later."


class ConfigurationMissing(BoostBotError):
    def __init__(self, name: str, detail: str = ""):
        message = f"Missing or invalid configuration: {name}"
        if detail:
            message += f" ({detail})"
        super().__init__(message)
        self.name = name

    def user_message(self) -> str:
        return f"❌ Missing or invalid {self.name}. Please contact staff."
