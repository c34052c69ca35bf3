"""Shared fixtures: in-memory channel provider, log sink and a manual clock."""

import asyncio

import pytest
import pytest_asyncio

import config
from database import Database
from pricing import RankLadder, TieredStepCost
from tickets import ChannelProvider, LogSink, TicketManager, TicketRef
from tickets_cooldowns import JsonCooldownStore
from tickets_errors import ProvisioningFailed
from tickets_utils import parse_owner_tag


class ManualClock:
    def __init__(self, start_ms: int = 1_700_000_000_000):
        self.now = start_ms

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: float):
        self.now += int(seconds * 1000)


class FakeProvider(ChannelProvider):
    """Channels are dicts keyed by id; the owner lives only in the topic."""

    def __init__(self):
        self.channels = {}
        self.create_calls = []
        self.messages = []
        self.archived = []
        self.deleted = []
        self.fail_create = None
        self.ready_error = None
        self._next_id = 5000

    def ensure_ready(self):
        if self.ready_error:
            raise self.ready_error

    def add_channel(self, topic, name="general"):
        self._next_id += 1
        self.channels[self._next_id] = {"name": name, "topic": topic}
        return self._next_id

    def _channel_id(self, ref):
        return ref.channel_id if isinstance(ref, TicketRef) else ref

    async def lookup_open_ticket(self, owner_id):
        for channel_id, channel in self.channels.items():
            if parse_owner_tag(channel["topic"]) == int(owner_id):
                return TicketRef(channel_id, int(owner_id), channel["name"])
        return None

    async def create_ticket_resource(self, owner_id, tag, quote=None):
        self.create_calls.append((owner_id, tag, quote))
        await asyncio.sleep(0)
        if self.fail_create:
            raise self.fail_create
        channel_id = self.add_channel(tag, name=f"ticket-{owner_id}")
        return TicketRef(channel_id, int(owner_id), f"ticket-{owner_id}")

    async def send_message(self, ref, text):
        self.messages.append((self._channel_id(ref), text))

    async def is_ticket(self, ref):
        channel = self.channels.get(self._channel_id(ref))
        return bool(channel) and parse_owner_tag(channel["topic"]) is not None

    async def archive_resource(self, ref, closed_by=None):
        self.archived.append((self._channel_id(ref), closed_by))

    async def delete_resource(self, ref):
        channel_id = self._channel_id(ref)
        self.deleted.append(channel_id)
        self.channels.pop(channel_id, None)

    def describe(self, ref):
        channel = self.channels.get(self._channel_id(ref))
        return channel["name"] if channel else str(ref)


class FakeLogSink(LogSink):
    def __init__(self, fail=False):
        self.fail = fail
        self.lines = []

    async def notify(self, text):
        if self.fail:
            raise RuntimeError("log channel unavailable")
        self.lines.append(text)


@pytest.fixture
def ladder():
    return RankLadder(config.RANKS)


@pytest.fixture
def tiered():
    return TieredStepCost(100, 10)


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def cooldown_file(tmp_path):
    return tmp_path / "ticket_cooldowns.json"


@pytest.fixture
def cooldowns(cooldown_file, clock):
    return JsonCooldownStore(cooldown_file, clock=clock)


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def log_sink():
    return FakeLogSink()


@pytest.fixture
def manager(provider, cooldowns, log_sink):
    return TicketManager(provider, cooldowns, log_sink=log_sink, cooldown_seconds=60, close_delay=0)


@pytest.fixture
def failing_log_sink():
    return FakeLogSink(fail=True)


@pytest_asyncio.fixture
async def db(tmp_path):
    database = Database(str(tmp_path / "bot_data.db"))
    await database.init()
    yield database
    await database.close()
