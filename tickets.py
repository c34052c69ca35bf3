"""Ticket lifecycle: opening, cooldowns and closing

A user is either without a ticket or has exactly one open ticket channel.
Opening goes through ``TicketManager.request_ticket``; closing through
``TicketManager.close_ticket``. Everything platform specific (finding,
creating, messaging and deleting channels) sits behind ``ChannelProvider``,
and staff notifications go through a ``LogSink``. Both are best-effort where
noted and never decide the outcome of a request.
"""

import asyncio
import contextlib
import traceback
from dataclasses import dataclass
from typing import Optional, Union

from tickets_cooldowns import JsonCooldownStore, remaining_seconds
from tickets_errors import CooldownActive, ProvisioningFailed
from tickets_utils import owner_tag, staff_log_closed_ticket, staff_log_new_ticket


@dataclass(frozen=True)
class TicketRef:
    channel_id: int
    owner_id: int
    name: str = ""

    @property
    def mention(self) -> str:
        return f"<#{self.channel_id}>"


@dataclass(frozen=True)
class Created:
    ticket: TicketRef


@dataclass(frozen=True)
class AlreadyOpen:
    ticket: TicketRef


TicketOutcome = Union[Created, AlreadyOpen]


class ChannelProvider:
    """Operations the ticket lifecycle needs from the chat platform"""

    def ensure_ready(self):
        """Raise ConfigurationMissing when tickets cannot be created at all"""

    async def lookup_open_ticket(self, owner_id) -> Optional[TicketRef]:
        raise NotImplementedError

    async def create_ticket_resource(self, owner_id, tag: str, quote=None) -> TicketRef:
        """Create the ticket channel. Raise ProvisioningFailed on platform errors."""
        raise NotImplementedError

    async def send_message(self, ref, text: str):
        raise NotImplementedError

    async def is_ticket(self, ref) -> bool:
        raise NotImplementedError

    async def archive_resource(self, ref, closed_by=None):
        """Optional transcript/history step before deletion"""

    async def delete_resource(self, ref):
        raise NotImplementedError

    def describe(self, ref) -> str:
        return getattr(ref, "name", None) or str(ref)


class LogSink:
    async def notify(self, text: str):
        raise NotImplementedError


class TicketManager:
    def __init__(
        self,
        provider: ChannelProvider,
        cooldowns: JsonCooldownStore,
        log_sink: Optional[LogSink] = None,
        cooldown_seconds: int = 60,
        close_delay: float = 2,
    ):
        self.provider = provider
        self.cooldowns = cooldowns
        self.log_sink = log_sink
        self.cooldown_ms = int(cooldown_seconds * 1000)
        self.close_delay = close_delay
        self._user_locks = {}
        self._closing = set()
        self._background = set()

    @contextlib.asynccontextmanager
    async def _user_lock(self, user_id):
        """Per-user lock; the entry is dropped once nobody holds or waits on it"""
        key = str(user_id)
        entry = self._user_locks.get(key)
        if entry is None:
            entry = self._user_locks[key] = [asyncio.Lock(), 0]
        entry[1] += 1
        try:
            async with entry[0]:
                yield
        finally:
            entry[1] -= 1
            if entry[1] == 0:
                del self._user_locks[key]

    # ---------- OPEN ----------
    async def request_ticket(self, user_id, quote=None, user_label: str = None) -> TicketOutcome:
        """Open a ticket for user_id, or point them at the one they have.

        The cooldown is recorded before the channel is created and is not
        rolled back if creation fails or the channel is later deleted.
        """
        async with self._user_lock(user_id):
            existing = await self.provider.lookup_open_ticket(user_id)
            if existing:
                return AlreadyOpen(existing)

            self.provider.ensure_ready()
            remaining = await self.cooldowns.try_consume(user_id, self.cooldown_ms)
            if remaining > 0:
                raise CooldownActive(remaining_seconds(remaining))

        try:
            ticket = await self.provider.create_ticket_resource(user_id, owner_tag(user_id), quote)
        except ProvisioningFailed as e:
            print(f"❌ Ticket creation failed for {user_id}: {e}")
            raise
        except Exception as e:
            print(f"❌ Ticket creation failed for {user_id}: {e}")
            raise ProvisioningFailed(str(e)) from e

        print(f"✅ Ticket {ticket.channel_id} opened for {user_id}")
        self._notify_later(staff_log_new_ticket(user_label or user_id, ticket.mention, quote))
        return Created(ticket)

    # ---------- CLOSE ----------
    async def close_ticket(self, user_id, channel_ref, user_label: str = None) -> bool:
        """Close channel_ref if it is a ticket not already being closed.

        Returns False (and does nothing) otherwise.
        """
        if not await self.provider.is_ticket(channel_ref):
            return False

        key = self._channel_key(channel_ref)
        if key in self._closing:
            return False
        self._closing.add(key)

        try:
            await self.provider.send_message(channel_ref, "✅ Closing ticket...")
        except Exception as e:
            print(f"⚠️ Could not send closing message: {e}")

        channel_name = self.provider.describe(channel_ref)
        self._notify_later(staff_log_closed_ticket(user_label or user_id, channel_name))
        self._spawn(self._delete_later(channel_ref, user_id), f"delete {channel_name}")
        print(f"✅ Ticket {channel_name} closed by {user_id}")
        return True

    async def _delete_later(self, channel_ref, closed_by):
        try:
            if self.close_delay > 0:
                await asyncio.sleep(self.close_delay)
            try:
                await self.provider.archive_resource(channel_ref, closed_by)
            except Exception as e:
                print(f"⚠️ Transcript/archive failed: {e}")
            await self.provider.delete_resource(channel_ref)
        finally:
            self._closing.discard(self._channel_key(channel_ref))

    @staticmethod
    def _channel_key(channel_ref):
        if isinstance(channel_ref, TicketRef):
            return channel_ref.channel_id
        return getattr(channel_ref, "id", channel_ref)

    # ---------- BACKGROUND ----------
    def _notify_later(self, text: str):
        if self.log_sink is None:
            return
        self._spawn(self.log_sink.notify(text), "staff log")

    def _spawn(self, coro, what: str):
        task = asyncio.create_task(self._swallow(coro, what))
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    @staticmethod
    async def _swallow(coro, what: str):
        try:
            await coro
        except asyncio.CancelledError:
            raise
        except Exception as e:
            print(f"⚠️ Background task '{what}' failed: {e}")
            traceback.print_exc()

    async def wait_for_background(self):
        """Wait for pending log notifications and scheduled deletions"""
        while self._background:
            await asyncio.gather(*list(self._background))
