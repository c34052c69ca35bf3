"""Discord side of the ticket lifecycle: ticket channels and the staff log"""

import discord
from typing import Optional
import config
from tickets import ChannelProvider, LogSink, TicketRef
from tickets_errors import ConfigurationMissing, ProvisioningFailed
from tickets_transcript import generate_transcript
from tickets_utils import parse_owner_tag, safe_channel_name, ticket_tutorial


async def _get_text_channel(bot, channel_id) -> Optional[discord.abc.Messageable]:
    if not config.is_snowflake(channel_id):
        return None
    channel = bot.get_channel(int(channel_id))
    if channel is None:
        try:
            channel = await bot.fetch_channel(int(channel_id))
        except discord.HTTPException:
            return None
    return channel if isinstance(channel, discord.abc.Messageable) else None


class DiscordChannelProvider(ChannelProvider):
    """Ticket channels live under one category and carry `ticket_owner:<id>` in their topic.

    The database registry is consulted first; the topic scan covers tickets
    whose registry row was lost.
    """

    def __init__(self, bot, db):
        self.bot = bot
        self.db = db

    # ---------- HELPERS ----------
    @property
    def category_id(self):
        return config.CHANNEL_IDS.get("TICKETS_CATEGORY")

    def ensure_ready(self):
        config.require_snowflake("ticket category ID", self.category_id)

    def _category(self) -> Optional[discord.CategoryChannel]:
        if not config.is_snowflake(self.category_id):
            return None
        channel = self.bot.get_channel(int(self.category_id))
        return channel if isinstance(channel, discord.CategoryChannel) else None

    def _resolve(self, ref):
        if isinstance(ref, TicketRef):
            return self.bot.get_channel(ref.channel_id)
        return ref

    def _is_ticket_channel(self, channel) -> bool:
        return (
            isinstance(channel, discord.TextChannel)
            and config.is_snowflake(self.category_id)
            and channel.category_id == int(self.category_id)
            and parse_owner_tag(channel.topic) is not None
        )

    def describe(self, ref) -> str:
        channel = self._resolve(ref)
        return getattr(channel, "name", None) or str(ref)

    # ---------- LOOKUP ----------
    async def lookup_open_ticket(self, owner_id) -> Optional[TicketRef]:
        for row in await self.db.get_tickets_by_owner(owner_id):
            channel = self.bot.get_channel(row["channel_id"])
            if self._is_ticket_channel(channel) and parse_owner_tag(channel.topic) == int(owner_id):
                return TicketRef(channel.id, owner_id, channel.name)
            # Channel deleted outside the bot, or the row no longer matches its topic
            await self.db.forget_ticket(row["channel_id"])

        category = self._category()
        if category is None:
            return None
        for channel in category.text_channels:
            if self._is_ticket_channel(channel) and parse_owner_tag(channel.topic) == int(owner_id):
                try:
                    await self.db.register_ticket(channel.id, int(owner_id))
                except Exception as e:
                    print(f"⚠️ Could not re-register ticket {channel.name}: {e}")
                return TicketRef(channel.id, owner_id, channel.name)
        return None

    async def is_ticket(self, ref) -> bool:
        return self._is_ticket_channel(self._resolve(ref))

    # ---------- CREATE ----------
    async def create_ticket_resource(self, owner_id, tag: str, quote=None) -> TicketRef:
        category = self._category()
        if category is None:
            raise ProvisioningFailed("ticket category not found")

        guild = category.guild
        member = guild.get_member(int(owner_id))
        if member is None:
            try:
                member = await guild.fetch_member(int(owner_id))
            except discord.HTTPException as e:
                raise ProvisioningFailed(f"member {owner_id} not found: {e}") from e

        overwrites = {
            guild.default_role: discord.PermissionOverwrite(view_channel=False),
            member: discord.PermissionOverwrite(view_channel=True, send_messages=True, read_message_history=True),
            guild.me: discord.PermissionOverwrite(
                view_channel=True, send_messages=True, read_message_history=True, manage_channels=True
            ),
        }

        staff_role = guild.get_role(config.ROLE_IDS.get("STAFF")) if config.is_snowflake(config.ROLE_IDS.get("STAFF")) else None
        if staff_role:
            overwrites[staff_role] = discord.PermissionOverwrite(
                view_channel=True, send_messages=True, read_message_history=True, manage_channels=True
            )

        try:
            channel = await category.create_text_channel(
                name=safe_channel_name(member.name, owner_id),
                topic=tag,
                overwrites=overwrites,
                reason=f"Boosting ticket for {member}",
            )
        except discord.HTTPException as e:
            raise ProvisioningFailed(str(e)) from e

        try:
            await self.db.register_ticket(channel.id, int(owner_id), quote)
        except Exception as e:
            # The topic tag still identifies the owner
            print(f"⚠️ Could not register ticket {channel.name}: {e}")

        await self.send_message(channel, f"{config.staff_ping()} 🛒 **New ticket opened by** <@{owner_id}>")
        await self.send_message(channel, ticket_tutorial(owner_id, quote))

        return TicketRef(channel.id, int(owner_id), channel.name)

    # ---------- MESSAGES ----------
    async def send_message(self, ref, text: str):
        channel = self._resolve(ref)
        if channel is None:
            return
        try:
            await channel.send(text)
        except discord.HTTPException as e:
            print(f"⚠️ Could not send message in {getattr(channel, 'name', channel)}: {e}")

    # ---------- CLOSE ----------
    async def archive_resource(self, ref, closed_by=None):
        channel = self._resolve(ref)
        if channel is None:
            return
        owner_id = parse_owner_tag(channel.topic)
        ticket = None
        try:
            ticket = await self.db.get_ticket(channel.id)
            await self.db.close_ticket(channel.id, closed_by)
        except Exception as e:
            print(f"⚠️ History save failed: {e}")

        transcript_id = config.CHANNEL_IDS.get("TRANSCRIPT") or config.CHANNEL_IDS.get("STAFF_LOG")
        transcript_channel = await _get_text_channel(self.bot, transcript_id)
        await generate_transcript(channel, transcript_channel, owner_id, ticket)

    async def delete_resource(self, ref):
        channel = self._resolve(ref)
        if channel is None:
            return
        try:
            await channel.delete(reason="Ticket closed")
        except discord.NotFound:
            pass
        except discord.HTTPException as e:
            print(f"⚠️ Could not delete {channel.name}: {e}")


class StaffLogSink(LogSink):
    """Posts operational messages to the staff log channel"""

    def __init__(self, bot, channel_id=None):
        self.bot = bot
        self.channel_id = channel_id

    async def notify(self, text: str):
        channel_id = self.channel_id or config.CHANNEL_IDS.get("STAFF_LOG")
        channel = await _get_text_channel(self.bot, channel_id)
        if channel is None:
            return
        await channel.send(text)


def require_ticket_category():
    """Used at startup to warn early about a missing category id"""
    try:
        config.require_snowflake("ticket category ID", config.CHANNEL_IDS.get("TICKETS_CATEGORY"))
        return True
    except ConfigurationMissing as e:
        print(f"⚠️ {e}")
        return False
