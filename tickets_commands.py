"""Slash commands and listeners for the boosting ticket system"""

import discord
from discord import app_commands
from discord.ext import commands
import asyncio
import traceback
import config
from pricing import compute_quote
from tickets_buttons_actions import handle_component
from tickets_buttons_panel import QuoteView
from tickets_cooldowns import remaining_seconds
from tickets_embeds import create_quote_embed
from tickets_errors import BoostBotError, CooldownActive
from tickets_tokens import CONFIRM_PREFIX, encode_token
from tickets_utils import (
    TUTORIAL_MARKER,
    command_channel_tutorial,
    is_close_phrase,
    staff_log_quote_requested,
)

RANK_CHOICES = [app_commands.Choice(name=rank, value=rank) for rank in config.RANKS[:25]]


def _is_staff(member) -> bool:
    if not isinstance(member, discord.Member):
        return False
    staff_role_id = config.ROLE_IDS.get("STAFF")
    if config.is_snowflake(staff_role_id) and member.get_role(int(staff_role_id)):
        return True
    perms = getattr(member, "guild_permissions", None)
    return bool(perms and perms.manage_channels)


async def post_command_tutorial_once(bot):
    """Post the how-to message in the command channel unless it is already there"""
    channel_id = config.CHANNEL_IDS.get("COMMAND")
    if not config.is_snowflake(channel_id):
        print("⚠️ Command channel not configured, skipping tutorial")
        return
    try:
        channel = bot.get_channel(int(channel_id)) or await bot.fetch_channel(int(channel_id))
        async for msg in channel.history(limit=10):
            if msg.author.id == bot.user.id and TUTORIAL_MARKER in (msg.content or ""):
                return
        await channel.send(command_channel_tutorial(bot.pricing_policy.describe()))
        print("✅ Posted command channel tutorial")
    except discord.HTTPException as e:
        print(f"⚠️ Could not post command channel tutorial: {e}")


class TicketEvents(commands.Cog):
    """Routes quote buttons and the CLOSE TICKET phrase"""

    def __init__(self, bot: commands.Bot):
        self.bot = bot

    @commands.Cog.listener()
    async def on_interaction(self, interaction: discord.Interaction):
        if interaction.type != discord.InteractionType.component:
            return
        try:
            await handle_component(interaction)
        except Exception as e:
            print(f"❌ Button handler error: {e}")
            traceback.print_exc()
            try:
                msg = "❌ Something went wrong. Please try again."
                if interaction.response.is_done():
                    await interaction.followup.send(msg, ephemeral=True)
                else:
                    await interaction.response.send_message(msg, ephemeral=True)
            except discord.HTTPException:
                pass

    @commands.Cog.listener()
    async def on_message(self, message: discord.Message):
        if message.author.bot or not message.guild:
            return
        if not is_close_phrase(message.content):
            return
        try:
            await self.bot.ticket_manager.close_ticket(
                message.author.id, message.channel, user_label=str(message.author)
            )
        except Exception as e:
            print(f"❌ Close ticket error: {e}")
            traceback.print_exc()


async def setup_tickets(bot):
    """Setup ticket commands"""

    await bot.add_cog(TicketEvents(bot))

    @bot.tree.command(name="price", description="Get a quote for a rank up (tiered pricing + Roblox tax estimate).")
    @app_commands.describe(rank="Your current rank", to="Rank you want to reach")
    @app_commands.choices(rank=RANK_CHOICES, to=RANK_CHOICES)
    async def price(interaction: discord.Interaction, rank: app_commands.Choice[str], to: app_commands.Choice[str]):
        """Show a private quote with Confirm/Cancel buttons"""
        command_channel_id = config.CHANNEL_IDS.get("COMMAND")
        if config.is_snowflake(command_channel_id) and interaction.channel_id != int(command_channel_id):
            await interaction.response.send_message(
                f"❌ Please use this command in <#{command_channel_id}>.", ephemeral=True
            )
            return

        try:
            quote = compute_quote(rank.value, to.value, bot.ladder, bot.pricing_policy, config.FEE_RATIO)
            remaining = await bot.quote_cooldowns.try_consume(
                interaction.user.id, config.QUOTE_COOLDOWN_SECONDS * 1000
            )
            if remaining > 0:
                raise CooldownActive(remaining_seconds(remaining))
        except BoostBotError as e:
            await interaction.response.send_message(e.user_message(), ephemeral=True)
            return

        token = encode_token(CONFIRM_PREFIX, quote, config.QUOTE_TOKEN_SECRET)
        await interaction.response.send_message(
            embed=create_quote_embed(quote, bot.pricing_policy.describe()),
            view=QuoteView(token),
            ephemeral=True
        )

        try:
            await bot.staff_log.notify(
                staff_log_quote_requested(interaction.user, interaction.channel_id, quote)
            )
        except Exception as e:
            print(f"⚠️ Quote staff log failed: {e}")

        await asyncio.sleep(config.QUOTE_EXPIRY_SECONDS)
        try:
            await interaction.delete_original_response()
        except discord.HTTPException:
            pass

    @bot.tree.command(name="ticketstats", description="Show open and recently closed tickets (Staff only)")
    async def ticketstats(interaction: discord.Interaction):
        if not _is_staff(interaction.user):
            await interaction.response.send_message("❌ You don't have permission to use this command.", ephemeral=True)
            return

        open_count = await bot.db.count_open_tickets()
        closed_24h = await bot.db.get_tickets_last_24h()

        embed = discord.Embed(
            title="🎫 Ticket Stats",
            color=config.COLORS["PRIMARY"],
            timestamp=discord.utils.utcnow()
        )
        embed.add_field(name="Open tickets", value=f"**{open_count}**", inline=True)
        embed.add_field(name="Closed (24h)", value=f"**{closed_24h}**", inline=True)
        await interaction.response.send_message(embed=embed, ephemeral=True)
