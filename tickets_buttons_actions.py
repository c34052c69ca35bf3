"""Handlers for quote buttons (confirm, cancel, open ticket)"""

import discord
import asyncio
import config
from tickets import AlreadyOpen, Created
from tickets_buttons_panel import OpenTicketView
from tickets_embeds import create_confirmed_embed
from tickets_errors import BoostBotError
from tickets_tokens import CANCEL_ID, CONFIRM_PREFIX, OPEN_TICKET_PREFIX, decode_token, encode_token


async def _reply(interaction: discord.Interaction, content: str):
    """Ephemeral reply that works whether or not the interaction was answered"""
    if interaction.response.is_done():
        await interaction.followup.send(content, ephemeral=True)
    else:
        await interaction.response.send_message(content, ephemeral=True)


async def handle_component(interaction: discord.Interaction) -> bool:
    """Route a button click by custom id. Returns False when it isn't ours."""
    custom_id = (interaction.data or {}).get("custom_id", "")

    if custom_id == CANCEL_ID:
        await on_price_cancel(interaction)
    elif custom_id.startswith(CONFIRM_PREFIX + ":"):
        await on_price_confirm(interaction, custom_id)
    elif custom_id == OPEN_TICKET_PREFIX or custom_id.startswith(OPEN_TICKET_PREFIX + ":"):
        await on_open_ticket(interaction, custom_id)
    else:
        return False
    return True


async def on_price_cancel(interaction: discord.Interaction):
    await interaction.response.edit_message(content="❌ Cancelled.", embed=None, view=None)

    await asyncio.sleep(config.CANCEL_CLEANUP_SECONDS)
    try:
        await interaction.delete_original_response()
    except discord.HTTPException:
        pass


async def on_price_confirm(interaction: discord.Interaction, custom_id: str):
    bot = interaction.client
    try:
        pending = decode_token(custom_id, bot.ladder, config.QUOTE_TOKEN_SECRET)
    except BoostBotError as e:
        print(f"⚠️ Rejected confirm token from {interaction.user.id}: {e}")
        await _reply(interaction, e.user_message())
        return

    quote = pending.to_quote(bot.ladder, bot.pricing_policy)
    open_token = encode_token(OPEN_TICKET_PREFIX, pending, config.QUOTE_TOKEN_SECRET)

    await interaction.response.edit_message(
        content=None,
        embed=create_confirmed_embed(quote),
        view=OpenTicketView(open_token)
    )


async def on_open_ticket(interaction: discord.Interaction, custom_id: str):
    bot = interaction.client

    if not interaction.guild:
        await _reply(interaction, "❌ This can only be used in a server.")
        return

    # Bare "open_ticket" comes from older panels without a quote
    quote = None
    if custom_id != OPEN_TICKET_PREFIX:
        try:
            pending = decode_token(custom_id, bot.ladder, config.QUOTE_TOKEN_SECRET)
        except BoostBotError as e:
            print(f"⚠️ Rejected open_ticket token from {interaction.user.id}: {e}")
            await _reply(interaction, e.user_message())
            return
        quote = pending.to_quote(bot.ladder, bot.pricing_policy)

    await interaction.response.defer(ephemeral=True, thinking=True)

    try:
        outcome = await bot.ticket_manager.request_ticket(
            interaction.user.id, quote, user_label=str(interaction.user)
        )
    except BoostBotError as e:
        await _reply(interaction, e.user_message())
        return

    if isinstance(outcome, AlreadyOpen):
        await _reply(
            interaction,
            f"⚠️ You already have an open ticket: {outcome.ticket.mention}\n"
            f"Type **{config.CLOSE_PHRASE}** in it to close it."
        )
    elif isinstance(outcome, Created):
        await _reply(
            interaction,
            f"✅ Ticket created: {outcome.ticket.mention}\n"
            f"Type **{config.CLOSE_PHRASE}** inside it to close it."
        )
