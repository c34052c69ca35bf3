"""Embed creation utilities for quotes and tickets"""
import discord
import config
from pricing import Quote, format_robux


def create_quote_embed(quote: Quote, pricing_description: str) -> discord.Embed:
    """Private price quote shown after /price"""
    embed = discord.Embed(
        title="📈 Price Quote",
        description=(
            f"🧾 **Pricing:** first step **{format_robux(quote.first_step_cost)}**, "
            f"last step **{format_robux(quote.last_step_cost)}** ({pricing_description})\n\n"
            "⏳ After you open a ticket, staff will send the gamepass link within **1–2 minutes**.\n\n"
            f"{config.RESPECT_TEXT}"
        ),
        color=config.COLORS["PRIMARY"],
        timestamp=discord.utils.utcnow()
    )

    embed.add_field(name="From", value=quote.from_rank, inline=True)
    embed.add_field(name="To", value=quote.to_rank, inline=True)
    embed.add_field(name="Steps", value=str(quote.step_count), inline=True)
    embed.add_field(name="💰 Total (net)", value=f"**{format_robux(quote.net_price)} Robux**", inline=True)
    embed.add_field(
        name="🧾 Gamepass price (est. w/ Roblox fee)",
        value=f"**{format_robux(quote.gross_price)} Robux**",
        inline=True
    )
    embed.set_footer(
        text=f"Click Confirm Price to proceed • This message will disappear in {config.QUOTE_EXPIRY_SECONDS} seconds"
    )
    return embed


def create_confirmed_embed(quote: Quote) -> discord.Embed:
    embed = discord.Embed(
        title="✅ Confirmed",
        description=(
            f"📊 {quote.from_rank} → {quote.to_rank} ({quote.step_count} steps)\n"
            f"💰 Net: **{format_robux(quote.net_price)} Robux**\n"
            f"🧾 Gamepass (est): **{format_robux(quote.gross_price)} Robux**\n\n"
            "Click **🛒 Open Ticket** to proceed."
        ),
        color=config.COLORS["SUCCESS"]
    )
    return embed
