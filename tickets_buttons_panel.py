"""Buttons for the quote -> confirm -> open ticket flow

The buttons carry their quote in the custom id (see tickets_tokens), so
clicks are routed by prefix in tickets_buttons_actions and keep working
after a restart.
"""

import discord
import config
from tickets_tokens import CANCEL_ID


class QuoteView(discord.ui.View):
    """Confirm Price / Cancel under a fresh quote"""
    def __init__(self, confirm_token: str):
        super().__init__(timeout=config.QUOTE_EXPIRY_SECONDS)
        self.add_item(discord.ui.Button(
            label="Confirm Price",
            emoji="✅",
            style=discord.ButtonStyle.success,
            custom_id=confirm_token,
        ))
        self.add_item(discord.ui.Button(
            label="Cancel",
            emoji="❌",
            style=discord.ButtonStyle.secondary,
            custom_id=CANCEL_ID,
        ))


class OpenTicketView(discord.ui.View):
    """Single Open Ticket button shown after confirmation"""
    def __init__(self, open_token: str):
        super().__init__(timeout=config.QUOTE_EXPIRY_SECONDS)
        self.add_item(discord.ui.Button(
            label="Open Ticket",
            emoji="🛒",
            style=discord.ButtonStyle.primary,
            custom_id=open_token,
        ))
