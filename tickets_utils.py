"""Utility functions for ticket system"""
import re
from typing import Optional
import config
from pricing import format_robux

_OWNER_TAG_RE = re.compile(re.escape(config.OWNER_TAG_PREFIX) + r"(\d+)")


def owner_tag(owner_id) -> str:
    return f"{config.OWNER_TAG_PREFIX}{owner_id}"


def parse_owner_tag(topic) -> Optional[int]:
    """Owner id from a channel topic, or None when the topic carries no tag"""
    if not isinstance(topic, str):
        return None
    match = _OWNER_TAG_RE.search(topic)
    return int(match.group(1)) if match else None


def is_close_phrase(content) -> bool:
    return isinstance(content, str) and content.strip().upper() == config.CLOSE_PHRASE


def safe_channel_name(username: str, owner_id) -> str:
    name = re.sub(r"[^a-z0-9-]", "", f"ticket-{username}".lower())[:90]
    return name if name != "ticket-" else f"ticket-{owner_id}"


def quote_details(quote) -> str:
    if not quote:
        return ""
    return (
        "\n\n📊 **Quote Summary**\n"
        f"• From: {quote.from_rank}\n"
        f"• To: {quote.to_rank}\n"
        f"• Steps: {quote.step_count}\n"
        f"• Net: {format_robux(quote.net_price)} Robux\n"
        f"• Gamepass (est): {format_robux(quote.gross_price)} Robux"
    )


def command_channel_tutorial(pricing_description: str) -> str:
    return (
        f"📘 **Welcome to {config.SERVER_NAME} — How to use this channel**\n\n"
        "**Step 1:** Type **/price** in this channel.\n"
        "**Step 2:** Pick your current rank and the rank you want from the dropdowns.\n"
        "**Step 3:** The bot will show a quote (private) and you click **Confirm Price**.\n"
        "**Step 4:** Then click **🛒 Open Ticket**.\n\n"
        f"🧾 **Pricing:** step-based pricing that {pricing_description}.\n"
        "🧾 The bot also shows an **estimated gamepass price** to cover Roblox fees.\n\n"
        "⏳ After you open a ticket, staff will send the gamepass link within **1–2 minutes**.\n\n"
        f"{config.RESPECT_TEXT}\n\n"
        f"🔒 **To close a ticket:** Type **{config.CLOSE_PHRASE}** inside your ticket channel.\n"
        "⏱️ **Ticket cooldown:** 1 ticket per minute (still applies even if you delete/close your old ticket).\n"
    )


TUTORIAL_MARKER = "How to use this channel"


def ticket_tutorial(owner_id, quote=None) -> str:
    return (
        "🎟️ **Ticket Created**\n\n"
        "**Step 1:** Confirm your request here (current rank → target rank).\n"
        "**Step 2:** Wait for staff — we will send the gamepass link within **1–2 minutes**.\n\n"
        f"{config.RESPECT_TEXT}\n"
        f"{quote_details(quote)}\n\n"
        f"❌ **To close this ticket:** Type **{config.CLOSE_PHRASE}**\n"
        "⏱️ **Cooldown:** 1 ticket per minute (even if you delete/close the old one).\n\n"
        f"<@{owner_id}>"
    )


def staff_log_new_ticket(user_label, ticket_mention, quote=None) -> str:
    text = f"🧾 **New Ticket** by **{user_label}** → {ticket_mention} | {config.staff_ping()}"
    if quote:
        text += (
            f"\n📊 {quote.from_rank} → {quote.to_rank} ({quote.step_count} steps)"
            f"\n💰 Net: {format_robux(quote.net_price)} | Gamepass (est): {format_robux(quote.gross_price)}"
        )
    return text


def staff_log_closed_ticket(user_label, channel_name) -> str:
    return f"🔒 **Ticket Closed** by **{user_label}** in #{channel_name} | {config.staff_ping()}"


def staff_log_quote_requested(user_label, channel_id, quote) -> str:
    return (
        f"🧾 **Price Quote Requested** {config.staff_ping()}\n"
        f"👤 User: {user_label}\n"
        f"📍 Channel: <#{channel_id}>\n"
        f"📊 {quote.from_rank} → {quote.to_rank} ({quote.step_count} steps)\n"
        f"💰 Net: {format_robux(quote.net_price)} | Gamepass (est): {format_robux(quote.gross_price)}"
    )
