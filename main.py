# main.py
# Summit Boosting Ticket Bot - Main Entry Point

import discord
from discord.ext import commands
import os
import config
from database import Database
from pricing import RankLadder, policy_from_config
from tickets import TicketManager
from tickets_channels import DiscordChannelProvider, StaffLogSink, require_ticket_category
from tickets_cooldowns import JsonCooldownStore

# Import webserver for uptime monitoring
try:
    import webserver
    webserver.start()
    print("✅ Webserver started for uptime monitoring")
except Exception as e:
    print(f"⚠️ Webserver not started: {e}")

# Bot configuration
TOKEN = os.getenv("DISCORD_BOT_TOKEN")
if not TOKEN:
    raise ValueError("❌ DISCORD_BOT_TOKEN not found in environment variables!")

# Initialize bot with intents
intents = discord.Intents.default()
intents.message_content = True  # needed for "CLOSE TICKET"
intents.members = True
intents.guilds = True


class BoostBot(commands.Bot):
    async def setup_hook(self):
        """Runs once before connecting, unlike on_ready"""
        await self.db.init()
        print("✅ Database initialized")

        from tickets_commands import setup_tickets
        await setup_tickets(self)
        print("✅ Ticket system loaded")

        require_ticket_category()

    async def close(self):
        await self.ticket_manager.wait_for_background()
        await self.db.close()
        await super().close()


bot = BoostBot(
    command_prefix="!",  # Slash commands only, prefix unused
    intents=intents,
    help_command=None,
)

# Pricing, storage and ticket lifecycle, shared through the bot object
bot.ladder = RankLadder(config.RANKS)
bot.pricing_policy = policy_from_config(config.PRICING)
bot.db = Database()
bot.staff_log = StaffLogSink(bot)
bot.quote_cooldowns = JsonCooldownStore(config.QUOTE_COOLDOWN_FILE)
bot.ticket_manager = TicketManager(
    provider=DiscordChannelProvider(bot, bot.db),
    cooldowns=JsonCooldownStore(config.COOLDOWN_FILE),
    log_sink=bot.staff_log,
    cooldown_seconds=config.TICKET_COOLDOWN_SECONDS,
    close_delay=config.CLOSE_DELAY_SECONDS,
)


@bot.event
async def on_ready():
    """Called when bot successfully connects to Discord"""
    print(f"✅ Bot logged in as {bot.user.name} (ID: {bot.user.id})")
    print(f"📊 Connected to {len(bot.guilds)} guild(s)")

    # Sync slash commands
    try:
        synced = await bot.tree.sync()
        print(f"✅ Synced {len(synced)} slash command(s)")
    except Exception as e:
        print(f"⚠️ Failed to sync commands: {e}")

    from tickets_commands import post_command_tutorial_once
    await post_command_tutorial_once(bot)

    await bot.change_presence(
        activity=discord.Activity(
            type=discord.ActivityType.watching,
            name="boost quotes | /price"
        )
    )
    print("✅ Bot is ready!")


@bot.event
async def on_error(event, *args, **kwargs):
    """Global error handler"""
    print(f"❌ Error in {event}: {args} {kwargs}")


if __name__ == "__main__":
    try:
        bot.run(TOKEN)
    except KeyboardInterrupt:
        print("\n👋 Bot shutting down...")
    except Exception as e:
        print(f"❌ Fatal error: {e}")
