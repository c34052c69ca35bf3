"""Transcript generation for closed tickets"""

import discord
import io
import config


def render_transcript(channel_name: str, owner_id, messages, ticket=None) -> str:
    """Plain-text transcript. `messages` are (timestamp, author, content) tuples."""
    lines = [
        f"=== TRANSCRIPT FOR {channel_name.upper()} ===",
        f"Owner: {owner_id}",
    ]
    if ticket and ticket.get("from_rank"):
        lines.append(f"Quote: {ticket['from_rank']} -> {ticket['to_rank']} ({ticket['steps']} steps)")
        lines.append(f"Net: {ticket['net']} | Gamepass (est): {ticket['gross']}")
    lines += ["=" * 50, ""]

    for timestamp, author, content in messages:
        lines.append(f"[{timestamp}] {author}: {content or '[Embed/Attachment]'}")

    return "\n".join(lines)


async def generate_transcript(channel: discord.TextChannel, transcript_channel, owner_id, ticket=None):
    """Post a transcript of `channel` to `transcript_channel`"""
    if transcript_channel is None:
        return

    messages = []
    async for msg in channel.history(limit=500, oldest_first=True):
        author = f"{msg.author.name}#{msg.author.discriminator}" if msg.author.discriminator != "0" else msg.author.name
        messages.append((msg.created_at.strftime('%Y-%m-%d %H:%M:%S'), author, msg.content))

    transcript_text = render_transcript(channel.name, owner_id, messages, ticket)

    file = discord.File(
        io.BytesIO(transcript_text.encode('utf-8')),
        filename=f"transcript-{channel.name}.txt"
    )

    embed = discord.Embed(
        title=f"📄 Transcript: {channel.name} (Closed)",
        description=f"**Owner:** <@{owner_id}>",
        color=config.COLORS["PRIMARY"],
        timestamp=discord.utils.utcnow()
    )

    await transcript_channel.send(embed=embed, file=file)
