import logging
import os
from typing import Optional

import discord
from dotenv import load_dotenv

from newsdesk import NewsAggregator, RefreshScheduler, Registry, default_registry, load_registry
from newsdesk.config import configure_logging, load_settings
from newsdesk.models import STATUS_ERROR
from newsdesk.scheduler import DashboardState

MAX_MESSAGE_CHARS = 2000
DEFAULT_ITEMS = 5

logger = logging.getLogger("discord_bot")


def format_digest(state: DashboardState, registry: Registry, category: Optional[str] = None,
                  limit: int = DEFAULT_ITEMS) -> str:
    """Render the newest articles of a category (or all) as one Discord message."""
    if category and category != "all" and category not in registry.categories:
        known = ", ".join(["all", *registry.categories])
        return f"Unknown category `{category}`. Try one of: {known}"

    articles = state.for_category(category)[:limit]
    if not articles:
        if state.loading:
            return "Fetching the latest news, try again in a moment."
        return "No articles found for this category."

    label = registry.label_for(category) if category and category != "all" else "All Stories"
    response = f"📰 {label}\n\n"
    for item in articles:
        badge = "🔴 BREAKING " if item.is_breaking else ""
        response += f"{badge}**{item.title}**\n"
        response += f"*{item.source_name} - {item.time_ago_label}*\n"
        if item.url != "#":
            response += f"<{item.url}>\n"
        response += "\n"

    # Keep within Discord's message limit
    if len(response) > MAX_MESSAGE_CHARS:
        response = response[: MAX_MESSAGE_CHARS - 3] + "..."
    return response


def format_status(state: DashboardState) -> str:
    if state.last_sync is None:
        return "No sync yet."
    failed = sorted(name for name, s in state.status.items() if s == STATUS_ERROR)
    line = f"{state.sources_ok} sources live, last sync {state.last_sync.strftime('%H:%M')} UTC"
    if failed:
        line += f"\nFailed: {', '.join(failed)}"
    return line


def main() -> None:
    # Load variables from .env
    load_dotenv()
    settings = load_settings()
    configure_logging(settings.log_level)

    # The token is stored in .env as DISCORD_BOT_TOKEN="YOUR_BOT_TOKEN"
    token = os.getenv("DISCORD_BOT_TOKEN")
    if not token:
        raise ValueError("DISCORD_BOT_TOKEN is not set. Check your .env file.")

    registry = load_registry(settings.sources_file) if settings.sources_file else default_registry()
    scheduler = RefreshScheduler(NewsAggregator(registry, settings), interval_seconds=settings.refresh_seconds)

    intents = discord.Intents.default()
    intents.message_content = True  # needed to read commands

    client = discord.Client(intents=intents)

    @client.event
    async def on_ready():
        logger.info("event=bot_ready user=%s", client.user)
        scheduler.start()

    @client.event
    async def on_message(message):
        # Ignore our own messages
        if message.author == client.user:
            return

        parts = message.content.split()
        if not parts:
            return
        command = parts[0]

        if command == "!news":
            category = parts[1].lower() if len(parts) > 1 else None
            await message.channel.send(format_digest(scheduler.state, registry, category))
        elif command == "!refresh":
            await message.channel.send("Refreshing feeds...")
            state = await scheduler.refresh()
            await message.channel.send(format_status(state))
        elif command == "!status":
            await message.channel.send(format_status(scheduler.state))

    client.run(token)


if __name__ == "__main__":
    main()
