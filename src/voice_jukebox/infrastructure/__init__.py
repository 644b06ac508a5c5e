"""Infrastructure layer - external systems integration.

This layer contains implementations for:
- Persistence (SQLite preference store)
- Discord (bot, cogs, voice and status adapters)
- Providers (NetEase over httpx, YouTube over yt-dlp)
- Web (aiohttp HTTP API)
"""
