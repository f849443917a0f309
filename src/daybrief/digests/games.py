"""Meta Quest games newsletter."""

from __future__ import annotations

from datetime import datetime

from .base import EmailDigest, JobContext, ask_json, deliver_email, parse_model
from .models import GamesDigest
from .render import format_score, render_html

MIN_GAMES = 10
REASONS = ("Recent price drop", "Recently added to Horizon+", "New release")
_REASON_LIST = ", ".join(f'"{r}"' for r in REASONS)

PROMPT = f"""Create a gaming newsletter featuring at least {MIN_GAMES} games. Return the response as a JSON object with the following structure:

{{
  "title": "🎮 Gaming Newsletter - Latest Games & Updates",
  "subtitle": "🆕 Featured Games",
  "games": [
    {{
      "name": "Game Name",
      "score": 8.5,
      "type": "Action RPG",
      "description": "Brief 1-2 sentence description of the game",
      "reason": "Recent price drop",
      "storeUrl": "https://www.meta.com/en-gb/experiences/search/?q=game+name"
    }}
  ]
}}

Please favor games with recent changes (price drops, new releases, or Horizon+ additions). Make sure to include a good mix of different game types and prioritize games that have had recent updates or changes in their status.

For the reason field, use one of: {_REASON_LIST}.

For the storeUrl, provide Meta store URLs using the format "https://www.meta.com/en-gb/experiences/search/?q=[game-name]" where spaces are replaced with + and no special characters are used.

Return ONLY the JSON object, no additional text or formatting."""


def subject_for(now: datetime) -> str:
    return f"Gaming Newsletter - Latest Games & Updates for {now:%d/%m/%Y}"


def render_text(digest: GamesDigest) -> str:
    header = f"{digest.title}\n\n{digest.subtitle}\n\n"
    body = "\n".join(
        f"{g.name}\nScore: {format_score(g.score)}/10 | Type: {g.type}\n{g.description} ({g.reason})\n{g.url}\n"
        for g in digest.games
    )
    return header + body


def render(digest: GamesDigest, now: datetime) -> EmailDigest:
    html = render_html(
        "games.html",
        digest=digest,
        title=digest.title,
        subtitle="Latest Games & Updates",
        accent_from="#667eea",
        accent_to="#764ba2",
        generated_on=now,
    )
    return EmailDigest(subject=subject_for(now), text=render_text(digest), html=html)


async def run(ctx: JobContext) -> GamesDigest:
    recipient = ctx.require_email("games_recipient")
    digest = parse_model(GamesDigest, await ask_json(ctx, PROMPT, "games"))
    ctx.logger.log(f"🎮 {len(digest.games)} games in this issue")
    deliver_email(ctx, recipient, render(digest, ctx.today()), digest)
    return digest
