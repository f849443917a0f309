"""Ashford (Kent) events for the next three days."""

from __future__ import annotations

from datetime import datetime, timedelta

from daybrief.errors import DecodeError
from daybrief.logging.logger import LogLevel

from .base import EmailDigest, JobContext, ask_json, deliver_email, parse_model
from .models import Event, EventsDigest
from .render import render_html

POSTCODE = "TN231DS"
WINDOW_DAYS = 3
DEFAULT_TITLE = "🎟️ Ashford Events — Next 3 Days"

_EVENT_FIELDS = """      "title": "[{kind} name]",
      "sources": ["[venue/source name]"],
      "description": "[brief description]",
      "distanceMiles": [number],
      "distance": "[X.X miles from TN231DS]",
      "time": "[{time_hint}]",
      "startDateTime": "[ISO format or null]",
      "venueName": "[venue name]",
      "venueAddress": "[address with postcode if known]",
      "category": "{category}\""""


def date_window(now: datetime) -> tuple[str, str, str]:
    """Return ``(start_iso, end_iso, human_range)`` for the next three days."""
    end = now + timedelta(days=WINDOW_DAYS)

    def human(d: datetime) -> str:
        return f"{d:%A} {d.day} {d:%b}"

    return now.date().isoformat(), end.date().isoformat(), f"{human(now)} to {human(end)}"


def _schema(human_range: str) -> str:
    long_running = _EVENT_FIELDS.format(
        kind="regular activity", time_hint="typical schedule, e.g. 'Tuesdays 7pm'", category="long-running"
    )
    one_off = _EVENT_FIELDS.format(kind="specific event", time_hint="specific date/time", category="one-off")
    return (
        "{\n"
        f'  "title": "{DEFAULT_TITLE}",\n'
        f'  "subtitle": "{human_range} • near {POSTCODE}",\n'
        '  "longRunningEvents": [\n    {\n' + long_running + "\n    }\n  ],\n"
        '  "oneOffEvents": [\n    {\n' + one_off + "\n    }\n  ]\n"
        "}"
    )


def build_prompt(now: datetime) -> str:
    start_iso, end_iso, human_range = date_window(now)
    month = f"{now:%B}"
    return f"""You are a local events expert for Ashford, Kent, UK. Find real events happening between {start_iso} and {end_iso} in Ashford and nearby areas (prioritize within 8 miles of {POSTCODE}).

ORGANIZE INTO TWO CATEGORIES:

🔄 LONG RUNNING EVENTS - regular, recurring activities on a predictable schedule:
- Activities that repeat weekly, monthly, or daily
- Ongoing classes, services, or programs
- Regular market days, library programs, weekly pub quizzes
- Any activity someone could reliably expect to attend regularly

🎯 ONE-OFF EVENTS - specific, dated events that happen once or have a limited run:
- Special performances, concerts, or shows with specific dates
- One-time workshops, talks, or educational events
- Festival events, exhibition openings, community gatherings
- Seasonal events tied to specific dates

THEMATIC SEARCH - cast a wide net:
- Arts & Culture, Food & Drink, Community & Local, Health & Wellness
- Learning & Education, Family & Children, Business & Professional
- Seasonal activities appropriate for {month}

ACCURACY REQUIREMENTS:
✅ Include both regular scheduled activities AND specific one-off events
✅ Focus on events within 20 miles of Ashford postcode {POSTCODE}
✅ At least one credible source per event (venue name, organization, etc.)
✅ Provide realistic distance estimates from {POSTCODE}
❌ Don't invent completely fictional venues or organizations
❌ Don't create events that would be highly unusual for the Ashford area

OUTPUT FORMAT (JSON only, no extra text):
{_schema(human_range)}

TARGET: Find up to 5 long running events AND up to 5 one-off events (maximum 10 total events).
IMPORTANT: Only include events you are confident exist. If you can only find 2-3 events per category, that's perfectly fine. Do NOT create fictional events just to reach the maximum quota."""


def build_fallback_prompt(now: datetime) -> str:
    start_iso, end_iso, human_range = date_window(now)
    return f"""FALLBACK: Find Ashford area events for {start_iso} to {end_iso}. Organize into:

🔄 REGULAR ACTIVITIES (things that happen repeatedly):
- Any weekly, daily, or monthly recurring activities

🎯 SPECIAL EVENTS (specific dated events):
- Any one-time events, special occasions, or limited-time activities happening in the date range

SEARCH BROADLY:
- Think about all possible activities in the Ashford area
- Consider seasonal events appropriate for {now:%B}
- Include activities for all age groups and interests

JSON ONLY:
{_schema(human_range)}

TARGET: Find up to 5 events per category. Only include real events - don't invent activities to reach the quota."""


def subject_for(now: datetime) -> str:
    return f"Ashford Events (Next 3 Days) — {now:%d/%m/%Y}"


def _event_text(event: Event, number: int, inferred: str | None) -> str:
    label = "[Regular]" if event.resolved_category(inferred) == "long-running" else "[One-off]"
    sources = ", ".join(event.sources) if event.sources else "N/A"
    return (
        f"#{number} {event.title} {label}\n"
        f"Time: {event.when or 'TBC'}\n"
        f"Distance: {event.distance_label(' mi') or 'N/A'}\n"
        f"Sources: {sources}\n"
        f"Google Search: {event.search_url}\n"
        f"{event.description}\n"
    )


def render_text(digest: EventsDigest) -> str:
    text = f"{digest.title or DEFAULT_TITLE}\n\n"
    counter = 0

    def block(events: list[Event], inferred: str | None) -> str:
        nonlocal counter
        parts = []
        for event in events:
            counter += 1
            parts.append(_event_text(event, counter, inferred))
        return "\n".join(parts)

    if digest.long_running_events:
        text += "🔄 REGULAR ACTIVITIES:\n\n" + block(digest.long_running_events, "long-running")
    if digest.one_off_events:
        if digest.long_running_events:
            text += "\n"
        text += "🎯 SPECIAL EVENTS:\n\n" + block(digest.one_off_events, "one-off")
    if not digest.long_running_events and not digest.one_off_events and digest.events:
        text += block(digest.events, None)
    if counter == 0:
        text += "No events found."
    return text


def render(digest: EventsDigest, now: datetime) -> EmailDigest:
    html = render_html(
        "events.html",
        digest=digest,
        title=digest.title or "Ashford Events: Next 3 Days",
        subtitle=digest.subtitle or f"What’s on near {POSTCODE}",
        accent_from="#2563eb",
        accent_to="#1e40af",
        generated_on=now,
    )
    return EmailDigest(subject=subject_for(now), text=render_text(digest), html=html)


async def fetch(ctx: JobContext) -> EventsDigest:
    """Ask for events; retry once with the permissive prompt when none come back."""
    now = ctx.today()
    prompt = build_prompt(now)
    if ctx.dry_run:
        ctx.echo("🧪 Prompt sent to AI:")
        ctx.echo(prompt)
    digest = parse_model(EventsDigest, await ask_json(ctx, prompt, "events"))
    if not digest.is_empty():
        return digest

    ctx.logger.log("⚠️  No events returned; retrying with the fallback prompt", LogLevel.WARNING)
    fallback_prompt = build_fallback_prompt(now)
    if ctx.dry_run:
        ctx.echo("🧪 Fallback prompt sent to AI:")
        ctx.echo(fallback_prompt)
    try:
        return parse_model(EventsDigest, await ask_json(ctx, fallback_prompt, "events-fallback"))
    except DecodeError as exc:
        ctx.logger.log(f"⚠️  Fallback response unreadable ({exc}); keeping the empty digest", LogLevel.WARNING)
        return digest


async def run(ctx: JobContext) -> EventsDigest:
    recipient = ctx.require_email("events_recipient")
    digest = await fetch(ctx)
    deliver_email(ctx, recipient, render(digest, ctx.today()), digest)
    return digest
