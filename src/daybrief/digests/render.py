"""Jinja2 environment shared by the HTML digest templates."""

from __future__ import annotations

from datetime import date, datetime
from functools import lru_cache
from typing import Any

from jinja2 import Environment, PackageLoader, StrictUndefined, select_autoescape


def uk_date(value: date | datetime | None) -> str:
    if value is None:
        return ""
    return value.strftime("%d/%m/%Y")


def format_score(value: float | None) -> str:
    if value is None:
        return "?"
    return f"{value:g}"


@lru_cache(maxsize=1)
def get_environment() -> Environment:
    env = Environment(
        loader=PackageLoader("daybrief", "templates"),
        autoescape=select_autoescape(["html"]),
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["uk_date"] = uk_date
    env.filters["score"] = format_score
    return env


def render_html(template_name: str, **context: Any) -> str:
    return get_environment().get_template(template_name).render(**context)
