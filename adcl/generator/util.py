"""Naming helpers shared by the generators."""

import re

_SPLIT_RE = re.compile(r"[_\-\s]+")


def to_camel_case(name: str) -> str:
    """Convert snake_case or kebab-case to CamelCase.

    Parts that are already capitalized keep their remaining letters, so
    "share_size" becomes "ShareSize" and "hub_URL" becomes "HubURL".
    """
    return "".join(part[:1].upper() + part[1:] for part in _SPLIT_RE.split(name) if part)
