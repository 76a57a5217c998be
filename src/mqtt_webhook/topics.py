"""MQTT topic grammar used by the broker hooks.

Topics follow ``/channels/<channel>/messages[/<subtopic>][?<query>]``.
The channel identifier is handed to the things service verbatim; the
subtopic is normalized into dot-separated levels before it is forwarded
with a published message.
"""

from __future__ import annotations

import re
from typing import NamedTuple
from urllib.parse import unquote_plus

from .errors import ParseError

LEVEL_SEPARATOR = "."
PATH_SEPARATOR = "/"
SINGLE_LEVEL_WILDCARD = "*"
MULTI_LEVEL_WILDCARD = ">"

_CHANNEL_TOPIC = re.compile(r"/channels/([\w\-]+)/messages(/[^?]*)?(\?.*)?", re.ASCII)
_PERCENT_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


class ChannelTopic(NamedTuple):
    channel_id: str
    subtopic: str


def parse_topic(topic: str) -> ChannelTopic:
    """Split a hook topic into channel id and raw subtopic path.

    The leading separator of the subtopic path and any query string are
    dropped. Raises :class:`ParseError` when the topic does not follow the
    channel grammar.
    """
    match = _CHANNEL_TOPIC.fullmatch(topic or "")
    if match is None:
        raise ParseError.malformed_topic(topic)
    channel_id, path, _query = match.groups()
    return ChannelTopic(channel_id, (path or "").lstrip(PATH_SEPARATOR))


def normalize_subtopic(raw: str) -> str:
    """Return the canonical dotted form of a raw subtopic path.

    Percent escapes are decoded before separators are translated, so an
    encoded ``/`` or wildcard gets the same checks as a literal one.
    Wildcards are only valid as a whole level.
    """
    if not raw:
        return ""

    decoded = _unescape(raw)
    levels = []
    for level in decoded.replace(PATH_SEPARATOR, LEVEL_SEPARATOR).split(LEVEL_SEPARATOR):
        if not level:
            continue
        if len(level) > 1 and (SINGLE_LEVEL_WILDCARD in level or MULTI_LEVEL_WILDCARD in level):
            raise ParseError.malformed_subtopic(raw)
        levels.append(level)
    return LEVEL_SEPARATOR.join(levels)


def _unescape(raw: str) -> str:
    # Query-string unescaping: '+' is a space, every '%' must start a valid escape.
    if _PERCENT_ESCAPE.search(raw):
        raise ParseError.malformed_subtopic(raw)
    try:
        return unquote_plus(raw, errors="strict")
    except UnicodeDecodeError as exc:
        raise ParseError.malformed_subtopic(raw) from exc


__all__ = [
    "ChannelTopic",
    "LEVEL_SEPARATOR",
    "MULTI_LEVEL_WILDCARD",
    "SINGLE_LEVEL_WILDCARD",
    "normalize_subtopic",
    "parse_topic",
]
