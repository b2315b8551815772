"""
Removes non-content page chrome from raw markup before segmentation.
"""

from __future__ import annotations

import re

BOILERPLATE_PATTERNS = (
    re.compile(r"<script[\s\S]*?</script>", re.IGNORECASE),
    re.compile(r"<style[\s\S]*?</style>", re.IGNORECASE),
    re.compile(r"<noscript[\s\S]*?</noscript>", re.IGNORECASE),
    re.compile(r"<(header|footer|nav|aside)\b[\s\S]*?</\1>", re.IGNORECASE),
    re.compile(r"<(div|section)\b[^>]*(?:cookie|consent|banner|subscribe)[^>]*>[\s\S]*?</\1>", re.IGNORECASE),
)


class RegexBoilerplateFilter:
    """Strips scripts, styles, site chrome and consent banners by pattern."""

    def __init__(self, patterns: tuple[re.Pattern[str], ...] = BOILERPLATE_PATTERNS):
        self.patterns = patterns

    def strip(self, html: str) -> str:
        if not html or not html.strip():
            return ""
        for pattern in self.patterns:
            html = pattern.sub("", html)
        return html
