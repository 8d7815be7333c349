from __future__ import annotations

import html
import logging
import re

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Markdown -> Telegram HTML
# ---------------------------------------------------------------------------

def md_to_telegram_html(text: str) -> str:
    """Convert the Markdown subset the digest uses to Telegram-supported HTML.

    Handles fenced and inline code, headings (rendered bold), ``**bold**``,
    ``*italic*`` and ``[text](url)`` links. Anything else is escaped and
    passed through as-is.
    """
    try:
        escaped = html.escape(text, quote=False)

        def _replace_code_block(m: re.Match) -> str:
            code = m.group(2).strip("\n")
            return f"<pre>{code}</pre>"

        result = re.sub(
            r"```(\w*)\n(.*?)```", _replace_code_block, escaped, flags=re.DOTALL
        )
        result = re.sub(r"`([^`\n]+)`", r"<code>\1</code>", result)
        result = re.sub(r"^#{1,6}[ \t]+(.+?)[ \t]*#*$", r"<b>\1</b>", result, flags=re.MULTILINE)

        def _replace_link(m: re.Match) -> str:
            url = html.unescape(m.group(2))
            return f'<a href="{html.escape(url, quote=True)}">{m.group(1)}</a>'

        result = re.sub(r"\[([^\]\n]+)\]\((https?://[^)\s]+)\)", _replace_link, result)
        result = re.sub(r"\*\*(.+?)\*\*", r"<b>\1</b>", result)
        result = re.sub(r"(?<![\*\w])\*(?![\*\s])(.+?)(?<![\*\s])\*(?![\*\w])", r"<i>\1</i>", result)
        return result
    except re.error:
        log.debug("md_to_telegram_html conversion failed", exc_info=True)
        return html.escape(text, quote=False)
