"""Gazette, the weekly market digest: LLM summary, dated archive, Telegram delivery."""
