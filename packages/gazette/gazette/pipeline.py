"""One digest run: sources -> prompt -> LLM -> file -> post steps.

Post steps (Telegram delivery, git commit) are plain async callables that
receive the finished :class:`DigestRun`; they run in order and the first
failure stops the run.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Awaitable, Callable

from aiogram import Bot

from gazette.config import Config
from gazette.formatting import md_to_telegram_html
from gazette.prompt import build_system_prompt, build_user_prompt
from gazette.providers import BaseProvider
from gazette.segmenter import split_digest
from gazette.sources import build_sources
from gazette.storage import format_date, today_utc, write_digest
from gazette.telegram import DeliveryError, TelegramSender, deliver_segments
from gazette.vcs import git_commit

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class DigestRun:
    run_date: date
    text: str
    path: Path

    @property
    def run_id(self) -> str:
        return format_date(self.run_date)


PostStep = Callable[[DigestRun], Awaitable[None]]


async def generate_digest(
    provider: BaseProvider, config: Config, run_date: date
) -> str:
    sources = build_sources(run_date, config.sources)
    log.info(
        "Requesting digest for %s from %s (%d sources)",
        format_date(run_date), provider.model_name, len(sources),
    )
    response = await provider.complete(build_system_prompt(), build_user_prompt(sources))
    if not response.content:
        log.warning("Provider returned an empty digest for %s", format_date(run_date))
    return response.content


async def run_digest(
    config: Config,
    provider: BaseProvider,
    steps: list[PostStep] | None = None,
    run_date: date | None = None,
) -> DigestRun:
    run_date = run_date or today_utc()
    text = await generate_digest(provider, config, run_date)
    path = write_digest(text, config.output_dir, run_date)
    run = DigestRun(run_date=run_date, text=text, path=path)

    for step in steps or []:
        await step(run)
    return run


# ---------------------------------------------------------------------------
# Post steps
# ---------------------------------------------------------------------------

def telegram_step(
    config: Config,
    bot_factory: Callable[[str], Bot] = Bot,
) -> PostStep:
    """Deliver the digest to the configured chat, segmented and paced."""

    async def _deliver(run: DigestRun) -> None:
        text = run.text
        if config.delivery.parse_mode == "html":
            text = md_to_telegram_html(text)
        segments = split_digest(text, config.segmenter)
        log.info("Delivering %s digest in %d part(s)", run.run_id, len(segments))

        bot = bot_factory(config.telegram_bot_token)
        try:
            sender = TelegramSender(
                bot,
                config.telegram_chat_id,
                options=config.delivery,
                hard_limit=config.segmenter.hard_limit,
                thread_id=config.telegram_thread_id,
            )
            await deliver_segments(segments, sender, delay_s=config.delivery_delay_s)
        except DeliveryError as e:
            raise DeliveryError(f"Telegram delivery of {run.run_id} digest failed: {e}") from e
        finally:
            await bot.session.close()

    return _deliver


def commit_step(config: Config) -> PostStep:
    """Commit the written digest file to the configured repository."""

    async def _commit(run: DigestRun) -> None:
        git_commit(run.path, run.run_date, config.repo_dir)

    return _commit


def default_steps(config: Config) -> list[PostStep]:
    steps: list[PostStep] = []
    if config.telegram_enabled:
        steps.append(telegram_step(config))
    if config.git_commit:
        steps.append(commit_step(config))
    return steps
