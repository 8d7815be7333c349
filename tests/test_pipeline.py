"""End-to-end digest run with a fake provider, bot, and git."""

import asyncio
from dataclasses import replace
from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest

from gazette import pipeline
from gazette.config import DeliveryOptions
from gazette.pipeline import (
    DigestRun,
    commit_step,
    default_steps,
    run_digest,
    telegram_step,
)
from gazette.providers import BaseProvider, ProviderResponse
from gazette.telegram import DeliveryError

RUN_DATE = date(2025, 10, 20)


class FakeProvider(BaseProvider):
    def __init__(self, text: str):
        super().__init__("fake-model")
        self.text = text
        self.messages = None

    @property
    def provider_name(self) -> str:
        return "fake"

    async def _call_api(self, messages):
        self.messages = messages
        return ProviderResponse(content=self.text, model=self.model_name)

    def cost_per_token(self):
        return (0.0, 0.0)


@pytest.fixture
def bot():
    b = MagicMock()
    b.send_message = AsyncMock()
    b.session.close = AsyncMock()
    return b


# ---------------------------------------------------------------------------
# run_digest
# ---------------------------------------------------------------------------

class TestRunDigest:

    def test_writes_dated_file(self, config):
        provider = FakeProvider("## Головні події\n- ринок зріс")
        run = asyncio.run(run_digest(config, provider, run_date=RUN_DATE))

        assert run.run_date == RUN_DATE
        assert run.run_id == "2025-10-20"
        assert run.path.name == "2025-10-20.md"
        assert run.path.read_text(encoding="utf-8") == "## Головні події\n- ринок зріс\n"

    def test_prompt_lists_sources_for_the_run_date(self, config):
        provider = FakeProvider("digest")
        asyncio.run(run_digest(config, provider, run_date=RUN_DATE))

        system, user = provider.messages
        assert system["role"] == "system"
        assert "Ключові прогнози" in system["content"]
        assert user["role"] == "user"
        assert "https://icu.ua/research/market-reviews" in user["content"]
        # October 20 is past mid-month in a quarter-start month
        assert "ecb.europa.eu" in user["content"]

    def test_empty_provider_output_still_written(self, config):
        run = asyncio.run(run_digest(config, FakeProvider(""), run_date=RUN_DATE))
        assert run.text == ""
        assert run.path.read_text(encoding="utf-8") == "\n"

    def test_steps_run_in_order(self, config):
        calls = []

        async def first(run: DigestRun):
            calls.append(("first", run.run_id))

        async def second(run: DigestRun):
            calls.append(("second", run.run_id))

        asyncio.run(run_digest(config, FakeProvider("x"), [first, second], run_date=RUN_DATE))
        assert calls == [("first", "2025-10-20"), ("second", "2025-10-20")]

    def test_failing_step_aborts_later_steps(self, config):
        calls = []

        async def broken(run):
            raise DeliveryError("boom")

        async def after(run):
            calls.append(run)

        with pytest.raises(DeliveryError):
            asyncio.run(run_digest(config, FakeProvider("x"), [broken, after], run_date=RUN_DATE))
        assert calls == []


# ---------------------------------------------------------------------------
# Post steps
# ---------------------------------------------------------------------------

def _run(text: str, tmp_dir) -> DigestRun:
    return DigestRun(run_date=RUN_DATE, text=text, path=tmp_dir / "2025-10-20.md")


class TestTelegramStep:

    def test_short_digest_sent_as_html(self, config, bot, tmp_dir):
        step = telegram_step(config, bot_factory=lambda token: bot)
        asyncio.run(step(_run("**Україна**: ОВДП стабільні", tmp_dir)))

        bot.send_message.assert_awaited_once()
        kwargs = bot.send_message.await_args.kwargs
        assert kwargs["text"] == "<b>Україна</b>: ОВДП стабільні"
        assert kwargs["chat_id"] == "100"
        bot.session.close.assert_awaited_once()

    def test_plain_mode_sends_markdown_untouched(self, config, bot, tmp_dir):
        config = replace(config, delivery=DeliveryOptions(parse_mode="plain"))
        step = telegram_step(config, bot_factory=lambda token: bot)
        asyncio.run(step(_run("**bold**", tmp_dir)))
        assert bot.send_message.await_args.kwargs["text"] == "**bold**"

    def test_long_digest_sent_in_labelled_parts(self, config, bot, tmp_dir):
        tokens = []

        def factory(token):
            tokens.append(token)
            return bot

        text = "\n\n".join(["a" * 3000, "b" * 3000])
        asyncio.run(telegram_step(config, bot_factory=factory)(_run(text, tmp_dir)))

        assert tokens == ["123456:test-token"]
        texts = [c.kwargs["text"] for c in bot.send_message.await_args_list]
        assert texts == ["[Part 1/2]\n" + "a" * 3000, "[Part 2/2]\n" + "b" * 3000]

    def test_failure_is_wrapped_and_session_closed(self, config, bot, tmp_dir):
        bot.send_message.side_effect = _fail_on_second_call()
        text = "\n\n".join(["a" * 3000] * 3)

        with pytest.raises(DeliveryError, match="2025-10-20 digest failed: part 2/3") as exc_info:
            asyncio.run(telegram_step(config, bot_factory=lambda t: bot)(_run(text, tmp_dir)))

        assert bot.send_message.await_count == 2
        assert isinstance(exc_info.value.__cause__, DeliveryError)
        bot.session.close.assert_awaited_once()


def _fail_on_second_call():
    from aiogram.exceptions import TelegramNetworkError
    from aiogram.methods import SendMessage

    calls = {"n": 0}

    async def _send(**kwargs):
        calls["n"] += 1
        if calls["n"] == 2:
            raise TelegramNetworkError(method=SendMessage(chat_id=100, text="x"), message="timeout")

    return _send


def test_commit_step_commits_written_file(config, tmp_dir, monkeypatch):
    commits = []
    monkeypatch.setattr(pipeline, "git_commit", lambda path, run_date, repo_dir: commits.append((path, run_date, repo_dir)))

    run = _run("x", tmp_dir)
    asyncio.run(commit_step(config)(run))

    assert commits == [(run.path, RUN_DATE, ".")]


def test_default_steps(config):
    assert default_steps(config) == []
    steps = default_steps(replace(config, telegram_enabled=True, git_commit=True))
    assert len(steps) == 2
