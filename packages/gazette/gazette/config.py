import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from gazette.sources import SourceSet


class ConfigError(RuntimeError):
    """Missing or invalid configuration. Fatal at startup."""


PARSE_MODES = ("plain", "markdown", "html")

# Room for the widest "[Part i/N]\n" label up to 999 parts.
LABEL_MARGIN = len("[Part 999/999]\n")

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class SegmenterConfig:
    # Telegram sendMessage rejects text over 4096 chars; the threshold
    # leaves room for the "[Part i/N]" label.
    hard_limit: int = 4096
    threshold: int = 4000
    section_delimiter: str = "\n\n"
    subsection_delimiter: str = "\n- "

    def __post_init__(self) -> None:
        if self.threshold <= 0:
            raise ValueError("threshold must be positive")
        if self.hard_limit - self.threshold < LABEL_MARGIN:
            raise ValueError(
                f"threshold ({self.threshold}) must be at least {LABEL_MARGIN} below "
                f"hard_limit ({self.hard_limit}) to fit the part label"
            )
        if not self.section_delimiter or not self.subsection_delimiter:
            raise ValueError("delimiters must be non-empty")


@dataclass(frozen=True)
class DeliveryOptions:
    parse_mode: str = "html"
    disable_link_preview: bool = True
    disable_notification: bool = False

    def __post_init__(self) -> None:
        if self.parse_mode not in PARSE_MODES:
            raise ValueError(
                f"parse_mode must be one of {', '.join(PARSE_MODES)}, got {self.parse_mode!r}"
            )


@dataclass(frozen=True)
class Config:
    openai_api_key: str
    openai_model: str = "gpt-5.1"
    openai_api_base: str = "https://api.openai.com/v1"
    reasoning_effort: str = "high"
    web_search: bool = True
    llm_timeout_s: float = 600.0
    # Archive
    output_dir: str = "./summaries"
    git_commit: bool = False
    repo_dir: str = "."
    # Telegram
    telegram_enabled: bool = False
    telegram_bot_token: str = ""
    telegram_chat_id: str = ""
    telegram_thread_id: int | None = None
    delivery: DeliveryOptions = field(default_factory=DeliveryOptions)
    delivery_delay_s: float = 5.0
    segmenter: SegmenterConfig = field(default_factory=SegmenterConfig)
    sources: SourceSet = field(default_factory=SourceSet)
    # Shared infra
    data_dir: str = "~/.gazette"
    watchtower_enabled: bool = True


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigError(f"{name} must be a boolean (1/0, true/false), got {raw!r}")


def _env_number(name: str, default: str, kind=float):
    raw = os.environ.get(name, default)
    try:
        return kind(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None


def load_config(
    telegram_enabled: bool | None = None,
    git_commit: bool | None = None,
    require_openai: bool = True,
) -> Config:
    """Build a :class:`Config` from the environment (and ``.env``).

    *telegram_enabled* and *git_commit* override ``TELEGRAM_ENABLED`` and
    ``GIT_COMMIT`` when given, so CLI flags win over the environment.
    Commands that never call the LLM pass *require_openai=False*.
    """
    load_dotenv()

    api_key = os.environ.get("OPENAI_API_KEY", "")
    if not api_key and require_openai:
        raise ConfigError("OPENAI_API_KEY is required")

    if telegram_enabled is None:
        telegram_enabled = _env_bool("TELEGRAM_ENABLED", False)
    if git_commit is None:
        git_commit = _env_bool("GIT_COMMIT", False)

    token = os.environ.get("TELEGRAM_BOT_TOKEN", "")
    chat_id = os.environ.get("TELEGRAM_CHAT_ID", "")
    if telegram_enabled:
        missing = [
            name for name, value in
            (("TELEGRAM_BOT_TOKEN", token), ("TELEGRAM_CHAT_ID", chat_id))
            if not value
        ]
        if missing:
            raise ConfigError(
                f"{', '.join(missing)} required when Telegram delivery is enabled"
            )

    raw_thread = os.environ.get("TELEGRAM_THREAD_ID", "")
    thread_id = _env_number("TELEGRAM_THREAD_ID", raw_thread, int) if raw_thread else None

    try:
        delivery = DeliveryOptions(
            parse_mode=os.environ.get("TELEGRAM_PARSE_MODE", "html").strip().lower(),
            disable_link_preview=_env_bool("TELEGRAM_DISABLE_PREVIEW", True),
            disable_notification=_env_bool("TELEGRAM_SILENT", False),
        )
        segmenter = SegmenterConfig(
            hard_limit=_env_number("SEGMENT_HARD_LIMIT", "4096", int),
            threshold=_env_number("SEGMENT_THRESHOLD", "4000", int),
        )
    except ValueError as e:
        raise ConfigError(str(e)) from e

    return Config(
        openai_api_key=api_key,
        openai_model=os.environ.get("OPENAI_MODEL", "gpt-5.1"),
        openai_api_base=os.environ.get("OPENAI_API_BASE", "https://api.openai.com/v1"),
        reasoning_effort=os.environ.get("OPENAI_REASONING_EFFORT", "high"),
        web_search=_env_bool("OPENAI_WEB_SEARCH", True),
        llm_timeout_s=_env_number("OPENAI_TIMEOUT_S", "600"),
        output_dir=os.environ.get("OUTPUT_DIR", "./summaries"),
        git_commit=git_commit,
        repo_dir=os.environ.get("REPO_DIR", "."),
        telegram_enabled=telegram_enabled,
        telegram_bot_token=token,
        telegram_chat_id=chat_id,
        telegram_thread_id=thread_id,
        delivery=delivery,
        delivery_delay_s=_env_number("TELEGRAM_DELAY_S", "5"),
        segmenter=segmenter,
        data_dir=os.environ.get("GAZETTE_DATA_DIR", "~/.gazette"),
        watchtower_enabled=_env_bool("WATCHTOWER_ENABLED", True),
    )
