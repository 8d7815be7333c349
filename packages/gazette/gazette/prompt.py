from __future__ import annotations

from gazette.sources import Source


_SYSTEM_LINES = [
    "Ти фінансовий аналітик. ",
    "Пиши чіткі, структуровані огляди українською мовою у форматі bullet list. ",
    "Використовуй простий, зрозумілий для читача текст, без перевантаження "
    "спеціальними термінами та аббревіатурами. Без всяких EM, UST, IG gilts, DM, тощо. "
    "Роби текст зрозумілим для читача не з фінансового сектору. ",
    "Секції: 'Головні події', 'Основні загрози / ризики', 'Ключові прогнози'.",
    "Якщо є трохи цифр, будь ласка вкажи їх також, але не вигадуй нічого від себе. "
    "Не змінюй цифри, лише показуй їх. ",
]

_REGIONS = [
    "Україна: ОВДП, євробонди, валютний ринок, стан економіки; ",
    "США: облігації, акції, стан економіки; ",
    "Європа: облігації, акції, стан економіки; ",
    "Світ: облігації, акції, стан економіки; ",
]

_INVESTOR_SECTION = (
    "Інвестування з позиції українця, який хоче зберегти свої заощадження та хоче "
    "помірного зростання портфелю без ризиків, на 8%-12% річних, з диверсифікацією: "
    "облігації, акції, криптовалюти, реальний сектор, нерухомість."
)


def build_system_prompt() -> str:
    """Analyst persona plus the fixed section layout of the digest."""
    return "\n".join(_SYSTEM_LINES)


def format_sources(sources: list[Source]) -> str:
    return "\n".join(f"- {s.name}: {s.url}" for s in sources)


def build_user_prompt(sources: list[Source]) -> str:
    """Ask for the latest weekly report from each of *sources*, region by region."""
    lines = [
        "Знайди на цих джерелах: ",
        format_sources(sources),
        "найактуальніші фінансові звіти ",
        "найактуальніший щотижневий фінансовий звіт (Financial Weekly / Фінансовий тижневик) "
        "і зроби по ньому короткий звіт у вказаному форматі: "
        + _REGIONS[0],
        *_REGIONS[1:],
        _INVESTOR_SECTION,
    ]
    return "\n".join(lines)
