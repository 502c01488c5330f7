"""
Locale tables for the number and date formatters.

Covers the locales the editor ships with. Unknown locales fall back to
the language-only entry ("pt" for "pt-PT"), then to pt-BR.
"""

from dataclasses import dataclass, field

FALLBACK_LOCALE = "pt-BR"


@dataclass(frozen=True)
class LocaleInfo:
    decimal_sep: str
    group_sep: str
    date_pattern: str  # strftime pattern for short dates
    time_pattern: str
    long_date: str  # str.format pattern with day, month, year
    months: tuple[str, ...]
    currency_pattern: str  # str.format pattern with symbol, amount
    currency_symbols: dict[str, str] = field(default_factory=dict)
    just_now: str = "now"
    minutes_ago: str = "{n}min ago"
    hours_ago: str = "{n}h ago"
    days_ago: str = "{n}d ago"
    boolean_words: tuple[str, str] = ("Yes", "No")


LOCALES: dict[str, LocaleInfo] = {
    "pt-BR": LocaleInfo(
        decimal_sep=",",
        group_sep=".",
        date_pattern="%d/%m/%Y",
        time_pattern="%H:%M",
        long_date="{day} de {month} de {year}",
        months=(
            "janeiro", "fevereiro", "março", "abril", "maio", "junho",
            "julho", "agosto", "setembro", "outubro", "novembro", "dezembro",
        ),
        currency_pattern="{symbol} {amount}",
        currency_symbols={"BRL": "R$", "USD": "US$", "EUR": "€", "GBP": "£"},
        just_now="agora",
        minutes_ago="{n}min atrás",
        hours_ago="{n}h atrás",
        days_ago="{n}d atrás",
        boolean_words=("Sim", "Não"),
    ),
    "en-US": LocaleInfo(
        decimal_sep=".",
        group_sep=",",
        date_pattern="%m/%d/%Y",
        time_pattern="%I:%M %p",
        long_date="{month} {day}, {year}",
        months=(
            "January", "February", "March", "April", "May", "June",
            "July", "August", "September", "October", "November", "December",
        ),
        currency_pattern="{symbol}{amount}",
        currency_symbols={"USD": "$", "BRL": "R$", "EUR": "€", "GBP": "£"},
    ),
}

_LANGUAGE_DEFAULTS = {"pt": "pt-BR", "en": "en-US"}


def get_locale(name: str | None) -> LocaleInfo:
    """Resolve a locale name to its table, falling back to pt-BR."""
    if name and name in LOCALES:
        return LOCALES[name]
    language = (name or "").split("-")[0].split("_")[0].lower()
    return LOCALES[_LANGUAGE_DEFAULTS.get(language, FALLBACK_LOCALE)]
