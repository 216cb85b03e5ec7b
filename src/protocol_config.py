import logging
import os
from collections.abc import Iterable
from dataclasses import dataclass

from dotenv import load_dotenv

from chat_commands.interface import ProviderId

logger = logging.getLogger("app.config")

DEFAULT_WAKE_WORDS = ("night watch", "night-watch", "nightwatch", "nw")


class ConfigurationError(ValueError):
    """Raised when the administrator-supplied protocol settings are unusable."""


@dataclass(frozen=True)
class ProtocolConfig:
    provider_priority: tuple[ProviderId, ...] = tuple(ProviderId)
    wake_words: tuple[str, ...] = DEFAULT_WAKE_WORDS

    def priority_of(self, provider: ProviderId) -> int:
        # Unlisted providers rank after listed ones, in declaration order.
        if provider in self.provider_priority:
            return self.provider_priority.index(provider)
        return len(self.provider_priority) + list(ProviderId).index(provider)


def _split_csv(raw: str) -> list[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


def build_provider_priority(names: Iterable[str]) -> tuple[ProviderId, ...]:
    """Turn configured provider tags into a full tie-break order.

    Unknown or repeated tags raise ConfigurationError. Providers the list
    leaves out keep their declaration order after the listed ones.
    """
    order: list[ProviderId] = []
    for name in names:
        try:
            provider = ProviderId(name.strip().lower())
        except ValueError:
            known = ", ".join(p.value for p in ProviderId)
            raise ConfigurationError(f"Unknown provider: {name!r} (known: {known})") from None
        if provider in order:
            raise ConfigurationError(f"Provider listed twice in priority order: {provider}")
        order.append(provider)

    order.extend(p for p in ProviderId if p not in order)
    return tuple(order)


def build_wake_words(names: Iterable[str]) -> tuple[str, ...]:
    words = tuple(dict.fromkeys(" ".join(n.lower().split()) for n in names if n.strip()))
    if not words:
        raise ConfigurationError("At least one wake word is required")
    return words


def load_config() -> ProtocolConfig:
    """Read protocol settings from the environment (and a .env file if present)."""
    load_dotenv()

    raw_priority = os.environ.get("NIGHT_WATCH_PROVIDER_PRIORITY", "")
    raw_wake_words = os.environ.get("NIGHT_WATCH_WAKE_WORDS")

    priority = build_provider_priority(_split_csv(raw_priority))
    wake_words = (
        build_wake_words(_split_csv(raw_wake_words))
        if raw_wake_words is not None
        else DEFAULT_WAKE_WORDS
    )

    logger.debug(f"Provider priority: {[str(p) for p in priority]} | Wake words: {wake_words}")
    return ProtocolConfig(provider_priority=priority, wake_words=wake_words)
