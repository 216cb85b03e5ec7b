import logging
import re
from functools import lru_cache

from chat_commands.interface import (
    PROVIDER_ALIASES,
    DirectiveMatch,
    DirectiveRule,
    ProviderId,
    ProviderRequest,
)
from chat_commands.text import strip_user_mentions
from protocol_config import ProtocolConfig

logger = logging.getLogger("app.provider_directive")

# "can you please run claude ...", "ask codex ..."
POLITE_LEAD = (
    r"(?:can\s+(?:you|someone|anyone)\s+)?"
    r"(?:please\s+)?"
    r"(?:(?:run|use|invoke|trigger|ask)\s+)?"
)

# Characters allowed between the provider token and what follows it.
DIRECTIVE_SEPARATOR = re.compile(r"[\s:,-]*")

# "on beta:" directly after the directive. Possessive so a missing colon fails without backtracking.
PROJECT_HINT_CLAUSE = re.compile(r"on\s++(?P<hint>[^:\n]++):", re.IGNORECASE)

# Words that read like a project after "on" but are filler ("claude on it: ...").
HINT_STOPWORDS = frozenset(
    {
        "and", "or", "for", "on", "of", "please", "now", "it", "this", "these",
        "those", "the", "a", "an", "pr", "pull", "that", "thanks", "thank",
        "again", "job", "pipeline",
    }
)


def _words_pattern(phrase: str) -> str:
    return r"\s+".join(re.escape(word) for word in phrase.split())


ALIAS_PATTERNS: list[tuple[ProviderId, re.Pattern]] = [
    (provider, re.compile(_words_pattern(alias) + r"\b", re.IGNORECASE))
    for provider in ProviderId
    for alias in PROVIDER_ALIASES[provider]
]


def _provider_matches(text: str, start: int, lead_end: int, rule_index: int) -> list[DirectiveMatch]:
    """Every provider alias that begins exactly at ``lead_end``."""
    found = []
    for provider, pattern in ALIAS_PATTERNS:
        m = pattern.match(text, lead_end)
        if m:
            found.append(DirectiveMatch(start, m.end(), provider, rule_index))
    return found


class WakeWordRule:
    """``night watch claude ...`` / ``nw, ask codex ...``"""

    name = "wake_word"

    def __init__(self, wake_words: tuple[str, ...]):
        self._leads = [
            re.compile(r"\s*(" + _words_pattern(word) + r")\b[\s,:;-]*" + POLITE_LEAD, re.IGNORECASE)
            for word in wake_words
        ]

    def candidates(self, text: str, rule_index: int) -> list[DirectiveMatch]:
        found = []
        for lead in self._leads:
            m = lead.match(text)
            if m:
                found.extend(_provider_matches(text, m.start(1), m.end(), rule_index))
        return found


class BareProviderRule:
    """``claude fix the tests`` / ``can you please run codex ...``"""

    name = "bare_provider"

    def __init__(self):
        self._lead = re.compile(r"\s*" + POLITE_LEAD, re.IGNORECASE)

    def candidates(self, text: str, rule_index: int) -> list[DirectiveMatch]:
        m = self._lead.match(text)
        start = len(text) - len(text.lstrip())
        return _provider_matches(text, start, m.end(), rule_index)


class ProviderDirectiveParser:
    """Finds the provider directive that opens a chat message.

    Rules are tried in declaration order. When several candidates match,
    the one starting earliest wins, then the longest, then the provider
    declared first in ``config.provider_priority``, then the earlier rule.
    """

    def __init__(self, config: ProtocolConfig | None = None):
        self.config = config or ProtocolConfig()
        self.rules: list[DirectiveRule] = [
            WakeWordRule(self.config.wake_words),
            BareProviderRule(),
        ]

    def best_match(self, text: str) -> DirectiveMatch | None:
        candidates = []
        for index, rule in enumerate(self.rules):
            candidates.extend(rule.candidates(text, index))
        if not candidates:
            return None
        return min(
            candidates,
            key=lambda c: (
                c.start,
                -(c.end - c.start),
                self.config.priority_of(c.provider),
                c.rule_index,
            ),
        )

    def parse(self, message: str) -> ProviderRequest | None:
        text = strip_user_mentions(message or "")
        match = self.best_match(text)
        if match is None:
            return None

        pos = DIRECTIVE_SEPARATOR.match(text, match.end).end()

        project_hint = None
        hint_match = PROJECT_HINT_CLAUSE.match(text, pos)
        # "on https://...": the colon belongs to a URL
        if hint_match and not text.startswith("//", hint_match.end()):
            hint = " ".join(hint_match.group("hint").split())
            if hint.lower() in HINT_STOPWORDS:
                logger.debug(f"Ignoring filler project hint {hint!r}")
            else:
                project_hint = hint
            pos = hint_match.end()

        instruction = text[pos:].strip()
        rule = self.rules[match.rule_index].name
        logger.debug(
            f"Provider directive: provider={match.provider} rule={rule} "
            f"project_hint={project_hint!r} instruction={instruction[:100]!r}"
        )
        return ProviderRequest(
            provider=match.provider,
            project_hint=project_hint,
            instruction=instruction,
        )


@lru_cache(maxsize=8)
def _parser_for(config: ProtocolConfig) -> ProviderDirectiveParser:
    return ProviderDirectiveParser(config)


def parse_provider_request(message: str, config: ProtocolConfig | None = None) -> ProviderRequest | None:
    """Parse ``[wake word] <provider> [on <project>:] <instruction>``; None when absent."""
    return _parser_for(config or ProtocolConfig()).parse(message)
