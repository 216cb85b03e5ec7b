import time

import pytest

from chat_commands.interface import ProviderId, ProviderRequest
from chat_commands.provider_directive import ProviderDirectiveParser, parse_provider_request
from protocol_config import ProtocolConfig


# ── wake word form ────────────────────────────────────────────────


def test_wake_word_then_provider():
    request = parse_provider_request("night watch claude fix the tests")
    assert request == ProviderRequest(
        provider=ProviderId.CLAUDE, project_hint=None, instruction="fix the tests"
    )


@pytest.mark.parametrize(
    "message",
    [
        "nw codex refactor the parser",
        "Night-Watch codex refactor the parser",
        "NIGHTWATCH, codex refactor the parser",
        "night watch: please ask codex refactor the parser",
    ],
)
def test_wake_word_variants(message):
    request = parse_provider_request(message)
    assert request.provider == ProviderId.CODEX
    assert request.instruction == "refactor the parser"


def test_wake_word_without_provider_is_not_a_directive():
    assert parse_provider_request("night watch run the tests") is None


def test_wake_word_must_start_the_message():
    assert parse_provider_request("hey night watch claude do it") is None


# ── bare provider form ────────────────────────────────────────────


def test_bare_provider_first_token():
    request = parse_provider_request("claude fix the tests")
    assert request.provider == ProviderId.CLAUDE
    assert request.project_hint is None
    assert request.instruction == "fix the tests"


def test_provider_is_case_insensitive():
    assert parse_provider_request("CODEX add logging").provider == ProviderId.CODEX


@pytest.mark.parametrize(
    "message",
    [
        "can you please run claude: fix the tests",
        "please use claude, fix the tests",
        "invoke claude - fix the tests",
    ],
)
def test_polite_and_verb_prefixes(message):
    request = parse_provider_request(message)
    assert request.provider == ProviderId.CLAUDE
    assert request.instruction == "fix the tests"


def test_provider_mentioned_later_is_not_a_directive():
    assert parse_provider_request("maybe claude can help later") is None


def test_unknown_provider_is_not_a_directive():
    assert parse_provider_request("gemini fix the tests") is None
    assert parse_provider_request("claudette fix the tests") is None


def test_empty_and_blank_messages():
    assert parse_provider_request("") is None
    assert parse_provider_request("   ") is None


def test_instruction_may_be_empty():
    request = parse_provider_request("nw claude")
    assert request.provider == ProviderId.CLAUDE
    assert request.instruction == ""


def test_slack_mention_is_ignored():
    request = parse_provider_request("<@U0123ABC> codex investigate CI failures")
    assert request.provider == ProviderId.CODEX
    assert request.instruction == "investigate CI failures"


def test_instruction_keeps_original_case_and_lines():
    request = parse_provider_request("claude Fix README\nand CHANGELOG")
    assert request.instruction == "Fix README\nand CHANGELOG"


# ── project hint ──────────────────────────────────────────────────


def test_project_hint_with_wake_word():
    request = parse_provider_request("nw claude on beta: fix bug")
    assert request.provider == ProviderId.CLAUDE
    assert request.project_hint == "beta"
    assert request.instruction == "fix bug"


def test_project_hint_is_trimmed():
    request = parse_provider_request("codex on   night-watch-cli  :investigate")
    assert request.project_hint == "night-watch-cli"
    assert request.instruction == "investigate"


def test_on_without_colon_is_part_of_instruction():
    request = parse_provider_request("claude on second thought fix the tests")
    assert request.project_hint is None
    assert request.instruction == "on second thought fix the tests"


def test_on_with_url_is_not_a_hint():
    request = parse_provider_request("claude on https://github.com/org/alpha/pull/1 check it")
    assert request.project_hint is None
    assert request.instruction == "on https://github.com/org/alpha/pull/1 check it"


def test_filler_hint_is_dropped():
    request = parse_provider_request("claude on it: fix the tests")
    assert request.project_hint is None
    assert request.instruction == "fix the tests"


def test_hint_only_directly_after_directive():
    request = parse_provider_request("claude fix bug on beta: now")
    assert request.project_hint is None
    assert request.instruction == "fix bug on beta: now"


# ── tie-break ─────────────────────────────────────────────────────


def test_longest_alias_wins():
    request = parse_provider_request("claude code fix the tests")
    assert request.provider == ProviderId.CLAUDE
    assert request.instruction == "fix the tests"


def test_left_most_provider_wins():
    request = parse_provider_request("codex claude fix the tests")
    assert request.provider == ProviderId.CODEX
    assert request.instruction == "claude fix the tests"


def test_wake_word_form_beats_bare_mention_later():
    request = parse_provider_request("nw codex ask claude about it")
    assert request.provider == ProviderId.CODEX
    assert request.instruction == "ask claude about it"


def test_same_span_resolved_by_provider_priority(monkeypatch):
    # Give both providers an identical alias so only the priority order can decide.
    from chat_commands import provider_directive

    aliases = [(ProviderId.CODEX, _alias("agent")), (ProviderId.CLAUDE, _alias("agent"))]
    monkeypatch.setattr(provider_directive, "ALIAS_PATTERNS", aliases)

    default = ProviderDirectiveParser(ProtocolConfig())
    assert default.parse("agent fix it").provider == ProviderId.CLAUDE

    codex_first = ProviderDirectiveParser(
        ProtocolConfig(provider_priority=(ProviderId.CODEX, ProviderId.CLAUDE))
    )
    assert codex_first.parse("agent fix it").provider == ProviderId.CODEX


def test_custom_wake_words():
    parser = ProviderDirectiveParser(ProtocolConfig(wake_words=("hey bot",)))
    assert parser.parse("hey bot claude fix it").instruction == "fix it"
    assert parser.parse("nw claude fix it") is None


def test_parsing_is_deterministic():
    message = "nw claude on beta: fix bug"
    assert parse_provider_request(message) == parse_provider_request(message)


def _alias(word):
    import re

    return re.compile(re.escape(word) + r"\b", re.IGNORECASE)


# ── long input ────────────────────────────────────────────────────


def test_long_unterminated_hint_stays_fast():
    message = "claude on x" + " " * 40000 + "y fix"
    start = time.perf_counter()
    request = parse_provider_request(message)
    elapsed = time.perf_counter() - start

    assert request.project_hint is None
    assert request.instruction.endswith("y fix")
    assert elapsed < 0.5


def test_long_hint_before_colon_is_collapsed():
    request = parse_provider_request("claude on my" + " " * 40000 + "project: go")
    assert request.project_hint == "my project"
    assert request.instruction == "go"
