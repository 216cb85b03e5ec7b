import re

# <@U12345> or <@U12345|alice>
SLACK_USER_MENTION = re.compile(r"<@[A-Z0-9]+(?:\|[^>]*)?>")


def strip_user_mentions(text: str) -> str:
    """Replace Slack user mentions with a space, keeping every other character in place."""
    return SLACK_USER_MENTION.sub(" ", text)


def collapse_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


def remove_span(text: str, start: int, end: int) -> str:
    """Cut ``text[start:end]`` out and join what is left with a single space."""
    left = text[:start].rstrip()
    right = text[end:].lstrip()
    if left and right:
        return f"{left} {right}"
    return left or right
