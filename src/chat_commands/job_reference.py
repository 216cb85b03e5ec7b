import logging
import re

from chat_commands.interface import JobKind, JobReference, JobRequest
from chat_commands.text import remove_span, strip_user_mentions

logger = logging.getLogger("app.job_reference")

# Largest number accepted as a job/PR number.
MAX_JOB_NUMBER = 2**31 - 1

# Matches: https://github.com/{owner}/{repo}/pull/{number}[/files|?x|#y], also inside Slack <url|label> markup
PULL_URL_PATTERN = re.compile(
    r"(?P<open><)?"
    r"https?://[^\s/<>|]+/(?P<owner>[\w.-]+)/(?P<repo>[\w.-]+)/pull/(?P<number>\w+)"
    r"(?:[/?#][^\s<>|]*)?"
    r"(?(open)(?:\|[^>]*)?>)",
    re.IGNORECASE,
)

# Matches: {owner}/{repo}#{number}
SHORTHAND_PATTERN = re.compile(
    r"(?<![\w./:-])(?P<owner>[\w-][\w.-]*)/(?P<repo>[\w.-]+)#(?P<number>\w+)"
)

# Tried in this order when two candidates start at the same offset.
REFERENCE_PATTERNS = (PULL_URL_PATTERN, SHORTHAND_PATTERN)

# "qa org/alpha#3", "run the checks on ..."
JOB_KEYWORD = re.compile(r"\b(run|review|qa)\b", re.IGNORECASE)

CONFLICT_SIGNAL = re.compile(r"\b(conflicts?|merge conflict|merge issues?|rebase)\b", re.IGNORECASE)


def parse_job_number(raw: str) -> int | None:
    """Non-negative integer within MAX_JOB_NUMBER, else None."""
    if not re.fullmatch(r"[0-9]+", raw):
        return None
    number = int(raw)
    if number > MAX_JOB_NUMBER:
        return None
    return number


def find_job_reference(text: str) -> tuple[JobReference, re.Match] | None:
    """Return the left-most valid reference in ``text`` and the match that produced it.

    A rejected candidate also rules out anything inside it, such as the
    ``owner/repo#N`` label of a Slack-wrapped link with a bad number.
    """
    candidates = sorted(
        (
            (m.start(), order, m)
            for order, pattern in enumerate(REFERENCE_PATTERNS)
            for m in pattern.finditer(text)
        ),
        key=lambda c: (c[0], c[1]),
    )
    rejected_until = 0
    for start, _, m in candidates:
        if start < rejected_until:
            continue
        number = parse_job_number(m.group("number"))
        if number is None:
            logger.debug(f"Rejected job reference {m.group(0)!r}: bad number {m.group('number')!r}")
            rejected_until = max(rejected_until, m.end())
            continue
        return JobReference(owner=m.group("owner"), repo=m.group("repo"), number=number), m
    return None


def infer_job(instruction: str) -> tuple[JobKind, bool]:
    """Job kind named in the instruction (review when none is), and whether to fix conflicts.

    Conflict fixing only applies to reviews.
    """
    keyword = JOB_KEYWORD.search(instruction)
    job = JobKind(keyword.group(1).lower()) if keyword else JobKind.REVIEW
    fix_conflicts = job == JobKind.REVIEW and CONFLICT_SIGNAL.search(instruction) is not None
    return job, fix_conflicts


def parse_job_request(message: str) -> JobRequest | None:
    """Parse a pull request link or ``owner/repo#N`` out of a chat message; None when absent."""
    text = strip_user_mentions(message or "")
    found = find_job_reference(text)
    if found is None:
        return None

    reference, m = found
    instruction = remove_span(text, m.start(), m.end()).strip()
    job, fix_conflicts = infer_job(instruction)
    logger.debug(
        f"Job reference: {reference.slug} job={job} fix_conflicts={fix_conflicts} "
        f"instruction={instruction[:100]!r}"
    )
    return JobRequest(reference=reference, instruction=instruction, job=job, fix_conflicts=fix_conflicts)
