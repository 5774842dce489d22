"""Prompt templates for developer and marketing release notes."""

from patchnotes.config import DEVELOPER_MODEL, MARKETING_MODEL
from patchnotes.filters.types import DiffItem
from patchnotes.notes.types import ChatMessage, GenerationRequest
from patchnotes.stream.types import ChannelName

NO_USER_FACING_CHANGES = "No user-facing changes."

DEVELOPER_SYSTEM_PROMPT = (
    "You are a senior technical writer helping engineering teams write "
    "high-quality developer release notes. Extract the meaningful technical "
    "changes from a pull request's diff and summarize them in plain English "
    "for an internal developer changelog. Focus on what changed and why: "
    "refactors, bug fixes, performance improvements, API changes and new "
    "features. Ignore code inside comments and do NOT mention trivial changes "
    "such as version bumps, formatting or typo fixes. Name the concrete files, "
    "functions and mechanisms involved, for example: Refactored `useFetchDiffs` "
    "hook to use `useSWR` for improved caching and reduced re-renders. If the "
    "purpose is not clear from the diff, make a reasonable inference and say "
    "so. Keep it very concise: 2-3 lines at most."
)

DEVELOPER_USER_PROMPT = (
    "Given the following pull request details, generate a concise "
    "developer-facing release note. Focus on the WHAT (the technical change) "
    "and the WHY (the reason or benefit). Summarize your answer in 1 sentence.\n"
    "\n"
    "Title: {description}\n"
    "\n"
    "Diff:\n"
    "```diff\n"
    "{diff}\n"
    "```"
)

MARKETING_SYSTEM_PROMPT = (
    "You are a product marketer writing concise, high-impact release notes "
    "for end users. Review the code diff of a pull request and describe ONLY "
    "the functionality changes that affect the user experience. Ignore "
    "internal code structure, refactors, formatting and comments. Focus on "
    "how the change improves the product for the user: speed, reliability, "
    "ease of use or new capabilities. Keep the tone simple and benefit-driven, "
    "1 or 2 short sentences at most, with no technical jargon, file names or "
    "implementation details. If there are no meaningful user-facing changes, "
    f"respond with exactly: '{NO_USER_FACING_CHANGES}'\n"
    "Example of ideal output: Loading pull requests is now faster and "
    "smoother thanks to improved data fetching."
)

MARKETING_USER_PROMPT = (
    "Here's a new pull request. Based only on the functionality changes in "
    "the diff, write a short marketing-style release note that clearly "
    "explains the benefit to the user. Do not include anything about internal "
    "code, comments or refactors.\n"
    "\n"
    "Title: {description}\n"
    "\n"
    "Diff:\n"
    "```diff\n"
    "{diff}\n"
    "```"
)

_PROMPTS: dict[ChannelName, tuple[str, str, str]] = {
    ChannelName.DEVELOPER: (DEVELOPER_SYSTEM_PROMPT, DEVELOPER_USER_PROMPT, DEVELOPER_MODEL),
    ChannelName.MARKETING: (MARKETING_SYSTEM_PROMPT, MARKETING_USER_PROMPT, MARKETING_MODEL),
}


def build_request(channel: ChannelName, item: DiffItem) -> GenerationRequest:
    """Build the generation request for one channel of *item*."""
    system_prompt, user_template, model = _PROMPTS[channel]
    return GenerationRequest(
        channel=channel,
        model=model,
        messages=[
            ChatMessage(role="system", content=system_prompt),
            ChatMessage(
                role="user",
                content=user_template.format(description=item.description, diff=item.diff),
            ),
        ],
    )
