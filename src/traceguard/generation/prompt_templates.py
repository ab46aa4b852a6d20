"""Prompt templates for answer generation."""

from __future__ import annotations

import re

QUESTION_HEADER = "Question:"
CONTEXT_HEADER = "Context:"
NO_CONTEXT_MARKER = "(no context retrieved)"

ANSWER_PROMPT = """You are a careful assistant. Answer the question using only the context below.
If the context does not contain the answer, say so plainly.

{question_header} {query}

{context_header}
{context}

Answer:"""


def build_prompt(query: str, context: str) -> str:
    return ANSWER_PROMPT.format(
        question_header=QUESTION_HEADER,
        context_header=CONTEXT_HEADER,
        query=query.strip(),
        context=context.strip() or NO_CONTEXT_MARKER,
    )


def parse_prompt(prompt: str) -> tuple[str, str]:
    """Recover (query, context) from a prompt produced by ``build_prompt``."""
    query_match = re.search(rf"^{re.escape(QUESTION_HEADER)} (.*)$", prompt, re.MULTILINE)
    context_match = re.search(
        rf"^{re.escape(CONTEXT_HEADER)}\n(.*?)\n\nAnswer:", prompt, re.MULTILINE | re.DOTALL
    )
    query = query_match.group(1).strip() if query_match else ""
    context = context_match.group(1).strip() if context_match else ""
    if context == NO_CONTEXT_MARKER:
        context = ""
    return query, context
