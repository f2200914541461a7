"""
Template Token Analysis

Lists the placeholder tokens a template uses and where they sit, for template
authoring tools and for reporting tokens left unresolved after composition.
"""

from dataclasses import dataclass
from typing import List, Optional

from cvforge.contexts.templating.html_patterns import TokenRegex

CONTEXT_WINDOW = 100
REPEATING_BLOCK_HINTS = ("{{#each", ".map(", "v-for=")


@dataclass
class TokenContext:
    """
    Where a token appears in a template.

    Attributes:
        token: Token as written (e.g., "{{ firstName }}")
        context: Up to CONTEXT_WINDOW characters either side of its first occurrence
        section: Collection name from an enclosing {{#each name}} block, if any
        is_in_repeated_block: Whether a repeating-block construct precedes it
    """

    token: str
    context: str = ""
    section: Optional[str] = None
    is_in_repeated_block: bool = False


def extract_template_tokens(html: str) -> List[str]:
    """
    Extract every placeholder token in document order, de-duplicated.

    Example:
        >>> extract_template_tokens("<p>{{name}} ${email} {{name}}</p>")
        ['{{name}}', '${email}']
    """
    if not html:
        return []
    return list(dict.fromkeys(match.group(0) for match in TokenRegex.ANY.finditer(html)))


def analyze_token_context(token: str, html: str) -> TokenContext:
    """
    Describe the surroundings of a token's first occurrence.

    Args:
        token: Token as returned by extract_template_tokens
        html: Template HTML

    Returns:
        TokenContext (empty context when the token does not occur)
    """
    position = html.find(token) if html else -1
    if position < 0:
        return TokenContext(token=token)

    start = max(0, position - CONTEXT_WINDOW)
    end = min(len(html), position + len(token) + CONTEXT_WINDOW)
    preceding = html[:position]

    each_blocks = list(TokenRegex.EACH_BLOCK.finditer(preceding))
    open_each = [
        block for block in each_blocks if "{{/each}}" not in preceding[block.end():]
    ]

    return TokenContext(
        token=token,
        context=html[start:end],
        section=open_each[-1].group(1) if open_each else None,
        is_in_repeated_block=bool(open_each) or any(
            hint in html[start:position] for hint in REPEATING_BLOCK_HINTS[1:]
        ),
    )


def unresolved_tokens(html: str) -> List[str]:
    """Tokens still present in composed HTML."""
    return extract_template_tokens(html)


def token_key(token: str) -> Optional[str]:
    """
    Key named by a token.

    Example:
        >>> token_key("[[FIELD:email]]")
        'email'
    """
    match = TokenRegex.ANY.fullmatch(token.strip())
    if match is None:
        return None
    return next(group for group in match.groups() if group is not None).strip()
