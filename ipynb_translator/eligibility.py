import re

MIN_TRANSLATABLE_CHARS = 10

# A whole cell that is exactly one fence / one display formula
_SINGLE_CODE_BLOCK_RE = re.compile(r"```(?:(?!```)[\s\S])*```")
_SINGLE_MATH_BLOCK_RE = re.compile(r"\$\$[^$]+\$\$|\$[^$]+\$")

# Spans removed before measuring what prose is left
_CODE_BLOCK_RE = re.compile(r"```[\s\S]*?```")
_MATH_SPAN_RE = re.compile(r"\$\$?[\s\S]*?\$\$?")
_WHITESPACE_RE = re.compile(r"\s+")


def is_translatable(text: str, skip_code_blocks: bool = True, skip_math_formulas: bool = True) -> bool:
    """
    Decide whether a Markdown cell carries enough prose to be worth a request.

    Cells that are empty, a single fenced code block or a single display
    formula are skipped. Otherwise fences and formulas are removed and the
    remaining text must be longer than MIN_TRANSLATABLE_CHARS.
    An unterminated fence or formula does not match and stays in the text.
    """
    stripped = text.strip()
    if not stripped:
        return False

    if skip_code_blocks and _SINGLE_CODE_BLOCK_RE.fullmatch(stripped):
        return False

    if skip_math_formulas and _SINGLE_MATH_BLOCK_RE.fullmatch(stripped):
        return False

    remaining = text
    if skip_code_blocks:
        remaining = _CODE_BLOCK_RE.sub("", remaining)
    if skip_math_formulas:
        remaining = _MATH_SPAN_RE.sub("", remaining)

    remaining = _WHITESPACE_RE.sub(" ", remaining.strip())
    return len(remaining) > MIN_TRANSLATABLE_CHARS
