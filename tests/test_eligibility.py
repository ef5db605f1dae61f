import pytest

from ipynb_translator.eligibility import is_translatable

CODE_BLOCK = "```python\nimport numpy as np\nx = np.zeros(3)\n```"


@pytest.mark.parametrize("text", ["", "   ", "\n\t\n"])
def test_blank_text_is_skipped(text):
    assert not is_translatable(text, True, True)


def test_single_code_block_is_skipped():
    assert not is_translatable(CODE_BLOCK, skip_code_blocks=True, skip_math_formulas=True)


def test_code_block_with_trailing_sentence_is_translated():
    sentence = "Plot the curve."
    assert len(sentence) == 15
    assert is_translatable(CODE_BLOCK + "\n" + sentence, skip_code_blocks=True, skip_math_formulas=True)


def test_code_block_kept_when_not_skipping_code():
    assert is_translatable(CODE_BLOCK, skip_code_blocks=False, skip_math_formulas=True)


@pytest.mark.parametrize("text", ["$$E = mc^2 + \\frac{1}{2}mv^2$$", "$a^2 + b^2 = c^2 + d^2$"])
def test_single_formula_is_skipped(text):
    assert not is_translatable(text, skip_code_blocks=True, skip_math_formulas=True)


def test_formula_kept_when_not_skipping_math():
    assert is_translatable("$$E = mc^2 + \\frac{1}{2}mv^2$$", skip_code_blocks=True, skip_math_formulas=False)


def test_mostly_code_with_little_prose_is_skipped():
    text = "See:\n" + CODE_BLOCK + "\n" + CODE_BLOCK
    assert not is_translatable(text, True, True)


def test_mostly_formulas_with_little_prose_is_skipped():
    assert not is_translatable("where $x$ and $y$", True, True)


def test_prose_with_inline_math_is_translated():
    text = "The loss function $L(\\theta)$ is minimised with gradient descent."
    assert is_translatable(text, True, True)


def test_minimum_prose_length():
    # more than ten characters of prose are required
    assert not is_translatable("0123456789", True, True)
    assert is_translatable("0123456789a", True, True)


def test_unterminated_fence_counts_as_text():
    text = "```python\nprint('hello world')"
    assert is_translatable(text, True, True)


def test_whitespace_is_collapsed_before_measuring():
    assert not is_translatable("a   b   c   d\n\n\n\n\n", True, True)


@pytest.mark.parametrize(
    "text",
    [CODE_BLOCK, "Some ordinary paragraph of prose.", "$x$", "", "```\nunterminated"],
)
@pytest.mark.parametrize("skip_code", [True, False])
@pytest.mark.parametrize("skip_math", [True, False])
def test_filter_is_idempotent(text, skip_code, skip_math):
    assert is_translatable(text, skip_code, skip_math) == is_translatable(text, skip_code, skip_math)
