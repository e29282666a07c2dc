from __future__ import annotations

from markviewer.stats import count_characters, count_words


def test_count_words_ignores_markup() -> None:
    assert count_words("# Hello **world**") == 2
    assert count_words("- [x] done\n- [ ] todo") == 3
    assert count_words("well-known `code`") == 3
    assert count_words("") == 0


def test_count_characters() -> None:
    assert count_characters("abc\n") == 4
    assert count_characters("") == 0
