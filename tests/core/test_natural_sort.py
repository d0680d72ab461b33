from __future__ import annotations

from bookshelf.core.natural_sort import natural_sort_key, natural_sorted


def test_numbers_compare_by_value() -> None:
    assert natural_sorted(["10.jpg", "2.jpg", "1.jpg"]) == ["1.jpg", "2.jpg", "10.jpg"]


def test_text_compares_case_insensitively() -> None:
    assert natural_sorted(["b", "C", "a"]) == ["a", "b", "C"]


def test_multiple_numeric_chunks() -> None:
    names = ["vol2 ch10", "vol2 ch9", "vol10 ch1", "vol1 ch3"]

    assert natural_sorted(names) == ["vol1 ch3", "vol2 ch9", "vol2 ch10", "vol10 ch1"]


def test_digits_sort_before_letters_at_the_same_position() -> None:
    assert natural_sorted(["cover.jpg", "001.jpg"]) == ["001.jpg", "cover.jpg"]


def test_zero_padding_does_not_change_numeric_order() -> None:
    assert natural_sorted(["010.jpg", "9.jpg", "0001.jpg"]) == ["0001.jpg", "9.jpg", "010.jpg"]


def test_key_function_is_applied() -> None:
    items = [("b", "2"), ("a", "10"), ("c", "1")]

    assert natural_sorted(items, key=lambda item: item[1]) == [("c", "1"), ("b", "2"), ("a", "10")]


def test_key_is_stable_for_equal_names_with_different_case() -> None:
    assert natural_sort_key("Page1") == natural_sort_key("page1")


def test_superscript_digits_are_treated_as_text() -> None:
    assert natural_sorted(["p10", "p1²", "²³.jpg", "p2"]) == ["p1²", "p2", "p10", "²³.jpg"]


def test_other_script_decimal_digits_compare_by_value() -> None:
    assert natural_sorted(["page ١٠", "page ٢"]) == ["page ٢", "page ١٠"]
