from studylens.domain.study.collation import collation_key, locale_sorted


def test_case_is_ignored_at_primary_level() -> None:
    assert locale_sorted(["banana", "Apple", "cherry"]) == ["Apple", "banana", "cherry"]


def test_lowercase_sorts_before_uppercase_on_ties() -> None:
    assert locale_sorted(["B", "a", "A", "b"]) == ["a", "A", "b", "B"]


def test_accents_sort_next_to_their_base_letter() -> None:
    assert locale_sorted(["Zoología", "Ética", "Estadística"]) == ["Estadística", "Ética", "Zoología"]


def test_accent_difference_outranks_case_difference() -> None:
    assert locale_sorted(["résumé", "Resume", "resume"]) == ["resume", "Resume", "résumé"]


def test_key_is_total_and_deterministic() -> None:
    values = ["ñandú", "nandu", "Nandu", "NANDU", ""]

    assert locale_sorted(values) == locale_sorted(list(reversed(values)))
    assert collation_key("") < collation_key("a")


def test_stroked_letters_sort_next_to_their_base_letter() -> None:
    assert locale_sorted(["Pasta", "Ørsted"]) == ["Ørsted", "Pasta"]
    assert locale_sorted(["Mars", "Łódź"]) == ["Łódź", "Mars"]
    assert locale_sorted(["Zoology", "Æther", "Bee"]) == ["Æther", "Bee", "Zoology"]
    assert locale_sorted(["Zagreb", "Đakovo", "Eger"]) == ["Đakovo", "Eger", "Zagreb"]
