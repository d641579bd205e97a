from core.utils import is_valid_id, one_or_many, safe_int, sanitize_text


def test_sanitize_text_defuses_mentions_and_truncates():
    assert sanitize_text("@everyone\x07") == "@\u200beveryone"
    assert sanitize_text("x" * 300) == "x" * 253 + "..."
    assert sanitize_text(None) == ""


def test_id_helpers():
    assert safe_int(" 42 ") == 42
    assert safe_int(True) is None
    assert safe_int("4x") is None
    assert is_valid_id(1)
    assert not is_valid_id(0)
    assert not is_valid_id(True)


def test_one_or_many():
    assert one_or_many(None) == []
    assert one_or_many("a") == ["a"]
    assert one_or_many(["a", "b"]) == ["a", "b"]
