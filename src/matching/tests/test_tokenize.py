from src.matching.tokenize import token_set, tokenize


def test_tokenize_is_deterministic():
    text = "Check\tUPN\nuniqueness!!!"
    first = tokenize(text)
    second = tokenize(text)

    assert first == second
    assert first == ("check", "upn", "uniqueness")


def test_tokenize_drops_short_tokens():
    assert tokenize("409 AD error in it") == ("409", "error")


def test_tokenize_respects_custom_min_length():
    assert tokenize("409 AD error", min_length=2) == ("409", "ad", "error")


def test_tokenize_empty_inputs():
    assert tokenize("") == tuple()
    assert tokenize(None) == tuple()
    assert tokenize("a an to") == tuple()


def test_token_set_collapses_duplicates():
    assert token_set("user user USER error") == frozenset({"user", "error"})
