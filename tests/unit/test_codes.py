import pytest

from bungu_verify.utils.codes import code_generator, numeric_code, token_generator, url_token


def test_numeric_code_has_exact_length_and_no_leading_zero():
    for _ in range(200):
        code = numeric_code(4)
        assert len(code) == 4
        assert code.isdigit()
        assert code[0] != "0"


def test_numeric_code_other_lengths():
    assert len(numeric_code(6)) == 6
    assert len(numeric_code(1)) == 1
    with pytest.raises(ValueError):
        numeric_code(0)


def test_url_token_entropy():
    token = url_token()
    assert len(token) == 64
    int(token, 16)
    assert len(url_token(16)) == 32
    with pytest.raises(ValueError):
        url_token(8)


def test_tokens_are_not_repeated():
    tokens = {url_token() for _ in range(100)}
    assert len(tokens) == 100


def test_generator_factories():
    assert len(code_generator(5)()) == 5
    assert len(token_generator(20)()) == 40
