from email_verification.services import codes
from email_verification.services.codes import CODE_MAX, CODE_MIN, generate_code


def test_generate_code_is_six_digits_in_range():
    for _ in range(1000):
        code = generate_code()
        assert len(code) == 6
        assert code.isdigit()
        assert CODE_MIN <= int(code) <= CODE_MAX


def test_generate_code_bounds(monkeypatch):
    monkeypatch.setattr(codes.secrets, "randbelow", lambda upper: 0)
    assert generate_code() == "100000"
    monkeypatch.setattr(codes.secrets, "randbelow", lambda upper: upper - 1)
    assert generate_code() == "999999"
