import secrets

CODE_MIN = 100000
CODE_MAX = 999999


def generate_code() -> str:
    return str(CODE_MIN + secrets.randbelow(CODE_MAX - CODE_MIN + 1))
