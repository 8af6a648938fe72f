import jwt
import pytest

from antimg.tokens import (
    Claims,
    TokenError,
    classify_token,
    decode_claims,
    generate_api_token,
    generate_web_token,
)

SECRET = "secret" * 6
OTHER_SECRET = "placeholder" * 4
ADMIN = "admin"
ALGORITHM = "HS256"
WEEK = 7 * 24 * 3600


def test_web_token_round_trip():
    token = generate_web_token(ADMIN, ADMIN, SECRET)
    claims = decode_claims(token, SECRET)
    assert claims.username == ADMIN
    assert claims.role == ADMIN
    assert claims.expires_at - claims.issued_at == WEEK


def test_api_token_has_no_expiry():
    token = generate_api_token(ADMIN, ADMIN, SECRET, now=1_000)
    claims = decode_claims(token, SECRET)
    assert claims == Claims(username=ADMIN, role=ADMIN, issued_at=1_000)


def test_wrong_secret_rejected():
    token = generate_web_token(ADMIN, ADMIN, SECRET)
    with pytest.raises(TokenError):
        decode_claims(token, OTHER_SECRET)


def test_expired_web_token_rejected_by_decode():
    token = generate_web_token(ADMIN, ADMIN, SECRET, now=1_000)
    with pytest.raises(TokenError):
        decode_claims(token, SECRET)


def test_decode_missing_fields_become_empty():
    payload = {"iat": 5}
    token = jwt.encode(payload, SECRET, algorithm=ALGORITHM)
    claims = decode_claims(token, SECRET)
    assert (claims.username, claims.role) == ("", "")


def test_current_api_token_classified():
    token = generate_api_token(ADMIN, ADMIN, SECRET, now=1_000)
    claims, kind = classify_token(token, SECRET, token, now=2_000)
    assert kind == "api_token"
    assert claims.username == ADMIN


def test_stale_api_token_rejected():
    old = generate_api_token(ADMIN, ADMIN, SECRET, now=1_000)
    current = generate_api_token(ADMIN, ADMIN, SECRET, now=1_001)
    with pytest.raises(TokenError, match="API Token"):
        classify_token(old, SECRET, current, now=2_000)


def test_web_token_classified_before_expiry():
    token = generate_web_token(ADMIN, ADMIN, SECRET, now=1_000)
    claims, kind = classify_token(token, SECRET, None, now=1_001)
    assert kind == "web_token"
    assert claims.role == ADMIN


def test_web_token_rejected_at_expiry():
    token = generate_web_token(ADMIN, ADMIN, SECRET, now=1_000)
    with pytest.raises(TokenError):
        classify_token(token, SECRET, None, now=1_000 + WEEK)


def test_missing_username_is_malformed():
    payload = {"role": ADMIN, "exp": 10_000}
    token = jwt.encode(payload, SECRET, algorithm=ALGORITHM)
    with pytest.raises(TokenError, match="格式错误"):
        classify_token(token, SECRET, None, now=1)


def test_garbage_token_rejected():
    with pytest.raises(TokenError):
        classify_token("token", SECRET, None)