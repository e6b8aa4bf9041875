"""
Unit tests for the issuer, audience and subject matchers.
"""

import pytest

from service_oidc.app.providers import Provider
from service_oidc.app.validation.matchers import match_audience, match_issuer, validate_subject
from shared.errors import ErrorCode, ValidationError


def _assert_rejected(exc_info, code):
    assert exc_info.value.code == code
    assert exc_info.value.http_status == 401


class TestMatchIssuer:
    """Test cases for match_issuer."""

    @pytest.fixture
    def providers(self):
        return [
            Provider("https://a.example", ("client-a",)),
            Provider("https://b.example", ("client-b",)),
        ]

    def test_exact_match(self, providers):
        assert match_issuer({"iss": "https://b.example"}, providers) is providers[1]

    def test_first_registered_provider_wins(self):
        first = Provider("https://a.example", ("client-1",))
        second = Provider("https://a.example", ("client-2",))

        assert match_issuer({"iss": "https://a.example"}, [first, second]) is first

    def test_no_provider_registered(self, providers):
        with pytest.raises(ValidationError) as exc_info:
            match_issuer({"iss": "https://c.example"}, providers)
        _assert_rejected(exc_info, ErrorCode.ISSUER_NOT_FOUND)

    def test_wrong_type(self, providers):
        with pytest.raises(ValidationError) as exc_info:
            match_issuer({"iss": 42}, providers)
        _assert_rejected(exc_info, ErrorCode.INVALID_ISSUER_TYPE)
        assert "int" in exc_info.value.message

    @pytest.mark.parametrize("claims", [{}, {"iss": ""}, {"iss": None}])
    def test_missing_or_empty(self, providers, claims):
        with pytest.raises(ValidationError) as exc_info:
            match_issuer(claims, providers)
        _assert_rejected(exc_info, ErrorCode.INVALID_ISSUER)

    def test_google_claim_matches_url_provider(self):
        google = Provider("https://accounts.google.com", ("client-1",))
        assert match_issuer({"iss": "accounts.google.com"}, [google]) is google

    def test_google_claim_matches_bare_provider(self):
        google = Provider("accounts.google.com", ("client-1",))
        assert match_issuer({"iss": "accounts.google.com"}, [google]) is google

    def test_google_url_claim_does_not_match_bare_provider(self):
        google = Provider("accounts.google.com", ("client-1",))
        with pytest.raises(ValidationError) as exc_info:
            match_issuer({"iss": "https://accounts.google.com"}, [google])
        _assert_rejected(exc_info, ErrorCode.ISSUER_NOT_FOUND)

    def test_alias_limited_to_google(self):
        provider = Provider("https://idp.example", ("client-1",))
        with pytest.raises(ValidationError):
            match_issuer({"iss": "idp.example"}, [provider])


class TestMatchAudience:
    """Test cases for match_audience."""

    @pytest.fixture
    def provider(self):
        return Provider("https://idp.example", ("A", "B"))

    def test_string_audience(self, provider):
        assert match_audience({"aud": "B"}, provider) == "B"

    def test_list_audience(self, provider):
        assert match_audience({"aud": ["x", "B"]}, provider) == "B"

    def test_first_configured_client_id_wins(self, provider):
        assert match_audience({"aud": ["B", "A"]}, provider) == "A"

    def test_later_client_id_matches_when_first_absent(self, provider):
        assert match_audience({"aud": ["B"]}, provider) == "B"

    def test_audience_not_found(self, provider):
        with pytest.raises(ValidationError) as exc_info:
            match_audience({"aud": ["client-9"]}, provider)
        _assert_rejected(exc_info, ErrorCode.AUDIENCE_NOT_FOUND)
        assert exc_info.value.details["audiences"] == ["client-9"]

    def test_empty_list_not_found(self, provider):
        with pytest.raises(ValidationError) as exc_info:
            match_audience({"aud": []}, provider)
        _assert_rejected(exc_info, ErrorCode.AUDIENCE_NOT_FOUND)

    @pytest.mark.parametrize("claims", [{}, {"aud": 7}, {"aud": {"A": 1}}, {"aud": ["A", 7]}])
    def test_wrong_type(self, provider, claims):
        with pytest.raises(ValidationError) as exc_info:
            match_audience(claims, provider)
        _assert_rejected(exc_info, ErrorCode.INVALID_AUDIENCE_TYPE)

    @pytest.mark.parametrize("aud", ["", ["x", ""]])
    def test_empty_audience(self, provider, aud):
        with pytest.raises(ValidationError) as exc_info:
            match_audience({"aud": aud}, provider)
        _assert_rejected(exc_info, ErrorCode.INVALID_AUDIENCE)


class TestValidateSubject:
    """Test cases for validate_subject."""

    def test_valid_subject(self):
        assert validate_subject({"sub": "user-42"}) == "user-42"

    @pytest.mark.parametrize("claims", [{}, {"sub": ""}])
    def test_missing_or_empty(self, claims):
        with pytest.raises(ValidationError) as exc_info:
            validate_subject(claims)
        _assert_rejected(exc_info, ErrorCode.INVALID_SUBJECT)

    @pytest.mark.parametrize("sub", [42, ["user-42"]])
    def test_wrong_type(self, sub):
        with pytest.raises(ValidationError) as exc_info:
            validate_subject({"sub": sub})
        _assert_rejected(exc_info, ErrorCode.INVALID_SUBJECT_TYPE)
