"""
Tests for profile validation.
"""

import pytest

from profilefinder.profile import ProfileRecord
from profilefinder.schema import validate_profile, validate_result


@pytest.fixture
def valid_profile():
    return {
        "user_id": "12037949632@N01",
        "user_name": "Stewart",
        "display_name": "Stewart Butterfield",
        "portrait_url": "http://farm1.static.flickr.com/122/buddyicons/12037949632@N01.jpg",
        "location": "Vancouver, Canada",
    }


class TestValidateProfile:
    """Test basic validation function."""

    def test_valid_profile(self, valid_profile):
        assert validate_profile(valid_profile) == []

    def test_all_empty_strings_are_valid(self):
        assert validate_profile(ProfileRecord().to_dict()) == []

    def test_missing_field(self, valid_profile):
        del valid_profile["location"]
        errors = validate_profile(valid_profile)
        assert errors == ["Missing required field: location"]

    def test_non_string_field(self, valid_profile):
        valid_profile["user_id"] = 42
        errors = validate_profile(valid_profile)
        assert any("user_id" in err for err in errors)

    def test_relative_portrait_url(self, valid_profile):
        valid_profile["portrait_url"] = "/images/me.png"
        errors = validate_profile(valid_profile)
        assert any("portrait_url" in err for err in errors)

    def test_non_http_portrait_url(self, valid_profile):
        valid_profile["portrait_url"] = "ftp://example.com/me.png"
        assert validate_profile(valid_profile)

    def test_https_portrait_url(self, valid_profile):
        valid_profile["portrait_url"] = "https://www.gravatar.com/avatar/abc?default=404&size=40"
        assert validate_profile(valid_profile) == []


class TestValidateResult:
    """Test whole-result validation."""

    def test_valid_result(self, valid_profile):
        result = {"flickr": ProfileRecord(**valid_profile), "aim": ProfileRecord(user_name="jd")}
        assert validate_result(result) == []

    def test_errors_are_prefixed_with_service(self, valid_profile):
        valid_profile["portrait_url"] = "nope"
        errors = validate_result({"flickr": valid_profile})
        assert errors and errors[0].startswith("flickr: ")

    def test_blank_service_key(self):
        errors = validate_result({"  ": ProfileRecord()})
        assert errors == ["Invalid service key: '  '"]

    def test_non_mapping_profile(self):
        errors = validate_result({"twitter": "jdoe"})
        assert errors == ["twitter: profile must be a mapping"]
