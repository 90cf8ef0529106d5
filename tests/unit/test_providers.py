"""Unit tests for provider claim extraction."""

from channel_migrator.schemas.source import ProviderInfo
from channel_migrator.services.providers import extract_provider


class TestExtractProvider:
    """Test canonical provider labels."""

    def test_strips_com_suffix(self):
        """google.com becomes google."""
        assert extract_provider([ProviderInfo(provider_id="google.com")]) == "google"

    def test_first_provider_wins(self):
        """Only the first linked provider is used."""
        info = [
            ProviderInfo(provider_id="facebook.com"),
            ProviderInfo(provider_id="google.com"),
        ]
        assert extract_provider(info) == "facebook"

    def test_empty_sequence_defaults_to_email(self):
        assert extract_provider([]) == "email"

    def test_absent_sequence_defaults_to_email(self):
        assert extract_provider(None) == "email"

    def test_custom_default(self):
        assert extract_provider([], default="password") == "password"

    def test_only_trailing_suffix_removed(self):
        """Labels without a trailing .com pass through untouched."""
        test_cases = [
            ("password", "password"),
            ("github.com", "github"),
            ("apple.com.com", "apple.com"),
            ("my.company.org", "my.company.org"),
        ]

        for provider_id, expected in test_cases:
            result = extract_provider([ProviderInfo(provider_id=provider_id)])
            assert result == expected, f"Expected {expected} for {provider_id}, got {result}"
