"""Unit tests for instance name generation."""

import re
from unittest.mock import patch

from tins.names import ADJECTIVES, NOUNS, generate_instance_name


class TestGenerateInstanceName:
    """Tests for generate_instance_name function."""

    def test_format_is_adjective_dash_noun(self) -> None:
        """Test that generated names are two lowercase words joined by a dash."""
        for _ in range(50):
            name = generate_instance_name()
            assert re.fullmatch(r"[a-z]+-[a-z]+", name)

    def test_halves_come_from_word_lists(self) -> None:
        """Test that both halves are drawn from the fixed word lists."""
        for _ in range(50):
            adjective, noun = generate_instance_name().split("-")
            assert adjective in ADJECTIVES
            assert noun in NOUNS

    def test_uses_secrets_choice(self) -> None:
        """Test that words are chosen with the secrets module."""
        with patch("tins.names.secrets.choice", side_effect=["brave", "turing"]) as choice:
            assert generate_instance_name() == "brave-turing"

        assert choice.call_count == 2
        choice.assert_any_call(ADJECTIVES)
        choice.assert_any_call(NOUNS)

    def test_word_lists_are_lowercase_ascii(self) -> None:
        """Test that every word is lowercase ASCII letters only."""
        for word in ADJECTIVES + NOUNS:
            assert re.fullmatch(r"[a-z]+", word), word

    def test_word_lists_have_expected_size(self) -> None:
        """Test that the word lists give a useful number of combinations."""
        assert len(ADJECTIVES) >= 100
        assert len(NOUNS) >= 190
