"""
Tests for input hygiene helpers
"""
from gamestore.core.security import sanitize_input, is_valid_email, is_valid_phone, MAX_INPUT_LENGTH


class TestSanitizeInput:

    def test_removes_script_blocks(self):
        assert sanitize_input("Hello <script>alert('x')</script>world") == "Hello world"

    def test_removes_iframes_and_brackets(self):
        assert sanitize_input('<iframe src="evil"></iframe><b>bold</b>') == "bbold/b"

    def test_truncates_and_trims(self):
        assert len(sanitize_input("  " + "a" * (MAX_INPUT_LENGTH + 50))) == MAX_INPUT_LENGTH

    def test_empty_values(self):
        assert sanitize_input(None) == ""
        assert sanitize_input("") == ""

    def test_keeps_arabic_text(self):
        assert sanitize_input(" متى يصل طلبي؟ ") == "متى يصل طلبي؟"


class TestValidators:

    def test_email(self):
        assert is_valid_email("sara@example.com")
        assert not is_valid_email("sara@example")
        assert not is_valid_email(None)

    def test_gulf_phone_numbers(self):
        assert is_valid_phone("+965 5000 0000")
        assert is_valid_phone("(965) 5000-0000")
        assert not is_valid_phone("12345")
        assert not is_valid_phone("phone")
