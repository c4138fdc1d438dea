"""Tests for smart xpath candidates."""

from healcli.core.smart_xpath import build_smart_xpath_candidates, looks_dynamic, xpath_literal
from healcli.models.locator import LocatorStrategy


class TestXPathLiteral:
    """Tests for XPath string quoting."""

    def test_plain(self):
        """Plain strings use double quotes."""
        assert xpath_literal("OK") == '"OK"'

    def test_double_quotes_inside(self):
        """Double quotes inside switch to single quotes."""
        assert xpath_literal('say "hi"') == "'say \"hi\"'"

    def test_both_quote_kinds(self):
        """Both kinds need concat()."""
        assert xpath_literal("it's \"x\"") == "concat(\"it's \", '\"', \"x\", '\"')"


class TestLooksDynamic:
    """Tests for dynamic text detection."""

    def test_digits_only(self):
        """Pure numbers are dynamic."""
        assert looks_dynamic("12345")

    def test_digit_heavy(self):
        """Mostly digits is dynamic."""
        assert looks_dynamic("$1,299")

    def test_words(self):
        """Ordinary labels are stable."""
        assert not looks_dynamic("Sign in")

    def test_empty(self):
        """Empty text is treated as dynamic."""
        assert looks_dynamic("  ")


class TestBuildSmartXPathCandidates:
    """Tests for candidate generation."""

    def test_resource_id_candidates(self):
        """Resource id yields anchored and bare xpaths."""
        result = build_smart_xpath_candidates({
            "class": "android.widget.Button",
            "resourceId": "btn_ok",
        })

        assert [(c.value, c.score) for c in result] == [
            ('//*[@class="android.widget.Button" and @resource-id="btn_ok"]', 85),
            ('//*[@resource-id="btn_ok"]', 82),
        ]
        assert all(c.strategy is LocatorStrategy.XPATH for c in result)
        assert all(c.source == "inspector" for c in result)

    def test_full_metadata_sorted(self):
        """All signals are present and sorted by score."""
        result = build_smart_xpath_candidates(
            {
                "class": "android.widget.Button",
                "resourceId": "btn_ok",
                "contentDesc": "Confirm",
                "text": "OK",
            },
            parent_resource_id="dialog",
        )

        assert [c.score for c in result] == [85, 82, 80, 78, 72, 68]
        assert result[4].value == (
            '//*[@resource-id="dialog"]//*[@class="android.widget.Button" and @resource-id="btn_ok"]'
        )

    def test_long_text_uses_contains(self):
        """Texts over 40 characters match by prefix."""
        text = "Please read these terms and conditions carefully before continuing"

        result = build_smart_xpath_candidates({"text": text})

        assert len(result) == 1
        assert result[0].value == f'//*[contains(@text, "{text[:24]}")]'
        assert result[0].score == 60

    def test_dynamic_text_skipped(self):
        """Counters and prices produce no text candidate."""
        assert build_smart_xpath_candidates({"text": "42"}) == []

    def test_without_class(self):
        """No class means no class clause."""
        result = build_smart_xpath_candidates({"contentDesc": "Back"})

        assert [c.value for c in result] == ['//*[@content-desc="Back"]']

    def test_empty_metadata(self):
        """Nothing in, nothing out."""
        assert build_smart_xpath_candidates(None) == []
        assert build_smart_xpath_candidates({}) == []
