"""Tests for locator bundle normalization."""

from healcli.core.locator_bundle import (
    bundle_fingerprint,
    ensure_locator_bundle,
    is_locator_required_action,
    normalize_actions_for_locator_healing,
)
from healcli.models.locator import (
    Coordinates,
    LocatorBundle,
    LocatorCandidate,
    LocatorStrategy,
    RecordedAction,
)


class TestIsLocatorRequiredAction:
    """Tests for which action types need a locator."""

    def test_locator_types(self):
        """tap, input, longPress and assert need locators."""
        for action_type in ("tap", "input", "longPress", "assert"):
            assert is_locator_required_action(RecordedAction(type=action_type))

    def test_other_types(self):
        """Waits, swipes and system actions do not."""
        for action_type in ("wait", "swipe", "pressKey", "clearCache", "doubleTap"):
            assert not is_locator_required_action(RecordedAction(type=action_type))


class TestEnsureLocatorBundle:
    """Tests for ensure_locator_bundle."""

    def test_picks_top_candidate_as_primary(self):
        """Without an explicit primary the best candidate is chosen."""
        action = RecordedAction(
            id="a1",
            type="tap",
            element_id="btn_submit",
            element_text="Submit",
            coordinates=Coordinates(x=540, y=1200),
        )

        result = ensure_locator_bundle(action)
        bundle = result.locator_bundle

        assert bundle is not None
        assert bundle.version == 1
        assert bundle.primary == LocatorCandidate(LocatorStrategy.ID, "btn_submit", 88, "inspector")
        assert [(c.strategy.value, c.value) for c in bundle.fallbacks] == [
            ("text", "Submit"),
            ("coordinates", "540,1200"),
        ]

    def test_backfills_empty_locator_fields(self):
        """locator and locator_strategy are filled from the primary."""
        action = RecordedAction(id="a1", type="tap", element_id="btn_submit")

        result = ensure_locator_bundle(action)

        assert result.locator == "btn_submit"
        assert result.locator_strategy == "id"

    def test_keeps_existing_locator_fields(self):
        """Existing locator fields are never overwritten."""
        action = RecordedAction(
            id="a1",
            type="tap",
            locator="//android.widget.Button",
            locator_strategy="xpath",
            element_id="btn_submit",
        )

        result = ensure_locator_bundle(action)

        assert result.locator == "//android.widget.Button"
        assert result.locator_strategy == "xpath"
        assert result.locator_bundle.primary.value == "btn_submit"

    def test_explicit_primary_is_sticky(self):
        """A stored primary survives higher-scoring new candidates."""
        explicit = LocatorCandidate(LocatorStrategy.TEXT, "Sign in", score=20, source="legacy")
        action = RecordedAction(
            id="a1",
            type="tap",
            element_id="btn_login",
            element_content_desc="Login",
            locator_bundle=LocatorBundle(fingerprint="fp-1", primary=explicit),
        )

        result = ensure_locator_bundle(action)

        assert result.locator_bundle.primary is explicit
        assert result.locator_bundle.primary.score == 20

    def test_primary_not_in_fallbacks(self):
        """The primary is excluded from its own fallback list."""
        explicit = LocatorCandidate(LocatorStrategy.ID, "btn_login")
        action = RecordedAction(
            id="a1",
            type="tap",
            element_id="btn_login",
            element_text="Login",
            locator_bundle=LocatorBundle(fingerprint="", primary=explicit),
        )

        result = ensure_locator_bundle(action)
        primary = result.locator_bundle.primary

        assert all(c.key != primary.key for c in result.locator_bundle.fallbacks)
        assert [c.value for c in result.locator_bundle.fallbacks] == ["Login"]

    def test_idempotent(self):
        """Normalizing twice gives the same bundle."""
        action = RecordedAction(
            id="a1",
            type="input",
            element_id="email",
            element_content_desc="Email",
            xpath='//*[@resource-id="email"]',
            coordinates=Coordinates(x=100, y=200),
        )

        once = ensure_locator_bundle(action)
        twice = ensure_locator_bundle(once)

        assert twice.locator_bundle == once.locator_bundle
        assert twice.locator == once.locator
        assert twice.locator_strategy == once.locator_strategy

    def test_locator_without_strategy_stays_untagged(self):
        """A legacy locator is not tagged with the primary's strategy."""
        action = RecordedAction(id="a1", type="tap", locator="//foo", element_id="btn_ok")

        once = ensure_locator_bundle(action)
        twice = ensure_locator_bundle(once)

        assert once.locator == "//foo"
        assert once.locator_strategy == ""
        assert once.locator_bundle.fallbacks == ()
        assert twice.locator_bundle == once.locator_bundle

    def test_strategy_without_locator_backfilled_as_pair(self):
        """A stray strategy is replaced along with the empty locator."""
        action = RecordedAction(id="a1", type="tap", locator_strategy="xpath", element_id="btn_ok")

        once = ensure_locator_bundle(action)
        twice = ensure_locator_bundle(once)

        assert (once.locator, once.locator_strategy) == ("btn_ok", "id")
        assert twice.locator_bundle == once.locator_bundle

    def test_explicit_primary_trimmed(self):
        """A padded stored primary does not reappear as its own fallback."""
        padded = LocatorCandidate(LocatorStrategy.ID, " btn ", 90)
        action = RecordedAction(
            id="a1",
            type="tap",
            element_id="btn",
            locator_bundle=LocatorBundle(fingerprint="fp", primary=padded),
        )

        bundle = ensure_locator_bundle(action).locator_bundle

        assert bundle.primary.value == "btn"
        assert all(c.key != bundle.primary.key for c in bundle.fallbacks)
        assert bundle.fallbacks == ()

    def test_non_locator_action_unchanged(self):
        """Actions that need no locator are returned as-is."""
        action = RecordedAction(id="w1", type="wait", value="1000", element_id="ignored")

        assert ensure_locator_bundle(action) is action

    def test_no_candidates_unchanged(self):
        """Actions without any locator signal are returned as-is."""
        action = RecordedAction(id="a1", type="tap")

        assert ensure_locator_bundle(action) is action

    def test_does_not_mutate_input(self):
        """The input action keeps its original fields."""
        action = RecordedAction(id="a1", type="tap", element_id="ok", extra={"foo": 1})

        result = ensure_locator_bundle(action)

        assert action.locator_bundle is None
        assert action.locator == ""
        assert result.extra == {"foo": 1}
        assert result.extra is not action.extra


class TestBundleFingerprint:
    """Tests for fingerprint precedence."""

    def test_bundle_fingerprint_first(self):
        """An explicit bundle fingerprint wins."""
        action = RecordedAction(
            id="a1",
            type="tap",
            element_fingerprint="elem-fp",
            locator_bundle=LocatorBundle(fingerprint="bundle-fp", primary=None),
        )

        assert bundle_fingerprint(action) == "bundle-fp"

    def test_element_fingerprint_second(self):
        """The element fingerprint is used when the bundle has none."""
        action = RecordedAction(id="a1", type="tap", element_fingerprint="elem-fp")

        assert bundle_fingerprint(action) == "elem-fp"

    def test_synthesized_fallback(self):
        """Otherwise type and id are combined."""
        action = RecordedAction(id="a1", type="longPress")

        assert bundle_fingerprint(action) == "longPress:a1"

    def test_fingerprint_attached(self):
        """The normalized bundle carries the fingerprint."""
        action = RecordedAction(id="a7", type="tap", element_text="Next")

        assert ensure_locator_bundle(action).locator_bundle.fingerprint == "tap:a7"


class TestNormalizeActionsForLocatorHealing:
    """Tests for the batch variant."""

    def test_applies_to_each_action_in_order(self):
        """Each action is normalized independently and order is kept."""
        actions = [
            RecordedAction(id="1", type="tap", element_id="a"),
            RecordedAction(id="2", type="wait", value="500"),
            RecordedAction(id="3", type="assert", element_text="Welcome"),
        ]

        result = normalize_actions_for_locator_healing(actions)

        assert [a.id for a in result] == ["1", "2", "3"]
        assert result[0].locator_bundle.primary.value == "a"
        assert result[1] is actions[1]
        assert result[2].locator_bundle.primary.strategy == LocatorStrategy.TEXT

    def test_empty_sequence(self):
        """An empty scenario stays empty."""
        assert normalize_actions_for_locator_healing([]) == []
