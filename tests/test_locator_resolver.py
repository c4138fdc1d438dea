"""Tests for re-resolving locators against UI dumps."""

from healcli.core.locator_resolver import find_center_from_locator, find_node_for_locator
from healcli.core.ui_element_parser import parse_ui_nodes
from healcli.models.locator import LocatorStrategy, Point

DUMP = '''<?xml version="1.0" encoding="UTF-8"?>
<hierarchy rotation="0">
  <node index="0" class="android.widget.TextView" text="Welcome back" resource-id="title" bounds="[0,100][1080,200]" />
  <node index="1" class="android.widget.EditText" text="" resource-id="email" content-desc="Email" bounds="[40,300][1040,400]" />
  <node index="2" class="android.widget.Button" text="Submit" resource-id="btn_submit" bounds="[100,200][300,260]" />
  <node index="3" class="android.widget.Button" text="Submit" resource-id="btn_submit_2" bounds="[100,900][300,960]" />
  <node index="4" class="android.widget.Button" text="Broken" resource-id="btn_broken" bounds="oops" />
</hierarchy>'''


class TestFindCenterFromLocator:
    """Tests for strategy-based matching."""

    def test_by_id(self):
        """id matches resource-id exactly."""
        assert find_center_from_locator(DUMP, "btn_submit", LocatorStrategy.ID) == Point(200, 230)

    def test_by_id_string_strategy(self):
        """Strategy literals are accepted as plain strings."""
        assert find_center_from_locator(DUMP, "btn_submit", "id") == Point(200, 230)

    def test_id_requires_exact_match(self):
        """Partial resource ids do not match."""
        assert find_center_from_locator(DUMP, "btn_sub", LocatorStrategy.ID) is None

    def test_by_accessibility_id(self):
        """accessibilityId matches content-desc."""
        assert find_center_from_locator(DUMP, "Email", LocatorStrategy.ACCESSIBILITY_ID) == Point(540, 350)

    def test_by_text_first_match(self):
        """The first of several identical nodes wins."""
        assert find_center_from_locator(DUMP, "Submit", LocatorStrategy.TEXT) == Point(200, 230)

    def test_by_xpath_class_and_equality(self):
        """xpath applies class and attribute equality."""
        xpath = '//android.widget.Button[@resource-id="btn_submit_2"]'

        assert find_center_from_locator(DUMP, xpath, LocatorStrategy.XPATH) == Point(200, 930)

    def test_by_xpath_contains(self):
        """xpath applies contains() as a substring test."""
        xpath = '//android.widget.TextView[contains(@text, "Welcome")]'

        assert find_center_from_locator(DUMP, xpath, LocatorStrategy.XPATH) == Point(540, 150)

    def test_xpath_class_mismatch(self):
        """A wrong class segment rejects the node."""
        xpath = '//android.widget.TextView[@resource-id="btn_submit"]'

        assert find_center_from_locator(DUMP, xpath, LocatorStrategy.XPATH) is None

    def test_coordinates_never_resolved(self):
        """Coordinates and other strategies do not match anything."""
        assert find_center_from_locator(DUMP, "200,230", LocatorStrategy.COORDINATES) is None
        assert find_center_from_locator(DUMP, "x", LocatorStrategy.ANDROID_UI_AUTOMATOR) is None
        assert find_center_from_locator(DUMP, "btn_submit", "css") is None

    def test_malformed_bounds(self):
        """A matching node with bad bounds gives None."""
        assert find_center_from_locator(DUMP, "btn_broken", LocatorStrategy.ID) is None

    def test_empty_dump(self):
        """No nodes means no match."""
        assert find_center_from_locator("", "btn_submit", LocatorStrategy.ID) is None
        assert find_center_from_locator("<hierarchy/>", "btn_submit", LocatorStrategy.ID) is None

    def test_single_node_scenario(self):
        """A lone node is found by its resource id."""
        xml = '<node resource-id="btn_submit" bounds="[100,200][300,260]" />'

        assert find_center_from_locator(xml, "btn_submit", LocatorStrategy.ID) == Point(200, 230)


class TestFindNodeForLocator:
    """Tests for node lookup."""

    def test_returns_node(self):
        """The matching node itself is returned."""
        nodes = parse_ui_nodes(DUMP)

        node = find_node_for_locator(nodes, "Email", LocatorStrategy.ACCESSIBILITY_ID)

        assert node is not None
        assert node.resource_id == "email"
