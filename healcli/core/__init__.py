"""Core modules for heal."""

from healcli.core.config import ConfigLoader, HealConfig, HealingConfig, InsightsConfig
from healcli.core.fingerprint import bounds_bucket, compute_element_fingerprint, normalize_text
from healcli.core.healing_engine import HealingMatch, HealingTarget, LocatorHealingEngine
from healcli.core.locator_bundle import (
    ensure_locator_bundle,
    is_locator_required_action,
    normalize_actions_for_locator_healing,
)
from healcli.core.locator_candidates import (
    build_locator_candidates,
    infer_locator_strategy,
    normalize_locator_strategy,
)
from healcli.core.locator_insights import (
    build_contextual_xpath,
    build_low_score_locator_insights,
    get_locator_score,
    has_stable_locator,
)
from healcli.core.locator_resolver import find_center_from_locator, find_node_for_locator
from healcli.core.scenario_io import ScenarioData, ScenarioError, load_scenario, save_scenario
from healcli.core.self_healer import Resolution, resolve_action
from healcli.core.smart_xpath import build_smart_xpath_candidates, xpath_literal
from healcli.core.stable_locator import (
    derive_stable_locator,
    is_weak_class_only_xpath,
    suggest_locator_fix,
)
from healcli.core.ui_element_parser import (
    UIElementParser,
    UINode,
    bounds_center_from_string,
    parse_ui_nodes,
)
from healcli.core.xpath_filter import XPathFilter, parse_xpath_filter

__all__ = [
    "ConfigLoader",
    "HealConfig",
    "HealingConfig",
    "HealingMatch",
    "HealingTarget",
    "InsightsConfig",
    "LocatorHealingEngine",
    "Resolution",
    "ScenarioData",
    "ScenarioError",
    "UIElementParser",
    "UINode",
    "XPathFilter",
    "bounds_bucket",
    "bounds_center_from_string",
    "build_contextual_xpath",
    "build_locator_candidates",
    "build_low_score_locator_insights",
    "build_smart_xpath_candidates",
    "compute_element_fingerprint",
    "derive_stable_locator",
    "ensure_locator_bundle",
    "find_center_from_locator",
    "find_node_for_locator",
    "get_locator_score",
    "has_stable_locator",
    "infer_locator_strategy",
    "is_locator_required_action",
    "is_weak_class_only_xpath",
    "load_scenario",
    "normalize_actions_for_locator_healing",
    "normalize_locator_strategy",
    "normalize_text",
    "parse_ui_nodes",
    "parse_xpath_filter",
    "resolve_action",
    "save_scenario",
    "suggest_locator_fix",
    "xpath_literal",
]
