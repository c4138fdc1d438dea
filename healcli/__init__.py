"""heal - locator bundles and self-healing for recorded Android steps."""

__version__ = "0.1.0"
