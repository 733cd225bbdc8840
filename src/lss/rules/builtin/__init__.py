"""Bundled detection rules (``default_rules.txt``)."""
