"""
Logger Unit Tests
=================
"""

from fuze.shared.system.logging import Logger


def test_parses_source_tag():
    assert Logger._parse_source("[REGISTRY] Preloaded 4 accounts") == ("REGISTRY", "Preloaded 4 accounts")


def test_untagged_message_is_system():
    assert Logger._parse_source("plain message") == ("SYSTEM", "plain message")


def test_overlong_tag_is_not_a_source():
    message = "[THIS-IS-NOT-A-SOURCE-TAG] hello"
    assert Logger._parse_source(message) == ("SYSTEM", message)
