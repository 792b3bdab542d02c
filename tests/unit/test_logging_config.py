import logging

from dispatch_api.core.logging_config import setup_logging


def test_setup_logging_installs_single_console_handler(monkeypatch):
    root = logging.getLogger()
    monkeypatch.setattr(root, "handlers", [])
    monkeypatch.setattr(root, "level", logging.WARNING)

    setup_logging("debug")
    setup_logging("debug")

    assert len(root.handlers) == 1
    assert type(root.handlers[0]) is logging.StreamHandler
    assert root.level == logging.DEBUG


def test_setup_logging_keeps_existing_handlers(monkeypatch):
    root = logging.getLogger()
    existing = logging.NullHandler()
    monkeypatch.setattr(root, "handlers", [existing])
    monkeypatch.setattr(root, "level", logging.WARNING)

    setup_logging("DEBUG")

    assert root.handlers == [existing]
    assert root.level == logging.WARNING
