from __future__ import annotations

import logging

from testadura.core.messages import MessageType, quiet_messenger
from tests.utils import CapturedMessenger


def test_labels_and_streams():
    messenger = CapturedMessenger()

    messenger.info("Using library /usr/local/lib/testadura")
    messenger.warning("Skipping etc/app.cfg; destination is up-to-date.")
    messenger.fail("Aborting (unexpected response).")
    messenger.cancel("Aborting as per user request.")

    assert messenger.out.getvalue().splitlines() == [
        "[INFO] Using library /usr/local/lib/testadura",
        "[WARN] Skipping etc/app.cfg; destination is up-to-date.",
    ]
    assert messenger.err.getvalue().splitlines() == [
        "[FAIL] Aborting (unexpected response).",
        "[CNCL] Aborting as per user request.",
    ]


def test_markup_in_text_is_printed_literally():
    messenger = CapturedMessenger()
    messenger.ok("copied [bold]not bold[/bold]")
    assert messenger.out.getvalue() == "[OK  ] copied [bold]not bold[/bold]\n"


def test_debug_needs_verbose():
    quiet = CapturedMessenger()
    loud = CapturedMessenger(verbose=True)

    quiet.debug("details")
    loud.debug("details")

    assert quiet.text == ""
    assert loud.out.getvalue() == "[DEBUG] details\n"


def test_empty_type_prints_bare_text():
    messenger = CapturedMessenger()
    messenger.say(MessageType.EMPTY, "plain line")
    assert messenger.out.getvalue() == "plain line\n"


def test_messages_are_logged(caplog):
    with caplog.at_level(logging.DEBUG, logger="testadura.core.messages"):
        quiet_messenger().warning("Removing /etc/testadura/app.cfg")

    assert [(r.levelno, r.getMessage()) for r in caplog.records] == [
        (logging.WARNING, "WARN Removing /etc/testadura/app.cfg"),
    ]


def test_messages_are_not_echoed_by_the_logging_fallback(monkeypatch, capsys):
    messenger = CapturedMessenger()

    # Without any root handler, an unhandled warning would reach logging.lastResort.
    with monkeypatch.context() as patched:
        patched.setattr(logging.getLogger(), "handlers", [])
        messenger.warning("Skipping etc/testadura/app.cfg; destination is up-to-date.")
        messenger.fail("Failed to install etc/testadura/app.cfg")

    assert capsys.readouterr().err == ""
    assert "[WARN] Skipping" in messenger.out.getvalue()
