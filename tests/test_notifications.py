import logging

import pytest

from github_workspace_sync.notifications import LoggingNotifier, Notification


def test_logging_notifier(caplog: pytest.LogCaptureFixture):
    notifier = LoggingNotifier(logger=logging.getLogger("tests.notifications"))

    with caplog.at_level(logging.INFO, logger="tests.notifications"):
        notifier.notify(Notification(title="Repository synced", description="Imported 1 files and 0 folders"))
        notifier.notify(Notification(title="Sync failed", description="Bad credentials", variant="destructive"))

    assert [(record.levelname, record.getMessage()) for record in caplog.records] == [
        ("INFO", "Repository synced: Imported 1 files and 0 folders"),
        ("WARNING", "Sync failed: Bad credentials"),
    ]
