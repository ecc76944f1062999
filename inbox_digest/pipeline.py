"""Fetch, classify, aggregate and dispatch one weekly digest run."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Callable, Optional, TextIO

from .classifier import EmailClassifier
from .config import Configured, Settings
from .errors import SendError
from .graph_client import GraphClient
from .models import ClassifiedEmail, Report
from .report import build_report, render_report

logger = logging.getLogger(__name__)


class Outcome(str, Enum):
    NOTHING_TO_DO = "nothing_to_do"
    SENT = "sent"
    PRINTED = "printed"
    SEND_FAILED = "send_failed"


@dataclass(frozen=True)
class RunResult:
    """What a single run did."""

    outcome: Outcome
    fetched: int = 0
    classified: int = 0
    report: Optional[Report] = None


class DigestPipeline:
    """Sequential fetch -> classify -> aggregate -> dispatch job."""

    def __init__(
        self,
        settings: Settings,
        gateway: GraphClient | None = None,
        classifier: EmailClassifier | None = None,
        output: TextIO | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.settings = settings
        self.gateway = gateway or GraphClient(settings)
        self.classifier = classifier or EmailClassifier(settings)
        self.output = output or sys.stdout
        self.today = today

    def run(self, max_messages: int | None = None, mark_read: bool | None = None) -> RunResult:
        """Process the current unread mail once.

        AuthError and FetchError propagate; classification and dispatch
        failures are logged and absorbed.
        """
        mailbox = self.settings.graph_mailbox
        logger.info("Fetching unread messages for %s", mailbox)
        emails = self.gateway.list_unread(mailbox, max_messages=max_messages)
        if not emails:
            logger.info("No unread emails; nothing to summarise")
            return RunResult(outcome=Outcome.NOTHING_TO_DO)

        logger.info("Classifying %s unread email(s)", len(emails))
        entries: list[ClassifiedEmail] = []
        for index, email in enumerate(emails, start=1):
            logger.debug("Classifying %s/%s: %s", index, len(emails), email.subject)
            classification = self.classifier.classify(email.subject, email.body_text)
            entries.append(ClassifiedEmail(email=email, classification=classification))

        report = build_report(entries, self.today())
        classified = len(report.classified)
        if classified < len(entries):
            logger.warning("%s email(s) could not be classified", len(entries) - classified)

        outcome = self._dispatch(render_report(report))

        if mark_read is None:
            mark_read = self.settings.mark_read_after_summary
        if mark_read and outcome is not Outcome.SEND_FAILED:
            self._mark_read(report)

        logger.info(
            "Run complete: fetched=%s classified=%s outcome=%s",
            len(entries),
            classified,
            outcome.value,
        )
        return RunResult(
            outcome=outcome, fetched=len(entries), classified=classified, report=report
        )

    def _dispatch(self, text: str) -> Outcome:
        destination = self.settings.summary_destination
        if isinstance(destination, Configured):
            try:
                self.gateway.send(destination.address, self.settings.summary_subject, text)
            except SendError as exc:
                logger.warning("Summary could not be sent: %s", exc)
                return Outcome.SEND_FAILED
            return Outcome.SENT

        logger.info("No summary address configured; writing report to stdout")
        self.output.write(text)
        self.output.flush()
        return Outcome.PRINTED

    def _mark_read(self, report: Report) -> None:
        for entry in report.classified:
            try:
                self.gateway.mark_read(entry.email.id)
            except SendError as exc:
                logger.warning("Could not mark %s read: %s", entry.email.id, exc)
