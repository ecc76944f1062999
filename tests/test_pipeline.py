import io
from datetime import date
from unittest.mock import Mock

import pytest

from inbox_digest.errors import AuthError, FetchError, SendError
from inbox_digest.graph_client import GraphClient
from inbox_digest.pipeline import DigestPipeline, Outcome

from conftest import fake_response, make_classification, make_email


class FakeGateway:
    def __init__(self, emails=None, list_error=None, send_error=None, mark_read_error=None):
        self.emails = emails or []
        self.list_error = list_error
        self.send_error = send_error
        self.mark_read_error = mark_read_error
        self.listed = []
        self.sent = []
        self.marked = []

    def list_unread(self, mailbox_id, max_messages=None):
        self.listed.append((mailbox_id, max_messages))
        if self.list_error:
            raise self.list_error
        return list(self.emails)

    def send(self, to_address, subject, body_text):
        if self.send_error:
            raise self.send_error
        self.sent.append((to_address, subject, body_text))

    def mark_read(self, email_id):
        self.marked.append(email_id)
        if self.mark_read_error:
            raise self.mark_read_error


class FakeClassifier:
    def __init__(self, results):
        self.results = results
        self.calls = []

    def classify(self, subject, body_text):
        self.calls.append(subject)
        return self.results.get(subject)


def scenario():
    emails = [
        make_email("1", "Budget", "cfo@example.com"),
        make_email("2", "Prize", "promo@spam.test"),
        make_email("3", "Roadmap", "pm@example.com"),
    ]
    results = {
        "Budget": make_classification("work", "high", "reply", "Approve budget."),
        "Prize": make_classification("spam", "low", "delete", "Scam."),
        "Roadmap": make_classification("work", "high", "schedule_meeting", "Discuss roadmap."),
    }
    return emails, results


def build(settings, gateway, classifier):
    output = io.StringIO()
    pipeline = DigestPipeline(
        settings,
        gateway=gateway,
        classifier=classifier,
        output=output,
        today=lambda: date(2026, 10, 12),
    )
    return pipeline, output


def test_empty_inbox_produces_no_report(settings):
    gateway = FakeGateway()
    classifier = FakeClassifier({})
    pipeline, output = build(settings, gateway, classifier)

    result = pipeline.run()

    assert result.outcome is Outcome.NOTHING_TO_DO
    assert result.report is None
    assert gateway.sent == []
    assert output.getvalue() == ""
    assert classifier.calls == []


def test_scenario_prints_report_when_destination_unset(settings):
    emails, results = scenario()
    gateway = FakeGateway(emails)
    pipeline, output = build(settings, gateway, FakeClassifier(results))

    result = pipeline.run()

    assert result.outcome is Outcome.PRINTED
    assert gateway.sent == []
    assert dict(result.report.category_counts) == {"work": 2, "spam": 1}
    assert [entry.email.subject for entry in result.report.high_priority] == ["Budget", "Roadmap"]

    text = output.getvalue()
    high, everything = text.split("All Email Summaries")
    assert "- Budget" in high and "- Roadmap" in high and "- Prize" not in high
    assert everything.index("- Budget") < everything.index("- Prize") < everything.index("- Roadmap")
    assert all(everything.count(f"- {subject}") == 1 for subject in ("Budget", "Prize", "Roadmap"))


def test_configured_destination_sends_exactly_once(make_settings):
    settings = make_settings(SUMMARY_EMAIL_ADDRESS="boss@example.com")
    emails, results = scenario()
    gateway = FakeGateway(emails)
    pipeline, output = build(settings, gateway, FakeClassifier(results))

    result = pipeline.run()

    assert result.outcome is Outcome.SENT
    assert output.getvalue() == ""
    assert len(gateway.sent) == 1
    to_address, subject, body = gateway.sent[0]
    assert to_address == "boss@example.com"
    assert subject == "Email Summary"
    assert body.startswith("Email Summary - 2026-10-12\n")
    assert "High Priority Emails" in body


def test_classification_failure_does_not_stop_batch(settings):
    emails, results = scenario()
    results["Budget"] = None
    classifier = FakeClassifier(results)
    pipeline, output = build(settings, FakeGateway(emails), classifier)

    result = pipeline.run()

    assert classifier.calls == ["Budget", "Prize", "Roadmap"]
    assert result.fetched == 3
    assert result.classified == 2
    assert dict(result.report.category_counts) == {"spam": 1, "work": 1}
    assert "Budget" not in output.getvalue()


def test_send_failure_is_absorbed(make_settings):
    settings = make_settings(SUMMARY_EMAIL_ADDRESS="boss@example.com")
    emails, results = scenario()
    gateway = FakeGateway(emails, send_error=SendError("smtp down"))
    pipeline, _ = build(settings, gateway, FakeClassifier(results))

    result = pipeline.run()

    assert result.outcome is Outcome.SEND_FAILED
    assert result.classified == 3


@pytest.mark.parametrize("error", [AuthError("no token"), FetchError("forbidden")])
def test_fetch_stage_errors_abort(settings, error):
    classifier = FakeClassifier({})
    pipeline, output = build(settings, FakeGateway(list_error=error), classifier)

    with pytest.raises(type(error)):
        pipeline.run()
    assert classifier.calls == []
    assert output.getvalue() == ""


def test_messages_are_not_marked_read_by_default(settings):
    emails, results = scenario()
    gateway = FakeGateway(emails)
    pipeline, _ = build(settings, gateway, FakeClassifier(results))

    pipeline.run()

    assert gateway.marked == []


def test_mark_read_is_best_effort(settings):
    emails, results = scenario()
    results["Prize"] = None
    gateway = FakeGateway(emails, mark_read_error=SendError("denied"))
    pipeline, _ = build(settings, gateway, FakeClassifier(results))

    result = pipeline.run(mark_read=True)

    assert result.outcome is Outcome.PRINTED
    assert gateway.marked == ["1", "3"]


def test_mark_read_skipped_when_send_fails(make_settings):
    settings = make_settings(SUMMARY_EMAIL_ADDRESS="boss@example.com", MARK_READ_AFTER_SUMMARY="true")
    emails, results = scenario()
    gateway = FakeGateway(emails, send_error=SendError("down"))
    pipeline, _ = build(settings, gateway, FakeClassifier(results))

    pipeline.run()

    assert gateway.marked == []


def test_max_messages_is_passed_to_gateway(settings):
    gateway = FakeGateway()
    pipeline, _ = build(settings, gateway, FakeClassifier({}))

    pipeline.run(max_messages=5)

    assert gateway.listed == [("owner@example.com", 5)]


def graph_with_expiring_token(settings):
    credentials = Mock()
    credentials.acquire_token.side_effect = ["tok", AuthError("token expired")]
    session = Mock()
    session.request.return_value = fake_response(
        payload={
            "value": [
                {
                    "id": "m1",
                    "subject": "Budget",
                    "body": {"content": "Please approve"},
                    "from": {"emailAddress": {"address": "cfo@example.com"}},
                    "isRead": False,
                }
            ]
        }
    )
    return GraphClient(settings, credentials=credentials, session=session)


def test_token_failure_while_marking_read_is_logged_not_raised(settings):
    _, results = scenario()
    gateway = graph_with_expiring_token(settings)
    pipeline, output = build(settings, gateway, FakeClassifier(results))

    result = pipeline.run(mark_read=True)

    assert result.outcome is Outcome.PRINTED
    assert result.classified == 1
    assert "- Budget" in output.getvalue()


def test_token_failure_while_sending_is_send_failed(make_settings):
    settings = make_settings(SUMMARY_EMAIL_ADDRESS="boss@example.com")
    _, results = scenario()
    gateway = graph_with_expiring_token(settings)
    pipeline, output = build(settings, gateway, FakeClassifier(results))

    result = pipeline.run()

    assert result.outcome is Outcome.SEND_FAILED
    assert output.getvalue() == ""
