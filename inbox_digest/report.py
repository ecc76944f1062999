"""Aggregate classified emails into the plain-text summary report."""

from __future__ import annotations

from collections import Counter
from datetime import date
from typing import Iterable

from .models import ClassifiedEmail, Report


def build_report(entries: Iterable[ClassifiedEmail], generated_on: date) -> Report:
    """Tally categories and pick out high/critical items, keeping fetch order."""
    entries = tuple(entries)
    counts: Counter[str] = Counter()
    high_priority: list[ClassifiedEmail] = []
    for entry in entries:
        classification = entry.classification
        if classification is None:
            continue
        counts[classification.category.value] += 1
        if classification.is_high_priority:
            high_priority.append(entry)
    return Report(
        generated_on=generated_on,
        entries=entries,
        category_counts=dict(counts),
        high_priority=tuple(high_priority),
    )


def _heading(title: str) -> list[str]:
    return [title, "-" * len(title)]


def _subject(entry: ClassifiedEmail) -> str:
    return entry.email.subject or "No Subject"


def _sender(entry: ClassifiedEmail) -> str:
    email = entry.email
    if email.sender_name and email.sender_name != email.sender_address:
        return f"{email.sender_name} <{email.sender_address}>"
    return email.sender_address


def render_report(report: Report) -> str:
    lines = [
        f"Email Summary - {report.generated_on.isoformat()}",
        f"Processed {report.total} unread email(s), {len(report.classified)} classified.",
        "",
    ]

    lines += _heading("Category Breakdown")
    for category, count in report.category_counts.items():
        lines.append(f"{category}: {count}")
    lines.append("")

    if report.high_priority:
        lines += _heading("High Priority Emails")
        for entry in report.high_priority:
            result = entry.classification
            lines += [
                f"- {_subject(entry)}",
                f"  Importance: {result.importance.value}",
                f"  From: {_sender(entry)}",
                f"  Action: {result.suggested_action.value}",
                f"  Summary: {result.summary}",
                "",
            ]

    lines += _heading("All Email Summaries")
    for entry in report.classified:
        result = entry.classification
        lines += [
            f"- {_subject(entry)}",
            f"  From: {_sender(entry)}",
            f"  Category: {result.category.value}",
            f"  Importance: {result.importance.value}",
            f"  Action: {result.suggested_action.value}",
            f"  Summary: {result.summary}",
            "",
        ]

    return "\n".join(lines).rstrip("\n") + "\n"
