"""Exception types raised across the digest pipeline."""


class InboxDigestError(Exception):
    """Base class for digest failures."""


class ConfigError(InboxDigestError):
    """Required configuration is missing or invalid."""


class AuthError(InboxDigestError):
    """Graph token exchange failed; the run cannot continue."""


class FetchError(InboxDigestError):
    """Listing the mailbox failed; the run cannot continue."""


class ClassificationError(InboxDigestError):
    """A single email could not be classified."""


class SendError(InboxDigestError):
    """Sending the summary or marking a message read failed."""
