"""Record sources backing the negotiation engine."""

from dataguard.sources.mail import MailServiceClient, normalize_record

__all__ = [
    "MailServiceClient",
    "normalize_record",
]
