"""DataGuard: policy-gated negotiation and redaction for personal mail data."""

__version__ = "0.1.0"
