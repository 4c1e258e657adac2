"""CCTP attestation polling."""

from .models import AttestationRecord
from .poller import AttestationPoller

__all__ = ["AttestationPoller", "AttestationRecord"]
