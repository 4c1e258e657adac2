from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass(frozen=True)
class AttestationRecord:
    """Attested CCTP message, passed unchanged to the mint instruction."""

    message_bytes: str
    attestation_signature: str
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)
