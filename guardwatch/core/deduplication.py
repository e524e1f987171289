"""Zone breach deduplication for repeated position reports."""

from hashlib import md5
from datetime import datetime, timedelta
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple


@dataclass
class BreachSignature:
    """Signature for a breach used in deduplication."""
    subject: str  # Guard or device reporting the position
    zone_id: str

    def hash(self) -> str:
        """Generate hash for this signature."""
        data = f"{self.subject}:{self.zone_id}"
        return md5(data.encode()).hexdigest()[:16]


class BreachDeduplicator:
    """
    Prevents duplicate zone_breach events while a subject stays inside a zone.

    Strategy:
    1. Signature from (subject, zone_id)
    2. Track last report of each signature
    3. Suppress duplicates within the cooldown period (default: 30s)
    4. Re-trigger once the subject has been quiet for longer than the cooldown
    """

    def __init__(
        self,
        cooldown_seconds: float = 30,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.cooldown = timedelta(seconds=cooldown_seconds)
        self.clock = clock

        # {signature_hash: (last_seen, event_id)}
        self._recent_breaches: Dict[str, Tuple[datetime, Optional[str]]] = {}

    def should_create_event(self, subject: Optional[str], zone_id: str) -> Tuple[bool, str]:
        """
        Determine if this breach should create a new event.

        Anonymous reports are never suppressed.

        Returns:
            (should_create, signature_hash)
        """
        now = self.clock()
        sig_hash = BreachSignature(subject or "", zone_id).hash()

        if subject and self.cooldown.total_seconds() > 0 and sig_hash in self._recent_breaches:
            last_seen, event_id = self._recent_breaches[sig_hash]
            if now - last_seen < self.cooldown:
                # Still inside: extend the window but don't create a new event
                self._recent_breaches[sig_hash] = (now, event_id)
                return False, sig_hash

        return True, sig_hash

    def register_event(self, sig_hash: str, event_id: str):
        """Register a new event for tracking."""
        self._recent_breaches[sig_hash] = (self.clock(), event_id)

    def cleanup_stale(self, max_age_seconds: int = 300):
        """Remove stale entries older than max_age."""
        cutoff = self.clock() - timedelta(seconds=max_age_seconds)
        stale_keys = [k for k, (ts, _) in self._recent_breaches.items() if ts < cutoff]
        for k in stale_keys:
            del self._recent_breaches[k]

    @property
    def active_signatures(self) -> int:
        """Get count of active signatures being tracked."""
        return len(self._recent_breaches)
