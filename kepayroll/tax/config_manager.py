"""
Effective-dated payroll settings versions.

Publishing a new version closes the currently open one the day before the
new version takes effect, so at most one version applies on any date.
Storage belongs to the caller; this registry only keeps snapshots in memory.
"""
import logging
from dataclasses import replace
from datetime import date, timedelta
from typing import Any, Dict, List, Mapping, Optional, Union

from kepayroll.tax.settings import PayrollSettings, default_settings, validate_settings

logger = logging.getLogger(__name__)

class SettingsNotFoundError(LookupError):
    """No settings version applies on the requested date."""

class PayrollSettingsRegistry:
    """Versioned payroll settings with effective-date lookup."""

    def __init__(self, versions: Optional[List[PayrollSettings]] = None):
        self._versions: Dict[date, PayrollSettings] = {}
        for version in versions or []:
            self.publish(version)

    @classmethod
    def with_defaults(cls) -> "PayrollSettingsRegistry":
        return cls([default_settings()])

    def publish(self, snapshot: Union[PayrollSettings, Mapping[str, Any]]) -> PayrollSettings:
        """Validate and store a snapshot as the version effective from its start date."""
        if not isinstance(snapshot, PayrollSettings):
            snapshot = PayrollSettings.from_dict(snapshot)
        else:
            validate_settings(snapshot)
        if snapshot.effective_from is None:
            snapshot = replace(snapshot, effective_from=date.today())

        start = snapshot.effective_from
        replaced = start in self._versions

        # Close the version that was open when this one starts
        earlier = [d for d in self._versions if d < start]
        if earlier:
            prev_start = max(earlier)
            prev = self._versions[prev_start]
            if prev.effective_to is None or prev.effective_to >= start:
                self._versions[prev_start] = replace(prev, effective_to=start - timedelta(days=1))

        # A later version bounds this one
        later = [d for d in self._versions if d > start]
        if later and snapshot.effective_to is None:
            snapshot = replace(snapshot, effective_to=min(later) - timedelta(days=1))

        self._versions[start] = snapshot
        logger.info(
            "%s payroll settings effective %s (to %s)",
            "Replaced" if replaced else "Published", start, snapshot.effective_to or "open",
        )
        return snapshot

    def get_active(self, on_date: Optional[date] = None) -> PayrollSettings:
        on_date = on_date or date.today()
        candidates = [
            s for d, s in self._versions.items()
            if d <= on_date and (s.effective_to is None or s.effective_to >= on_date)
        ]
        if not candidates:
            raise SettingsNotFoundError(f"No active payroll settings for {on_date.isoformat()}")
        return max(candidates, key=lambda s: s.effective_from)

    def history(self) -> List[PayrollSettings]:
        return [self._versions[d] for d in sorted(self._versions)]

    def __len__(self):
        return len(self._versions)
