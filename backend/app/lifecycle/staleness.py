"""Tracks whether the last synthesis still reflects the decision's inputs."""


class StalenessTracker:
    """View-level stale flag for one decision's last analysis.

    Only removing something the analysis saw (created before it ran)
    invalidates it. The flag is never persisted; a fresh tracker starts
    not-stale because no deletion history is kept.
    """

    def __init__(self) -> None:
        self._stale = False

    @property
    def stale(self) -> bool:
        return self._stale

    def on_item_removed(self, item_timestamp: int, last_analysis_update: int | None) -> bool:
        """Record a removal; returns the resulting flag."""
        if last_analysis_update is not None and item_timestamp < last_analysis_update:
            self._stale = True
        return self._stale

    def on_analysis_completed(self) -> None:
        self._stale = False
