"""Platform link-state detection using psutil."""

from __future__ import annotations

import psutil

_LOOPBACK_PREFIXES = ("lo", "loopback")


class PsutilLinkState:
    """Reports whether any non-loopback interface is up with an address.

    This is the cheap first stage of the connectivity check: when it says
    the link is down, no network round-trip is attempted.
    """

    def is_link_up(self) -> bool:
        try:
            stats = psutil.net_if_stats()
            addrs = psutil.net_if_addrs()
        except OSError:
            # Without interface data we cannot rule the link out; let the
            # liveness probe decide.
            return True

        for iface, st in stats.items():
            if not st.isup:
                continue
            if iface.lower().startswith(_LOOPBACK_PREFIXES):
                continue
            if addrs.get(iface):
                return True
        return False


class StaticLinkState:
    """Link state fixed by the embedding host (or a test)."""

    def __init__(self, link_up: bool = True) -> None:
        self.link_up = link_up

    def is_link_up(self) -> bool:
        return self.link_up
