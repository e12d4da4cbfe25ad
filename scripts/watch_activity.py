#!/usr/bin/env python3
"""
Admin Live Feed Watcher

Connects to the admin socket and prints activity as it arrives.
Reconnects forever until Ctrl+C.

Usage: python scripts/watch_activity.py <admin-jwt> [ws://localhost:8000/ws/admin]
"""
import sys
sys.path.insert(0, '.')

import asyncio
import logging

from careerhub.services.live_feed import LiveActivityClient


class PrintingClient(LiveActivityClient):

    def handle_frame(self, raw) -> bool:
        before = self.history.recent(1)
        applied = super().handle_frame(raw)
        if not applied:
            return applied

        latest = self.history.recent(1)
        if latest and latest != before:
            event = latest[0]
            print(f"[{event.timestamp:%H:%M:%S}] {event.category.value:<12} {event.actor}: {event.description}")
        else:
            print(f"    users={self.stats.total_users} active={self.stats.active_today} "
                  f"applications={self.stats.total_applications} uptime={self.stats.system_uptime_percent}%")
        return applied


def main():
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)

    token = sys.argv[1]
    base_url = sys.argv[2] if len(sys.argv) > 2 else "ws://localhost:8000/ws/admin"
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    client = PrintingClient(f"{base_url}?token={token}")
    try:
        asyncio.run(client.run())
    except KeyboardInterrupt:
        print("\nStopped.")


if __name__ == "__main__":
    main()
