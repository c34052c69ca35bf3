"""Persistent per-user cooldowns for ticket and quote actions"""
import asyncio
import json
import os
import time
from pathlib import Path
from typing import Callable, Dict, Optional


def now_ms() -> int:
    return int(time.time() * 1000)


def remaining_seconds(remaining_ms: int) -> int:
    """Whole seconds left, rounded up"""
    return max(0, -(-remaining_ms // 1000))


class JsonCooldownStore:
    """user id -> last accepted action (epoch ms), kept in a JSON file

    Entries are only ever written when an action is accepted and are never
    removed, so a cooldown outlives whatever it gated. The whole file is
    rewritten on every update.
    """

    def __init__(self, path, clock: Callable[[], int] = now_ms):
        self.path = Path(path)
        self.clock = clock
        self._data: Dict[str, int] = self._load()
        self._lock = asyncio.Lock()

    def _load(self) -> Dict[str, int]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            print(f"⚠️ Could not read cooldowns from {self.path}, starting empty: {e}")
            return {}

        if not isinstance(raw, dict):
            print(f"⚠️ Ignoring cooldown file {self.path}: expected an object")
            return {}

        data = {}
        for user_id, ts in raw.items():
            try:
                data[str(user_id)] = int(ts)
            except (TypeError, ValueError):
                print(f"⚠️ Skipping bad cooldown entry {user_id!r}: {ts!r}")
        return data

    def _save(self):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(self.path.name + ".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(self._data, f, indent=2)
        os.replace(tmp, self.path)

    def get(self, user_id) -> int:
        return self._data.get(str(user_id), 0)

    async def set(self, user_id, timestamp_ms: int):
        async with self._lock:
            self._data[str(user_id)] = int(timestamp_ms)
            self._save()

    def remaining_ms(self, user_id, window_ms: int, now: Optional[int] = None) -> int:
        if window_ms <= 0:
            return 0
        now = self.clock() if now is None else now
        last = self.get(user_id)
        if not last:
            return 0
        return max(0, window_ms - (now - last))

    async def try_consume(self, user_id, window_ms: int, now: Optional[int] = None) -> int:
        """Check and record in one step.

        Returns 0 when the action is accepted (timestamp recorded), otherwise
        the milliseconds still to wait (nothing recorded).
        """
        async with self._lock:
            now = self.clock() if now is None else now
            remaining = self.remaining_ms(user_id, window_ms, now)
            if remaining > 0:
                return remaining
            self._data[str(user_id)] = int(now)
            self._save()
            return 0
