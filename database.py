# database.py - ticket owner registry and closed ticket history
import aiosqlite
import os
from pathlib import Path

DEFAULT_DB_FILE = "bot_data.db"
DB_FILE = os.getenv("DB_FILE", DEFAULT_DB_FILE)

_TICKET_COLUMNS = "channel_id, owner_id, from_rank, to_rank, steps, net, gross, created_at"


def _ticket_from_row(row):
    return {
        "channel_id": row[0],
        "owner_id": row[1],
        "from_rank": row[2],
        "to_rank": row[3],
        "steps": row[4],
        "net": row[5],
        "gross": row[6],
        "created_at": row[7],
    }


class Database:
    def __init__(self, path: str = None):
        self.path = path or DB_FILE
        self.db = None

    async def init(self):
        if self.db:
            return
        db_path = Path(self.path)
        if str(self.path) != ":memory:":
            db_path.parent.mkdir(parents=True, exist_ok=True)
        self.db = await aiosqlite.connect(self.path)
        print(f"Using SQLite at: {self.path}")
        await self.create_tables()

    async def close(self):
        if self.db:
            await self.db.close()
            self.db = None

    async def create_tables(self):
        # One row per open ticket channel; owner_id mirrors the channel topic tag
        await self.db.execute("""
        CREATE TABLE IF NOT EXISTS ticket_owners (
            channel_id INTEGER PRIMARY KEY,
            owner_id INTEGER NOT NULL,
            from_rank TEXT,
            to_rank TEXT,
            steps INTEGER,
            net INTEGER,
            gross INTEGER,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
        """)
        await self.db.execute(
            "CREATE INDEX IF NOT EXISTS idx_ticket_owners_owner ON ticket_owners(owner_id)"
        )
        await self.db.execute("""
        CREATE TABLE IF NOT EXISTS ticket_history (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            channel_id INTEGER,
            owner_id INTEGER,
            from_rank TEXT,
            to_rank TEXT,
            steps INTEGER,
            net INTEGER,
            gross INTEGER,
            created_at TIMESTAMP,
            closed_by INTEGER,
            closed_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
        """)
        await self.db.commit()

    # ---------- TICKETS ----------
    async def register_ticket(self, channel_id, owner_id, quote=None):
        """Record a newly created ticket channel"""
        await self.db.execute(
            "INSERT INTO ticket_owners(channel_id, owner_id, from_rank, to_rank, steps, net, gross) "
            "VALUES (?, ?, ?, ?, ?, ?, ?) "
            "ON CONFLICT(channel_id) DO UPDATE SET owner_id=excluded.owner_id",
            (
                channel_id,
                owner_id,
                getattr(quote, "from_rank", None),
                getattr(quote, "to_rank", None),
                getattr(quote, "step_count", None),
                getattr(quote, "net_price", None),
                getattr(quote, "gross_price", None),
            )
        )
        await self.db.commit()

    async def get_ticket(self, channel_id):
        async with self.db.execute(
            f"SELECT {_TICKET_COLUMNS} FROM ticket_owners WHERE channel_id = ?", (channel_id,)
        ) as cursor:
            row = await cursor.fetchone()
            return _ticket_from_row(row) if row else None

    async def get_tickets_by_owner(self, owner_id):
        """Newest first"""
        async with self.db.execute(
            f"SELECT {_TICKET_COLUMNS} FROM ticket_owners WHERE owner_id = ? "
            "ORDER BY created_at DESC, channel_id DESC",
            (owner_id,)
        ) as cursor:
            rows = await cursor.fetchall()
            return [_ticket_from_row(r) for r in rows]

    async def forget_ticket(self, channel_id):
        """Drop a registry row whose channel no longer exists"""
        cursor = await self.db.execute("DELETE FROM ticket_owners WHERE channel_id = ?", (channel_id,))
        await self.db.commit()
        return cursor.rowcount > 0

    async def close_ticket(self, channel_id, closed_by=None):
        """Move an open ticket into history. Returns False if it was not registered."""
        ticket = await self.get_ticket(channel_id)
        if not ticket:
            return False
        await self.db.execute("""
            INSERT INTO ticket_history
            (channel_id, owner_id, from_rank, to_rank, steps, net, gross, created_at, closed_by)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """, (
            ticket["channel_id"],
            ticket["owner_id"],
            ticket["from_rank"],
            ticket["to_rank"],
            ticket["steps"],
            ticket["net"],
            ticket["gross"],
            ticket["created_at"],
            closed_by,
        ))
        await self.db.execute("DELETE FROM ticket_owners WHERE channel_id = ?", (channel_id,))
        await self.db.commit()
        return True

    async def get_ticket_history(self, owner_id=None):
        query = (
            "SELECT channel_id, owner_id, from_rank, to_rank, steps, net, gross, closed_by "
            "FROM ticket_history"
        )
        params = ()
        if owner_id is not None:
            query += " WHERE owner_id = ?"
            params = (owner_id,)
        query += " ORDER BY id"
        async with self.db.execute(query, params) as cursor:
            rows = await cursor.fetchall()
            return [
                {
                    "channel_id": r[0],
                    "owner_id": r[1],
                    "from_rank": r[2],
                    "to_rank": r[3],
                    "steps": r[4],
                    "net": r[5],
                    "gross": r[6],
                    "closed_by": r[7],
                }
                for r in rows
            ]

    # ---------- STATS ----------
    async def count_open_tickets(self):
        async with self.db.execute("SELECT COUNT(*) FROM ticket_owners") as cursor:
            row = await cursor.fetchone()
            return row[0] if row else 0

    async def get_tickets_last_24h(self):
        """Tickets closed in the last 24 hours"""
        try:
            async with self.db.execute(
                "SELECT COUNT(*) FROM ticket_history WHERE closed_at > datetime('now', '-24 hours')"
            ) as cursor:
                row = await cursor.fetchone()
                return row[0] if row else 0
        except Exception as e:
            print(f"⚠️ Error getting 24h stats: {e}")
            return 0
