"""
SQLite catalog handle (aiosqlite-backed).

All statements run on a dedicated event-loop thread that owns the
connections; callers on any loop await the public `a*` methods.

Critical guarantee:
- The adapter never raises to callers; it returns `Result(...)`.
"""

from __future__ import annotations

import asyncio
import random
import sqlite3
import threading
from pathlib import Path
from queue import Empty, Queue
from typing import Any, Dict, List, Optional, Tuple

import aiosqlite

from ...config import DB_LOCK_RETRIES, DB_MAX_CONNECTIONS, DB_QUERY_TIMEOUT, DB_TIMEOUT
from ...shared import ErrorCode, Result, get_logger

logger = get_logger(__name__)

SQLITE_BUSY_TIMEOUT_MS = max(1000, int(float(DB_TIMEOUT) * 1000))
# Negative cache_size is in KiB. -32000 ~= 32 MiB cache.
SQLITE_CACHE_SIZE_KIB = -32000


def _is_locked_error(exc: Exception) -> bool:
    msg = str(exc).lower()
    return "locked" in msg or "busy" in msg


class _AsyncLoopThread:
    def __init__(self):
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._ready = threading.Event()

    def start(self) -> asyncio.AbstractEventLoop:
        if self._loop and self._thread and self._thread.is_alive():
            return self._loop

        self._ready.clear()

        def _run():
            loop = asyncio.new_event_loop()
            asyncio.set_event_loop(loop)
            self._loop = loop
            self._ready.set()
            try:
                loop.run_forever()
            finally:
                pending = asyncio.all_tasks(loop)
                for task in pending:
                    task.cancel()
                if pending:
                    loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
                loop.close()

        self._thread = threading.Thread(target=_run, name="xcroller-db", daemon=True)
        self._thread.start()
        self._ready.wait(timeout=10.0)
        if not self._loop:
            raise RuntimeError("Failed to start DB async loop thread")
        return self._loop

    def submit(self, coro):
        loop = self.start()
        return asyncio.run_coroutine_threadsafe(coro, loop)

    def stop(self):
        loop = self._loop
        thread = self._thread
        if not loop:
            return
        if not loop.is_closed():
            loop.call_soon_threadsafe(loop.stop)
        if thread is not None:
            thread.join(timeout=5.0)
        self._loop = None
        self._thread = None


class Sqlite:
    """
    Connection pool for the catalog database.

    Writes are serialized through one asyncio lock on the loop thread, so
    every mutation is a single statement committed on its own.
    """

    def __init__(self, db_path: str, max_connections: Optional[int] = None, timeout: float = DB_TIMEOUT):
        self.db_path = Path(db_path)
        self._max_conn_limit = max(1, int(max_connections or DB_MAX_CONNECTIONS))
        self._pool: "Queue[aiosqlite.Connection]" = Queue(maxsize=self._max_conn_limit)
        self._active_conns: set[aiosqlite.Connection] = set()
        self._async_sem: Optional[asyncio.Semaphore] = None
        self._write_lock: Optional[asyncio.Lock] = None
        self._timeout = float(timeout)
        self._query_timeout = float(DB_QUERY_TIMEOUT or 0.0)
        self._lock_retry_attempts = int(DB_LOCK_RETRIES)
        self._lock_retry_base_seconds = 0.05
        self._lock_retry_max_seconds = 0.75
        self._closed = False
        self._loop_thread = _AsyncLoopThread()

    async def _sleep_backoff(self, attempt: int):
        delay = min(self._lock_retry_max_seconds, self._lock_retry_base_seconds * (2 ** max(0, attempt)))
        delay += random.random() * 0.03
        logger.debug("DB lock backoff: attempt=%d delay=%.3fs", attempt, delay)
        await asyncio.sleep(delay)

    async def _apply_connection_pragmas(self, conn: aiosqlite.Connection):
        await conn.execute("PRAGMA journal_mode=WAL")
        await conn.execute("PRAGMA synchronous=NORMAL")
        await conn.execute(f"PRAGMA cache_size={SQLITE_CACHE_SIZE_KIB}")
        await conn.execute("PRAGMA temp_store=MEMORY")
        await conn.execute(f"PRAGMA busy_timeout = {SQLITE_BUSY_TIMEOUT_MS}")

    async def _create_connection(self) -> aiosqlite.Connection:
        # Autocommit mode: each statement is its own transaction.
        conn = await aiosqlite.connect(str(self.db_path), timeout=self._timeout, isolation_level=None)
        conn.row_factory = sqlite3.Row
        await self._apply_connection_pragmas(conn)
        return conn

    async def _acquire_connection_async(self) -> aiosqlite.Connection:
        if self._async_sem is None:
            self._async_sem = asyncio.Semaphore(self._max_conn_limit)
        if self._write_lock is None:
            self._write_lock = asyncio.Lock()
        sem = self._async_sem
        await sem.acquire()
        try:
            try:
                conn = self._pool.get_nowait()
            except Empty:
                conn = await self._create_connection()
            self._active_conns.add(conn)
            return conn
        except Exception:
            sem.release()
            raise

    async def _release_connection_async(self, conn: aiosqlite.Connection):
        try:
            self._active_conns.discard(conn)
            if not self._pool.full():
                self._pool.put(conn)
            else:
                await conn.close()
        finally:
            if self._async_sem:
                self._async_sem.release()

    @staticmethod
    def _rows_to_dicts(rows: Any) -> List[Dict[str, Any]]:
        return [dict(r) for r in rows or []]

    @staticmethod
    def _is_write_sql(query: str) -> bool:
        q = str(query or "").lstrip()
        if not q:
            return False
        head = q.split(None, 1)[0].upper()
        return head not in ("SELECT", "PRAGMA", "WITH", "EXPLAIN")

    async def _with_query_timeout(self, coro):
        if self._query_timeout > 0:
            try:
                return await asyncio.wait_for(coro, timeout=self._query_timeout)
            except asyncio.TimeoutError:
                return Result.Err(ErrorCode.TIMEOUT, "Database operation timed out")
        return await coro

    async def _run_guarded(self, is_write: bool, op, label: str) -> Result[Any]:
        """Run `op(conn)` on a pooled connection, mapping sqlite errors to Result."""
        async def _inner() -> Result[Any]:
            try:
                conn = await self._acquire_connection_async()
            except (sqlite3.Error, OSError) as exc:
                logger.error("Failed to open database %s: %s", self.db_path, exc)
                return Result.Err(ErrorCode.DB_ERROR, f"Failed to open database: {exc}")
            try:
                if is_write and self._write_lock is not None:
                    async with self._write_lock:
                        return await self._with_lock_retry(conn, op)
                return await self._with_lock_retry(conn, op)
            except sqlite3.IntegrityError as exc:
                logger.warning("Integrity error: %s", exc)
                return Result.Err(ErrorCode.DB_ERROR, f"Integrity error: {exc}")
            except sqlite3.OperationalError as exc:
                if "interrupted" in str(exc).lower():
                    return Result.Err(ErrorCode.TIMEOUT, "Database operation interrupted (query timeout)")
                logger.error("%s error: %s", label, exc)
                return Result.Err(ErrorCode.DB_ERROR, f"Operational error: {exc}")
            except sqlite3.Error as exc:
                logger.error("%s error: %s", label, exc)
                return Result.Err(ErrorCode.DB_ERROR, str(exc))
            except OverflowError as exc:
                logger.warning("%s rejected out-of-range value: %s", label, exc)
                return Result.Err(ErrorCode.INVALID_INPUT, f"Value out of range: {exc}")
            finally:
                await self._release_connection_async(conn)

        return await self._with_query_timeout(_inner())

    async def _with_lock_retry(self, conn: aiosqlite.Connection, op) -> Result[Any]:
        for attempt in range(self._lock_retry_attempts + 1):
            try:
                return await op(conn)
            except sqlite3.OperationalError as exc:
                if _is_locked_error(exc) and attempt < self._lock_retry_attempts:
                    await self._sleep_backoff(attempt)
                    continue
                raise
        return Result.Err(ErrorCode.DB_ERROR, "Query failed after retries")

    async def _execute_async(self, query: str, params: Optional[tuple], fetch: bool) -> Result[Any]:
        async def _op(conn: aiosqlite.Connection) -> Result[Any]:
            cursor = await conn.execute(query, params or ())
            try:
                if fetch:
                    return Result.Ok(self._rows_to_dicts(await cursor.fetchall()))
                await conn.commit()
                return self._cursor_write_result(cursor)
            finally:
                await cursor.close()

        return await self._run_guarded(self._is_write_sql(query), _op, "Execute")

    @staticmethod
    def _cursor_write_result(cursor: Any) -> Result[Any]:
        last_id = getattr(cursor, "lastrowid", None)
        rowcount = getattr(cursor, "rowcount", None)
        if last_id:
            return Result.Ok(last_id, rowcount=rowcount)
        return Result.Ok(rowcount if rowcount is not None else 0, rowcount=rowcount)

    async def _executemany_async(self, query: str, params_list: List[Tuple]) -> Result[int]:
        async def _op(conn: aiosqlite.Connection) -> Result[int]:
            cursor = await conn.executemany(query, params_list)
            try:
                await conn.commit()
                return Result.Ok(int(getattr(cursor, "rowcount", 0) or 0))
            finally:
                await cursor.close()

        return await self._run_guarded(True, _op, "Batch execute")

    async def _executescript_async(self, script: str) -> Result[bool]:
        async def _op(conn: aiosqlite.Connection) -> Result[bool]:
            await conn.executescript(script)
            await conn.commit()
            return Result.Ok(True)

        return await self._run_guarded(True, _op, "Script execution")

    async def _submit(self, coro) -> Result[Any]:
        if self._closed:
            coro.close()
            return Result.Err(ErrorCode.DB_ERROR, "Database is closed")
        try:
            fut = self._loop_thread.submit(coro)
        except RuntimeError as exc:
            coro.close()
            return Result.Err(ErrorCode.DB_ERROR, str(exc))
        return await asyncio.wrap_future(fut)

    async def aexecute(self, query: str, params: Optional[tuple] = None, fetch: bool = False) -> Result[Any]:
        """Execute one statement. Writes return lastrowid (or rowcount), reads return rows."""
        return await self._submit(self._execute_async(query, params, fetch))

    async def aquery(self, sql: str, params: Optional[tuple] = None) -> Result[List[Dict[str, Any]]]:
        """Execute a SELECT query and return rows as dicts."""
        return await self.aexecute(sql, params, fetch=True)

    async def aexecutemany(self, query: str, params_list: List[Tuple]) -> Result[int]:
        """Execute a parameterized statement over multiple param tuples."""
        if not params_list:
            return Result.Ok(0)
        return await self._submit(self._executemany_async(query, params_list))

    async def aexecutescript(self, script: str) -> Result[bool]:
        """Execute a multi-statement SQL script."""
        return await self._submit(self._executescript_async(script))

    async def _close_all_async(self):
        while True:
            try:
                conn = self._pool.get_nowait()
            except Empty:
                break
            await conn.close()
        for conn in list(self._active_conns):
            await conn.close()
        self._active_conns.clear()
        self._async_sem = None

    async def aclose(self):
        """Close connections and stop the DB loop thread."""
        if self._closed:
            return
        self._closed = True
        try:
            fut = self._loop_thread.submit(self._close_all_async())
            await asyncio.wrap_future(fut)
        except (sqlite3.Error, RuntimeError) as exc:
            logger.warning("Error while closing database: %s", exc)
        finally:
            self._loop_thread.stop()
