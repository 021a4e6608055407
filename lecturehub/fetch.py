"""
Fetch controller for list screens.

One controller per screen. It owns the record batch and the FetchState:

    fetch()    full-screen load       status -> loading
    refresh()  pull-to-refresh        refreshing -> True, status untouched
    retry()    "Retry" button         same as fetch()
    dispose()  screen torn down       late results are dropped

Every call gets a generation number. Only the most recently issued call
may write its result; earlier ones that finish late are discarded, so
hammering refresh cannot leave the screen half-updated.

The client call is blocking (requests), so it runs in a worker thread via
asyncio.to_thread while the event loop stays responsive. All state is
still only touched on the loop.
"""

from __future__ import annotations

import asyncio
import logging
from typing import List

from lecturehub.filters import filter_records
from lecturehub.model import FetchState, FetchStatus, FilterCriteria, Record
from lecturehub.remote import BackendError, CollectionClient

log = logging.getLogger(__name__)

LOAD_ERROR_MESSAGE = "Failed to load lectures. Please check your connection."


class FetchController:
    def __init__(
        self,
        client: CollectionClient,
        collection: str,
        timeout: float = 30.0,
        error_message: str = LOAD_ERROR_MESSAGE,
    ) -> None:
        self.client = client
        self.collection = collection
        self.timeout = timeout
        self.error_message = error_message

        self.records: List[Record] = []
        self.state = FetchState()

        self._generation = 0
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    async def fetch(self) -> None:
        if self._disposed:
            return
        self.state.status = FetchStatus.LOADING
        await self._run()

    async def refresh(self) -> None:
        if self._disposed:
            return
        self.state.refreshing = True
        await self._run()

    async def retry(self) -> None:
        await self.fetch()

    def dispose(self) -> None:
        self._disposed = True

    def visible(self, criteria: FilterCriteria) -> List[Record]:
        return filter_records(self.records, criteria)

    async def _run(self) -> None:
        self._generation += 1
        generation = self._generation

        try:
            records = await asyncio.wait_for(
                asyncio.to_thread(self.client.list_all, self.collection),
                timeout=self.timeout,
            )
        except (BackendError, asyncio.TimeoutError) as e:
            if self._is_stale(generation):
                log.debug("Dropping failed fetch #%d of %r", generation, self.collection)
                return
            log.warning("Error fetching %r: %s", self.collection, str(e) or "timed out")
            # previous batch stays on screen behind the error
            self.state.status = FetchStatus.ERROR
            self.state.error = self.error_message
        except Exception:
            # unexpected client failure propagates, the state still settles
            if not self._is_stale(generation):
                self.state.status = FetchStatus.ERROR
                self.state.error = self.error_message
            raise
        else:
            if self._is_stale(generation):
                log.debug("Dropping stale fetch #%d of %r", generation, self.collection)
                return
            self.records = list(records)
            self.state.status = FetchStatus.READY
            self.state.error = None
            log.info("Loaded %d records from %r", len(self.records), self.collection)
        finally:
            if not self._is_stale(generation):
                self.state.refreshing = False

    def _is_stale(self, generation: int) -> bool:
        return self._disposed or generation != self._generation
