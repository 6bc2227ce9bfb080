from asyncio import CancelledError, Task, create_task, gather, sleep
from collections.abc import Awaitable, Callable

from starlette.websockets import WebSocket, WebSocketState

from sup_notifier.logging import logger
from sup_notifier.utils.metrics import ws_liveness_probes_total

StaleHandler = Callable[[WebSocket], Awaitable[None]]


class LivenessMonitor:
    """
    Periodic liveness check for open notification connections.

    Every watched connection gets its own background task that inspects the
    connection each `interval` seconds. Nothing is written to the client:
    wire-level keep-alive is the ASGI server's ping/pong, whose timeout
    closes dead peers. A connection found closed on either side while its
    receive loop is still pending (a failed write, or a close handshake the
    peer never completed) is stale; the task then stops and hands it to
    `on_stale` so its bindings can be pruned. The task must be cancelled
    with `unwatch` when the connection closes normally.
    """

    def __init__(
        self, interval: float, on_stale: StaleHandler | None = None
    ) -> None:
        self.interval = interval
        self.on_stale = on_stale
        self.tasks: dict[WebSocket, Task[None]] = {}

    def __len__(self) -> int:
        return len(self.tasks)

    def is_watching(self, websocket: WebSocket) -> bool:
        return websocket in self.tasks

    def watched(self) -> list[WebSocket]:
        """Snapshot of the connections being watched."""
        return list(self.tasks)

    def watch(self, websocket: WebSocket) -> None:
        """
        Start checking a connection. Does nothing if already watched.

        Args:
            websocket: The WebSocket connection to watch.
        """
        if websocket in self.tasks:
            return

        self.tasks[websocket] = create_task(self._watch(websocket))
        logger.debug(
            f"Started liveness check for websocket object ({id(websocket)})"
        )

    def unwatch(self, websocket: WebSocket) -> None:
        """
        Cancel the liveness check of a connection. Safe if it is not watched.

        Args:
            websocket: The WebSocket connection whose check to cancel.
        """
        task = self.tasks.pop(websocket, None)
        if task is None:
            return

        task.cancel()
        logger.debug(
            f"Cancelled liveness check for websocket object ({id(websocket)})"
        )

    async def shutdown(self) -> None:
        """Cancel every liveness task and wait for them to finish."""
        tasks = list(self.tasks.values())
        self.tasks.clear()

        if not tasks:
            return

        logger.info(f"Cancelling {len(tasks)} liveness tasks")
        for task in tasks:
            task.cancel()
        await gather(*tasks, return_exceptions=True)

    def probe(self, websocket: WebSocket) -> bool:
        """
        Check whether a connection is still open in both directions.

        Returns:
            bool: False if either side has already closed.
        """
        alive = (
            websocket.client_state == WebSocketState.CONNECTED
            and websocket.application_state == WebSocketState.CONNECTED
        )
        ws_liveness_probes_total.labels(
            outcome="alive" if alive else "stale"
        ).inc()
        return alive

    async def _watch(self, websocket: WebSocket) -> None:
        try:
            while True:
                await sleep(self.interval)
                if not self.probe(websocket):
                    break
        except CancelledError:
            logger.debug(
                f"Liveness task for websocket object ({id(websocket)}) cancelled"
            )
            return

        # Leave the map before the handler runs so unwatch cannot cancel us
        self.tasks.pop(websocket, None)
        logger.warning(f"Stale websocket object ({id(websocket)}) detected")

        if self.on_stale is None:
            return
        try:
            await self.on_stale(websocket)
        except Exception as ex:
            logger.error(
                f"Failed to prune stale websocket object ({id(websocket)}): {ex}"
            )
