"""Callbacks fired on query execution events, run off the event loop."""

import threading
from collections import defaultdict
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Dict, List, Optional, Tuple


class HookEvents:
    """Standard hook event names."""
    COST_QUOTED = "cost_quoted"
    PAYMENT_ATTACHED = "payment_attached"
    QUERY_SUBMITTED = "query_submitted"
    QUERY_BUSY = "query_busy"
    QUERY_COMPLETED = "query_completed"
    QUERY_FAILED = "query_failed"


class HookManager:
    """
    Registry of execution-event callbacks.

    Callbacks run on a small thread pool so a slow or failing observer never
    delays or breaks the query that triggered it.
    """

    def __init__(self, max_workers: int = 4, name: str = "QueryHooks"):
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix=name
        )
        self._hooks: Dict[str, List[Tuple[int, Callable]]] = defaultdict(list)
        self._lock = threading.Lock()
        self._hook_stats: Dict[str, Dict[str, int]] = defaultdict(
            lambda: {"triggered": 0, "errors": 0}
        )

    def register_hook(self, event: str, callback: Callable, priority: int = 0):
        """
        Register a callback for an event.

        Args:
            event: One of the ``HookEvents`` names
            callback: Called with the event's keyword arguments
            priority: Higher priority callbacks are submitted first
        """
        with self._lock:
            self._hooks[event].append((priority, callback))
            self._hooks[event].sort(key=lambda x: x[0], reverse=True)

    def unregister_hook(self, event: str, callback: Callable):
        with self._lock:
            if event in self._hooks:
                self._hooks[event] = [
                    (p, cb) for p, cb in self._hooks[event] if cb != callback
                ]
                if not self._hooks[event]:
                    del self._hooks[event]

    def trigger_hook(self, event: str, **kwargs) -> List[Future]:
        """Submit every callback registered for ``event``; returns their futures."""
        with self._lock:
            callbacks = [cb for _, cb in self._hooks.get(event, [])]
            self._hook_stats[event]["triggered"] += len(callbacks)

        futures = []
        for callback in callbacks:
            try:
                futures.append(self._executor.submit(self._safe_call, callback, event, kwargs))
            except Exception as e:
                # e.g. RuntimeError once the executor has been shut down
                print(f"[HookManager] Error submitting hook '{event}': {e}", flush=True)
                with self._lock:
                    self._hook_stats[event]["errors"] += 1

        return futures

    def _safe_call(self, callback: Callable, event: str, kwargs: Dict[str, Any]):
        try:
            return callback(**kwargs)
        except Exception as e:
            print(f"[HookManager] Hook '{event}' callback error: {e}", flush=True)
            with self._lock:
                self._hook_stats[event]["errors"] += 1
            raise

    def wait_for_hooks(
        self, futures: List[Future], timeout: Optional[float] = None
    ) -> List[Any]:
        """Wait for hook futures; a callback that raised contributes ``None``."""
        results = []
        for future in futures:
            try:
                results.append(future.result(timeout=timeout))
            except Exception:
                results.append(None)
        return results

    def trigger_hook_sync(self, event: str, **kwargs) -> List[Any]:
        return self.wait_for_hooks(self.trigger_hook(event, **kwargs))

    def get_hook_count(self, event: str) -> int:
        with self._lock:
            return len(self._hooks.get(event, []))

    def snapshot(self) -> Dict:
        with self._lock:
            return {
                "registered_events": list(self._hooks.keys()),
                "stats": {event: dict(stats) for event, stats in self._hook_stats.items()},
            }

    def shutdown(self, wait: bool = True):
        self._executor.shutdown(wait=wait)
