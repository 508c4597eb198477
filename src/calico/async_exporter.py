"""
AsyncDataExporter: awaitable serializers that offload large payloads.

Small payloads are serialized inline. When the top-level container holds
more than `worker_threshold` entries the call is submitted to a worker
process; input and output cross the boundary as pickled copies, never
shared memory.

The worker replies with either {"result": text} or {"error": message};
an error reply or a dead pool raises WorkerError on the calling side.
There is no cancellation and no timeout: wrap calls in
asyncio.wait_for() if you need one.
"""

import asyncio
import logging
from concurrent.futures import Executor, ProcessPoolExecutor
from concurrent.futures.process import BrokenProcessPool
from typing import Any, Dict, List, Optional

from calico.backends.markdown_generator import serialize_markdown
from calico.csv_codec import deserialize_csv, serialize_csv
from calico.errors import CalicoError, WorkerError
from calico.json_codec import deserialize_json, serialize_json
from calico.model import CSVOptions, ExportFormat, MarkdownOptions, container_kind
from calico.yaml_codec import deserialize_yaml, serialize_yaml

logger = logging.getLogger(__name__)


def _run_export(data: Any, fmt: str, opts: Dict[str, Any]) -> str:
    target = ExportFormat(fmt)
    if target == ExportFormat.JSON:
        return serialize_json(data, opts.get("pretty", True))
    if target == ExportFormat.CSV:
        return serialize_csv(data, opts.get("options"))
    if target == ExportFormat.YAML:
        return serialize_yaml(data, opts.get("indent", 2))
    return serialize_markdown(data, opts.get("options"))


def worker_export(data: Any, fmt: str, opts: Dict[str, Any]) -> Dict[str, Any]:
    """
    Entry point executed inside the worker process.

    Returns:
        {"result": text} on success, {"error": message} on failure
    """
    try:
        return {"result": _run_export(data, fmt, opts)}
    except (CalicoError, TypeError, ValueError) as e:
        return {"error": f"{type(e).__name__}: {e}"}


class AsyncDataExporter:
    """
    Async facade over the calico codecs.

    Args:
        worker_threshold: Entry count above which exports go to a worker
        max_workers: Size of the default process pool
        executor: Custom executor (the exporter will not shut it down)
    """

    def __init__(self, worker_threshold: int = 10000, max_workers: int = 1,
                 executor: Optional[Executor] = None):
        self.threshold = worker_threshold
        self._owns_executor = executor is None
        self._executor = executor or ProcessPoolExecutor(max_workers=max_workers)

    def should_use_worker(self, data: Any) -> bool:
        if container_kind(data) is None:
            return False
        return len(data) > self.threshold

    async def _export(self, data: Any, fmt: ExportFormat, opts: Dict[str, Any]) -> str:
        if not self.should_use_worker(data):
            return _run_export(data, fmt.value, opts)

        logger.debug("Dispatching %s export of %d entries to worker", fmt.value, len(data))
        loop = asyncio.get_running_loop()
        try:
            reply = await loop.run_in_executor(self._executor, worker_export, data, fmt.value, opts)
        except BrokenProcessPool as e:
            raise WorkerError(f"Worker error: {e}") from e
        if "error" in reply:
            raise WorkerError(reply["error"])
        return reply["result"]

    async def to_json(self, data: Any, pretty: bool = True) -> str:
        return await self._export(data, ExportFormat.JSON, {"pretty": pretty})

    async def to_csv(self, data: Any, options: Optional[CSVOptions] = None) -> str:
        return await self._export(data, ExportFormat.CSV, {"options": options})

    async def to_yaml(self, data: Any, indent: int = 2) -> str:
        return await self._export(data, ExportFormat.YAML, {"indent": indent})

    async def to_markdown(self, data: Any, options: Optional[MarkdownOptions] = None) -> str:
        return await self._export(data, ExportFormat.MARKDOWN, {"options": options})

    async def from_json(self, text: str) -> Any:
        return deserialize_json(text)

    async def from_csv(self, text: str, options: Optional[CSVOptions] = None) -> List[Any]:
        return deserialize_csv(text, options)

    async def from_yaml(self, text: str) -> Any:
        return deserialize_yaml(text)

    def close(self) -> None:
        """Shut down the worker pool (only if this exporter created it)."""
        if self._owns_executor:
            self._executor.shutdown(wait=True)

    async def __aenter__(self) -> "AsyncDataExporter":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = ["AsyncDataExporter", "worker_export"]
