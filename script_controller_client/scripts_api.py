"""
Script Controller API client.

Named operations over the script-controller backend. Each method maps to one
dispatcher call with a fixed path and method; retries, transport selection
and response diagnosis all live in the dispatcher.
"""

import json
from typing import Any, Dict, Optional
from urllib.parse import quote

from .dispatcher import Dispatcher, get_dispatcher


class ScriptsApiClient:
    """
    Client for the script-controller REST API.

    Args:
        dispatcher: Dispatcher to route calls through; defaults to the
            process-wide one.
    """

    def __init__(self, dispatcher: Optional[Dispatcher] = None):
        self._dispatcher = dispatcher or get_dispatcher()

    async def _request(self, path: str, method: str = "GET", payload: Any = None) -> Any:
        body = json.dumps(payload) if payload is not None else None
        return await self._dispatcher.dispatch(path, method, body)

    # ---- Scripts ----

    async def list_scripts(self) -> Any:
        return await self._request("/api/scripts")

    async def get_script(self, script_id: str) -> Any:
        return await self._request(f"/api/scripts/{script_id}")

    async def create_script(self, definition: Dict[str, Any]) -> Any:
        """
        Create a script.

        Args:
            definition: Script definition as accepted by the backend

        Returns:
            The created script as returned by the backend
        """
        return await self._request("/api/scripts", "POST", definition)

    async def update_script(self, script_id: str, definition: Dict[str, Any]) -> Any:
        return await self._request(f"/api/scripts/{script_id}", "PUT", definition)

    async def delete_script(self, script_id: str) -> None:
        await self._request(f"/api/scripts/{script_id}", "DELETE")

    async def start_script(
        self, script_id: str, options: Optional[Dict[str, Any]] = None
    ) -> Any:
        """
        Start a script run.

        Args:
            script_id: Script to start
            options: Run options; an empty object is sent when omitted

        Returns:
            The backend's run acknowledgement
        """
        return await self._request(
            f"/api/scripts/{script_id}/start", "POST", options if options is not None else {}
        )

    async def stop_script(self, script_id: str) -> Any:
        return await self._request(f"/api/scripts/{script_id}/stop", "POST")

    async def get_script_status(self, script_id: str) -> Any:
        return await self._request(f"/api/scripts/{script_id}/status")

    async def get_script_logs(self, script_id: str, lines: int = 500) -> Any:
        return await self._request(f"/api/scripts/{script_id}/logs?lines={lines}")

    async def get_script_runs(self, script_id: str, limit: int = 50) -> Any:
        return await self._request(f"/api/scripts/{script_id}/runs?limit={limit}")

    # ---- Debug ----

    async def get_debug_data_root(self, script_id: Optional[str] = None) -> Any:
        """
        Report the backend data root, database path and, for `script_id`, how
        many runs the database holds. Useful when a script shows no logs.
        """
        query = f"?script_id={quote(str(script_id), safe='')}" if script_id else ""
        return await self._request(f"/api/debug/data-root{query}")

    async def clear_all_logs(self) -> Any:
        """Delete all run records and log files."""
        return await self._request("/api/debug/clear-all-logs", "POST")

    # ---- Scheduler ----

    async def get_scheduler_status(self) -> Any:
        return await self._request("/api/scheduler/status")

    async def scheduler_start(self) -> Any:
        return await self._request("/api/scheduler/start", "POST")

    async def scheduler_stop(self) -> Any:
        return await self._request("/api/scheduler/stop", "POST")


# Global client instance
_scripts_api_client = None


def get_scripts_api_client() -> ScriptsApiClient:
    """
    Get or create the global Scripts API client instance.

    Returns:
        ScriptsApiClient instance
    """
    global _scripts_api_client
    if _scripts_api_client is None:
        _scripts_api_client = ScriptsApiClient()
    return _scripts_api_client
