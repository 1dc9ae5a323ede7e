"""MCP client for the swap-quote tool server."""

from __future__ import annotations

import asyncio
import json
import shlex
import uuid
from asyncio.subprocess import Process
from typing import Any, Dict, List, Optional, Protocol

from swap_agent import __version__
from swap_agent.errors import RemoteToolError
from swap_agent.utils.logging import get_logger

logger = get_logger(__name__)

JSONRPC_VERSION = "2.0"
DEFAULT_PROTOCOL_VERSION = "2024-11-05"
CLIENT_INFO = {
    "name": "swap-agent",
    "version": __version__,
}
HANDSHAKE_TIMEOUT = 10
STREAM_LIMIT = 1_048_576  # quote plans carry long calldata on a single line


class MCPClient:
    """JSON-RPC over stdio client for one MCP server process."""

    def __init__(self, name: str, command: str) -> None:
        self.name = name
        self.command = command
        try:
            self._command_args = shlex.split(command)
        except ValueError as exc:  # pragma: no cover - invalid configuration is fatal
            raise ValueError(f"Invalid MCP command for {name!r}: {command}") from exc
        if not self._command_args:  # pragma: no cover - configuration failure
            raise ValueError(f"Empty MCP command for {name!r}")
        self.process: Optional[Process] = None
        self._reader_task: Optional[asyncio.Task[None]] = None
        self._stderr_task: Optional[asyncio.Task[None]] = None
        self._refresh_task: Optional[asyncio.Task[None]] = None
        self._init_lock = asyncio.Lock()
        self._write_lock = asyncio.Lock()
        self._pending: Dict[str, asyncio.Future[Any]] = {}
        self._initialized = False
        self._tools: List[Dict[str, Any]] = []

    @property
    def tools(self) -> List[Dict[str, Any]]:
        """Tools advertised by the server during the handshake."""
        return self._tools

    def has_tool(self, tool_name: str) -> bool:
        return any(tool.get("name") == tool_name for tool in self._tools)

    async def start(self) -> None:
        """Launch the server process and run the handshake if needed."""
        if self.process and self.process.returncode is None:
            await self._ensure_initialized()
            return

        logger.info(
            "starting_mcp_server", name=self.name, command=" ".join(self._command_args)
        )
        self.process = await asyncio.create_subprocess_exec(
            *self._command_args,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            limit=STREAM_LIMIT,
        )
        if self.process.returncode is not None:
            code = self.process.returncode
            await self.stop()
            raise RemoteToolError(
                f"MCP server {self.name} exited immediately with code {code}"
            )
        self._reader_task = asyncio.create_task(self._read_stdout())
        self._stderr_task = asyncio.create_task(self._log_stderr())
        await self._ensure_initialized()

    async def stop(self) -> None:
        """Terminate the process gracefully."""
        if not self.process:
            return
        logger.info("stopping_mcp_server", name=self.name)
        self.process.terminate()
        try:
            await asyncio.wait_for(self.process.wait(), timeout=5)
        except asyncio.TimeoutError:
            logger.warning("mcp_terminate_timeout", name=self.name)
            self.process.kill()
            await self.process.wait()

        for task in (self._reader_task, self._stderr_task, self._refresh_task):
            if task:
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        self._reader_task = None
        self._stderr_task = None
        self._refresh_task = None

        self._fail_pending(f"MCP server '{self.name}' stopped.")
        self._initialized = False
        self.process = None

    async def call_tool(self, tool_name: str, arguments: Dict[str, Any]) -> Any:
        """Invoke a tool and return the raw ``tools/call`` result.

        The result is returned as the server sent it (often a ``content``
        envelope); unwrapping is left to the caller.

        Raises:
            RemoteToolError: The process is unavailable, the server answered
                with a JSON-RPC error, or the tool flagged ``isError``.
        """
        await self.start()
        if not self.process or not self.process.stdin:
            raise RemoteToolError(f"MCP process {self.name} is not running")

        result = await self._send_request(
            "tools/call",
            {
                "name": tool_name,
                "arguments": arguments or {},
            },
        )

        if isinstance(result, dict) and result.get("isError"):
            message = (
                self._extract_content_text(result.get("content"))
                or f"MCP tool '{tool_name}' call failed."
            )
            raise RemoteToolError(message)

        return result

    async def _read_stdout(self) -> None:
        process = self.process
        if not process or not process.stdout:
            return

        try:
            while True:
                line = await process.stdout.readline()
                if not line:
                    break
                try:
                    payload = json.loads(line.decode("utf-8").strip())
                except json.JSONDecodeError as exc:
                    logger.error(
                        "invalid_mcp_payload",
                        name=self.name,
                        error=str(exc),
                        line=line.decode(errors="replace"),
                    )
                    continue

                if not isinstance(payload, dict):
                    logger.warning(
                        "unexpected_mcp_message", name=self.name, payload=payload
                    )
                elif "id" in payload and ("result" in payload or "error" in payload):
                    self._handle_response(payload)
                elif "method" in payload:
                    await self._handle_server_message(payload)
                else:
                    logger.warning(
                        "unexpected_mcp_message", name=self.name, payload=payload
                    )
        finally:
            exit_code = process.returncode
            if exit_code is not None:
                logger.info("mcp_process_exited", name=self.name, returncode=exit_code)
            if self._pending:
                message = f"MCP server '{self.name}' stopped before replying."
                if exit_code is not None:
                    message += f" Exit code: {exit_code}."
                self._fail_pending(message)
            self._initialized = False

    async def _log_stderr(self) -> None:
        if not self.process or not self.process.stderr:
            return
        while True:
            line = await self.process.stderr.readline()
            if not line:
                break
            logger.warning(
                "mcp_stderr", name=self.name, message=line.decode(errors="replace").strip()
            )

    def _fail_pending(self, message: str) -> None:
        for request_id, future in list(self._pending.items()):
            self._pending.pop(request_id, None)
            if not future.done():
                future.set_exception(RemoteToolError(message))

    async def _ensure_initialized(self) -> None:
        if self._initialized:
            return
        async with self._init_lock:
            if self._initialized:
                return

            try:
                await asyncio.wait_for(
                    self._send_request(
                        "initialize",
                        {
                            "protocolVersion": DEFAULT_PROTOCOL_VERSION,
                            "capabilities": {},
                            "clientInfo": CLIENT_INFO,
                        },
                    ),
                    timeout=HANDSHAKE_TIMEOUT,
                )
                await self._send_notification("notifications/initialized", {})
            except (RemoteToolError, asyncio.TimeoutError, OSError) as exc:
                await self.stop()
                raise RemoteToolError(
                    f"MCP server {self.name} failed to initialize: {exc}"
                ) from exc

            await self._refresh_tools()
            self._initialized = True

    async def _refresh_tools(self) -> None:
        try:
            response = await asyncio.wait_for(
                self._send_request("tools/list", {}), timeout=HANDSHAKE_TIMEOUT
            )
        except (RemoteToolError, asyncio.TimeoutError) as exc:
            # The tool list is informational; calls still go through without it.
            logger.warning("mcp_list_tools_failed", name=self.name, error=str(exc))
            return

        if isinstance(response, dict):
            self._tools = [
                tool
                for tool in response.get("tools", [])
                if isinstance(tool, dict) and tool.get("name")
            ]
            logger.info(
                "mcp_tools_available",
                name=self.name,
                tools=[tool["name"] for tool in self._tools],
            )

    async def _handle_server_message(self, payload: Dict[str, Any]) -> None:
        method = payload.get("method")
        if method == "ping" and "id" in payload:
            await self._write({"jsonrpc": JSONRPC_VERSION, "id": payload["id"], "result": {}})
            return

        if method == "notifications/tools/list_changed":
            logger.info("mcp_tools_list_changed", name=self.name)
            self._refresh_task = asyncio.create_task(self._refresh_tools())
            return

        if "id" in payload:
            await self._write(
                {
                    "jsonrpc": JSONRPC_VERSION,
                    "id": payload["id"],
                    "error": {
                        "code": -32601,
                        "message": f"Unsupported request method '{method}' from MCP server.",
                    },
                }
            )
            return

        logger.debug("mcp_notification_ignored", name=self.name, method=method)

    def _handle_response(self, payload: Dict[str, Any]) -> None:
        request_id = str(payload.get("id"))
        future = self._pending.pop(request_id, None)
        if not future:
            logger.warning("no_pending_future", name=self.name, request_id=request_id)
            return

        if "error" in payload:
            error_obj = payload["error"] or {}
            message = ""
            if isinstance(error_obj, dict):
                message = error_obj.get("message") or ""
            future.set_exception(RemoteToolError(message or str(error_obj)))
        else:
            future.set_result(payload.get("result"))

    async def _send_request(
        self, method: str, params: Optional[Dict[str, Any]] = None
    ) -> Any:
        request_id = str(uuid.uuid4())
        message: Dict[str, Any] = {
            "jsonrpc": JSONRPC_VERSION,
            "id": request_id,
            "method": method,
        }
        if params is not None:
            message["params"] = params

        future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
        self._pending[request_id] = future
        try:
            await self._write(message)
        except (RemoteToolError, OSError) as exc:
            self._pending.pop(request_id, None)
            raise RemoteToolError(f"MCP process {self.name} is unavailable") from exc

        return await future

    async def _send_notification(
        self, method: str, params: Optional[Dict[str, Any]] = None
    ) -> None:
        message: Dict[str, Any] = {"jsonrpc": JSONRPC_VERSION, "method": method}
        if params is not None:
            message["params"] = params
        await self._write(message)

    async def _write(self, message: Dict[str, Any]) -> None:
        async with self._write_lock:
            if not self.process or not self.process.stdin:
                raise RemoteToolError(f"MCP process {self.name} is not running")
            data = (json.dumps(message) + "\n").encode("utf-8")
            self.process.stdin.write(data)
            await self.process.stdin.drain()

    @staticmethod
    def _extract_content_text(content: Any) -> Optional[str]:
        if not isinstance(content, list):
            return None
        for block in content:
            if isinstance(block, dict) and block.get("type") == "text":
                text = block.get("text")
                if isinstance(text, str):
                    return text
        return None


class SwapQuoteTool(Protocol):
    """Port for the remote tool that builds swap transactions."""

    name: str

    async def quote(self, arguments: Dict[str, Any]) -> Any: ...


class MCPSwapQuoteTool:
    """Calls the swap tool exposed by an MCP server."""

    def __init__(self, client: MCPClient, tool_name: str = "swapTokens") -> None:
        self.client = client
        self.name = tool_name

    async def quote(self, arguments: Dict[str, Any]) -> Any:
        logger.info("swap_quote_requested", tool=self.name, server=self.client.name)
        return await self.client.call_tool(self.name, arguments)


__all__ = ["MCPClient", "MCPSwapQuoteTool", "SwapQuoteTool"]
