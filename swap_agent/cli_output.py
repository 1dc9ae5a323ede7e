"""CLI output formatting for terminal display.

Provides formatters for plain text and JSON output.
"""

from __future__ import annotations

import json
import sys
from enum import Enum
from typing import Any, Dict, List

from swap_agent.planner_types import PlanState, SwapPlanResult, TransactionArtifact


class OutputFormat(Enum):
    """Supported output formats."""

    TEXT = "text"
    JSON = "json"


class CLIOutput:
    """Unified output handler for CLI."""

    def __init__(
        self,
        format: OutputFormat = OutputFormat.TEXT,
        verbose: bool = False,
        stream: Any = None,
    ) -> None:
        self.format = format
        self.verbose = verbose
        self.stream = stream or sys.stdout

    def result(self, result: SwapPlanResult) -> None:
        """Output a planner result."""
        if self.format == OutputFormat.JSON:
            self._json_result(result)
        else:
            self._text_result(result)

    def _text_result(self, result: SwapPlanResult) -> None:
        print(result.message, file=self.stream)
        if result.artifact is not None:
            print("", file=self.stream)
            print(format_plan_plain(result.artifact), file=self.stream)

    def _json_result(self, result: SwapPlanResult) -> None:
        """JSON output for scripting."""
        output: Dict[str, Any] = {
            "state": result.state.value,
            "message": result.message,
        }
        if result.state == PlanState.COMPLETED and result.artifact is not None:
            output["artifact"] = result.artifact.to_payload()
        print(json.dumps(output, indent=2), file=self.stream)

    def status(self, message: str) -> None:
        """Output a status message."""
        if self.format == OutputFormat.JSON:
            return  # Suppress status in JSON mode
        print(f"... {message}", file=sys.stderr)

    def info(self, message: str) -> None:
        if self.format == OutputFormat.JSON:
            return
        print(message, file=self.stream)

    def warning(self, message: str) -> None:
        if self.format == OutputFormat.JSON:
            print(json.dumps({"warning": message}), file=sys.stderr)
            return
        print(f"Warning: {message}", file=sys.stderr)

    def error(self, message: str) -> None:
        if self.format == OutputFormat.JSON:
            print(json.dumps({"error": message}), file=sys.stderr)
            return
        print(f"Error: {message}", file=sys.stderr)

    def debug(self, message: str, data: Any = None) -> None:
        """Output debug information (only in verbose mode)."""
        if not self.verbose:
            return

        if self.format == OutputFormat.JSON:
            output: Dict[str, Any] = {"debug": message}
            if data is not None:
                output["data"] = data
            print(json.dumps(output), file=sys.stderr)
            return

        print(f"[debug] {message}", file=sys.stderr)
        if data is not None:
            print(f"   {data}", file=sys.stderr)


def format_plan_plain(artifact: TransactionArtifact) -> str:
    """Format a transaction plan for plain text output."""
    preview = artifact.tx_preview
    lines: List[str] = [
        f"Swap {preview.amount} {preview.from_token} ({preview.from_chain})"
        f" -> {preview.to_token} ({preview.to_chain})",
    ]
    for index, step in enumerate(artifact.tx_plan, 1):
        lines.append(f"{index}. to {step.to} on chain {step.chain_id}")
        if step.value is not None:
            lines.append(f"   value: {step.value}")
        lines.append(f"   data: {_shorten(step.data)}")
    return "\n".join(lines)


def _shorten(data: str, keep: int = 42) -> str:
    if len(data) <= keep:
        return data
    return f"{data[:keep]}... ({(len(data) - 2) // 2} bytes)"
