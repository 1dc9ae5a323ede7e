"""Tests for CLI output formatting."""

import io
import json

from _fakes import ROUTER, USDC_ETHEREUM
from swap_agent.cli_output import CLIOutput, OutputFormat, format_plan_plain
from swap_agent.planner_types import (
    SwapPlanResult,
    SwapPreview,
    TransactionArtifact,
    TransactionStep,
)


def _artifact() -> TransactionArtifact:
    return TransactionArtifact(
        tx_preview=SwapPreview(
            from_token="USDC",
            to_token="ETH",
            amount="100",
            from_chain="Ethereum",
            to_chain="Base",
        ),
        tx_plan=[
            TransactionStep(to=USDC_ETHEREUM, data="0x095ea7b3" + "00" * 64, value="0", chain_id="1"),
            TransactionStep(to=ROUTER, data="0xabcdef", chain_id="1"),
        ],
    )


class TestCLIOutput:
    def test_text_output_completed(self):
        stream = io.StringIO()
        output = CLIOutput(format=OutputFormat.TEXT, stream=stream)

        output.result(SwapPlanResult.completed(_artifact()))

        content = stream.getvalue()
        assert "Ready to sign." in content
        assert "Swap 100 USDC (Ethereum) -> ETH (Base)" in content
        assert f"1. to {USDC_ETHEREUM} on chain 1" in content
        assert f"2. to {ROUTER} on chain 1" in content

    def test_text_output_input_required(self):
        stream = io.StringIO()
        output = CLIOutput(format=OutputFormat.TEXT, stream=stream)

        output.result(SwapPlanResult.input_required("Please specify the 'fromChain'."))

        assert stream.getvalue().strip() == "Please specify the 'fromChain'."

    def test_json_output_format(self):
        stream = io.StringIO()
        output = CLIOutput(format=OutputFormat.JSON, stream=stream)

        output.result(SwapPlanResult.completed(_artifact()))

        data = json.loads(stream.getvalue())
        assert data["state"] == "completed"
        assert data["artifact"]["txPreview"]["toChain"] == "Base"
        assert data["artifact"]["txPlan"][1] == {"to": ROUTER, "data": "0xabcdef", "chainId": "1"}

    def test_json_input_required_has_no_artifact(self):
        stream = io.StringIO()
        output = CLIOutput(format=OutputFormat.JSON, stream=stream)

        output.result(SwapPlanResult.input_required("which chain?"))

        assert json.loads(stream.getvalue()) == {
            "state": "input-required",
            "message": "which chain?",
        }

    def test_json_mode_suppresses_status(self, capsys):
        output = CLIOutput(format=OutputFormat.JSON, stream=io.StringIO())
        output.status("Starting...")
        output.info("hello")
        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err == ""

    def test_error_goes_to_stderr_as_json(self, capsys):
        output = CLIOutput(format=OutputFormat.JSON, stream=io.StringIO())
        output.error("Token DOGE not supported.")
        assert json.loads(capsys.readouterr().err) == {"error": "Token DOGE not supported."}

    def test_debug_only_when_verbose(self, capsys):
        CLIOutput(verbose=False).debug("hidden")
        CLIOutput(verbose=True).debug("shown", data={"a": 1})
        err = capsys.readouterr().err
        assert "hidden" not in err
        assert "shown" in err


class TestFormatPlanPlain:
    def test_long_calldata_is_shortened(self):
        text = format_plan_plain(_artifact())
        assert "(68 bytes)" in text
        assert "data: 0xabcdef" in text
        assert "value: 0" in text
