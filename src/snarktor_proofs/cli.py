#!/usr/bin/env python3
"""
SNARKtor Proofs CLI

Command-line interface for computing proof commitments, Merkle roots and
inclusion paths, signing base-proof submissions, and checking the off-chain
commitment tree against the on-chain verifier.
"""

import json
import logging
import sys
from typing import Any, Dict, Optional, Tuple

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .authenticator import signing_message, sign_submission
from .commitment.merkle import (
    InclusionPath,
    build_root,
    generate_inclusion_path,
    get_tree_depth,
    verify_inclusion_path,
)
from .commitment.normalizer import standardize_proof_submission
from .commitment.utils.hex_helpers import bytes_to_hex, to_bytes32
from .config import Settings, log_level_from_env
from .errors import SnarktorError
from .fees import split_fee

# Configure rich console
console = Console()
logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False):
    """Setup logging configuration; --verbose overrides SNARKTOR_LOG_LEVEL."""
    try:
        level = logging.DEBUG if verbose else log_level_from_env()
    except ValueError as e:
        raise click.ClickException(str(e))
    logging.basicConfig(
        level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


def format_result(result_dict: Dict[str, Any]) -> str:
    """Format a result for JSON output."""
    return json.dumps(result_dict, indent=2)


def print_result(result: Dict[str, Any], title: str, format_output: str = "table"):
    """Print a flat result as a table or as JSON."""
    if format_output == "json":
        print(format_result(result))
        return

    table = Table(title=title)
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")
    for key, value in result.items():
        table.add_row(key.replace("_", " ").title(), str(value))
    console.print(table)


def parse_json_option(value: Optional[str], name: str) -> Any:
    if value is None:
        return None
    try:
        return json.loads(value)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"Invalid JSON: {e}", param_hint=name)


def read_json_file(path: str, name: str) -> Any:
    try:
        with open(path, "r") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"Invalid JSON in {path}: {e}", param_hint=name)


def load_payload(payload: Optional[str], payload_file: Optional[str]) -> Any:
    """Read a proof payload from a JSON file or a hex string argument."""
    if payload_file:
        return read_json_file(payload_file, "--file")

    if payload is None:
        raise click.UsageError("Provide a hex PAYLOAD or --file with a structured proof")
    return payload


def check_leaves(leaves: Tuple[str, ...]) -> Tuple[bytes, ...]:
    try:
        return tuple(to_bytes32(leaf) for leaf in leaves)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="LEAVES")


format_option = click.option(
    "--format",
    "format_output",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format",
)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.pass_context
def cli(ctx, verbose: bool):
    """
    SNARKtor Proofs CLI - Merkle commitments for aggregated proofs.

    This tool computes the commitments, roots and inclusion paths that the
    SNARKtor verifier contract checks, and signs base-proof submissions.
    """
    setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


@cli.command("hash")
@click.argument("payload", required=False)
@click.option("--file", "payload_file", type=click.Path(exists=True), help="JSON file with a structured proof")
@click.option("--public-inputs", help="Public inputs as JSON")
@click.option("--verification-key", help="Verification key as JSON")
@format_option
def hash_command(
    payload: Optional[str],
    payload_file: Optional[str],
    public_inputs: Optional[str],
    verification_key: Optional[str],
    format_output: str,
):
    """
    Compute the commitments of a proof payload.

    PAYLOAD: 0x-prefixed hex proof (or use --file for a structured proof)
    """
    data = load_payload(payload, payload_file)
    try:
        submission = standardize_proof_submission(
            data,
            parse_json_option(public_inputs, "--public-inputs"),
            parse_json_option(verification_key, "--verification-key"),
        )
    except SnarktorError as e:
        raise click.ClickException(str(e))

    print_result(
        {
            "commitment": bytes_to_hex(submission.commitment),
            "size_bytes": len(submission.canonical_bytes),
            "public_input": bytes_to_hex(submission.public_input_commitment),
            "verification_key": bytes_to_hex(submission.verification_key_commitment),
        },
        "Proof Commitments",
        format_output,
    )


@cli.command()
@click.argument("leaves", nargs=-1, required=True)
@format_option
def root(leaves: Tuple[str, ...], format_output: str):
    """
    Compute the Merkle root over ordered leaf commitments.

    LEAVES: 32-byte hex commitments, in tree order
    """
    values = check_leaves(leaves)
    print_result(
        {
            "root": bytes_to_hex(build_root(values)),
            "leaf_count": len(values),
            "depth": get_tree_depth(len(values)),
        },
        "Merkle Root",
        format_output,
    )


@cli.command()
@click.argument("leaf_index", type=int)
@click.argument("leaves", nargs=-1, required=True)
def path(leaf_index: int, leaves: Tuple[str, ...]):
    """
    Generate the inclusion path of one leaf.

    LEAF_INDEX: Position of the leaf to prove

    LEAVES: 32-byte hex commitments, in tree order
    """
    values = check_leaves(leaves)
    try:
        inclusion_path = generate_inclusion_path(values, leaf_index)
    except SnarktorError as e:
        raise click.ClickException(str(e))

    output = inclusion_path.to_dict()
    output["root"] = bytes_to_hex(build_root(values))
    print(format_result(output))


@cli.command("verify-path")
@click.argument("path_file", type=click.Path(exists=True))
@click.argument("root_hash")
def verify_path(path_file: str, root_hash: str):
    """
    Verify an inclusion path against a root.

    PATH_FILE: JSON file as written by the path command

    ROOT_HASH: Expected 32-byte hex root
    """
    data = read_json_file(path_file, "PATH_FILE")
    try:
        inclusion_path = InclusionPath.from_dict(data)
        expected = to_bytes32(root_hash)
    except (KeyError, ValueError) as e:
        raise click.ClickException(f"Invalid path or root: {e}")

    if verify_inclusion_path(inclusion_path, expected):
        console.print("[green]✅ Inclusion path is valid[/green]")
    else:
        console.print("[red]❌ Inclusion path does not match root[/red]")
        sys.exit(1)


@cli.command("fee-split")
@click.argument("total_fee", type=int)
@format_option
def fee_split(total_fee: int, format_output: str):
    """
    Split a total fee between current, inclusion and aggregation shares.

    TOTAL_FEE: Total fee in wei
    """
    try:
        split = split_fee(total_fee)
    except ValueError as e:
        raise click.ClickException(str(e))
    print_result(split.to_dict(), "Fee Split (40/5/55)", format_output)


@cli.command()
@click.option("--private-key", envvar="SNARKTOR_PRIVATE_KEY", required=True, help="Signer private key")
@click.option("--fee", type=int, required=True, help="Declared fee in wei")
@click.option("--nonce", type=int, required=True, help="Signer's current nonce")
@click.option("--public-input", required=True, help="Public input commitment (32-byte hex)")
@click.option("--verification-key", required=True, help="Verification key commitment (32-byte hex)")
@format_option
def sign(
    private_key: str,
    fee: int,
    nonce: int,
    public_input: str,
    verification_key: str,
    format_output: str,
):
    """Sign a base-proof submission."""
    from eth_account import Account

    try:
        message = signing_message(fee, nonce, public_input, verification_key)
        signature = sign_submission(private_key, fee, nonce, public_input, verification_key)
        address = Account.from_key(private_key).address
    except ValueError as e:
        raise click.ClickException(str(e))

    print_result(
        {
            "signer": address,
            "message": bytes_to_hex(message),
            "signature": bytes_to_hex(signature),
        },
        "Submission Signature",
        format_output,
    )


@cli.command()
@click.option("--host", default=None, help="Host to bind to")
@click.option("--port", default=None, type=int, help="Port to bind to")
@click.option("--dev", is_flag=True, help="Enable development mode with auto-reload")
@click.pass_context
def serve(ctx, host: Optional[str], port: Optional[int], dev: bool):
    """Start the REST API server."""
    from .api.rest_api import run_server

    settings = Settings.from_env()
    host = host or settings.api_host
    port = port or settings.api_port
    try:
        console.print(
            Panel(
                f"Starting SNARKtor Proofs API Server\n\n"
                f"🚀 Server: http://{host}:{port}\n"
                f"📖 Docs: http://{host}:{port}/docs\n"
                f"❤️ Health: http://{host}:{port}/health\n\n"
                f"Press Ctrl+C to stop",
                title="API Server",
                border_style="green",
            )
        )
        run_server(host=host, port=port, dev=dev)
    except KeyboardInterrupt:
        console.print("\n[yellow]Server stopped by user[/yellow]")
    except Exception as e:
        console.print(f"[red]Server error: {e}[/red]", style="bold")
        if ctx.obj.get("verbose"):
            console.print_exception()
        sys.exit(1)


@cli.command("verify-onchain")
@click.argument("leaves", nargs=-1, required=True)
@click.option("--rpc-url", envvar="SNARKTOR_RPC_URL", help="JSON-RPC endpoint")
@click.option("--contract", "contract_address", envvar="SNARKTOR_CONTRACT_ADDRESS", help="Verifier contract address")
@click.pass_context
def verify_onchain(ctx, leaves: Tuple[str, ...], rpc_url: Optional[str], contract_address: Optional[str]):
    """
    Check that the verifier contract accepts the off-chain root over LEAVES.

    LEAVES: 32-byte hex commitments, in tree order
    """
    from .api.contract_client import SnarktorContractClient

    values = check_leaves(leaves)
    try:
        client = SnarktorContractClient(rpc_url=rpc_url, contract_address=contract_address)
        result = client.check_root_parity(values)
    except (SnarktorError, ValueError) as e:
        logger.error(f"On-chain verification failed: {e}")
        raise click.ClickException(str(e))

    table = Table(title="On-Chain Root Parity")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Contract", client.contract_address)
    table.add_row("Root", result["root"])
    table.add_row("Leaves", str(result["leaf_count"]))
    table.add_row("Contract Verdict", "✅ MATCH" if result["onchain_verified"] else "❌ MISMATCH")
    console.print(table)

    if not result["onchain_verified"]:
        sys.exit(1)


@cli.command()
@click.pass_context
def health(ctx):
    """Check RPC connectivity of the configured verifier contract."""
    from .api.contract_client import SnarktorContractClient

    console.print("[cyan]Checking system health...[/cyan]")
    try:
        client = SnarktorContractClient()
        rpc_status = client.health_check()
    except (SnarktorError, ValueError) as e:
        console.print(f"[red]Health check failed: {e}[/red]", style="bold")
        sys.exit(1)

    table = Table(title="System Health Check")
    table.add_column("Component", style="cyan")
    table.add_column("Status", style="green")
    table.add_column("Details")
    table.add_row("RPC Endpoint", "✅ Healthy" if rpc_status else "❌ Unhealthy", str(client.rpc_url))
    table.add_row("Verifier Contract", "✅ Configured", client.contract_address)
    console.print(table)


if __name__ == "__main__":
    cli()
