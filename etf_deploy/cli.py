"""
ETFMintToken Deployment CLI
Deploys the contract to the selected network and prints its address
"""

import argparse
import asyncio
import json
import logging
import math
from typing import Any, List, Optional

from etf_deploy.config import DeployConfig
from etf_deploy.deploy import DeploymentResult, deploy_contract
from etf_deploy.errors import ConfigurationError
from etf_deploy.network import NetworkContext
from etf_deploy.notify import format_success, record_deployment, send_slack_notification
from etf_deploy.signers import DeployerSelector, first_signer, signer_at, signer_with_address

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler()]
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Deploy a compiled contract and wait for confirmation')
    parser.add_argument('constructor_args', nargs='*', help='Constructor arguments (JSON literals or strings)')
    parser.add_argument('--network', help='Network name (default: $DEPLOY_NETWORK or localhost)')
    parser.add_argument('--contract', help='Contract name or fully qualified name (default: ETFMintToken)')
    parser.add_argument('--artifacts', help='Compiled artifacts directory (default: artifacts)')
    parser.add_argument('--timeout', type=float, help='Seconds to wait for confirmation')
    parser.add_argument('--confirmations', type=int, help='Blocks required on top of the deployment')
    selection = parser.add_mutually_exclusive_group()
    selection.add_argument('--deployer-index', type=int, help='Use the signer at this position')
    selection.add_argument('--deployer', help='Use the signer with this address')
    parser.add_argument('--record', help='Append the deployment to this JSONL file')
    parser.add_argument('--log-level', default='INFO', help='Logging level')
    return parser


def parse_constructor_arg(raw: str) -> Any:
    try:
        return json.loads(raw)
    except ValueError:
        return raw


def resolve_config(args: argparse.Namespace) -> DeployConfig:
    config = DeployConfig.from_env(args.network)
    if args.contract:
        config.contract_name = args.contract
    if args.artifacts:
        config.artifacts_dir = args.artifacts
    if args.timeout is not None:
        if not math.isfinite(args.timeout) or args.timeout <= 0:
            raise ConfigurationError(f"--timeout must be positive, got {args.timeout}")
        config.timeout = args.timeout
    if args.confirmations is not None:
        if args.confirmations < 1:
            raise ConfigurationError(f"--confirmations must be at least 1, got {args.confirmations}")
        config.confirmations = args.confirmations
    if args.record:
        config.deployments_file = args.record
    return config


def resolve_selector(args: argparse.Namespace) -> DeployerSelector:
    if args.deployer_index is not None:
        return signer_at(args.deployer_index)
    if args.deployer:
        return signer_with_address(args.deployer)
    return first_signer


async def run(config: DeployConfig, select_deployer: DeployerSelector,
              constructor_args: List[Any]) -> DeploymentResult:
    context = await NetworkContext.connect(config)
    try:
        result = await deploy_contract(
            context,
            config.contract_name,
            select_deployer=select_deployer,
            constructor_args=constructor_args,
            timeout=config.timeout,
            confirmations=config.confirmations,
        )
    finally:
        await context.close()
    result.network = config.network
    result.explorer_url = config.get_explorer_url(result.address)
    return result


async def main_async(argv: Optional[List[str]] = None) -> int:
    try:
        args = build_parser().parse_args(argv)
    except SystemExit as e:
        # argparse exits 0 for --help and 2 for usage errors
        return 0 if e.code == 0 else 1
    configure_logging(args.log_level)

    config = None
    try:
        config = resolve_config(args)
        select_deployer = resolve_selector(args)
        constructor_args = [parse_constructor_arg(raw) for raw in args.constructor_args]
        result = await run(config, select_deployer, constructor_args)
    except Exception as e:
        logger.exception(f"Deployment failed: {e}")
        if config is not None and config.slack_webhook:
            await send_slack_notification(
                config.slack_webhook,
                f"❌ {config.contract_name} deployment on {config.network} failed: {e}",
                "danger"
            )
        return 1

    print(f"Deploying contracts with the account: {result.deployer}")
    print(f"{result.contract_name} deployed to: {result.address}")
    if result.explorer_url:
        print(f"Explorer: {result.explorer_url}")

    if config.deployments_file:
        record_deployment(config.deployments_file, result)
    if config.slack_webhook:
        await send_slack_notification(config.slack_webhook, format_success(result))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    try:
        return asyncio.run(main_async(argv))
    except KeyboardInterrupt:
        logger.info("Deployment stopped by user")
        return 1
