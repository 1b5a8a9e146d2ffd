"""
Deployment Notifications
Slack webhook alerts and a JSONL log of deployments
"""

import asyncio
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Union

import aiohttp

from etf_deploy.deploy import DeploymentResult

logger = logging.getLogger(__name__)


async def send_slack_notification(webhook_url: str, message: str, color: str = "good") -> bool:
    """Send notification to Slack, returns whether Slack accepted it"""
    payload = {
        "text": "🚀 Contract Deployment",
        "attachments": [
            {
                "color": color,
                "fields": [
                    {
                        "title": "Message",
                        "value": message,
                        "short": False
                    },
                    {
                        "title": "Time",
                        "value": datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
                        "short": True
                    }
                ]
            }
        ]
    }

    try:
        async with aiohttp.ClientSession() as session:
            async with session.post(webhook_url, json=payload) as response:
                if response.status == 200:
                    logger.info("Slack notification sent successfully")
                    return True
                logger.error(f"Failed to send Slack notification: {response.status}")
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        logger.error(f"Error sending Slack notification: {e}")
    return False


def format_success(result: DeploymentResult) -> str:
    message = f"{result.contract_name} deployed to `{result.address}`\n"
    message += f"Network: {result.network}\n"
    message += f"Deployer: `{result.deployer}`\n"
    message += f"Tx: `{result.tx_hash}`"
    if result.explorer_url:
        message += f"\nExplorer: {result.explorer_url}"
    return message


def record_deployment(path: Union[str, Path], result: DeploymentResult) -> bool:
    """Append a deployment to a JSONL file"""
    try:
        with open(path, "a") as f:
            f.write(json.dumps(result.to_dict()) + "\n")
    except OSError as e:
        logger.error(f"Failed to record deployment in {path}: {e}")
        return False
    logger.info(f"Recorded deployment {result.tx_hash} in {path}")
    return True
