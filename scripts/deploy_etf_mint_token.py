#!/usr/bin/env python3
"""
ETFMintToken Deployment Script

    python scripts/deploy_etf_mint_token.py --network sepolia
"""

import sys

from etf_deploy.cli import main

if __name__ == "__main__":
    sys.exit(main())
