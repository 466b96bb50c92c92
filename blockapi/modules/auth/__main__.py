"""
Issue an access token for the admin interface.

Usage:
    JWT_SECRET=... python -m blockapi.modules.auth admin@example.com --days 365
"""

import argparse
import sys

from ...config.provider import EnvConfigProvider
from .auth import AuthModule


def main() -> int:
    parser = argparse.ArgumentParser(description="Issue a blockapi bearer token")
    parser.add_argument("email", help="Email address stored in the token")
    parser.add_argument("--days", type=int, default=365, help="Token lifetime in days")
    args = parser.parse_args()

    auth = AuthModule(EnvConfigProvider().get_auth_config())
    if not auth.is_configured():
        print("Error: JWT_SECRET environment variable is not set", file=sys.stderr)
        return 1

    print(auth.sign_token(args.email, expires_in=args.days * 24 * 3600))
    return 0


if __name__ == "__main__":
    sys.exit(main())
