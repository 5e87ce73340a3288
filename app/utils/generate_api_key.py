"""
Generate API keys for the API_KEYS allow-list.

Usage:
    python -m app.utils.generate_api_key
    python -m app.utils.generate_api_key --prefix mps --env dev --env staging

Keys look like "<prefix>_<env>_<64 hex chars>", the same shape as the
built-in development defaults.
"""

import argparse
import secrets
from typing import List

DEFAULT_PREFIX = "sk"
DEFAULT_ENVS = ["dev", "prod"]
KEY_BYTES = 32


def generate_api_key(prefix: str = DEFAULT_PREFIX, env: str = "prod") -> str:
    """
    Generate one random API key.

    Args:
        prefix: Leading key namespace
        env: Environment tag embedded in the key

    Returns:
        Key string with KEY_BYTES of randomness as hex
    """
    return f"{prefix}_{env}_{secrets.token_hex(KEY_BYTES)}"


def api_keys_line(keys: List[str]) -> str:
    """The API_KEYS setting value for a list of keys."""
    return "API_KEYS=" + ",".join(keys)


def main():
    parser = argparse.ArgumentParser(description="Generate API keys for the scoring API")
    parser.add_argument(
        "--prefix",
        type=str,
        default=DEFAULT_PREFIX,
        help=f"Key prefix (default: {DEFAULT_PREFIX})",
    )
    parser.add_argument(
        "--env",
        action="append",
        default=None,
        help="Environment tag, repeatable (default: dev and prod)",
    )

    args = parser.parse_args()
    envs = args.env or DEFAULT_ENVS
    keys = [generate_api_key(args.prefix, env) for env in envs]

    print("=== Generated API Keys ===")
    for env, key in zip(envs, keys):
        print(f"{env}: {key}")
    print()
    print("Set them in your environment or .env file:")
    print(api_keys_line(keys))


if __name__ == "__main__":
    main()
