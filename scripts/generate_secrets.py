#!/usr/bin/env python3
"""
Generate gateway credentials for local development.

Writes config/.env with a fresh key id, key secret and webhook secret,
shared by the storefront and the mock gateway.

Usage:
    python scripts/generate_secrets.py
"""

import os
import secrets
import shutil
import sys
from pathlib import Path

from dotenv import set_key


def generate_credentials() -> dict[str, str]:
    """New test-mode key pair and webhook secret"""
    return {
        "GATEWAY_KEY_ID": f"rzp_test_{secrets.token_hex(7)}",
        "GATEWAY_KEY_SECRET": secrets.token_urlsafe(24),
        "GATEWAY_WEBHOOK_SECRET": secrets.token_urlsafe(24),
    }


def write_env(env_file: Path, example_file: Path, credentials: dict[str, str]) -> None:
    """Copy the example config and set the credential keys in the copy"""
    env_file.parent.mkdir(parents=True, exist_ok=True)
    if example_file.exists():
        shutil.copyfile(example_file, env_file)
    else:
        env_file.touch()

    for key, value in credentials.items():
        set_key(env_file, key, value, quote_mode="never")

    os.chmod(env_file, 0o600)  # Restrict permissions


def main():
    project_root = Path(__file__).parent.parent
    env_file = project_root / "config" / ".env"
    example_file = project_root / "config" / ".env.example"

    print("=" * 60)
    print("Gateway Credential Generator")
    print("=" * 60)

    if env_file.exists():
        response = input("\nconfig/.env already exists. Overwrite? [y/N]: ")
        if response.lower() != "y":
            print("Aborted.")
            sys.exit(0)

    credentials = generate_credentials()
    write_env(env_file, example_file, credentials)

    print(f"\nWrote {env_file}")
    print(f"   GATEWAY_KEY_ID={credentials['GATEWAY_KEY_ID']}")
    print("   GATEWAY_KEY_SECRET=<hidden>")
    print("   GATEWAY_WEBHOOK_SECRET=<hidden>")

    print("\n" + "=" * 60)
    print("Credentials generated successfully!")
    print("=" * 60)


if __name__ == "__main__":
    main()
