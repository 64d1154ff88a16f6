#!/usr/bin/env python3
"""
Development startup script.

Starts the storefront and the mock payment gateway in development mode.
"""

import os
import sys
import subprocess
import time
from pathlib import Path

from dotenv import dotenv_values

# Project root
PROJECT_ROOT = Path(__file__).parent.parent
ENV_FILE = PROJECT_ROOT / "config" / ".env"


def check_dependencies():
    """Check if required dependencies are installed."""
    try:
        import fastapi
        import uvicorn
        import httpx
        import cryptography
        import pydantic_settings
        print("✓ All core dependencies installed")
        return True
    except ImportError as e:
        print(f"✗ Missing dependency: {e.name}")
        print("\nRun: pip install -e .")
        return False


def check_env(env_file: Path = ENV_FILE):
    """Check that config/.env exists and has gateway credentials."""
    if not env_file.exists():
        print("✗ Configuration file not found")
        return False

    values = dotenv_values(env_file)

    if values.get("GATEWAY_KEY_ID") and values.get("GATEWAY_KEY_SECRET"):
        print("✓ Gateway credentials found")
        return True

    print("✗ Gateway credentials missing from config/.env")
    return False


def start_services():
    """Start both services in development mode."""
    processes = []

    try:
        # Start Mock Gateway
        print("\n💳 Starting Mock Gateway on http://localhost:8002 ...")
        gateway_process = subprocess.Popen(
            [
                sys.executable, "-m", "uvicorn",
                "mock_gateway.main:app",
                "--reload",
                "--host", "0.0.0.0",
                "--port", "8002",
            ],
            cwd=PROJECT_ROOT,
            env=os.environ.copy(),
        )
        processes.append(gateway_process)

        # Wait a bit for the gateway to start
        time.sleep(2)

        # Start Storefront
        print("🏪 Starting Storefront on http://localhost:8000 ...")
        storefront_process = subprocess.Popen(
            [
                sys.executable, "-m", "uvicorn",
                "storefront.main:app",
                "--reload",
                "--host", "0.0.0.0",
                "--port", "8000",
            ],
            cwd=PROJECT_ROOT,
            env=os.environ.copy(),
        )
        processes.append(storefront_process)

        print("\n" + "=" * 60)
        print("Services started successfully!")
        print("=" * 60)
        print("\n📍 Storefront API: http://localhost:8000/docs")
        print("📍 Mock Gateway:   http://localhost:8002/docs")
        print("\nPress Ctrl+C to stop all services")
        print("=" * 60)

        # Wait for processes
        for p in processes:
            p.wait()

    except KeyboardInterrupt:
        print("\n\nShutting down services...")
        for p in processes:
            p.terminate()
        for p in processes:
            p.wait()
        print("All services stopped.")


def main():
    print("=" * 60)
    print("Artisan Storefront - Development Server")
    print("=" * 60)

    # Pre-flight checks
    print("\nRunning pre-flight checks...")

    if not check_dependencies():
        sys.exit(1)

    if not check_env():
        response = input("\nGenerate gateway credentials now? [Y/n]: ")
        if response.lower() != "n":
            subprocess.run([sys.executable, str(PROJECT_ROOT / "scripts" / "generate_secrets.py")])
        else:
            print("Gateway credentials are required. Exiting.")
            sys.exit(1)

    print("\n✓ All checks passed!")

    # Start services
    start_services()


if __name__ == "__main__":
    main()
