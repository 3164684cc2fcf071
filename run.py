#!/usr/bin/env python3
"""
Production application runner for DocAI Document Chat
"""
import os
import sys
import argparse
import logging
from pathlib import Path

# Add the project root to the Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from config import settings


def setup_production_logging():
    """Setup production logging with a rotating file under logs/"""
    from utils.logging import setup_logging

    logs_dir = Path("logs")
    logs_dir.mkdir(exist_ok=True)

    setup_logging(
        log_level=settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file or str(logs_dir / "app.log")
    )


def run_server():
    """Run the application server"""
    import uvicorn
    from main import app

    setup_production_logging()

    logger = logging.getLogger(__name__)
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Host: {settings.host}:{settings.port}")

    # Sessions are held in process memory, so a single worker keeps them consistent
    if settings.workers > 1:
        logger.warning("Multiple workers do not share chat sessions; running with 1 worker")

    uvicorn_config = {
        "app": app,
        "host": settings.host,
        "port": settings.port,
        "workers": 1,
        "log_level": settings.log_level.lower(),
        "log_config": None,
        "access_log": False,
        "server_header": False,
        "date_header": False,
        "proxy_headers": True,
        "forwarded_allow_ips": "*",
        "timeout_keep_alive": 5
    }

    ssl_keyfile = os.getenv("SSL_KEYFILE")
    ssl_certfile = os.getenv("SSL_CERTFILE")

    if ssl_keyfile and ssl_certfile:
        uvicorn_config.update({
            "ssl_keyfile": ssl_keyfile,
            "ssl_certfile": ssl_certfile
        })
        logger.info("SSL/TLS enabled")

    uvicorn.run(**uvicorn_config)


def run_health_check():
    """Run a health check against the running service"""
    import requests
    import json

    base_url = f"http://{settings.host}:{settings.port}"

    try:
        response = requests.get(f"{base_url}/health", timeout=10)
        print(f"Health Check Status: {response.status_code}")
        print(json.dumps(response.json(), indent=2))

        response = requests.get(f"{base_url}/health/detailed", timeout=30)
        print(f"\nDetailed Health Check Status: {response.status_code}")
        print(json.dumps(response.json(), indent=2))

        return response.status_code == 200

    except requests.exceptions.RequestException as e:
        print(f"Health check failed: {e}")
        return False


def run_config_check():
    """Build the service graph and report missing configuration"""
    from api.dependencies import build_services
    from utils.logging import setup_logging

    setup_logging()
    logger = logging.getLogger(__name__)
    logger.info("Checking configuration...")

    services = build_services(settings)
    problems = []

    if not services.object_store.is_available():
        problems.append("S3_BUCKET is not set")
    if not services.gemini_client.is_available():
        problems.append("GEMINI_API_KEY is not set")

    for problem in problems:
        logger.error(f"Configuration problem: {problem}")

    if not problems:
        logger.info("Configuration check passed")
    return not problems


def main():
    """Main entry point"""
    parser = argparse.ArgumentParser(description="DocAI Document Chat Runner")
    parser.add_argument(
        "command",
        choices=["server", "health", "check-config"],
        help="Command to run"
    )

    args = parser.parse_args()

    if args.command == "server":
        run_server()
    elif args.command == "health":
        success = run_health_check()
        sys.exit(0 if success else 1)
    elif args.command == "check-config":
        success = run_config_check()
        sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
