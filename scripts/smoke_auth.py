#!/usr/bin/env python3
"""
Smoke test a running tracker service over HTTP.

Validates:
1. A user can register (or log in if the name is taken)
2. The returned token passes /api/me
3. A job can be added and listed back
4. Cleanup removes the user's jobs

Usage:
    python scripts/smoke_auth.py

    # Against another server / with other credentials
    python scripts/smoke_auth.py --base-url http://localhost:8080 --username test1 --password pass1
"""

import argparse
import logging
import sys

import requests

logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)

TIMEOUT_SECONDS = 10


def obtain_token(base_url: str, username: str, password: str) -> str:
    """Register, falling back to login when the user already exists."""
    logger.info("\n=== Step 1: Register / Login ===")
    credentials = {"username": username, "password": password}

    response = requests.post(f"{base_url}/api/register", json=credentials, timeout=TIMEOUT_SECONDS)
    logger.info(f"  register status {response.status_code}")
    if response.status_code == 409:
        response = requests.post(f"{base_url}/api/login", json=credentials, timeout=TIMEOUT_SECONDS)
        logger.info(f"  login status {response.status_code}")

    response.raise_for_status()
    token = response.json().get("token")
    if not token:
        raise RuntimeError("No token received")
    logger.info("  ✓ Token received")
    return token


def verify_me(base_url: str, headers: dict, username: str) -> None:
    logger.info("\n=== Step 2: /api/me ===")
    response = requests.get(f"{base_url}/api/me", headers=headers, timeout=TIMEOUT_SECONDS)
    response.raise_for_status()
    user = response.json()["user"]
    if user["username"] != username:
        raise RuntimeError(f"Token identifies {user['username']}, expected {username}")
    logger.info(f"  ✓ Authenticated as {user['username']} ({user['id']})")


def verify_jobs(base_url: str, headers: dict) -> None:
    logger.info("\n=== Step 3: Add and list a job ===")
    job = {"company": "Smoke Test Co", "position": "Tester", "date": "2024-01-05"}
    response = requests.post(f"{base_url}/api/jobs", json=job, headers=headers, timeout=TIMEOUT_SECONDS)
    response.raise_for_status()
    job_id = response.json()["job"]["_id"]
    logger.info(f"  ✓ Created job {job_id}")

    response = requests.get(
        f"{base_url}/api/jobs",
        params={"company": "Smoke Test Co"},
        headers=headers,
        timeout=TIMEOUT_SECONDS,
    )
    response.raise_for_status()
    payload = response.json()
    if not any(item["_id"] == job_id for item in payload["jobs"]):
        raise RuntimeError("Created job missing from listing")
    logger.info(f"  ✓ Listing returned {len(payload['jobs'])} of {payload['total']} jobs")


def verify_cleanup(base_url: str, headers: dict) -> None:
    logger.info("\n=== Step 4: Cleanup ===")
    response = requests.delete(f"{base_url}/api/cleanup", headers=headers, timeout=TIMEOUT_SECONDS)
    response.raise_for_status()
    logger.info(f"  ✓ {response.json()['message']}")


def main() -> int:
    parser = argparse.ArgumentParser(description="Smoke test the tracker API")
    parser.add_argument("--base-url", default="http://localhost:3000", help="Server base URL")
    parser.add_argument("--username", default="test1", help="Account to register or log in")
    parser.add_argument("--password", default="pass1", help="Account password")
    args = parser.parse_args()

    base_url = args.base_url.rstrip("/")
    try:
        token = obtain_token(base_url, args.username, args.password)
        headers = {"Authorization": f"Bearer {token}"}
        verify_me(base_url, headers, args.username)
        verify_jobs(base_url, headers)
        verify_cleanup(base_url, headers)
    except (requests.RequestException, RuntimeError, KeyError) as e:
        logger.error(f"  ✗ Smoke test failed: {e}")
        return 1

    logger.info("\nAll checks passed")
    return 0


if __name__ == "__main__":
    sys.exit(main())
