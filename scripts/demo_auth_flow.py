"""
Authentication Flow Demo

Walks through register -> login -> face verification -> me, either in
process against a throwaway in-memory AuthCore or against a running API
server.

Usage:
    # In process (no server needed)
    python scripts/demo_auth_flow.py

    # Against a running server
    python scripts/demo_auth_flow.py --api --api-url http://localhost:8000

    # Custom probe embedding
    python scripts/demo_auth_flow.py --probe 0.11 0.21 0.33
"""

import argparse
import json
import sys
import uuid
from pathlib import Path
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

PROJECT_ROOT = Path(__file__).parent.parent.resolve()
sys.path.insert(0, str(PROJECT_ROOT))

DEFAULT_API_URL = "http://localhost:8000"
DEFAULT_ENROLLED = [0.11, 0.22, 0.33]
DEFAULT_PROBE = [0.11, 0.21, 0.33]


def print_step(title: str) -> None:
    print(f"\n{'-' * 60}\n {title}\n{'-' * 60}")


def run_in_process(email: str, password: str, enrolled: list, probe: list) -> int:
    """Run the flow directly against AuthCore."""
    from core.auth_core import AuthCore
    from core.errors import AuthError
    from core.matching import EuclideanEmbeddingMatcher
    from core.password import PasswordCredential
    from core.token_issuer import TokenIssuer
    from core.user_directory import InMemoryUserDirectory

    auth = AuthCore(
        directory=InMemoryUserDirectory(),
        credential=PasswordCredential(),
        matcher=EuclideanEmbeddingMatcher(),
        issuer=TokenIssuer(secret=uuid.uuid4().hex),
    )

    try:
        print_step("1. Register")
        registered = auth.register("Budi Santoso", email, password, enrolled)
        print(f"   User ID: {registered.user.id}")
        print(f"   Email:   {registered.user.email}")

        print_step("2. Login")
        login = auth.login(email, password)
        print(f"   Token:   {login.access_token[:32]}...")

        print_step("3. Face verification")
        identity = auth.authenticate(login.access_token)
        result = auth.verify_face(identity.sub, probe)
        print(f"   Verified:  {result.verified}")
        print(f"   Distance:  {result.distance:.4f}")
        print(f"   Threshold: {result.threshold}")

        print_step("4. Me")
        print(f"   {auth.me(identity).to_dict()}")
    except AuthError as e:
        print(f"\nFAILED ({e.kind}): {e.message}")
        return 1

    return 0


def call_api(base_url: str, method: str, path: str, body: dict = None, token: str = None) -> dict:
    """Send a JSON request and return the decoded response body."""
    data = json.dumps(body).encode() if body is not None else None
    request = Request(f"{base_url.rstrip('/')}{path}", data=data, method=method)
    request.add_header("Content-Type", "application/json")
    if token:
        request.add_header("Authorization", f"Bearer {token}")

    with urlopen(request, timeout=30) as response:
        return json.loads(response.read().decode())


def run_against_api(base_url: str, email: str, password: str, enrolled: list, probe: list) -> int:
    """Run the flow over HTTP."""
    try:
        print_step("1. Register")
        registered = call_api(base_url, "POST", "/auth/register", {
            "fullName": "Budi Santoso",
            "email": email,
            "password": password,
            "faceEmbedding": enrolled,
        })
        print(f"   User ID: {registered['user']['id']}")

        print_step("2. Login")
        login = call_api(base_url, "POST", "/auth/login", {"email": email, "password": password})
        token = login["accessToken"]
        print(f"   Token:   {token[:32]}...")

        print_step("3. Face verification")
        result = call_api(base_url, "POST", "/auth/face-verify", {"faceEmbedding": probe}, token)
        print(f"   {result}")

        print_step("4. Me")
        print(f"   {call_api(base_url, 'GET', '/auth/me', token=token)}")
    except HTTPError as e:
        print(f"\nFAILED (HTTP {e.code}): {e.read().decode()}")
        return 1
    except URLError as e:
        print(f"\nCannot reach API at {base_url}: {e.reason}")
        return 1

    return 0


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Demo of the register / login / face-verify / me flow",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--api", action="store_true",
        help="Run against a running API server instead of in process",
    )
    parser.add_argument(
        "--api-url", default=DEFAULT_API_URL,
        help=f"API base URL (default: {DEFAULT_API_URL})",
    )
    parser.add_argument(
        "--email", default=None,
        help="Email to register (default: random address)",
    )
    parser.add_argument("--password", default="rahasia123")
    parser.add_argument(
        "--probe", type=float, nargs="+", default=DEFAULT_PROBE,
        help="Probe embedding values",
    )
    args = parser.parse_args()

    email = args.email or f"budi-{uuid.uuid4().hex[:6]}@mail.com"

    if args.api:
        return run_against_api(args.api_url, email, args.password, DEFAULT_ENROLLED, args.probe)
    return run_in_process(email, args.password, DEFAULT_ENROLLED, args.probe)


if __name__ == "__main__":
    sys.exit(main())
