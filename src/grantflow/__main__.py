"""grantflow command line.

Builds authorize URLs and runs a login from the terminal: open the printed
URL, sign in, then paste the URL the browser was redirected to.

Examples:
  grantflow authorize-url --config client.json
  grantflow login --provider google --client-id ID --client-secret S \\
      --redirect-uri https://localhost/callback --scope email --open
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
import webbrowser
from pathlib import Path
from typing import Any

from grantflow.config import get_settings
from grantflow.errors import ConfigurationError, OAuth2Error
from grantflow.flow import OAuth2Flow
from grantflow.logging_setup import setup_logging
from grantflow.providers import PROVIDERS, flow_for_grant, provider_settings

logger = logging.getLogger(__name__)


def _load_settings(args: argparse.Namespace) -> dict[str, Any]:
    settings: dict[str, Any] = {}
    if args.config:
        settings.update(json.loads(Path(args.config).read_text()))

    overrides = {
        "client_id": args.client_id,
        "client_secret": args.client_secret,
        "scope": args.scope,
        "redirect_uris": [args.redirect_uri] if args.redirect_uri else None,
        "verbose": True if args.verbose else None,
    }
    settings.update(_without_none(overrides))
    if args.provider:
        return provider_settings(args.provider, **settings)
    return settings


def _without_none(values: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in values.items() if v is not None}


def build_flow(args: argparse.Namespace) -> OAuth2Flow:
    return flow_for_grant(args.grant, _load_settings(args), args.provider)


async def run_login(flow: OAuth2Flow, open_browser: bool = False) -> int:
    """Walk the user through one authorization; returns the exit code."""
    url = flow.authorize_url()
    print(f"Open this URL to authorize:\n\n  {url}\n")
    if open_browser:
        webbrowser.open(url)

    outcome: dict[str, Any] = {}
    flow.on_authorize = lambda params: outcome.update(params=params)
    flow.on_failure = lambda error: outcome.update(error=error)

    redirected = await asyncio.to_thread(input, "Paste the URL you were redirected to: ")
    interceptor = flow.interceptor()
    if not await interceptor.intercept(redirected.strip()):
        print(f"That URL does not match the redirect URI {flow.redirect}", file=sys.stderr)
        return 1

    error: OAuth2Error | None = outcome.get("error")
    if "params" not in outcome:
        print(f"Authorization failed ({error.kind.value}): {error.message}", file=sys.stderr)
        return 1

    print(json.dumps(outcome["params"], indent=2))
    return 0


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="OAuth2 authorization code and implicit grant helper",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "command",
        choices=["authorize-url", "login"],
        help="Print an authorize URL, or run a full login",
    )
    parser.add_argument("--config", help="JSON file with client settings (client_id, ...)")
    parser.add_argument("--provider", choices=sorted(PROVIDERS), help="Use a known provider")
    parser.add_argument(
        "--grant", choices=["code", "implicit"], default="code", help="Grant type (default: code)"
    )
    parser.add_argument("--client-id", help="OAuth client ID")
    parser.add_argument("--client-secret", help="OAuth client secret")
    parser.add_argument("--redirect-uri", help="Redirect URI registered with the provider")
    parser.add_argument("--scope", help="Space-separated scopes")
    parser.add_argument("--open", action="store_true", help="Open the URL in a browser")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log protocol details")
    args = parser.parse_args()

    setup_logging(level="DEBUG" if args.verbose else get_settings().log_level)

    try:
        flow = build_flow(args)
        if args.command == "authorize-url":
            print(flow.authorize_url())
            return
        sys.exit(asyncio.run(run_login(flow, open_browser=args.open)))
    except (ConfigurationError, ValueError, OSError) as e:
        logger.error("%s", e)
        sys.exit(2)
    except (KeyboardInterrupt, EOFError):
        print("\nCancelled.", file=sys.stderr)
        sys.exit(130)


if __name__ == "__main__":
    main()
