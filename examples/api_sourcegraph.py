"""Resolve a link against the live Sourcegraph GraphQL API.

Requirements:
    pip install sgref
    export SRC_ACCESS_TOKEN=sgp_...          # optional for public repositories
    export SRC_ENDPOINT=https://sourcegraph.com
"""

import asyncio
import sys

from sgref import NotFoundError, ServiceSettings, SourcegraphSource, TransportError, resolve_target
from sgref.target import DirectoryTarget

DEFAULT_LINK = "sg://github.com/sourcegraph/sourcegraph@main/-/blob/dev/sg/rfc.go?L29:2"


async def main(link: str) -> int:
    settings = ServiceSettings.from_env()
    async with SourcegraphSource(settings) as source:
        try:
            target = await resolve_target(link, source, settings=settings)
        except NotFoundError as exc:
            print(f"Not found ({exc.kind}): {exc}")
            return 1
        except TransportError as exc:
            hint = "retry later" if exc.retryable else "check the token and endpoint"
            print(f"Lookup failed, {hint}: {exc}")
            return 1

        if isinstance(target, DirectoryTarget):
            print(target.canonical_web_url(service_url=settings.service_url))
            for entry in await target.list_entries(source):
                print(f"  {entry.path}{'/' if entry.is_directory else ''}")
            return 0

        ref = target.reference
        print(ref.short_display_name(host_aliases=settings.host_aliases))
        print(ref.canonical_web_url(service_url=settings.service_url))
        lines = await ref.read(source)
        if ref.line is not None and ref.line <= len(lines):
            print(f"{ref.line}: {lines[ref.line - 1]}")
    return 0


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else DEFAULT_LINK)))
