"""Share revision lookups with CommitCache and persist resolved references."""

import asyncio
import json

from sgref import CommitCache, InMemorySource, Reference, resolve_reference

COMMIT = "9c0d1e2f3a4b5c6d7e8f90a1b2c3d4e5f6a7b8c9"


async def main() -> None:
    source = InMemorySource()
    source.add_commit("github.com/org/repo", COMMIT, {"a.py": "x = 1\n", "b.py": "y = 2\n"}, revisions=("HEAD",))

    # Concurrent resolutions of the same (remote, revision) share one lookup.
    cache = CommitCache(source)
    refs = await asyncio.gather(
        resolve_reference("sg://gh/org/repo/-/a.py?L1:1", cache),
        resolve_reference("sg://gh/org/repo/-/b.py", cache),
        resolve_reference("sg://gh/org/repo/-/a.py", cache),
    )
    print(f"Resolved {len(refs)} references with {len(source.calls)} lookup(s)")

    # A moved branch is picked up after invalidation.
    dropped = cache.invalidate("github.com/org/repo")
    print(f"Invalidated {dropped} cached revision(s)")

    # References are plain values: serialize and restore them.
    payload = json.dumps([ref.to_dict() for ref in refs], indent=2)
    print(payload)
    restored = [Reference.from_dict(item) for item in json.loads(payload)]
    assert restored == list(refs)

    # The canonical URL feeds back into the pipeline with zero lookups.
    before = len(source.calls)
    again = await resolve_reference(refs[0].canonical_web_url(), source)
    assert (again.remote, again.commit, again.path) == (refs[0].remote, refs[0].commit, refs[0].path)
    assert len(source.calls) == before


if __name__ == "__main__":
    asyncio.run(main())
