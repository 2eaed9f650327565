"""Basic usage: resolve editor links against an in-memory code host."""

import asyncio

from sgref import DirectoryTarget, InMemorySource, expect_file, resolve_reference, resolve_target

COMMIT = "3f1b2c4d5e6f708192a3b4c5d6e7f80912a3b4c5"


async def main() -> None:
    # Register one commit with a few files and the names that point at it.
    source = InMemorySource()
    source.add_commit(
        "github.com/neovim/neovim",
        COMMIT,
        {
            "src/nvim/autocmd.c": "// autocmd.c\n#include <stdbool.h>\n",
            "src/nvim/main.c": "int main(void);\n",
        },
        revisions=("HEAD", "master"),
    )

    # Every surface syntax for the same location resolves to the same Reference.
    links = [
        "sg://gh/neovim/neovim/-/blob/src/nvim/autocmd.c?L2:1",
        "sg://github.com/neovim/neovim@master/-/src/nvim/autocmd.c?L2:1",
        "https://sourcegraph.com/gh/neovim/neovim/-/blob/src/nvim/autocmd.c?L2:1",
    ]
    for link in links:
        ref = await resolve_reference(link, source)
        print(f"{link}\n  -> {ref.short_display_name()} (line {ref.line}, col {ref.col})")

    # The canonical URL pins the exact commit.
    ref = await resolve_reference(links[0], source)
    print(f"\nCanonical URL: {ref.canonical_web_url()}")
    assert ref.line is not None
    print(f"Line {ref.line}: {(await ref.read(source))[ref.line - 1]}")

    # Directories resolve to a separate target type.
    directory = await resolve_target("sg://gh/neovim/neovim/-/tree/src/nvim", source)
    assert isinstance(directory, DirectoryTarget)
    print(f"\n{directory.canonical_web_url()}")
    for entry in await directory.list_entries(source):
        print(f"  {entry.path}")

    # File-only callers narrow the target explicitly.
    file_target = expect_file(await resolve_target("sg://gh/neovim/neovim/-/src/nvim/main.c", source))
    print(f"\n{file_target.path}: {await file_target.read(source)}")

    print(f"\nCollaborator calls: {len(source.calls)}")


if __name__ == "__main__":
    asyncio.run(main())
