# dxforge

Building blocks for DX developer tools. The package finds `dx*` component
references in source code, answers completion and hover requests for them,
extracts symbols from Rust source, manages users and sessions, stores file
content as content-addressed blobs and sets up a `.dx/forge` repository
directory with its SQLite database.

Install with `pip install .`; the tests need the `test` extra
(`pip install .[test]`) and run with `pytest`.

## Modules

### `dxforge.patterns`

`PatternDetector` looks for identifiers such as `dxButton` (dx-ui),
`dxiHome` (dx-icons), `dxfRoboto` (dx-fonts), `dxsFlex` (dx-style),
`dxtText` (dx-i18n) and `dxaGoogleLogin` (dx-auth). Each hit is a
`PatternMatch` with the file, a 1-based line and column, the matched text,
the `DxToolType` and the component name. A name like `dxiHome` is reported
both as an icon and as a dx-ui component, since the dx-ui pattern also
matches it.

- `detect_in_file(path, content)` and `detect_in_files(pairs)`
- `group_by_tool(matches)` — a dict from `DxToolType` to matches
- `has_patterns(content)`
- `extract_components(matches)` — unique component names, sorted

`DxToolType` has the built-in tools `UI`, `ICONS`, `FONTS`, `STYLE`, `I18N`,
`AUTH` and `CHECK`, plus `DxToolType.custom(value)`. `prefix()` and
`tool_name()` give e.g. `"dxi"` and `"dx-icons"`; `DxToolType.from_prefix`
maps back, turning unknown prefixes into custom tools.

`analyze_for_injection(path, content, matches)` turns matches into
`InjectionPoint`s with zero-based `Range`/`Position` values; `import_needed`
is true when the content contains neither `import` nor `require`.

```python
from dxforge.patterns import PatternDetector

detector = PatternDetector()
matches = detector.detect_in_file("App.tsx", "dxButton dxButton dxInput dxCard")
print(detector.extract_components(matches))  # ['Button', 'Card', 'Input']
```

### `dxforge.server.lsp`

`LspServer` keeps open documents in memory (`did_open`, `did_change`,
`did_close`, and `documents()` for a snapshot). Its request methods are
coroutines:

- `completion(uri, line, character)` returns five `CompletionItem`s
  (`dxButton`, `dxInput`, `dxCard`, `dxiHome`, `dxiUser`) when the text
  before the zero-based position ends with `dx`, and an empty list otherwise.
  Negative positions raise `ValueError`.
- `hover(uri, line, character)` returns a `HoverInfo` for the first dx
  component on the zero-based line, or `None`; the character is not used.

```python
import asyncio
from dxforge.server.lsp import LspServer

async def main():
    server = LspServer()
    await server.did_open("App.tsx", "<dx")
    items = await server.completion("App.tsx", 0, 3)
    print([item.label for item in items])

asyncio.run(main())
```

### `dxforge.server.semantic_analyzer`

`SemanticAnalyzer.analyze_file(path, source)` extracts `Symbol`s line by line
from Rust source: lines starting with `mod`, `fn`, `struct`, `enum`, `impl`,
`const`, `static`, `trait` or `type`. Items after a `mod` line become its
children until a line starting with `}`. Each symbol's `Range` covers only its
own line (1-based lines, 0-based columns). This is a line scanner, not a
parser: `pub fn` and similar qualified items are not recognised.

`find_symbol_at_position(path, line, column)` returns the innermost analysed
symbol at that spot, `get_symbols(path)` the stored list, and
`detect_dx_patterns(source)` the first `<dx...>` element on each line as
`DxPattern`s.

### `dxforge.server.authentication`

`AuthManager` holds users and sessions in memory, guarded by a lock. On
construction it creates an `admin` user with the `Role.ADMIN` role and the
password `password`; change it with `update_password`. Passwords are stored
as unsalted SHA-256 hex digests. Sessions last 24 hours unless another
`session_hours` is given.

- `register`, `login`, `validate_token`, `logout`
- `get_user`, `list_users`, `update_password`, `delete_user`
- `clean_expired_sessions`

Failures raise `AuthError`. `User.has_permission` lets admins do everything,
developers act as developers or viewers, and viewers only as viewers.
`LoginRequest`, `LoginResponse`, `CreateUserRequest` and
`ChangePasswordRequest` are plain request and response records.

```python
from dxforge.server.authentication import AuthManager, Role

manager = AuthManager()
password = "password"
manager.register("alice", password, Role.DEVELOPER)
session = manager.login("alice", password)
print(manager.validate_token(session.token).username)
```

### `dxforge.storage.blob`

`Blob.from_content(path, content)` and `Blob.from_file(path)` build a blob
addressed by the SHA-256 of its content, with a MIME type guessed from the
file name. `to_binary()`/`from_binary()` use a little-endian u32 metadata
length, the metadata as JSON, then the content. `compress()` applies LZ4
block compression only when it makes the content smaller; `decompress()`
undoes it.

`BlobRepository(forge_dir)` stores blobs under `<forge_dir>/blobs/ab/cdef…`
with `store_local`, `load_local` and `exists_local`. Read and decode failures
raise `BlobError`.

```python
from dxforge.storage.blob import Blob, BlobRepository

blob = Blob.from_content("notes.md", b"hello " * 200)
blob.compress()
repository = BlobRepository(".dx/forge")
repository.store_local(blob)
restored = repository.load_local(blob.hash())
restored.decompress()
```

### `dxforge.storage.db` and `dxforge.storage.repository`

`Database(forge_path)` (or `Database.open`) opens `<forge_path>/forge.db`.
`initialize()` creates the `operations`, `anchors` and `annotations` tables
and their indexes; `table_names()` lists the tables; `close()` closes it, and
the object works as a context manager.

`init_repository(path)` creates `.dx/forge` with `objects`, `refs`, `logs`
and `context` subdirectories, an initialised database and a `config.json`
holding fresh actor and repository ids, and returns the forge directory.
`sync_with_git(path)` creates that repository if `path/.dx` does not exist,
prints progress messages, and returns whether it created one.

## What this package does not do

- There is no command-line program and no network server. `LspServer` is the
  document store and request logic only; it does not speak the language
  server protocol over stdio or sockets.
- The database schema is created, but nothing here writes or reads
  operations, anchors or annotations, so there is no operation log, history
  view or time travel.
- `sync_with_git` does not read or write git data; it only creates the forge
  directory.
- Blobs are kept on local disk only; there is no remote storage.