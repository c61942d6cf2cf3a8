# cnabkit

A small library for working with CNAB bundles. It can:

- export a bundle manifest, together with whatever an image store writes into
  the archive directory, into a gzipped tar archive;
- import such an archive again and load the bundle inside it;
- check schema versions such as `cnab-core-1.0.0`;
- hold parameter and credential value sets and value-source strategies, with
  JSON and YAML conversion;
- resolve secret values from the local host: a command, a file, an environment
  variable or a literal.

## Installation

```
pip install cnabkit
```

To run the test suite:

```
pip install "cnabkit[test]"
pytest
```

## Modules

### `cnabkit.imagestore`

- `Store`: abstract image store with `add(image)`, which returns a content
  digest (an empty string when none is known), and `push(digest, src, dst)`.
- `Parameters`: frozen dataclass with `archive_dir` (default `""`), `logs`
  (default: a writer that discards everything) and `transport` (default `None`).
- `create(*options)` applies option functions to the default `Parameters`;
  `with_archive_dir`, `with_logs` and `with_transport` build such options.
- `MockStore`: a `Store` whose `add` and `push` call the `add_stub` and
  `push_stub` callables it was given; calling one without its stub raises
  `RuntimeError`.

### `cnabkit.version`

- `Version`: a `str` whose `validate()` raises `InvalidSchemaVersion` (a
  `ValueError`) unless it is a semantic version, for example
  `invalid schema version "not-semver": Invalid Semantic Version`. A leading
  `v` and missing minor or patch parts are accepted.
- `get_semver(schema_version)` strips a `cnab-<kind>-` prefix and returns the
  validated remainder as a `Version`.

### `cnabkit.valuesource`

- `ValueSet`: a `dict` of resolved names to values. `merge(other)` adds the
  entries of `other` and raises `ValueError` if any name is already present,
  even with the same value.
- `is_valid(value_set, key)`: whether `key` is in the set.
- `Source`: one `key`/`value` pair. `to_raw()` gives `{key: value}` or `None`
  when no key is set; `from_raw()` accepts `None`, an empty mapping or a
  one-pair mapping of strings and raises `ValueError` otherwise. `to_json`,
  `from_json`, `to_yaml` and `from_yaml` convert through that mapping form;
  YAML scalars are read as strings.
- `Strategy`: `name`, `source` and `value`. `to_dict()` and `from_dict()`
  carry the name and source only; `value` is never serialized.

### `cnabkit.secrets`

- `SecretStore`: abstract `resolve(key_name, key_value)`.
- `HostSecretStore`: resolves by `key_name`, case-insensitively:
  - `command`: splits `key_value` on spaces, runs it and returns stdout and
    stderr combined; a failing command raises `subprocess.CalledProcessError`;
  - `path`: expands `$VAR` and `${VAR}` in the path and returns the file's
    contents;
  - `env`: returns the environment variable, or raises `LookupError`;
  - `value`: returns `key_value` itself;
  - anything else raises `ValueError("invalid value source: <key_name>")`.
- The constants `SOURCE_COMMAND`, `SOURCE_PATH`, `SOURCE_ENV` and
  `SOURCE_VALUE` name these kinds.

### `cnabkit.packager`

- `BundleLoader.load(path)` reads a JSON manifest and raises `ValueError`
  unless it is an object with non-empty string `name` and `version`, an
  optional `images` object and an optional `invocationImages` list, each image
  an object with a string `image` and an optional string `contentDigest`.
- `check_digest(image, digest)` raises `DigestMismatchError` when both the
  manifest digest and `digest` are non-empty and differ.
- `Exporter(source, image_store_constructor, logs, destination="", loader=...)`
  and `new_exporter(source, destination, logs_dir, loader, constructor)`, which
  names the log file `export-<YYYYmmddHHMMSS>` inside `logs_dir`.
  `export()` writes the log file, loads the manifest, copies it as
  `bundle.json` into a temporary archive directory, builds an image store by
  calling the constructor with `with_archive_dir` and `with_logs` options,
  adds every image from `images` and `invocationImages` to it, checks the
  returned digests, and writes the directory as a gzipped tar to the
  destination, or to `<name>-<version>.tgz` in the current directory. The
  destination's parent directory must already exist. Failures are raised as
  `RuntimeError` with messages such as `Error preparing artifacts: ...`.
- `Importer(source, destination, loader=...)`: `unzip()` extracts the archive
  into `<destination>/<archive name without .tgz>`, refusing entries and links
  that would land outside it, then loads `bundle.cnab` if present and
  `bundle.json` otherwise, and returns the directory and the bundle. If the
  bundle does not load, the directory is removed and `RuntimeError` is raised.
  `import_bundle()` does the same and returns nothing.

## Examples

```python
from cnabkit.secrets import HostSecretStore

store = HostSecretStore()
store.resolve("value", "cassowary")      # "cassowary"
store.resolve("command", "echo hello")   # "hello\n"
```

```python
from cnabkit.valuesource import ValueSet

values = ValueSet({"first": "1"})
values.merge({"second": "2"})
values.merge({"first": "again"})  # raises ValueError
```

```python
from cnabkit.version import get_semver

get_semver("cnab-core-1.0.0")  # Version("1.0.0")
```

```python
from cnabkit import imagestore, packager

store = imagestore.MockStore(add_stub=lambda image: "")
exporter = packager.new_exporter(
    "bundle.json", "out.tgz", "/tmp", packager.BundleLoader(), lambda *options: store
)
exporter.export()

path, bundle = packager.Importer(source="out.tgz", destination="unpacked").unzip()
```

## What it does not do

- It has no image store that pulls images from a registry, keeps them in an
  OCI image layout or pushes them elsewhere; an exporter needs a `Store`
  supplied by the caller, and `MockStore` is the only one included.
- It does not validate bundles or claims against the CNAB JSON schemas;
  `BundleLoader` checks only the fields listed above.
- It provides no command-line program.