"""Exporting bundles with their images into archives, and importing them back."""

from __future__ import annotations

import json
import os
import shutil
import stat
import tarfile
import tempfile
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, BinaryIO, Optional

from cnabkit import imagestore

BUNDLE_FILE = "bundle.json"


def _check_image(image: Any) -> None:
    if not isinstance(image, dict) or not isinstance(image.get("image"), str):
        raise ValueError("every image must be an object with an image reference")
    if not isinstance(image.get("contentDigest", ""), str):
        raise ValueError(f"content digest of image {image['image']} must be a string")


def _check_bundle(data: Any) -> None:
    if not isinstance(data, dict):
        raise ValueError("bundle must be a JSON object")
    for key in ("name", "version"):
        value = data.get(key)
        if not isinstance(value, str) or not value:
            raise ValueError(f"bundle {key} must be a non-empty string")
    images = data.get("images") or {}
    if not isinstance(images, dict):
        raise ValueError("bundle images must be an object")
    invocation_images = data.get("invocationImages") or []
    if not isinstance(invocation_images, list):
        raise ValueError("bundle invocationImages must be a list")
    for image in [*images.values(), *invocation_images]:
        _check_image(image)


class BundleLoader:
    """Loads and checks a bundle manifest stored as JSON."""

    def load(self, path: str) -> dict:
        """Read the manifest at ``path``; raise ValueError if it is malformed."""
        with open(path, "rb") as handle:
            data = json.loads(handle.read())
        _check_bundle(data)
        return data


class DigestMismatchError(ValueError):
    """Raised when an image's content digest differs from the manifest's."""


def check_digest(image: dict, digest: str) -> None:
    """Raise DigestMismatchError if both digests are known and differ."""
    expected = image.get("contentDigest", "")
    if not digest or not expected:
        return
    if expected != digest:
        raise DigestMismatchError(
            f"content digest mismatch: image {image['image']} has digest {digest} "
            f"but the digest should be {expected} according to the bundle manifest"
        )


@dataclass
class Exporter:
    """Packages a bundle manifest and its images into a gzipped tar archive."""

    source: str
    image_store_constructor: imagestore.Constructor
    logs: str
    destination: str = ""
    loader: BundleLoader = field(default_factory=BundleLoader)
    image_store: Optional[imagestore.Store] = field(default=None, init=False)

    def export(self) -> None:
        """Collect the bundle's images and write the archive to the destination."""
        with open(self.logs, "w", encoding="utf-8") as log_file:
            if stat.S_ISDIR(os.stat(self.source).st_mode):
                raise IsADirectoryError(
                    f"Bundle manifest {self.source} is a directory, should be a file"
                )
            try:
                bundle = self.loader.load(self.source)
            except Exception as err:
                raise RuntimeError(f"Error loading bundle: {err}") from err

            name = f"{bundle['name']}-{bundle['version']}"
            with tempfile.TemporaryDirectory(prefix=name) as archive_dir:
                shutil.copyfile(self.source, os.path.join(archive_dir, BUNDLE_FILE))

                try:
                    self.image_store = self.image_store_constructor(
                        imagestore.with_archive_dir(archive_dir),
                        imagestore.with_logs(log_file),
                    )
                except Exception as err:
                    raise RuntimeError(f"Error creating artifacts: {err}") from err

                try:
                    self._prepare_artifacts(bundle)
                except Exception as err:
                    raise RuntimeError(f"Error preparing artifacts: {err}") from err

                dest = self.destination or f"{name}.tgz"
                try:
                    writer = open(dest, "wb")
                except OSError as err:
                    raise RuntimeError(f"Error creating archive file: {err}") from err
                with writer, tarfile.open(fileobj=writer, mode="w:gz") as archive:
                    archive.add(archive_dir, arcname=".")

    def _prepare_artifacts(self, bundle: dict) -> None:
        for image in (bundle.get("images") or {}).values():
            self._add_image(image)
        for image in bundle.get("invocationImages") or []:
            self._add_image(image)

    def _add_image(self, image: dict) -> None:
        assert self.image_store is not None
        digest = self.image_store.add(image["image"])
        check_digest(image, digest)


def new_exporter(
    source: str,
    destination: str,
    logs_dir: str,
    loader: BundleLoader,
    constructor: imagestore.Constructor,
) -> Exporter:
    """Create an exporter whose log file is named after the current time."""
    logs = os.path.join(logs_dir, "export-" + datetime.now().strftime("%Y%m%d%H%M%S"))
    return Exporter(
        source=source,
        image_store_constructor=constructor,
        logs=logs,
        destination=destination,
        loader=loader,
    )


def _within(root: str, path: str) -> bool:
    return os.path.commonpath([root, path]) == root


def _extract(stream: BinaryIO, dest: str) -> None:
    root = os.path.realpath(dest)
    with tarfile.open(fileobj=stream, mode="r:gz") as archive:
        members = archive.getmembers()
        for member in members:
            target = os.path.realpath(os.path.join(root, member.name))
            if not _within(root, target):
                raise ValueError(f"archive entry {member.name!r} escapes the destination")
            if member.issym() or member.islnk():
                base = os.path.dirname(target) if member.issym() else root
                link_target = os.path.realpath(os.path.join(base, member.linkname))
                if not _within(root, link_target):
                    raise ValueError(
                        f"archive link {member.name!r} points outside the destination"
                    )
        if hasattr(tarfile, "data_filter"):
            archive.extractall(root, members=members, filter="data")
        else:
            archive.extractall(root, members=members)


@dataclass
class Importer:
    """Unpacks a bundle archive into a destination directory."""

    source: str
    destination: str
    loader: BundleLoader = field(default_factory=BundleLoader)

    def import_bundle(self) -> None:
        """Unpack the archive and check the bundle it holds."""
        self.unzip()

    def unzip(self) -> tuple[str, dict]:
        """Unpack the archive; return the bundle's directory and the loaded bundle."""
        base = os.path.basename(self.source).removesuffix(".tgz")
        dest = os.path.join(self.destination, base)
        os.makedirs(dest, exist_ok=True)

        with open(self.source, "rb") as reader:
            try:
                _extract(reader, dest)
            except (tarfile.TarError, OSError, ValueError, EOFError) as err:
                raise RuntimeError(f"untar failed: {err}") from err

        # A bundle.cnab takes precedence over a bundle.json.
        ext = "cnab" if os.path.exists(os.path.join(dest, "bundle.cnab")) else "json"
        try:
            bundle = self.loader.load(os.path.join(dest, f"bundle.{ext}"))
        except Exception as err:
            try:
                shutil.rmtree(dest)
            except OSError as remove_err:
                raise RuntimeError(
                    f"failed to load and validate bundle.{ext} on import {err} "
                    f"and failed to remove invalid bundle from filesystem {remove_err}"
                ) from err
            raise RuntimeError(f"failed to load and validate bundle.{ext}: {err}") from err
        return dest, bundle