"""Content tree clients: remote GitHub repository or a local blueprint checkout."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Callable, Dict, List, Mapping, Optional, Protocol, Sequence
from urllib.error import HTTPError, URLError
from urllib.parse import quote
from urllib.request import Request, urlopen

from ..logging import get_logger
from ..models import CandidateDocument, ContentType

logger = get_logger("fetching")

FILE_EXTENSIONS: Mapping[ContentType, tuple[str, ...]] = {
    ContentType.RULE: (".mdc", ".md"),
    ContentType.COMMAND: (".md",),
    ContentType.DOC: (".md",),
    ContentType.SCHEMA: (".json",),
}

CONTENT_ROOTS: Mapping[ContentType, str] = {
    ContentType.RULE: "rules",
    ContentType.COMMAND: "commands",
    ContentType.DOC: "docs",
    ContentType.SCHEMA: "schemas",
}

MAX_DEPTH = 2


class FetchError(RuntimeError):
    """Raised when a listing or a body cannot be retrieved."""


@dataclass(frozen=True)
class TreeEntry:
    name: str
    path: str
    type: str
    ref: str

    @property
    def is_dir(self) -> bool:
        return self.type == "dir"


class ContentTree(Protocol):
    """Minimal interface of a blueprint content tree."""

    def list(self, path: str) -> List[TreeEntry]:
        """Return the entries directly under ``path`` (empty when it does not exist)."""

    def fetch(self, ref: str) -> str:
        """Return the body addressed by ``ref``."""


Transport = Callable[[str, Mapping[str, str]], bytes]


def _urllib_transport(timeout: float) -> Transport:
    def _get(url: str, headers: Mapping[str, str]) -> bytes:
        request = Request(url, headers=dict(headers), method="GET")
        try:
            with urlopen(request, timeout=timeout) as response:  # type: ignore[arg-type]
                return response.read()
        except HTTPError as exc:
            if exc.code == 404:
                raise FileNotFoundError(url) from exc
            detail = exc.read().decode("utf-8", errors="ignore") if hasattr(exc, "read") else ""
            message = detail.strip() or exc.reason
            raise FetchError(f"GET {url} failed with status {exc.code}: {message}") from exc
        except URLError as exc:
            raise FetchError(f"GET {url} failed: {exc.reason}") from exc

    return _get


class GitHubContentTree:
    """Reads a blueprint repository through the GitHub contents API."""

    API_URL = "https://api.github.com"

    def __init__(
        self,
        repository: str,
        *,
        ref: str | None = None,
        token: str | None = None,
        base_path: str = ".ai",
        timeout: float = 30.0,
        transport: Transport | None = None,
    ) -> None:
        self.repository = repository.strip("/")
        self.ref = ref
        self.token = token
        self.base_path = base_path.strip("/")
        self._transport = transport or _urllib_transport(timeout)

    @classmethod
    def from_environment(
        cls, repository: str, *, ref: str | None = None, token_env: str = "RULEFORGE_GITHUB_TOKEN"
    ) -> "GitHubContentTree":
        return cls(repository, ref=ref, token=os.environ.get(token_env) or None)

    def _headers(self, accept: str) -> Dict[str, str]:
        headers = {"Accept": accept, "User-Agent": "ruleforge"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def list(self, path: str) -> List[TreeEntry]:
        full_path = "/".join(part for part in (self.base_path, path.strip("/")) if part)
        url = f"{self.API_URL}/repos/{self.repository}/contents/{quote(full_path)}"
        if self.ref:
            url += f"?ref={quote(self.ref)}"
        try:
            raw = self._transport(url, self._headers("application/vnd.github+json"))
        except FileNotFoundError:
            return []
        try:
            payload = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise FetchError(f"Listing {full_path} returned invalid JSON") from exc
        if not isinstance(payload, list):
            raise FetchError(f"Listing {full_path} did not return a directory")

        entries: List[TreeEntry] = []
        prefix = f"{self.base_path}/" if self.base_path else ""
        for item in payload:
            if not isinstance(item, dict) or item.get("type") not in {"file", "dir"}:
                continue
            item_path = str(item.get("path", ""))
            if prefix and item_path.startswith(prefix):
                item_path = item_path[len(prefix):]
            ref = item.get("download_url") if item.get("type") == "file" else item_path
            entries.append(
                TreeEntry(
                    name=str(item.get("name", "")),
                    path=item_path,
                    type=str(item["type"]),
                    ref=str(ref or item_path),
                )
            )
        return entries

    def fetch(self, ref: str) -> str:
        try:
            raw = self._transport(ref, self._headers("application/vnd.github.raw"))
        except FileNotFoundError as exc:
            raise FetchError(f"Blueprint not found: {ref}") from exc
        return raw.decode("utf-8", errors="replace")


class LocalContentTree:
    """Reads blueprints from a directory on disk laid out like the remote repository."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root).expanduser().resolve()

    def list(self, path: str) -> List[TreeEntry]:
        directory = self.root / path.strip("/") if path.strip("/") else self.root
        if not directory.is_dir():
            return []
        entries = []
        for child in sorted(directory.iterdir(), key=lambda item: item.name):
            rel_path = child.relative_to(self.root).as_posix()
            entries.append(
                TreeEntry(
                    name=child.name,
                    path=rel_path,
                    type="dir" if child.is_dir() else "file",
                    ref=rel_path,
                )
            )
        return entries

    def fetch(self, ref: str) -> str:
        target = (self.root / ref).resolve()
        if self.root not in target.parents:
            raise FetchError(f"Reference escapes the content root: {ref}")
        try:
            return target.read_text(encoding="utf-8")
        except OSError as exc:
            raise FetchError(f"Cannot read {ref}: {exc}") from exc


def discover_candidates(
    tree: ContentTree,
    content_types: Sequence[ContentType],
    *,
    platform_id: str | None = None,
) -> List[CandidateDocument]:
    """List candidate documents for each content type in discovery order.

    Commands live under ``commands/<platform>/<category>/``; when no directory
    exists for the platform the whole ``commands`` tree is used.
    """
    candidates: List[CandidateDocument] = []
    for content_type in content_types:
        root = CONTENT_ROOTS[content_type]
        if content_type is ContentType.COMMAND and platform_id:
            platform_root = f"{root}/{platform_id}"
            if tree.list(platform_root):
                root = platform_root
        candidates.extend(_walk(tree, root, content_type, depth=0, category=None))
    logger.debug("Discovered %d candidate documents", len(candidates))
    return candidates


def _walk(
    tree: ContentTree,
    path: str,
    content_type: ContentType,
    *,
    depth: int,
    category: Optional[str],
) -> List[CandidateDocument]:
    found: List[CandidateDocument] = []
    extensions = FILE_EXTENSIONS[content_type]
    for entry in tree.list(path):
        if entry.is_dir:
            if depth < MAX_DEPTH:
                found.extend(
                    _walk(
                        tree,
                        entry.path,
                        content_type,
                        depth=depth + 1,
                        category=category or entry.name,
                    )
                )
            continue
        if not entry.name.lower().endswith(extensions):
            continue
        found.append(
            CandidateDocument(
                name=entry.name,
                path=str(PurePosixPath(entry.path)),
                content_type=content_type,
                category=category,
                ref=entry.ref,
            )
        )
    return found


__all__ = [
    "ContentTree",
    "FetchError",
    "GitHubContentTree",
    "LocalContentTree",
    "TreeEntry",
    "discover_candidates",
]
