"""
Git subtree fetching.

Fetches a single subtree of a remote repository at a given ref using
the git CLI: a shallow, blob-filtered fetch followed by a sparse
checkout of just the requested path. The working copy lives in a
temporary directory that is removed once the tree has been read into
memory.
"""

from __future__ import annotations

import asyncio
import logging
import tempfile
from pathlib import Path, PurePosixPath

from wpforge.errors import ResourceFetchError
from wpforge.runtime.fs import read_host_tree, run_blocking

from .content import Directory

logger = logging.getLogger(__name__)


class GitDirectoryFetcher:
    """
    Fetches repository subtrees with the git command line client.

    Example:
        fetcher = GitDirectoryFetcher()
        directory = await fetcher.fetch(
            "https://github.com/WordPress/wordpress-playground.git",
            ref="HEAD",
            path="packages/docs/site",
        )
    """

    def __init__(self, git_executable: str = "git"):
        self._git = git_executable

    async def fetch(self, repo_url: str, ref: str = "HEAD", path: str = "") -> Directory:
        """
        Fetch ``path`` from ``repo_url`` at ``ref``.

        Returns:
            Directory rooted at ``path`` (the enclosing path is stripped)

        Raises:
            ResourceFetchError: git failed or the path does not exist at ref
        """
        subpath = str(PurePosixPath("/", path or "/")).strip("/")
        name = PurePosixPath(subpath).name if subpath else _repo_name(repo_url)
        locator = f"{repo_url}#{ref}:{subpath}"
        if ".." in PurePosixPath(subpath).parts:
            raise ResourceFetchError(f"Invalid repository path '{path}'", locator=locator)

        logger.info(f"Fetching git directory {locator}")

        with tempfile.TemporaryDirectory(prefix="wpforge-git-") as tmp:
            workdir = Path(tmp)
            await self._run_git("init", "-q", cwd=workdir)
            await self._run_git("remote", "add", "origin", repo_url, cwd=workdir)
            if subpath:
                await self._run_git("config", "core.sparseCheckout", "true", cwd=workdir)
                await run_blocking(_write_sparse_checkout, workdir, subpath)
            await self._run_git(
                "fetch", "-q", "--depth=1", "--filter=blob:none", "origin", ref, cwd=workdir
            )
            await self._run_git("checkout", "-q", "FETCH_HEAD", cwd=workdir)

            root = workdir / subpath if subpath else workdir
            if not await run_blocking(root.is_dir):
                raise ResourceFetchError(
                    f"Path '{subpath}' does not exist in {repo_url} at {ref}",
                    locator=locator,
                )
            files = await run_blocking(read_host_tree, root, exclude=(".git",))

        directory = Directory(name=name, files=files)
        logger.info(f"Fetched {directory!r} from {repo_url}")
        return directory

    async def _run_git(self, *args: str, cwd: Path) -> str:
        """Run a git command; non-zero exit raises ResourceFetchError."""
        try:
            process = await asyncio.create_subprocess_exec(
                self._git,
                *args,
                cwd=str(cwd),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise ResourceFetchError(f"Could not run {self._git}: {e}") from e

        stdout, stderr = await process.communicate()
        if process.returncode != 0:
            message = stderr.decode("utf-8", "replace").strip() or f"exit code {process.returncode}"
            raise ResourceFetchError(f"git {args[0]} failed: {message}")
        return stdout.decode("utf-8", "replace")


def _write_sparse_checkout(workdir: Path, subpath: str) -> None:
    sparse_file = workdir / ".git" / "info" / "sparse-checkout"
    sparse_file.parent.mkdir(parents=True, exist_ok=True)
    sparse_file.write_text(f"/{subpath}/\n", encoding="utf-8")


def _repo_name(repo_url: str) -> str:
    name = repo_url.rstrip("/").rsplit("/", 1)[-1]
    return name[: -len(".git")] if name.endswith(".git") else name or "repository"
