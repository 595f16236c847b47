"""
Resource Reference Schema.

Tagged descriptions of where a step obtains its content, before
resolution. The ``resource`` field is the discriminator:

    {"resource": "url", "url": "https://example.com/hello.zip"}
    {"resource": "wordpress.org/plugins", "slug": "gutenberg"}
    {"resource": "wordpress.org/themes", "slug": "twentytwentyfour"}
    {"resource": "git-directory", "url": "...", "ref": "HEAD", "path": "wp-content/plugins/x"}
    {"resource": "literal", "name": "hello.zip", "contents": b"..."}
    {"resource": "literal-directory", "name": "hello", "files": {"hello.php": "<?php"}}

Archive-shaped references (url, wordpress.org, literal) resolve to an
ArchiveFile; directory-shaped references (git-directory,
literal-directory) resolve to a Directory.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter

WORDPRESS_ORG_DOWNLOADS = "https://downloads.wordpress.org"


class UrlReference(BaseModel):
    """Archive fetched over HTTP(S)."""

    resource: Literal["url"] = "url"
    url: str = Field(..., description="Archive URL")
    caption: str | None = Field(default=None, description="Progress caption override")

    class Config:
        frozen = True

    @property
    def locator(self) -> str:
        return self.url


class WordPressOrgPluginReference(BaseModel):
    """Plugin archive from the wordpress.org plugin directory."""

    resource: Literal["wordpress.org/plugins"] = "wordpress.org/plugins"
    slug: str = Field(..., min_length=1, description="Plugin directory slug")

    class Config:
        frozen = True

    @property
    def locator(self) -> str:
        return f"{WORDPRESS_ORG_DOWNLOADS}/plugin/{self.slug}.zip"


class WordPressOrgThemeReference(BaseModel):
    """Theme archive from the wordpress.org theme directory."""

    resource: Literal["wordpress.org/themes"] = "wordpress.org/themes"
    slug: str = Field(..., min_length=1, description="Theme directory slug")

    class Config:
        frozen = True

    @property
    def locator(self) -> str:
        return f"{WORDPRESS_ORG_DOWNLOADS}/theme/{self.slug}.zip"


class GitDirectoryReference(BaseModel):
    """Subtree of a remote git repository at a given ref."""

    resource: Literal["git-directory"] = "git-directory"
    url: str = Field(..., description="Repository URL")
    ref: str = Field(default="HEAD", description="Branch, tag, or commit")
    path: str = Field(default="", description="Subtree path inside the repository")

    class Config:
        frozen = True

    @property
    def locator(self) -> str:
        return f"{self.url}#{self.ref}:{self.path}"


class LiteralReference(BaseModel):
    """File whose bytes are already available (e.g. an uploaded zip)."""

    resource: Literal["literal"] = "literal"
    name: str = Field(..., min_length=1)
    contents: bytes | str

    class Config:
        frozen = True

    @property
    def locator(self) -> str:
        return f"literal:{self.name}"


class LiteralDirectoryReference(BaseModel):
    """Directory tree given inline: nested mapping of names to contents."""

    resource: Literal["literal-directory"] = "literal-directory"
    name: str = Field(..., min_length=1)
    files: dict[str, Any] = Field(default_factory=dict)

    class Config:
        frozen = True

    @property
    def locator(self) -> str:
        return f"literal-directory:{self.name}"


ResourceReference = Annotated[
    Union[
        UrlReference,
        WordPressOrgPluginReference,
        WordPressOrgThemeReference,
        GitDirectoryReference,
        LiteralReference,
        LiteralDirectoryReference,
    ],
    Field(discriminator="resource"),
]

ARCHIVE_RESOURCES = frozenset(
    {"url", "wordpress.org/plugins", "wordpress.org/themes", "literal"}
)
DIRECTORY_RESOURCES = frozenset({"git-directory", "literal-directory"})

_reference_adapter: TypeAdapter = TypeAdapter(ResourceReference)


def parse_resource_reference(data: Any) -> ResourceReference:
    """Validate a raw mapping into a ResourceReference."""
    return _reference_adapter.validate_python(data)


def is_directory_reference(ref: ResourceReference) -> bool:
    """True when the reference resolves to a file tree rather than an archive."""
    return ref.resource in DIRECTORY_RESOURCES
