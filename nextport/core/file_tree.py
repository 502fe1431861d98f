"""Output buckets to project paths, and the navigable FileNode tree."""
from __future__ import annotations

import posixpath
from typing import Iterator, Mapping

from ..models import (
    BUCKET_API,
    BUCKET_COMPONENTS,
    BUCKET_CONFIG,
    BUCKET_PAGES,
    BUCKET_PUBLIC,
    BUCKET_STYLES,
    ConversionOutput,
    FileNode,
)

DEFAULT_ROOT_NAME = "next-app"

# Bucket -> directory under the project root ("" is the root itself)
BUCKET_DIRECTORIES: tuple[tuple[str, str], ...] = (
    (BUCKET_PAGES, "pages"),
    (BUCKET_API, "pages/api"),
    (BUCKET_COMPONENTS, "components"),
    (BUCKET_STYLES, "styles"),
    (BUCKET_CONFIG, ""),
    (BUCKET_PUBLIC, "public"),
)
BUCKET_DIRECTORY = dict(BUCKET_DIRECTORIES)


def output_path(bucket: str, key: str) -> str:
    """Project-relative path of bucket entry ``key``."""
    directory = BUCKET_DIRECTORY[bucket]
    return posixpath.join(directory, key) if directory else key


def iter_output_files(output: ConversionOutput) -> Iterator[tuple[str, str]]:
    """Yield ``(path, content)`` for every bucket entry."""
    for bucket, _ in BUCKET_DIRECTORIES:
        for key, content in output.bucket(bucket).items():
            yield output_path(bucket, key), content


def _sort_key(node: FileNode) -> tuple[int, str]:
    return (0 if node.type == "directory" else 1, node.name)


def _sort(node: FileNode) -> None:
    if node.children is None:
        return
    node.children.sort(key=_sort_key)
    for child in node.children:
        _sort(child)


def build_file_tree(files: Mapping[str, str], root_name: str = DEFAULT_ROOT_NAME) -> FileNode:
    """Assemble project-relative paths into a tree.

    Children are ordered directories first, then by name.
    """
    root = FileNode(name=root_name, path="", type="directory", children=[])
    directories: dict[str, FileNode] = {"": root}
    for path in sorted(files):
        parent = root
        parts = path.split("/")
        for depth in range(1, len(parts)):
            dir_path = "/".join(parts[:depth])
            node = directories.get(dir_path)
            if node is None:
                node = FileNode(name=parts[depth - 1], path=dir_path, type="directory", children=[])
                directories[dir_path] = node
                parent.children.append(node)
            parent = node
        parent.children.append(FileNode(name=parts[-1], path=path, type="file", content=files[path]))
    _sort(root)
    return root


def tree_from_output(output: ConversionOutput, root_name: str = DEFAULT_ROOT_NAME) -> FileNode:
    return build_file_tree(dict(iter_output_files(output)), root_name)


def iter_leaves(node: FileNode) -> Iterator[FileNode]:
    if node.type == "file":
        yield node
        return
    for child in node.children or ():
        yield from iter_leaves(child)
