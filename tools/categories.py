"""Category document tools: import and export whole category trees.

A category document is the nested form of a tree:

    [
        {
            "category_name": "Electronics",
            "category_description": "Devices and gadgets",
            "subcategories": [{"category_name": "Phones"}]
        }
    ]

Documents are read from and written to .json, .yaml or .yml files.
"""

import json
from pathlib import Path
from typing import Dict, List, Optional

import pydantic
import yaml
from pydantic import BaseModel, Field, TypeAdapter

from category_tree import MAX_NAME_LENGTH, CategoryTree
from errors import ValidationError
from logger import get_logger

logger = get_logger()


class CategoryDocument(BaseModel):
    """One category and its subcategories."""

    category_id: Optional[int] = None
    category_name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    category_description: Optional[str] = None
    subcategories: List["CategoryDocument"] = Field(default_factory=list)


_DOCUMENT_LIST = TypeAdapter(List[CategoryDocument])


def parse_documents(data) -> List[CategoryDocument]:
    """Validate raw data (a document or a list of documents).

    Raises:
        ValidationError: If the data does not describe a category tree.
    """
    if isinstance(data, dict):
        data = [data]

    try:
        return _DOCUMENT_LIST.validate_python(data)
    except pydantic.ValidationError as e:
        raise ValidationError(
            f"Invalid category document: {e.error_count()} error(s)",
            errors=e.errors(include_url=False, include_context=False),
        ) from e


def read_documents(path: Path) -> List[CategoryDocument]:
    """Read and validate a category document file.

    Raises:
        ValueError: If the file type is not supported.
        ValidationError: If the content is not a valid category document.
    """
    suffix = path.suffix.lower()
    with open(path, "r") as f:
        if suffix == ".json":
            data = json.load(f)
        elif suffix in (".yaml", ".yml"):
            data = yaml.safe_load(f)
        else:
            raise ValueError(f"Unsupported category document type: {suffix}")

    return parse_documents(data or [])


def dump_documents(tree: CategoryTree, fmt: str = "json") -> str:
    """Render the tree as document text in the given format ("json" or "yaml")."""
    data = tree.to_dict()
    if fmt == "json":
        return json.dumps(data, indent=2, ensure_ascii=False)
    if fmt == "yaml":
        return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
    raise ValueError(f"Unsupported category document format: {fmt}")


def write_documents(tree: CategoryTree, path: Path) -> None:
    """Write the tree to a document file, choosing the format from the suffix."""
    fmt = "yaml" if path.suffix.lower() in (".yaml", ".yml") else "json"
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        f.write(dump_documents(tree, fmt))


def import_documents(
    tree: CategoryTree,
    documents: List[CategoryDocument],
    parent_ref: Optional[int] = None,
    merge_existing: bool = False,
) -> List[int]:
    """Add documents to the tree as new nodes.

    Document category_id values are ignored; imported nodes are new.

    Args:
        tree: Tree to add to.
        documents: Validated documents.
        parent_ref: Node to add under; None adds new roots.
        merge_existing: If True, a document whose name already exists in the
            tree is not added again; its subcategories are merged under the
            existing node instead.

    Returns:
        Keys of the nodes created, parents before children.
    """
    if parent_ref is not None:
        tree.get(parent_ref)

    by_name: Dict[str, int] = {node.name: node.key for _, node in tree.walk()}
    created = []

    def add(document: CategoryDocument, parent: Optional[int]) -> None:
        existing = by_name.get(document.category_name) if merge_existing else None
        if existing is not None:
            logger.info(f"⊘ Skipped '{document.category_name}' (already exists)")
            key = existing
        else:
            if parent is None:
                key = tree.add_root(
                    document.category_name, document.category_description
                )
            else:
                key = tree.add_child(
                    parent, document.category_name, document.category_description
                )
            by_name[document.category_name] = key
            created.append(key)

        for child in document.subcategories:
            add(child, key)

    for document in documents:
        add(document, parent_ref)

    return created
