# catalyst/services/content_tree.py
"""
Pure operations over a product's nested content tree.

Every edit returns a new top-level list; the input tree is never mutated.
Untouched modules are reused as-is and sibling order is preserved. Edits that
target an id which is not in the tree leave it unchanged.
"""
from typing import Callable, Iterator, List, Optional, Tuple

from catalyst.domain.schemas import (
    AddFile,
    AddModule,
    ContentFile,
    ContentModule,
    DeleteFile,
    DeleteModule,
    RenameModule,
)
from catalyst.utils.ids import new_node_id

Tree = List[ContentModule]
FilesUpdater = Callable[[List[ContentFile]], List[ContentFile]]
ModulesUpdater = Callable[[List[ContentModule]], List[ContentModule]]


def _changed(old: list, new: list) -> bool:
    return len(old) != len(new) or any(a is not b for a, b in zip(old, new))


def _rebuild(modules: Tree, target_id: str, change: Callable[[ContentModule], ContentModule]) -> Tree:
    rebuilt = []
    for module in modules:
        if module.id == target_id:
            module = change(module)
        elif module.modules:
            children = _rebuild(module.modules, target_id, change)
            if _changed(module.modules, children):
                module = module.model_copy(update={"modules": children})
        rebuilt.append(module)
    return rebuilt


def iter_modules(tree: Tree) -> Iterator[ContentModule]:
    """Depth-first, pre-order."""
    for module in tree:
        yield module
        yield from iter_modules(module.modules)


def all_module_ids(tree: Tree) -> List[str]:
    return [m.id for m in iter_modules(tree)]


def find_module(tree: Tree, module_id: str) -> Optional[ContentModule]:
    return next((m for m in iter_modules(tree) if m.id == module_id), None)


def find_file(tree: Tree, file_id: str) -> Optional[ContentFile]:
    for module in iter_modules(tree):
        for f in module.files:
            if f.id == file_id:
                return f
    return None


def first_file(tree: Tree) -> Optional[ContentFile]:
    # what a course opens on
    for module in iter_modules(tree):
        if module.files:
            return module.files[0]
    return None


def upsert_files_in_module(tree: Tree, module_id: str, updater: FilesUpdater) -> Tree:
    return _rebuild(
        tree,
        module_id,
        lambda m: m.model_copy(update={"files": list(updater(list(m.files)))}),
    )


def upsert_child_modules(tree: Tree, parent_id: Optional[str], updater: ModulesUpdater) -> Tree:
    if parent_id is None:
        return list(updater(list(tree)))
    return _rebuild(
        tree,
        parent_id,
        lambda m: m.model_copy(update={"modules": list(updater(list(m.modules)))}),
    )


def set_module_title(tree: Tree, module_id: str, title: str) -> Tree:
    return _rebuild(tree, module_id, lambda m: m.model_copy(update={"title": title}))


def remove_module(tree: Tree, module_id: str) -> Tree:
    kept = []
    for module in tree:
        if module.id == module_id:
            continue
        if module.modules:
            children = remove_module(module.modules, module_id)
            if _changed(module.modules, children):
                module = module.model_copy(update={"modules": children})
        kept.append(module)
    return kept


def apply_edit(tree: Tree, edit, id_factory: Callable[[str], str] = new_node_id) -> Tuple[Tree, Optional[str]]:
    """
    Run one EditTree operation. Returns the new tree and, for add operations
    that landed, the id allocated for the new node.
    """
    if isinstance(edit, AddModule):
        module = ContentModule(id=id_factory("mod"), title=edit.title)
        new_tree = upsert_child_modules(tree, edit.parent_id, lambda ms: ms + [module])
        return new_tree, (module.id if find_module(new_tree, module.id) else None)

    if isinstance(edit, AddFile):
        f = ContentFile(
            id=id_factory("file"),
            name=edit.name,
            type=edit.type,
            url=edit.url,
            content=edit.content,
        )
        new_tree = upsert_files_in_module(tree, edit.module_id, lambda fs: fs + [f])
        return new_tree, (f.id if find_file(new_tree, f.id) else None)

    if isinstance(edit, RenameModule):
        return set_module_title(tree, edit.module_id, edit.title), None

    if isinstance(edit, DeleteModule):
        return remove_module(tree, edit.module_id), None

    if isinstance(edit, DeleteFile):
        return (
            upsert_files_in_module(tree, edit.module_id, lambda fs: [f for f in fs if f.id != edit.file_id]),
            None,
        )

    raise TypeError(f"unknown tree edit: {type(edit).__name__}")
