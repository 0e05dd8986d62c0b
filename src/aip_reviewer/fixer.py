"""Apply the fixes attached to findings back onto a document.

Each fix is all-or-nothing: its changes run in order and, when one fails,
the ones before it are undone. Fixes are independent of each other, so a
failed fix never rolls back earlier ones.
"""

import copy
import logging
from typing import Any, Callable, Iterable

from aip_reviewer.errors import FixError, PointerError
from aip_reviewer.models import ChangeOperation, ChangeResult, Finding, FixResult, FixSummary, SpecChange
from aip_reviewer.spec.model import NodeKind, node_kind, parameter_key
from aip_reviewer.spec.pointer import Pointer, follow_ref, mapping_key, resolve

logger = logging.getLogger(__name__)

SKIPPED = "skipped: an earlier change in this fix failed"


class Fixer:
    """Holds a working copy of a document and applies fixes to it.

    The caller's document is copied on construction and never touched;
    read the result back with :meth:`get_spec`.
    """

    def __init__(self, document: dict):
        self._spec = copy.deepcopy(document)
        self._log: list[FixResult] = []
        self._total = 0
        self._applied = 0
        self._failed = 0
        self._changes = 0

    def apply_fixes(self, findings: Iterable[Finding], dry_run: bool = False) -> list[FixResult]:
        """Apply every fix carried by ``findings``; findings without one are ignored.

        With ``dry_run`` the same changes are validated against a throw-away
        copy, so later fixes still see earlier ones but :meth:`get_spec` is
        left as it was.
        """
        document = copy.deepcopy(self._spec) if dry_run else self._spec
        results = []
        for finding in findings:
            if finding.fix is None:
                continue
            results.append(self._apply(finding, document))
        return results

    def apply_fix(self, finding: Finding, dry_run: bool = False) -> FixResult:
        if finding.fix is None:
            raise FixError(f"Finding {finding.rule_id} at {finding.path} has no fix")
        return self.apply_fixes([finding], dry_run=dry_run)[0]

    def _apply(self, finding: Finding, document: dict) -> FixResult:
        fix = finding.fix
        undo: list[Callable[[], None]] = []
        outcomes = []
        failed = False
        for change in fix.spec_changes:
            if failed:
                outcomes.append(ChangeResult(change=change, applied=False, skipped=True, error=SKIPPED))
                continue
            try:
                undo.append(apply_change(document, change))
            except FixError as e:
                failed = True
                outcomes.append(ChangeResult(change=change, applied=False, error=str(e)))
            else:
                logger.debug("%s: %s", finding.rule_id, change.describe())
                outcomes.append(ChangeResult(change=change, applied=True))

        if failed:
            for revert in reversed(undo):
                revert()
        result = FixResult(rule_id=finding.rule_id, fix_type=fix.type, applied=not failed, changes=outcomes)
        self._record(result)
        if failed:
            logger.warning("Fix for %s at %s not applied: %s", finding.rule_id, finding.path,
                           next(o.error for o in outcomes if o.error and not o.skipped))
        return result

    def _record(self, result: FixResult) -> None:
        self._log.append(result)
        self._total += 1
        if result.applied:
            self._applied += 1
        else:
            self._failed += 1
        self._changes += sum(1 for c in result.changes if not c.skipped)

    def get_spec(self) -> dict:
        return self._spec

    def get_summary(self) -> FixSummary:
        return FixSummary(total=self._total, applied=self._applied, failed=self._failed, changes=self._changes)

    def get_log(self) -> list[FixResult]:
        return list(self._log)

    def get_errors(self) -> list[dict]:
        errors = []
        for result in self._log:
            for outcome in result.changes:
                if outcome.error and not outcome.skipped:
                    errors.append({
                        "rule_id": result.rule_id,
                        "change": outcome.change.describe(),
                        "error": outcome.error,
                    })
        return errors

    def has_errors(self) -> bool:
        return self._failed > 0


def apply_all_fixes(
    document: dict, findings: Iterable[Finding], dry_run: bool = False
) -> tuple[dict, list[FixResult], FixSummary]:
    fixer = Fixer(document)
    results = fixer.apply_fixes(findings, dry_run=dry_run)
    return fixer.get_spec(), results, fixer.get_summary()


# Change operations. Each validates before it mutates and returns a callable
# that puts the document back the way it found it.

Undo = Callable[[], None]


def _noop() -> None:
    return None


def apply_change(document: dict, change: SpecChange) -> Undo:
    try:
        handler = _HANDLERS[change.operation]
    except KeyError:
        raise FixError(f"Unsupported change operation {change.operation!r}") from None
    return handler(document, change)


def _locate(document: Any, pointer: Pointer) -> Any:
    try:
        return resolve(document, pointer)
    except PointerError as e:
        raise FixError(str(e)) from None


def _deref(document: Any, node: Any, key: Any = None) -> Any:
    """Follow a ``$ref`` node unless it holds ``key`` itself."""
    if node_kind(node) is NodeKind.REF and (key is None or mapping_key(node, key) is None):
        try:
            return follow_ref(document, node)
        except PointerError as e:
            raise FixError(str(e)) from None
    return node


def _snapshot(container: dict) -> Undo:
    items = list(container.items())

    def undo() -> None:
        container.clear()
        container.update(items)
    return undo


def _ensure(document: Any, pointer: Pointer, leaf: Callable[[], Any]) -> tuple[Any, Undo]:
    """Return the node at ``pointer``, creating missing mappings on the way.

    The last missing node is built by ``leaf``; anything above it is ``{}``.
    Nothing is created unless the whole chain can be.
    """
    segments = pointer.segments
    existing = len(segments)
    while existing >= 0:
        try:
            node = resolve(document, Pointer(segments[:existing]))
            break
        except PointerError:
            existing -= 1
    if existing == len(segments):
        return node, _noop

    missing = segments[existing:]
    node = _deref(document, node, missing[0])
    if not isinstance(node, dict) or not all(isinstance(s, str) for s in missing):
        where = Pointer(segments[:existing]).format()
        raise FixError(f"Cannot create {pointer} below non-mapping at {where}")
    top = node
    for segment in missing[:-1]:
        node[segment] = {}
        node = node[segment]
    node[missing[-1]] = leaf()
    return node[missing[-1]], lambda: top.pop(missing[0], None)


def _rename_key(document: dict, change: SpecChange) -> Undo:
    pointer = change.pointer
    if change.from_ is None or change.to is None:
        raise FixError(f"rename-key at {pointer} needs both 'from' and 'to'")
    container = _deref(document, _locate(document, pointer), change.from_)
    if not isinstance(container, dict):
        raise FixError(f"Cannot rename a key in a non-mapping at {pointer}")
    old = mapping_key(container, change.from_)
    if old is None:
        raise FixError(f"Key {change.from_!r} not found at {pointer}")
    if mapping_key(container, change.to) is not None:
        raise FixError(f"Key {change.to!r} already exists at {pointer}")

    # Rebuild in place so the renamed key keeps its position.
    undo = _snapshot(container)
    items = list(container.items())
    container.clear()
    for key, value in items:
        container[change.to if key == old else key] = value
    return undo


def _set(document: dict, change: SpecChange) -> Undo:
    pointer = change.pointer
    if not pointer.segments:
        raise FixError("Cannot set the document root")
    key = pointer.last
    parent = _deref(document, _locate(document, pointer.parent), key)
    value = copy.deepcopy(change.value)
    if isinstance(parent, dict) and isinstance(key, str):
        found = mapping_key(parent, key)
        if found is None:
            parent[key] = value
            return lambda: parent.pop(key, None)
        old = parent[found]
        parent[found] = value
        return lambda: parent.__setitem__(found, old)
    if isinstance(parent, list) and isinstance(key, int) and 0 <= key < len(parent):
        old = parent[key]
        parent[key] = value
        return lambda: parent.__setitem__(key, old)
    if isinstance(parent, list):
        raise FixError(f"Index {key!r} out of range at {pointer.parent}")
    raise FixError(f"Parent of {pointer} is not a container")


def _is_duplicate(document: dict, sequence: list, value: Any) -> bool:
    key = parameter_key(value)
    if key is not None:
        return any(parameter_key(_deref(document, item)) == key for item in sequence)
    return value in sequence


def _add(document: dict, change: SpecChange) -> Undo:
    pointer = change.pointer
    container, created = _ensure(document, pointer, dict if change.to is not None else list)
    try:
        container = _deref(document, container, change.to)
        if change.to is not None:
            if not isinstance(container, dict):
                raise FixError(f"Cannot add key {change.to!r}: {pointer} is not a mapping")
            if mapping_key(container, change.to) is not None:
                raise FixError(f"Key {change.to!r} already exists at {pointer}")
        elif not isinstance(container, list):
            raise FixError(f"Cannot append: {pointer} is not a sequence")
        elif _is_duplicate(document, container, change.value):
            raise FixError(f"An equal element already exists at {pointer}")
    except FixError:
        created()
        raise

    if change.to is not None:
        container[change.to] = copy.deepcopy(change.value)

        def undo() -> None:
            container.pop(change.to, None)
            created()
        return undo

    container.append(copy.deepcopy(change.value))

    def undo_append() -> None:
        container.pop()
        created()
    return undo_append


def _remove(document: dict, change: SpecChange) -> Undo:
    pointer = change.pointer
    if not pointer.segments:
        raise FixError("Cannot remove the document root")
    key = pointer.last
    try:
        parent = resolve(document, pointer.parent)
    except PointerError:
        return _noop
    parent = _deref(document, parent, key)
    if isinstance(parent, dict):
        found = mapping_key(parent, key)
        if found is None:
            return _noop
        undo = _snapshot(parent)
        del parent[found]
        return undo
    if isinstance(parent, list) and isinstance(key, int) and 0 <= key < len(parent):
        old = parent.pop(key)
        return lambda: parent.insert(key, old)
    return _noop


def _merge(document: dict, change: SpecChange) -> Undo:
    pointer = change.pointer
    value = change.value
    if not isinstance(value, (dict, list)):
        raise FixError(f"merge at {pointer} needs a mapping or sequence value")
    try:
        target = resolve(document, pointer)
    except PointerError:
        _node, created = _ensure(document, pointer, lambda: copy.deepcopy(value))
        return created

    target = _deref(document, target)
    if isinstance(target, dict) and isinstance(value, dict):
        undo = _snapshot(target)
        target.update(copy.deepcopy(value))
        return undo
    if isinstance(target, list) and isinstance(value, list):
        size = len(target)
        target.extend(copy.deepcopy(value))
        return lambda: target.__delitem__(slice(size, None))
    raise FixError(f"Cannot merge {type(value).__name__} into {type(target).__name__} at {pointer}")


_HANDLERS = {
    ChangeOperation.RENAME_KEY: _rename_key,
    ChangeOperation.SET: _set,
    ChangeOperation.ADD: _add,
    ChangeOperation.REMOVE: _remove,
    ChangeOperation.MERGE: _merge,
}
