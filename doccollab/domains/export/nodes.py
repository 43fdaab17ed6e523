"""Дерево содержимого документа.

Содержимое хранится строкой JSON в формате редактора
({"type": "doc", "content": [...]}). Здесь оно разбирается в закрытый набор
неизменяемых узлов; неизвестные типы узлов сохраняются как Unknown вместе
с дочерними узлами.
"""
import json
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from doccollab.core.errors import ValidationError


@dataclass(frozen=True)
class Mark:
    kind: str
    href: Optional[str] = None


@dataclass(frozen=True)
class Text:
    text: str
    marks: Tuple[Mark, ...] = ()


@dataclass(frozen=True)
class HardBreak:
    pass


@dataclass(frozen=True)
class HorizontalRule:
    pass


@dataclass(frozen=True)
class Paragraph:
    children: Tuple["Node", ...] = ()


@dataclass(frozen=True)
class Heading:
    level: int = 1
    children: Tuple["Node", ...] = ()


@dataclass(frozen=True)
class CodeBlock:
    language: Optional[str] = None
    children: Tuple["Node", ...] = ()


@dataclass(frozen=True)
class Blockquote:
    children: Tuple["Node", ...] = ()


@dataclass(frozen=True)
class ListItem:
    children: Tuple["Node", ...] = ()


@dataclass(frozen=True)
class TaskItem:
    checked: bool = False
    children: Tuple["Node", ...] = ()


@dataclass(frozen=True)
class BulletList:
    children: Tuple["Node", ...] = ()


@dataclass(frozen=True)
class OrderedList:
    children: Tuple["Node", ...] = ()


@dataclass(frozen=True)
class TaskList:
    children: Tuple["Node", ...] = ()


@dataclass(frozen=True)
class Doc:
    children: Tuple["Node", ...] = ()


@dataclass(frozen=True)
class Unknown:
    kind: str
    children: Tuple["Node", ...] = ()


Node = Union[
    Doc, Paragraph, Heading, BulletList, OrderedList, ListItem, TaskList, TaskItem,
    CodeBlock, Blockquote, HorizontalRule, HardBreak, Text, Unknown
]

LIST_NODES = (BulletList, OrderedList, TaskList)

MAX_DEPTH = 100

_CONTAINERS = {
    "doc": Doc,
    "paragraph": Paragraph,
    "bulletList": BulletList,
    "orderedList": OrderedList,
    "listItem": ListItem,
    "taskList": TaskList,
    "blockquote": Blockquote,
}


def parse_content(content: Union[str, bytes, dict]) -> Node:
    """Разбор содержимого документа в дерево узлов"""
    if isinstance(content, (str, bytes)):
        try:
            raw = json.loads(content)
        except (TypeError, ValueError) as exc:
            raise ValidationError(f"Content is not valid JSON: {exc}") from exc
        except RecursionError as exc:
            raise ValidationError(f"Content is nested deeper than {MAX_DEPTH} levels") from exc
    else:
        raw = content

    return _parse_node(raw, "$", 0)


def _parse_node(raw, path: str, depth: int) -> Node:
    if depth > MAX_DEPTH:
        raise ValidationError(f"Node at {path} is nested deeper than {MAX_DEPTH} levels")
    if not isinstance(raw, dict):
        raise ValidationError(f"Node at {path} must be an object")

    kind = raw.get("type")
    if not isinstance(kind, str) or not kind:
        raise ValidationError(f"Node at {path} has no type")

    attrs = raw.get("attrs") or {}
    if not isinstance(attrs, dict):
        raise ValidationError(f"Node attrs at {path} must be an object")

    if kind == "text":
        text = raw.get("text")
        if not isinstance(text, str):
            raise ValidationError(f"Text node at {path} must have a string text")
        return Text(text=text, marks=_parse_marks(raw.get("marks"), path))

    raw_children = raw.get("content")
    if raw_children is None:
        raw_children = []
    if not isinstance(raw_children, list):
        raise ValidationError(f"Node content at {path} must be a list")
    children = tuple(
        _parse_node(child, f"{path}.content[{i}]", depth + 1) for i, child in enumerate(raw_children)
    )

    if kind in _CONTAINERS:
        return _CONTAINERS[kind](children=children)

    if kind == "heading":
        level = attrs.get("level", 1)
        if isinstance(level, bool) or not isinstance(level, int) or not 1 <= level <= 6:
            raise ValidationError(f"Heading level at {path} must be an integer from 1 to 6")
        return Heading(level=level, children=children)

    if kind == "taskItem":
        return TaskItem(checked=bool(attrs.get("checked")), children=children)

    if kind == "codeBlock":
        language = attrs.get("language")
        return CodeBlock(language=language if isinstance(language, str) else None, children=children)

    if kind == "horizontalRule":
        return HorizontalRule()

    if kind == "hardBreak":
        return HardBreak()

    return Unknown(kind=kind, children=children)


def _parse_marks(raw_marks, path: str) -> Tuple[Mark, ...]:
    if raw_marks is None:
        return ()
    if not isinstance(raw_marks, list):
        raise ValidationError(f"Marks at {path} must be a list")

    marks = []
    for raw in raw_marks:
        if not isinstance(raw, dict) or not isinstance(raw.get("type"), str):
            raise ValidationError(f"Mark at {path} must be an object with a type")
        attrs = raw.get("attrs") or {}
        href = attrs.get("href") if isinstance(attrs, dict) else None
        marks.append(Mark(kind=raw["type"], href=href if isinstance(href, str) else None))
    return tuple(marks)
