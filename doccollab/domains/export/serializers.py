from typing import Iterable, Optional

from doccollab.domains.export.nodes import (
    Node, Doc, Paragraph, Heading, BulletList, OrderedList, ListItem, TaskList, TaskItem,
    CodeBlock, Blockquote, HorizontalRule, HardBreak, Text, Unknown, LIST_NODES, parse_content
)

HTML_STYLES = """body { font-family: system-ui, -apple-system, sans-serif; line-height: 1.6; max-width: 800px; margin: 0 auto; padding: 20px; }
h1, h2, h3, h4, h5, h6 { margin-top: 1.5em; margin-bottom: 0.5em; }
p { margin: 1em 0; }
ul, ol { padding-left: 2em; }
blockquote { border-left: 3px solid #ccc; margin-left: 0; padding-left: 1em; color: #666; }
code { background: #f4f4f4; padding: 2px 6px; border-radius: 3px; }
pre { background: #f4f4f4; padding: 1em; border-radius: 5px; overflow-x: auto; }
pre code { background: none; padding: 0; }
a { color: #0066cc; }
hr { border: none; border-top: 1px solid #ccc; margin: 2em 0; }"""


def escape_html(text: str) -> str:
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&#039;")
    )


def _raw_text(nodes: Iterable[Node]) -> str:
    """Текст узлов без разметки (для блоков кода)"""
    parts = []
    for node in nodes:
        if isinstance(node, Text):
            parts.append(node.text)
        elif isinstance(node, HardBreak):
            parts.append("\n")
        elif isinstance(node, HorizontalRule):
            continue
        else:
            parts.append(_raw_text(node.children))
    return "".join(parts)


# Markdown

def to_markdown(content) -> str:
    """Markdown из содержимого документа (строка JSON, dict или дерево)"""
    return _md(_ensure_tree(content))


def _md(node: Node, depth: int = 0) -> str:
    if isinstance(node, Doc):
        return "\n\n".join(_md(child) for child in node.children)
    if isinstance(node, Paragraph):
        return _md_inline(node.children)
    if isinstance(node, Heading):
        return f"{'#' * node.level} {_md_inline(node.children)}"
    if isinstance(node, BulletList):
        return "\n".join(_md_item(item, depth, "- ") for item in node.children)
    if isinstance(node, OrderedList):
        return "\n".join(
            _md_item(item, depth, f"{number}. ") for number, item in enumerate(node.children, start=1)
        )
    if isinstance(node, TaskList):
        return "\n".join(_md_item(item, depth, "- ") for item in node.children)
    if isinstance(node, (ListItem, TaskItem)):
        return _md_item(node, depth, "- ")
    if isinstance(node, CodeBlock):
        return f"```{node.language or ''}\n{_raw_text(node.children)}\n```"
    if isinstance(node, Blockquote):
        inner = "\n\n".join(_md(child) for child in node.children)
        return "\n".join(f"> {line}" for line in inner.split("\n"))
    if isinstance(node, HorizontalRule):
        return "---"
    if isinstance(node, HardBreak):
        return "\n"
    if isinstance(node, Text):
        return _md_text(node)
    if isinstance(node, Unknown):
        return "".join(_md(child, depth) for child in node.children)
    raise TypeError(f"Unsupported node {node!r}")


def _md_item(item: Node, depth: int, marker: str) -> str:
    if isinstance(item, TaskItem):
        marker = f"- [{'x' if item.checked else ' '}] "
    elif not isinstance(item, ListItem):
        return _md(item, depth)

    inline = []
    nested = []
    for child in item.children:
        if isinstance(child, LIST_NODES):
            nested.append(_md(child, depth + 1))
        else:
            inline.append(_md(child, depth))

    line = f"{'  ' * depth}{marker}{''.join(inline)}"
    return "\n".join([line] + nested)


def _md_inline(nodes: Iterable[Node]) -> str:
    return "".join(_md(node) for node in nodes)


def _md_text(node: Text) -> str:
    text = node.text
    for mark in node.marks:
        if mark.kind == "bold":
            text = f"**{text}**"
        elif mark.kind == "italic":
            text = f"*{text}*"
        elif mark.kind == "strike":
            text = f"~~{text}~~"
        elif mark.kind == "code":
            text = f"`{text}`"
        elif mark.kind == "link":
            text = f"[{text}]({mark.href or ''})"
    return text


# HTML

def to_html(content, include_styles: bool = False, title: Optional[str] = None) -> str:
    """HTML из содержимого документа; include_styles - полный документ со стилями"""
    body = _html(_ensure_tree(content))
    if not include_styles:
        return body

    head = ['<meta charset="UTF-8">']
    if title is not None:
        head.append(f"<title>{escape_html(title)}</title>")
    head.append(f"<style>\n{HTML_STYLES}\n</style>")

    return "\n".join([
        "<!DOCTYPE html>",
        "<html>",
        "<head>",
        *head,
        "</head>",
        "<body>",
        body,
        "</body>",
        "</html>",
    ])


def _html(node: Node) -> str:
    if isinstance(node, Doc):
        return _html_children(node)
    if isinstance(node, Paragraph):
        return f"<p>{_html_children(node)}</p>"
    if isinstance(node, Heading):
        return f"<h{node.level}>{_html_children(node)}</h{node.level}>"
    if isinstance(node, BulletList):
        return f"<ul>{_html_children(node)}</ul>"
    if isinstance(node, OrderedList):
        return f"<ol>{_html_children(node)}</ol>"
    if isinstance(node, ListItem):
        return f"<li>{_html_children(node)}</li>"
    if isinstance(node, TaskList):
        return f'<ul class="task-list">{_html_children(node)}</ul>'
    if isinstance(node, TaskItem):
        checkbox = '<input type="checkbox" checked disabled>' if node.checked else '<input type="checkbox" disabled>'
        return f"<li>{checkbox} {_html_children(node)}</li>"
    if isinstance(node, CodeBlock):
        css_class = f' class="language-{escape_html(node.language)}"' if node.language else ""
        return f"<pre><code{css_class}>{escape_html(_raw_text(node.children))}</code></pre>"
    if isinstance(node, Blockquote):
        return f"<blockquote>{_html_children(node)}</blockquote>"
    if isinstance(node, HorizontalRule):
        return "<hr>"
    if isinstance(node, HardBreak):
        return "<br>"
    if isinstance(node, Text):
        return _html_text(node)
    if isinstance(node, Unknown):
        return _html_children(node)
    raise TypeError(f"Unsupported node {node!r}")


def _html_children(node: Node) -> str:
    return "".join(_html(child) for child in node.children)


def _html_text(node: Text) -> str:
    text = escape_html(node.text)
    for mark in node.marks:
        if mark.kind == "bold":
            text = f"<strong>{text}</strong>"
        elif mark.kind == "italic":
            text = f"<em>{text}</em>"
        elif mark.kind == "strike":
            text = f"<s>{text}</s>"
        elif mark.kind == "code":
            text = f"<code>{text}</code>"
        elif mark.kind == "underline":
            text = f"<u>{text}</u>"
        elif mark.kind == "link":
            text = f'<a href="{escape_html(mark.href or "")}">{text}</a>'
    return text


# Plain text

def to_text(content) -> str:
    """Текст без форматирования"""
    return _text(_ensure_tree(content))


def _text(node: Node) -> str:
    if isinstance(node, (Doc, Blockquote)):
        return "\n\n".join(_text(child) for child in node.children)
    if isinstance(node, (Paragraph, Heading, CodeBlock)):
        return "".join(_text(child) for child in node.children)
    if isinstance(node, LIST_NODES):
        return "\n".join(_text(child) for child in node.children)
    if isinstance(node, (ListItem, TaskItem)):
        inline = []
        nested = []
        for child in node.children:
            if isinstance(child, LIST_NODES):
                nested.append(_text(child))
            else:
                inline.append(_text(child))
        return "\n".join([f"• {''.join(inline)}"] + nested)
    if isinstance(node, HorizontalRule):
        return "---"
    if isinstance(node, HardBreak):
        return "\n"
    if isinstance(node, Text):
        return node.text
    if isinstance(node, Unknown):
        return "".join(_text(child) for child in node.children)
    raise TypeError(f"Unsupported node {node!r}")


# JSON

def to_json(content: str) -> str:
    """Содержимое без изменений (после проверки структуры)"""
    parse_content(content)
    return content


def _ensure_tree(content) -> Node:
    if isinstance(content, (str, bytes, dict)):
        return parse_content(content)
    return content
