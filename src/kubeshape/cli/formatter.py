# src/kubeshape/cli/formatter.py
from typing import Any, Dict, List

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from kubeshape.core.models import (
    MappingType,
    ScalarType,
    SequenceType,
    StructuredType,
    Tag,
    TupleType,
    TypedValue,
)

# Initialize the Rich console for high-quality terminal output
console = Console()

TAG_STYLES = {
    Tag.KNOWN: "green",
    Tag.NULL: "dim",
    Tag.UNKNOWN: "bold yellow",
}


class ShapeFormatter:
    """
    Renders structural types, typed value trees and audit reports.
    """

    def __init__(self, target: Console = None):
        self.console = target or console

    def type_tree(self, type_: Any, label: str = "[bold cyan]type[/bold cyan]") -> Tree:
        tree = Tree(f"{label}: {self._type_label(type_)}")
        self._add_type_children(tree, type_)
        return tree

    def _type_label(self, type_: Any) -> str:
        if isinstance(type_, ScalarType):
            return f"[magenta]{type_.kind.value}[/magenta]"
        if isinstance(type_, SequenceType):
            return "sequence"
        if isinstance(type_, TupleType):
            return f"tuple ({len(type_.elements)})"
        if isinstance(type_, MappingType):
            return "mapping"
        if isinstance(type_, StructuredType):
            return "object" if type_.fields else "object (unshaped)"
        return "[italic]dynamic[/italic]"

    def _add_type_children(self, tree: Tree, type_: Any):
        if isinstance(type_, (SequenceType, MappingType)):
            branch = tree.add(f"[white]<element>[/white]: {self._type_label(type_.element)}")
            self._add_type_children(branch, type_.element)
        elif isinstance(type_, StructuredType):
            for name, field_type in type_.fields.items():
                branch = tree.add(f"[white]{escape(name)}[/white]: {self._type_label(field_type)}")
                self._add_type_children(branch, field_type)
        elif isinstance(type_, TupleType):
            for i, element in enumerate(type_.elements):
                branch = tree.add(f"[white]{escape(f'[{i}]')}[/white]: {self._type_label(element)}")
                self._add_type_children(branch, element)

    def value_tree(self, value: TypedValue, label: str = "[bold cyan]object[/bold cyan]") -> Tree:
        tree = Tree(f"{label}{self._value_label(value)}")
        self._add_value_children(tree, value)
        return tree

    def _value_label(self, value: TypedValue) -> str:
        style = TAG_STYLES[value.tag]
        if value.tag is not Tag.KNOWN:
            return f" [{style}]({value.tag.value})[/{style}]"
        if isinstance(value.value, (list, dict)):
            return ""
        return f" = [{style}]{escape(repr(value.value))}[/{style}]"

    def _add_value_children(self, tree: Tree, value: TypedValue):
        for step, child in value.children():
            label = f"[{step}]" if isinstance(step, int) else str(step)
            branch = tree.add(f"[white]{escape(label)}[/white]{self._value_label(child)}")
            self._add_value_children(branch, child)

    def print_final_table(self, reports: List[Dict[str, Any]]):
        """
        Builds the summary table shown at the very end of an audit.
        """
        table = Table(title="KubeShape Audit Report", show_lines=True, header_style="bold magenta")
        table.add_column("File Path", style="cyan")
        table.add_column("Doc", justify="right")
        table.add_column("Kind", style="white")
        table.add_column("Status", style="bold")
        table.add_column("Result", justify="center")

        for r in reports:
            status = r.get("status", "ERROR")
            status_color = {"DECODED": "green", "PENDING": "yellow"}.get(status, "red")
            result_icon = "✅" if status == "DECODED" else "⏳" if status == "PENDING" else "❌"
            table.add_row(
                str(r.get("file_path")),
                str(r.get("document", "-")),
                str(r.get("kind", "Unknown")),
                f"[{status_color}]{status}[/{status_color}]",
                result_icon,
            )

        self.console.print(table)
