"""
Help rendering for discovered tasks.

Plain formatters
- format_param(): "<name>" required, "[name]" optional, "[name...]" rest.
- format_flags(): "--name, -n, --alias" (empty for rest or flagless parameters).
- signature(): "task <a> [b]".

Rich renderers (HelpRenderer)
- task(): usage line, description, parameter table (name, type, required/optional, flags).
- listing(): available tasks, root first, then one heading per namespace.
- overview(): title, header doc, listing and the usage footer.

Every user-supplied fragment is wrapped in rich Text so brackets in signatures
are never parsed as console markup.

Customization
- Define a mapping named __styles__ in __main__ to override any palette entry.
- When colorful is False, styling is suppressed.
"""
from collections import defaultdict

from rich.box import ROUNDED
from rich.console import Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

TITLE = "taskonaut — Python task runner"


def format_param(param, /):
    if param.rest:
        return f"[{param.name}...]"
    return f"<{param.name}>" if param.required else f"[{param.name}]"


def format_flags(param, /):
    if param.flag is None or param.rest:
        return ""
    return ", ".join(param.flag.names)


def signature(name, task, /):
    return " ".join([name, *map(format_param, task.params)])


class HelpRenderer:
    """
    Renders help views as rich renderables; printing is left to the caller.
    """

    def __init__(self, prog="tkn", *, colorful=True, fancy=False):
        self.prog = prog
        self.colorful = colorful
        self.fancy = fancy
        self.styles = defaultdict(str, {
            # === Head sections ===
            "title": "bold #FF4D94",
            "usage-label": "bold #00E6FF",
            "program-name": "bold #FF4D94",
            "usage-section": "bold #36C5F0",
            "description-section": "italic #A3A3A3",

            # === Listing ===
            "group-label": "bold #FFFFFF",
            "task": "bold #36C5F0",
            "metavar": "bold #FFD600",

            # === Parameter table ===
            "table": "#4B5563",
            "table-title": "bold #FFFFFF",
            "parameter": "bold #00E6FF",
            "type": "#D1D5DB",
            "required": "bold #22C55E",
            "optional": "#9CA3AF",
            "flag-name": "bold #22C55E",

            # === Footer / panel ===
            "epilog-section": "#737373",
            "panel-title": "bold #FF4D94",
        } | getattr(__import__("__main__"), "__styles__", {}))

    def styler(self, style):
        return self.styles[style] if self.colorful else ""

    def text(self, fragment, style=""):
        return Text(str(fragment), self.styler(style) if style else "")

    def _signature(self, name, task):
        return Text(" ").join([
            self.text(name, "task"),
            *(self.text(format_param(param), "metavar") for param in task.params),
        ])

    def _framed(self, renders, title):
        renderable = Group(*renders)
        if self.fancy:
            renderable = Panel(
                renderable,
                title=Text.assemble("[ ", title.upper(), " ]", style=self.styler("panel-title")),
                title_align="left",
            )
        return renderable

    def usage(self, name, task, /):
        return Text.assemble(
            self.text("usage", "usage-label"), ": ",
            self.text(self.prog, "program-name"), " ",
            self._signature(name, task),
        )

    def task(self, name, task, /):
        """
        Per-task help: usage line, description, then the parameter table when any.
        """
        renders = [self.usage(name, task).append("\n")]

        if task.description:
            renders.append(self.text(task.description, "description-section").append("\n"))

        if task.params:
            table = Table(
                "name", "type", "", "flags",
                title=self.text("arguments", "table-title"),
                title_justify="left",
                box=ROUNDED,
                style=self.styler("table"),
                header_style=self.styler("table-title"),
            )
            for param in task.params:
                table.add_row(
                    self.text(param.name, "parameter"),
                    self.text(f"{param.type}..." if param.rest else param.type, "type"),
                    self.text("(required)", "required") if param.required else self.text("(optional)", "optional"),
                    self.text(format_flags(param), "flag-name"),
                )
            renders.append(table)
        elif task.reflected:
            renders.append(self.text("arguments are passed through verbatim", "epilog-section"))

        return self._framed(renders, f"{self.prog} {name}")

    def listing(self, registry, /):
        """
        Available tasks: root signatures first, then each namespace under its heading.
        """
        listing = Text()
        listing.append(self.text("available tasks", "group-label")).append(":\n\n")
        for name, task in registry.root.items():
            listing.append("  ").append(self._signature(name, task)).append("\n")

        for namespace, methods in registry.namespaces.items():
            listing.append("\n").append(self.text(namespace, "group-label")).append(":\n")
            for method, task in methods.items():
                listing.append("  ").append(self._signature(f"{namespace}:{method}", task)).append("\n")

        listing.rstrip()
        return listing

    def overview(self, registry, /):
        renders = [self.text(TITLE, "title").append("\n")]
        if registry.header_doc:
            renders.append(self.text(registry.header_doc, "description-section").append("\n"))
        renders.append(self.listing(registry).append("\n"))

        footer = Text.assemble(
            self.text("usage", "usage-label"), ": ",
            self.text(self.prog, "program-name"), " <task> [args...]\n",
            " " * 7, self.text(self.prog, "program-name"), " <task> -h   ",
            self.text("show help for a specific task", "epilog-section"),
        )
        renders.append(footer)
        return self._framed(renders, f"{self.prog} help")


__all__ = (
    "TITLE",
    "format_param",
    "format_flags",
    "signature",
    "HelpRenderer",
)
