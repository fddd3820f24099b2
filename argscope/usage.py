"""
Argscope usage and help rendering (rich).

What this module provides
- render_usage(schema, ...): a one-paragraph usage line plus a pointer to the
  help option, as a rich Text.
- render_help(schema, ...): the full help screen (title, purpose, usage line,
  arguments, options) as a rich renderable.
- show_usage(schema, ...) / show_help(schema, ...): print the above to a
  console (stderr for usage, stdout for help).

Layout
- Usage: "usage: PROG FOO [BAR] [FILES...] [OPTIONS]". Positional slots come
  first, in order, then the rest argument, then OPTIONS ("OPTIONS" when the
  schema has requirement sets, "[OPTIONS]" otherwise).
- Help sections: "arguments" (positional, command and rest arguments, each
  command listing its command values) and "options" (keyword and flag
  arguments). An argument's usage_break, when set, is printed as a heading
  above it. Defaults are appended to descriptions unless the argument is
  sensitive.

Palette keys
- usage-label, program-name, usage-hint, title, purpose
- group-label, break-label, argument-description, default
- option-name, flag-name, metavar, greedy-metavar, command, command-description
- panel-title

Customization
- Define a mapping named __styles__ in __main__ to override palette entries,
  and __prog__ to override the program name.
- colorful=False renders plain text; fancy=True wraps the help in a panel.
"""
from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .arguments import *
from .faults import _prog, _styled, console
from .utils import *

PALETTE = {
    # === Head sections ===
    "usage-label": "bold #00E6FF",
    "program-name": "bold #FF4D94",
    "usage-hint": "italic #737373",
    "title": "bold #FFFFFF underline",
    "purpose": "italic #A3A3A3",

    # === Groups / arguments ===
    "group-label": "bold #FFFFFF",
    "break-label": "bold #36C5F0",
    "argument-description": "#9CA3AF",
    "default": "#737373",

    # === Names / metavars ===
    "option-name": "bold #00E6FF",
    "flag-name": "bold #22C55E",
    "metavar": "bold #FFD600",
    "greedy-metavar": "bold italic #FFD600",
    "command": "bold #36C5F0",
    "command-description": "#9CA3AF",

    # === Fancy panel ===
    "panel-title": "bold #FF4D94",
}

PADDING = 2


def _palette(colorful):
    return _styled({"colorful": colorful}, PALETTE)


def _usage_items(schema, styler, text):
    items = []
    for argument in schema.positional_args():
        style = "command" if argument.kind is ArgumentKind.COMMAND else "metavar"
        label = text(str(argument), styler(style))
        items.append(label if argument.required else Text.assemble("[", label, "]"))
    if (rest := schema.rest_arg()) is not None:
        label = Text.assemble(text(str(rest), styler("greedy-metavar")), "...")
        items.append(label if rest.required else Text.assemble("[", label, "]"))
    if schema.non_positional_args():
        items.append(Text("OPTIONS" if schema.requires_some else "[OPTIONS]"))
    return items


def render_usage(schema, /, *, prog=Unset, colorful=True, width=Unset):
    """
    Build the usage paragraph for a schema.

    Parameters
    - schema: the (possibly collapsed) Schema to describe.
    - prog: program name; defaults to __main__.__prog__, then sys.argv[0].
    - colorful: apply the palette.
    - width: wrap width; defaults to the stderr console width.
    """
    styler, text = _palette(colorful)
    width = coalesce(width, console.width)

    usage = Text()
    usage.append(text("usage", styler("usage-label"))).append(": ")
    usage.append(text(_prog({"prog": coalesce(prog)}), styler("program-name")))
    usage.append(" ")
    offset = len(usage)

    # Wrap usage items with a hanging indent under the first one.
    lines = []
    for item in _usage_items(schema, styler, text):
        if lines and len(lines[-1]) + 1 + len(item) <= width - offset:
            lines[-1].append(Text(" ") + item)
        else:
            lines.append(item)
    for index, line in enumerate(lines):
        if index:
            usage.append("\n").append(" " * offset)
        usage.append(line)

    usage.append("\n\n")
    usage.append(text("Specify the /? or --help option for more detailed help", styler("usage-hint")))
    return usage


def _option_label(argument, styler, text):
    style = "flag-name" if argument.kind is ArgumentKind.FLAG else "option-name"
    label = Text()
    if argument.short_key:
        label.append(text("-" + argument.short_key, styler(style))).append(", ")
    label.append(text(str(argument), styler(style)))
    if argument.kind is ArgumentKind.KEYWORD:
        value = text(argument.usage_value, styler("metavar"))
        label.append(" ").append(Text.assemble("[", value, "]") if argument.accepts_no_value else value)
    return label


def _argument_label(argument, styler, text):
    match argument.kind:
        case ArgumentKind.COMMAND:
            return text(str(argument), styler("command"))
        case ArgumentKind.REST:
            return Text.assemble(text(str(argument), styler("greedy-metavar")), "...")
        case _:
            return text(str(argument), styler("metavar"))


def _description(argument, styler, text):
    descr = text(argument.descr, styler("argument-description")).copy() if argument.descr else Text()
    default = argument.default
    if default is not None and default is not False and default != [] and \
            argument.value_bearing and not argument.sensitive:
        if descr:
            descr.append("\n")
        descr.append(text(f"[default: {default}]", styler("default")))
    elif argument.kind is ArgumentKind.FLAG and default:
        if descr:
            descr.append("\n")
        descr.append(text("[default: on]", styler("default")))
    return descr


def _rows(render, rows, width, indent, styler, text):
    """Append (argument, label, description) rows with a hanging-indent description column."""
    for argument, label, descr, padding in rows:
        if argument is not None and argument.usage_break:
            render.append("\n").append(text(argument.usage_break, styler("break-label"))).append("\n")
        section = Text(" " * padding) + label
        if descr:
            if len(section) >= indent:
                section.append("\n").append(" " * indent)
            else:
                section.append(" " * (indent - len(section)))
            wrapped = descr.wrap(console, max(width - indent, 10))
            for index, line in enumerate(wrapped):
                if index:
                    section.append("\n").append(" " * indent)
                section.append(line)
        render.append(section).append("\n")


def render_help(schema, /, *, prog=Unset, colorful=True, fancy=False, width=Unset):
    """
    Build the help screen for a schema.

    Parameters
    - schema: the (possibly collapsed) Schema to describe.
    - prog, colorful, width: as for render_usage().
    - fancy: wrap the screen in a panel titled with the program name.
    """
    styler, text = _palette(colorful)
    width = coalesce(width, console.width) - 4 * bool(fancy)
    name = _prog({"prog": coalesce(prog)})
    renders = []

    if title := schema.title or name:
        heading = Text()
        heading.append(text(title, styler("title")))
        if schema.purpose:
            heading.append("\n\n")
            for index, line in enumerate(text(schema.purpose, styler("purpose")).wrap(console, width)):
                if index:
                    heading.append("\n")
                heading.append(line)
        renders.append(heading.append("\n"))

    renders.append(render_usage(schema, prog=prog, colorful=colorful, width=width).append("\n"))

    # Arguments: positional slots, command values, rest.
    arguments = schema.positional_args()
    if (rest := schema.rest_arg()) is not None:
        arguments.append(rest)
    if arguments:
        rows = []
        for argument in arguments:
            rows.append((argument, _argument_label(argument, styler, text), _description(argument, styler, text), PADDING))
            if isinstance(argument, CommandArgument):
                for command, instance in argument.commands.items():
                    descr = text(instance.descr, styler("command-description")).copy() if instance.descr else Text()
                    rows.append((None, text(command, styler("command")), descr, PADDING * 3))
        indent = min(max(len(label) + padding for _, label, _, padding in rows) + 4, width // 3)
        section = Text()
        section.append(text("arguments", styler("group-label"))).append(":\n")
        _rows(section, rows, width, indent, styler, text)
        renders.append(section)

    # Options: keyword and flag arguments.
    if options := schema.non_positional_args():
        rows = [
            (argument, _option_label(argument, styler, text), _description(argument, styler, text), PADDING)
            for argument in options
        ]
        indent = min(max(len(label) + padding for _, label, _, padding in rows) + 4, width // 3)
        section = Text()
        section.append(text("options", styler("group-label"))).append(":\n")
        _rows(section, rows, width, indent, styler, text)
        renders.append(section)

    renders[-1].rstrip()
    renderable = Group(*renders)
    if fancy:
        renderable = Panel(
            renderable,
            title=Text.assemble("[", " ", f"{name} HELP".upper(), " ", "]", style=styler("panel-title")),
            title_align="left",
        )
    return renderable


def show_usage(schema, /, *, file=Unset, **options):
    """Print the usage paragraph (to stderr unless a file is given)."""
    target = console if file is Unset else Console(file=file)
    target.print(render_usage(schema, **options))


def show_help(schema, /, *, file=Unset, **options):
    """Print the help screen (to stdout unless a file is given)."""
    target = Console() if file is Unset else Console(file=file)
    target.print(render_help(schema, **options))


__all__ = (
    "render_usage",
    "render_help",
    "show_usage",
    "show_help",
)
