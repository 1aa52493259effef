"""Formatting of raw execution output into displayable lines."""

from .models import OutputConfig, OutputKind, OutputLine


def format_output(raw_output: str, succeeded: bool) -> list[OutputLine]:
    """Split raw execution text into numbered output lines.

    Empty lines are kept, including the trailing one produced by a final
    line break.

    Args:
        raw_output: Combined stdout/stderr text from the execution service
        succeeded: Whether the run exited with code 0

    Returns:
        Ordered list of output lines, numbered from 1
    """
    kind = OutputKind.OUTPUT if succeeded else OutputKind.ERROR
    return [
        OutputLine(line_number=index, content=content, kind=kind)
        for index, content in enumerate(raw_output.split("\n"), start=1)
    ]


def render_output(lines: list[OutputLine], config: OutputConfig | None = None) -> str:
    """Render output lines as console text."""
    config = config or OutputConfig()
    if not config.show_line_numbers:
        return "\n".join(line.content for line in lines)

    width = len(str(len(lines))) if lines else 1
    return "\n".join(
        f"{line.line_number:>{width}}  {line.content}" for line in lines
    )
