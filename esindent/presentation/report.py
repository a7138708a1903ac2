"""
Report renderers — Text and JSON output for check results.

Commands produce CheckResult lists; renderers handle display. This enables
format switching (text, json) without changing the commands.
"""

import json
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, TYPE_CHECKING

from .symbols import SymbolSet, get_symbols, visible_whitespace

if TYPE_CHECKING:
    from ..checker import CheckResult
    from ..core.source import SourceCode


class BaseRenderer(ABC):
    """
    Abstract base class for result renderers.

    Subclasses must implement render().
    """

    def __init__(self, symbols: Optional[SymbolSet] = None):
        self.symbols = symbols or get_symbols()

    @abstractmethod
    def render(self, results: List['CheckResult']) -> str:
        pass

    def format_count(self, count: int, singular: str, plural: Optional[str] = None) -> str:
        """Format count with singular/plural noun (e.g., "3 problems", "1 problem")."""
        if count == 1:
            return f"{count} {singular}"
        return f"{count} {plural or singular + 's'}"

    def summary(self, results: List['CheckResult']) -> Dict[str, int]:
        return {
            "files": len(results),
            "problems": sum(len(r.violations) for r in results),
            "errors": sum(1 for r in results if r.error is not None),
            "skipped": sum(1 for r in results if r.skipped),
        }


class TextRenderer(BaseRenderer):
    """
    Human-readable output, one block per file with problems:

        src/app.js
          3  Expected indentation of 2 spaces but found 4.
    """

    def render(self, results: List['CheckResult']) -> str:
        s = self.symbols
        lines = []
        for result in results:
            label = result.path or "<text>"
            if result.error is not None:
                lines.append(f"{s.check_fail} {label}")
                lines.append(f"  {result.error}")
                continue
            if not result.violations:
                continue
            lines.append(label)
            width = len(str(result.violations[-1].line))
            for violation in result.violations:
                lines.append(f"  {str(violation.line).rjust(width)}  {violation.message}")

        totals = self.summary(results)
        if totals["problems"] or totals["errors"]:
            if lines:
                lines.append("")
            parts = [self.format_count(totals["problems"], "problem")]
            if totals["errors"]:
                parts.append(self.format_count(totals["errors"], "file error"))
            lines.append(f"{s.check_fail} " + ", ".join(parts))
        else:
            checked = totals["files"] - totals["skipped"]
            lines.append(f"{s.check_pass} {self.format_count(checked, 'file')} checked, no problems")
        return "\n".join(lines)


class JsonRenderer(BaseRenderer):
    """
    Machine-readable output.

    Useful for piping to jq or editor integrations.
    """

    def render(self, results: List['CheckResult']) -> str:
        output = {
            "results": [result.to_dict() for result in results],
            "summary": self.summary(results),
        }
        return json.dumps(output, indent=2, default=self._json_serializer, ensure_ascii=False)

    def _json_serializer(self, obj: Any) -> Any:
        if hasattr(obj, "to_dict"):
            return obj.to_dict()
        return str(obj)


RENDERERS = {
    "text": TextRenderer,
    "json": JsonRenderer,
}


def render(results: List['CheckResult'], format: str = "text",
           symbols: Optional[SymbolSet] = None) -> str:
    """Render results with the renderer registered for a format."""
    renderer_class = RENDERERS.get(format, TextRenderer)
    return renderer_class(symbols=symbols).render(results)


def render_levels(source: 'SourceCode', levels: Dict[int, int],
                  symbols: Optional[SymbolSet] = None) -> str:
    """
    Annotated listing of expected levels:

        3  L1  ··return a;
    """
    s = symbols or get_symbols()
    width = len(str(source.line_count))
    lines = []
    for line in range(1, source.line_count + 1):
        text = source.line_bytes(line).decode('utf-8', errors='replace')
        if line in levels:
            stripped = text.lstrip(' \t')
            indent = visible_whitespace(s, text[:len(text) - len(stripped)])
            marker = f"L{levels[line]}"
            lines.append(f"{str(line).rjust(width)}  {marker:<4}{indent}{stripped}")
        elif text.strip():
            lines.append(f"{str(line).rjust(width)}  {'-':<4}{text}")
    return "\n".join(lines)
