"""Interactive calculator REPL on top of a ``Calculator`` session.

Each input line is typed keys followed by '='. A line that starts with an
operator continues from the previous result (``+2``). Lines starting with ':'
are commands.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.history import FileHistory

from calcpad import history as hist
from calcpad.converter import all_bases
from calcpad.errors import CalculatorError, LexError, UnknownHistoryEntry
from calcpad.modes import NumberBase, enabled_labels, parse_mode
from calcpad.session import Calculator, evaluate_expression

logger = logging.getLogger(__name__)

_COMMANDS = [
    ':help', ':mode', ':base', ':history', ':recall', ':clear-history',
    ':clear', ':del', ':state', ':bases', ':keys', ':exit',
]

_HELP_TOPICS: Dict[str, str] = {
    'general': (
        "Calculator REPL help:\n"
        "Type an expression and press Enter to evaluate it. A line that starts\n"
        "with an operator continues from the last result.\n"
        "Examples:\n"
        "  5+3        -> 8\n"
        "  +2         -> 10\n"
        "  sin(pi/2)  -> 1        (scientific mode)\n"
        "  FF AND 0F  -> F        (programmer mode, base hex)\n"
        "Commands:\n"
        "  :help [topic]          show help (topics: general, keys, modes)\n"
        "  :mode [name]           show or set mode (standard, scientific, programmer)\n"
        "  :base [name]           show or set programmer base (hex, dec, oct, bin)\n"
        "  :history [keyword]     list history, most recent first\n"
        "  :recall <id>           put a history result back on the display\n"
        "  :clear-history         forget all history\n"
        "  :clear, :del           clear the entry or delete the last key\n"
        "  :state                 show display, expression and status\n"
        "  :bases                 show the current value in every base\n"
        "  :keys                  list the keys enabled right now\n"
        "  :exit                  exit\n"
    ),
    'keys': (
        "Typed input maps onto keypad keys:\n"
        "  * and / are × and ÷; ^ is xʸ; ² and ³ are x² and x³\n"
        "  sqrt( or √( is the square root key; pi or π is the π key\n"
        "  AND OR XOR NOT MOD << >> are the programmer keys (any case)\n"
        "  In hex, letters a-f are digits; 'e' is still Euler's number elsewhere\n"
    ),
    'modes': (
        "Modes:\n"
        "  standard    + - × ÷ %, x², √, 1/x, ±\n"
        "  scientific  adds ( ), sin cos tan ln log, π e, x³ xʸ, inv\n"
        "  programmer  integer arithmetic, AND OR XOR NOT MOD << >>, bases\n"
        "Operators and precedence (low -> high):\n"
        "  OR XOR, AND, + -, * / % MOD << >>, prefix - NOT, ^ (right-assoc)\n"
    ),
}


def show_help(topic: Optional[str] = None) -> str:
    """Return help text for topic or general if None."""
    if not topic:
        return _HELP_TOPICS['general']
    return _HELP_TOPICS.get(topic.lower(), f"No help available for topic '{topic}'")


class REPL:
    """Read-Eval-Print Loop for the calculator."""

    def __init__(self, calculator: Optional[Calculator] = None, history_file: Optional[str] = None):
        self.calculator = calculator or Calculator()
        self.history_file = history_file

    def _process_command(self, line: str) -> Optional[str]:
        """Run a ':' command and return its output, or None if ``line`` is not a command."""
        s = line.strip()
        if not s.startswith(':'):
            return None
        body = s[1:].strip()
        if not body:
            return "No command specified. Use :help for available commands."
        parts = body.split(None, 1)
        cmd = parts[0].lower()
        arg = parts[1].strip() if len(parts) > 1 else ''
        return self._run_command(cmd, arg)

    def _run_command(self, cmd: str, arg: str) -> str:
        """Execute a REPL command. Raises EOFError for exit/quit."""
        calc = self.calculator
        logger.debug(f"command :{cmd} {arg}".rstrip())
        if cmd in {'exit', 'quit'}:
            raise EOFError()
        if cmd == 'help':
            return show_help(arg or None)
        if cmd == 'mode':
            if arg:
                try:
                    calc.select_mode(parse_mode(arg))
                except ValueError as e:
                    return str(e)
            return f"Mode: {calc.state.mode.value}"
        if cmd == 'base':
            if arg:
                try:
                    calc.select_base(NumberBase.parse(arg))
                except ValueError as e:
                    return str(e)
            return f"Base: {calc.state.number_base.name}"
        if cmd == 'history':
            entries = hist.search(calc.state.history, arg) if arg else calc.list_history()
            if not entries:
                return "(no history)"
            return "\n".join(hist.format_entry(e) for e in entries)
        if cmd == 'recall':
            try:
                calc.select_history_entry(int(arg))
            except ValueError:
                return "Usage: :recall <id>"
            except UnknownHistoryEntry as e:
                return str(e)
            return calc.display_text
        if cmd == 'clear-history':
            calc.clear_history()
            return "History cleared"
        if cmd == 'clear':
            calc.on_clear()
            return calc.display_text
        if cmd == 'del':
            calc.on_delete()
            return calc.display_text
        if cmd == 'state':
            state = calc.state
            return (f"display: {state.display_text}\n"
                    f"expression: {state.raw_expression}\n"
                    f"status: {state.status.value}\n"
                    f"mode: {state.mode.value}  base: {state.number_base.name}")
        if cmd == 'bases':
            return self._show_bases()
        if cmd == 'keys':
            return " ".join(enabled_labels(calc.state.mode, calc.state.number_base))
        return f"Unknown command: {cmd}"

    def _show_bases(self) -> str:
        state = self.calculator.state
        raw = state.raw_expression or '0'
        try:
            value = evaluate_expression(raw, state.mode, state.number_base)
        except CalculatorError as e:
            return f"Error: {e}"
        if isinstance(value, float):
            if not value.is_integer():
                return f"{value!r} is not an integer"
            value = int(value)
        return "\n".join(f"{base.name}: {text}" for base, text in all_bases(value).items())

    def evaluate_line(self, line: str) -> Tuple[bool, str]:
        """Evaluate a single line (either command or expression). Returns (ok, output)."""
        cmd_out = self._process_command(line)
        if cmd_out is not None:
            return True, cmd_out

        calc = self.calculator
        try:
            rejected = calc.enter(line)
        except LexError as e:
            return False, f"Error: {e}"
        if rejected:
            keys = ", ".join(rejected)
            return False, f"Not available in {calc.state.mode.value} mode: {keys}"
        outcome = calc.on_equals()
        if outcome.ok:
            return True, outcome.entry.result
        return False, f"Error: {outcome.message}"

    def _completions(self) -> List[str]:
        return _COMMANDS + enabled_labels(self.calculator.state.mode, self.calculator.state.number_base)

    def repl_loop(self) -> None:
        """Interactive loop with prompt_toolkit line history and completion."""
        print("Calculator REPL. Type :help for help. Ctrl-D or :exit to quit.")
        history = FileHistory(self.history_file) if self.history_file else None
        session = PromptSession(history=history)
        while True:
            try:
                completer = WordCompleter(self._completions(), ignore_case=True, sentence=True)
                prompt = f"[{self.calculator.state.mode.value}] > "
                line = session.prompt(prompt, completer=completer)
            except KeyboardInterrupt:
                print("^C")
                continue
            except EOFError:
                print("Exiting.")
                break
            if not line.strip():
                continue
            try:
                ok, out = self.evaluate_line(line)
            except EOFError:
                print("Exiting.")
                break
            print(out)
