"""CLI interface for GyanSathi"""

import sys
import time
import threading
import argparse
import logging
import textwrap
from pathlib import Path
from colorama import init, Fore, Style

from .engine import RetrievalEngine
from .knowledge import KnowledgeStorage
from .responses import CANNED_RESPONSES, format_stats
from . import config
from . import __version__, __author__, __powered_by__

# Initialize colorama for Windows support
init(autoreset=True)

# Only show WARNING+ from this module; verbose logging is silenced in __main__.py
logger = logging.getLogger(__name__)


# ── Typewriter helper ────────────────────────────────────────────────────────
def _typewrite(text: str, color: str = Fore.WHITE, delay: float = 0.013, end: str = '\n'):
    """Print text with a typewriter effect, one character at a time."""
    # Long texts print faster
    if len(text) > 400:
        delay = 0.005
    elif len(text) > 200:
        delay = 0.009
    sys.stdout.write(color)
    sys.stdout.flush()
    for ch in text:
        sys.stdout.write(ch)
        sys.stdout.flush()
        time.sleep(delay)
    sys.stdout.write(Style.RESET_ALL + end)
    sys.stdout.flush()


# ── Spinner ──────────────────────────────────────────────────────────────────
class _Spinner:
    """Animated braille spinner that runs in a background thread."""
    _FRAMES = ('⠋', '⠙', '⠹', '⠸', '⠼', '⠴', '⠦', '⠧', '⠇', '⠏')

    def __init__(self, message: str, color: str = Fore.YELLOW):
        self.message = message
        self.color   = color
        self._stop   = threading.Event()
        self._thread = threading.Thread(target=self._spin, daemon=True)

    def _spin(self):
        i = 0
        while not self._stop.is_set():
            frame = self._FRAMES[i % len(self._FRAMES)]
            sys.stdout.write(
                f"\r{self.color}  {frame}  {self.message}{Style.RESET_ALL}   "
            )
            sys.stdout.flush()
            time.sleep(0.09)
            i += 1

    def start(self):
        self._thread.start()
        return self

    def stop(self):
        self._stop.set()
        self._thread.join()
        sys.stdout.write('\r' + ' ' * (len(self.message) + 14) + '\r')
        sys.stdout.flush()

    def __enter__(self):
        return self.start()

    def __exit__(self, *_):
        self.stop()


class GyanSathiCLI:
    """Interactive CLI for the GyanSathi engine"""

    def __init__(self, data_dir: Path = None):
        self.data_dir = data_dir
        self.engine = None
        self.running = False

    def print_banner(self):
        """Print welcome banner with a subtle cascade-reveal effect."""
        W = 62

        def _row(label: str, value: str, vcol: str) -> str:
            inner = f"  {Fore.WHITE}{label}{vcol}{value}"
            pad   = W - 2 - len(label) - len(value)
            return f"{Fore.MAGENTA}║{inner}{' ' * max(pad, 0)}{Fore.MAGENTA}║{Style.RESET_ALL}"

        title_text = '·  জ্ঞানসাথী  ·'
        sub_text   = 'Bengali Knowledge Assistant'

        lines = [
            "",
            f"{Fore.MAGENTA}╔{'═' * W}╗{Style.RESET_ALL}",
            f"{Fore.MAGENTA}║{' ' * W}║{Style.RESET_ALL}",
            f"{Fore.MAGENTA}║{Fore.CYAN + Style.BRIGHT}{title_text:^{W}}{Style.RESET_ALL}{Fore.MAGENTA}║{Style.RESET_ALL}",
            f"{Fore.MAGENTA}║{Fore.YELLOW}{sub_text:^{W}}{Style.RESET_ALL}{Fore.MAGENTA}║{Style.RESET_ALL}",
            f"{Fore.MAGENTA}║{' ' * W}║{Style.RESET_ALL}",
            f"{Fore.MAGENTA}║{'─' * W}║{Style.RESET_ALL}",
            f"{Fore.MAGENTA}║{' ' * W}║{Style.RESET_ALL}",
            _row("Developed by  : ", __author__,    Fore.GREEN),
            _row("Powered by    : ", __powered_by__, Fore.CYAN),
            _row("Version       : ", f"v{__version__}", Fore.WHITE),
            f"{Fore.MAGENTA}║{' ' * W}║{Style.RESET_ALL}",
            f"{Fore.MAGENTA}╚{'═' * W}╝{Style.RESET_ALL}",
            "",
        ]

        for line in lines:
            print(line)
            time.sleep(0.030)

    def print_help(self):
        bar = f"{Fore.CYAN}{'─' * 60}{Style.RESET_ALL}"
        print(f"\n{bar}")
        _typewrite("  Commands", Fore.CYAN + Style.BRIGHT, delay=0.035)
        print(bar)

        for cmd, desc in [
            ("learn",        "Teach a new passage (title, then text)"),
            ("qa",           "Add a question with its answer"),
            ("bulk <file>",  "Import Q&A pairs from a text file"),
            ("wiki <query>", "Learn the introduction of a Wikipedia page"),
            ("list",         "List stored passages and Q&A pairs"),
            ("delete <id>",  "Delete a passage or Q&A pair"),
            ("stats",        "Show knowledge statistics"),
            ("clear",        "Clear all passages and the conversation"),
            ("clearqa",      "Clear all Q&A pairs"),
            ("version",      "Show version and credits"),
            ("help",         "Show this help message"),
            ("quit",         "Exit the application"),
        ]:
            print(f"  {Fore.GREEN}{cmd:<14}{Style.RESET_ALL}{Fore.WHITE}{desc}{Style.RESET_ALL}")

        print(f"\n{Fore.CYAN + Style.BRIGHT}  Usage{Style.RESET_ALL}")
        print(f"  Type a question in Bengali and press Enter.")
        print(f"  Answers come only from what you have taught.\n")
        print(f"{Fore.CYAN + Style.BRIGHT}  Examples{Style.RESET_ALL}")
        for ex in [
            "তোমার নাম কি?",
            "রবীন্দ্রনাথ কোথায় জন্মগ্রহণ করেন?",
            "তিনি কত সালে মারা যান?",
        ]:
            time.sleep(0.060)
            print(f"  {Fore.YELLOW}›{Style.RESET_ALL} {ex}")
        print(f"{bar}\n")

    def print_response(self, text: str):
        """Print response with typewriter body."""
        sep   = f"{Fore.GREEN}{'─' * 62}{Style.RESET_ALL}"
        label = f"{Fore.GREEN + Style.BRIGHT}  {config.CLI_ASSISTANT}{Style.RESET_ALL}"
        print(f"\n{sep}")
        print(label)
        print(sep)

        for raw_line in text.splitlines():
            chunks = textwrap.wrap(raw_line, width=config.CLI_WIDTH) if len(raw_line) > config.CLI_WIDTH else [raw_line]
            for line in chunks:
                stripped = line.strip()
                if not stripped or set(stripped) <= set('─—-='):
                    print(f"{Fore.WHITE}{line}{Style.RESET_ALL}")
                else:
                    _typewrite(line, Fore.WHITE, delay=0.013)

        print(f"{sep}\n")

    def print_error(self, error: str):
        print(f"\n{Fore.RED}  ✗  {error}{Style.RESET_ALL}\n")

    def print_success(self, message: str):
        print(f"{Fore.GREEN}  ✓  {message}{Style.RESET_ALL}\n")

    def get_input(self) -> str:
        """Get user input with styled prompt."""
        try:
            prompt = (
                f"{Fore.LIGHTMAGENTA_EX}  ╰─{Style.RESET_ALL}"
                f"{Fore.LIGHTMAGENTA_EX + Style.BRIGHT} {config.CLI_PROMPT} {Style.RESET_ALL}"
                f"{Fore.LIGHTMAGENTA_EX}›{Style.RESET_ALL} "
            )
            return input(prompt).strip()
        except (KeyboardInterrupt, EOFError):
            return "quit"

    def _ask(self, label: str) -> str:
        try:
            return input(f"{Fore.CYAN}  {label}: {Style.RESET_ALL}").strip()
        except (KeyboardInterrupt, EOFError):
            return ''

    def _ask_multiline(self, label: str) -> str:
        """Read lines until an empty line."""
        print(f"{Fore.CYAN}  {label} (finish with an empty line):{Style.RESET_ALL}")
        lines = []
        while True:
            try:
                line = input("  ")
            except (KeyboardInterrupt, EOFError):
                break
            if not line.strip():
                break
            lines.append(line)
        return "\n".join(lines).strip()

    def initialize_engine(self):
        """Load stored knowledge with an animated loading spinner."""
        print()
        sp = _Spinner("Loading knowledge…", Fore.YELLOW).start()
        try:
            storage = KnowledgeStorage(config.knowledge_dir(self.data_dir))
            self.engine = RetrievalEngine(storage=storage)
            sp.stop()
            stats = self.engine.get_knowledge_stats()
            print(f"{Fore.GREEN}  ✓  Ready! {stats['total']} passages, {stats['qa_pairs']} Q&A pairs{Style.RESET_ALL}\n")
            self.print_response(CANNED_RESPONSES["greeting"])
            return True
        except Exception as e:
            sp.stop()
            self.print_error(f"Failed to initialize: {e}")
            logger.exception("Initialization error")
            return False

    # ── Commands ─────────────────────────────────────────────────────────────

    def cmd_learn(self):
        title = self._ask("শিরোনাম")
        content = self._ask_multiline("বিষয়বস্তু")
        if not title or not content:
            self.print_error("Title and content are both required.")
            return
        item = self.engine.learn_from_text(title, content)
        self.print_success(f"Learned \"{item.title}\" ({len(item.keywords)} keywords)")

    def cmd_qa(self):
        question = self._ask("প্রশ্ন")
        answer = self._ask("উত্তর")
        if not question or not answer:
            self.print_error("Question and answer are both required.")
            return
        self.engine.add_question_answer(question, answer)
        self.print_success("Q&A pair added")

    def cmd_bulk(self, path: str):
        if not path:
            self.print_error("Usage: bulk <file>")
            return
        try:
            text = Path(path).expanduser().read_text(encoding="utf-8")
        except OSError as e:
            self.print_error(f"Could not read {path}: {e}")
            return
        added, failed = self.engine.import_bulk_qa(text, progress=True)
        self.print_success(f"{added} pairs imported, {failed} failed")

    def cmd_wiki(self, query: str):
        if not query:
            self.print_error("Usage: wiki <query>")
            return
        with _Spinner("Fetching from Wikipedia…", Fore.YELLOW):
            item = self.engine.learn_from_wikipedia(query)
        if item is None:
            self.print_error(f"Nothing found on Wikipedia for \"{query}\"")
        else:
            self.print_success(f"Learned \"{item.title}\" from Wikipedia")

    def cmd_list(self):
        items = self.engine.get_knowledge_base()
        pairs = self.engine.get_question_answer_pairs()
        print(f"\n{Fore.CYAN + Style.BRIGHT}  Passages ({len(items)}){Style.RESET_ALL}")
        for item in items:
            print(f"  {Fore.YELLOW}{item.id[:8]}{Style.RESET_ALL}  {item.title}")
        print(f"\n{Fore.CYAN + Style.BRIGHT}  Q&A pairs ({len(pairs)}){Style.RESET_ALL}")
        for pair in pairs:
            print(f"  {Fore.YELLOW}{pair.id[:8]}{Style.RESET_ALL}  {pair.question}")
        print()

    def cmd_delete(self, prefix: str):
        """Delete by id or by a unique id prefix."""
        if not prefix:
            self.print_error("Usage: delete <id>")
            return
        items = [i.id for i in self.engine.get_knowledge_base() if i.id.startswith(prefix)]
        pairs = [p.id for p in self.engine.get_question_answer_pairs() if p.id.startswith(prefix)]
        if len(items) + len(pairs) != 1:
            self.print_error(f"No unique entry matches \"{prefix}\"")
            return
        if items:
            self.engine.delete_knowledge(items[0])
        else:
            self.engine.delete_question_answer(pairs[0])
        self.print_success("Deleted")

    def _confirm(self, message: str) -> bool:
        return self._ask(f"{message} (yes/no)").lower() == 'yes'

    def handle_command(self, command: str):
        """
        Handle special commands.
        Returns True to continue, False to exit, None if not a command.
        """
        name, _, arg = command.partition(' ')
        name, arg = name.lower(), arg.strip()

        if name in ('quit', 'exit', 'q'):
            _typewrite("\n  ধন্যবাদ! আবার দেখা হবে। 👋", Fore.MAGENTA, delay=0.022)
            print()
            return False

        handlers = {
            'help':    lambda: self.print_help(),
            'version': lambda: self.print_version(),
            'learn':   lambda: self.cmd_learn(),
            'qa':      lambda: self.cmd_qa(),
            'bulk':    lambda: self.cmd_bulk(arg),
            'wiki':    lambda: self.cmd_wiki(arg),
            'list':    lambda: self.cmd_list(),
            'delete':  lambda: self.cmd_delete(arg),
            'stats':   lambda: print(f"\n{format_stats(self.engine.get_knowledge_stats(), self.engine.get_conversation_insights())}\n"),
        }
        if name in handlers and (arg == '' or name in ('bulk', 'wiki', 'delete')):
            handlers[name]()
            return True

        if name == 'clear' and not arg:
            if self._confirm("Clear all passages and the conversation?"):
                self.engine.clear_knowledge_base()
                self.print_success("Knowledge base cleared")
            else:
                print(f"{Fore.CYAN}  Cancelled.{Style.RESET_ALL}\n")
            return True

        if name == 'clearqa' and not arg:
            if self._confirm("Clear all Q&A pairs?"):
                self.engine.clear_question_answers()
                self.print_success("Q&A pairs cleared")
            else:
                print(f"{Fore.CYAN}  Cancelled.{Style.RESET_ALL}\n")
            return True

        return None  # Not a command

    def run(self):
        """Main CLI loop."""
        self.print_banner()
        self.print_help()

        if not self.initialize_engine():
            return

        self.running = True

        while self.running:
            try:
                user_input = self.get_input()
                if not user_input:
                    continue

                result = self.handle_command(user_input)
                if result is False:
                    break
                if result is True:
                    continue

                response = self.engine.generate_response(user_input)
                self.print_response(response)

            except KeyboardInterrupt:
                print(f"\n{Fore.YELLOW}  Use 'quit' to exit.{Style.RESET_ALL}\n")
            except ValueError as e:
                self.print_error(str(e))
            except Exception as e:
                self.print_error(f"Unexpected error: {e}")
                logger.exception("Unexpected error in main loop")

    def print_version(self):
        print()
        _typewrite(f"  জ্ঞানসাথী (GyanSathi) v{__version__}", Fore.CYAN + Style.BRIGHT, delay=0.020)
        print(f"  {Fore.GREEN}Developer : {__author__}{Style.RESET_ALL}")
        print(f"  {Fore.CYAN}Powered by: {__powered_by__}{Style.RESET_ALL}")
        print()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gyansathi",
        description="GyanSathi - rule-based Bengali question answering over your own knowledge",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            f"Developed by: {__author__}\n"
            f"Powered by:   {__powered_by__}\n"
            f"Version:      {__version__}"
        ),
    )
    parser.add_argument(
        "--version", "-v",
        action="version",
        version=(
            f"{Fore.CYAN}GyanSathi v{__version__}{Style.RESET_ALL}\n"
            f"{Fore.GREEN}Developed by: {__author__}{Style.RESET_ALL}\n"
            f"{Fore.BLUE}Powered by:   {__powered_by__}{Style.RESET_ALL}"
        ),
    )
    parser.add_argument(
        "--about",
        action="store_true",
        help="Show detailed about information and exit",
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help=f"Directory for stored knowledge (default: {config.BASE_DIR})",
    )
    return parser


def main(argv=None):
    """Main entry point - supports --version, --about, --data-dir and interactive mode"""
    args = build_parser().parse_args(argv)

    if args.about:
        print(f"{Fore.CYAN}জ্ঞানসাথী (GyanSathi){Style.RESET_ALL}")
        print(f"  Rule-based answers from passages and Q&A pairs you teach it")
        print(f"  {Fore.GREEN}Version   : {__version__}{Style.RESET_ALL}")
        print(f"  {Fore.GREEN}Developer : {__author__}{Style.RESET_ALL}")
        print(f"  {Fore.BLUE}Powered by: {__powered_by__}{Style.RESET_ALL}")
        print(f"\n  Run {Fore.YELLOW}gyansathi{Style.RESET_ALL} to start the interactive assistant.")
        return

    cli = GyanSathiCLI(data_dir=args.data_dir)
    try:
        cli.run()
    except Exception as e:
        print(f"{Fore.RED}Fatal error: {e}{Style.RESET_ALL}")
        logging.exception("Fatal error")
        sys.exit(1)


if __name__ == "__main__":
    main()
