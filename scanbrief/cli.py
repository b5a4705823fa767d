"""
ScanBrief - Main CLI interface
AI security summaries for host scan datasets
"""
import sys
import json
import asyncio
import argparse

from colorama import init, Fore, Style
from dotenv import load_dotenv

from . import __version__
from .models.analysis import AnalysisRequest
from .services.ai import model_table
from .services.ai.settings import AISettings
from .services.ai_analyzer import SecurityAnalyzer
from .utils.config_loader import ConfigLoader, mask_secret
from .utils.logger import setup_logging

# Initialize colorama
init(autoreset=True)

ANALYZE_EXAMPLES = """\
Examples:
  scanbrief analyze hosts.json
  scanbrief analyze hosts.json --model o1-mini
  scanbrief analyze hosts.json --model Meta-Llama-3.1-70B-Instruct --output report.md
  cat hosts.json | scanbrief analyze -

Credentials are read from the environment (or a .env file):
  OPENAI_API_KEY  for OpenAI models
  GITHUB_TOKEN    for GitHub Models
"""


# ── Helpers ────────────────────────────────────────────────────────────────

def load_input(source):
    """Read scan data from a file path or '-' for stdin.

    JSON content is parsed; anything else is passed through as text.

    Args:
        source: File path or '-'

    Returns:
        Parsed JSON value or raw text
    """
    if source == '-':
        text = sys.stdin.read()
    else:
        with open(source, 'r', encoding='utf-8') as f:
            text = f.read()

    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


def handle_analyze(args, settings):
    """Run an analysis and print or save the summary.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    try:
        data = load_input(args.file)
    except (OSError, UnicodeDecodeError) as e:
        print(f"{Fore.RED}[ERROR] Cannot read {args.file}: {e}{Style.RESET_ALL}")
        return 1

    if data is None or (not data and not isinstance(data, (list, dict))):
        print(f"{Fore.RED}[ERROR] No data provided in {args.file}{Style.RESET_ALL}")
        return 1

    analyzer = SecurityAnalyzer(settings=settings)
    result = asyncio.run(analyzer.analyze(AnalysisRequest(raw_data=data, model_key=args.model)))

    if not result.ok:
        print(f"{Fore.RED}[ERROR] {result.message}{Style.RESET_ALL}")
        if result.detail and result.detail not in result.message:
            print(f"{Fore.YELLOW}        Provider detail: {result.detail}{Style.RESET_ALL}")
        return 1

    if result.truncated:
        print(f"{Fore.YELLOW}[WARNING] Input was truncated "
              f"({result.original_length} characters) before analysis{Style.RESET_ALL}")

    if args.output:
        try:
            with open(args.output, 'w', encoding='utf-8') as f:
                f.write(result.text)
        except OSError as e:
            print(f"{Fore.RED}[ERROR] Cannot write {args.output}: {e}{Style.RESET_ALL}")
            print(result.text)
            return 1
        print(f"{Fore.GREEN}[SUCCESS] Summary written to {args.output}{Style.RESET_ALL}")
    else:
        print(f"\n{Fore.CYAN}  ▸ Security Summary ({result.model_key}){Style.RESET_ALL}\n")
        print(result.text)

    return 0


def handle_models(args, settings):
    """Print the model capability table with credential status."""
    print(f"\n{Fore.CYAN}Available models (default: {settings.default_model}){Style.RESET_ALL}\n")

    current_provider = None
    for model in model_table.list_models():
        provider = model.provider
        if provider is not current_provider:
            credential = ConfigLoader.get_credential(provider.credential_env)
            print(f"{Fore.GREEN}{provider.display_name}{Style.RESET_ALL} "
                  f"({provider.credential_env}: {mask_secret(credential)})")
            current_provider = provider

        tags = []
        if model.is_reasoning:
            tags.append("reasoning")
        if not model.capabilities.uses_system_role:
            tags.append("no-system-role")
        suffix = f" [{', '.join(tags)}]" if tags else ""
        print(f"  • {model.key:<32} {model.wire_name}{suffix}")

    print()
    return 0


def handle_serve(args, settings):
    """Start the HTTP API server."""
    from scanbriefui.app import create_app
    from .services.ai_analyzer import SummaryService

    config = ConfigLoader.load_config_json()
    host = args.host or config["server_host"]
    port = args.port or int(config["server_port"])

    setup_logging(
        verbose=args.verbose,
        quiet=args.quiet,
        style="server",
        secrets=ConfigLoader.get_credentials(model_table.credential_envs()),
    )

    app = create_app(SummaryService(SecurityAnalyzer(settings=settings)))
    print(f"{Fore.GREEN}[INFO] Server running on http://{host}:{port}{Style.RESET_ALL}")
    app.run(host=host, port=port)
    return 0


# ── Argument Parser ────────────────────────────────────────────────────────

def create_argument_parser():
    """Create and configure the subparser-based argument parser."""
    parser = argparse.ArgumentParser(
        prog='scanbrief',
        description='ScanBrief: AI security summaries for host scan datasets',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')

    # Shared parent so --verbose/--quiet work after the subcommand name
    _log_parent = argparse.ArgumentParser(add_help=False)
    _log_parent.add_argument('--verbose', action='store_true', help='Enable verbose output')
    _log_parent.add_argument('--quiet', action='store_true', help='Only show warnings and errors')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # ── analyze ────────────────────────────────────────────────────────
    analyze_parser = subparsers.add_parser(
        'analyze',
        parents=[_log_parent],
        help='Analyze a host dataset with an AI model',
        description='Generate a security summary for a host scan dataset.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=ANALYZE_EXAMPLES,
    )
    analyze_parser.add_argument('file', help="Dataset file (JSON or text), or '-' for stdin")
    analyze_parser.add_argument('--model', help='Logical model key (default: configured default)')
    analyze_parser.add_argument('--output', help='Write the summary to this file')

    # ── models ─────────────────────────────────────────────────────────
    subparsers.add_parser(
        'models',
        parents=[_log_parent],
        help='List available models',
        description='Display logical model keys, wire names and capability flags.',
    )

    # ── serve ──────────────────────────────────────────────────────────
    serve_parser = subparsers.add_parser(
        'serve',
        parents=[_log_parent],
        help='Run the HTTP API server',
        description='Serve POST /summarize, GET /models and GET /.',
    )
    serve_parser.add_argument('--host', help='Bind address (default: from config)')
    serve_parser.add_argument('--port', type=int, help='Port (default: from config or $PORT)')

    return parser


COMMAND_HANDLERS = {
    'analyze': handle_analyze,
    'models': handle_models,
    'serve': handle_serve,
}


def main(argv=None):
    """Main entry point for the scanbrief console script."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    load_dotenv()
    setup_logging(
        verbose=args.verbose,
        quiet=args.quiet,
        secrets=ConfigLoader.get_credentials(model_table.credential_envs()),
    )
    settings = AISettings.load()

    return COMMAND_HANDLERS[args.command](args, settings)


if __name__ == '__main__':
    sys.exit(main())
