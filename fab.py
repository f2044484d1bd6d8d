import sys
from pathlib import Path

from fab.fab_runtime import ScriptRunner
from fab.fab_config import ConfigError, load_config
from fab.fab_serialize import serialize

DEMO_SCRIPT = (
    '$word = "Hello World"\n'
    'echo $word\n'
    '$user = [$name = "skyss0fly", $age = 17]\n'
    'echo $user.$name\n'
    'echo "FableLang Made by skyss0fly!"'
)


def run_source(source: str, source_dir: str | None = None) -> None:
    """Run FabLang source, streaming echo output; exit with status 1 on any error."""
    try:
        config = load_config(source_dir=source_dir)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(1)
    runner = ScriptRunner(config=config, output=sys.stdout)
    result = runner.handle_script(source)
    if result.status == 'error':
        print(result.format_error(), file=sys.stderr)
        raise SystemExit(1)
    if config.dump_env:
        print(serialize(runner.environment, fmt=config.dump_env).rstrip("\n"))


def run_script_file(file_path: str) -> None:
    """Run a FabLang script file non-interactively."""
    p = Path(file_path)
    try:
        source = p.read_text(encoding="utf-8")
    except FileNotFoundError:
        print(f"Error: file not found: {file_path}", file=sys.stderr)
        raise SystemExit(1)
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error: cannot read {file_path}: {e}", file=sys.stderr)
        raise SystemExit(1)
    run_source(source, source_dir=str(p.parent.resolve()))


def main(argv: list[str] | None = None) -> None:
    """Run a script file when provided, otherwise the built-in demo."""
    args = sys.argv[1:] if argv is None else argv
    if args:
        run_script_file(args[0])
        return

    print("FableLang v0.1 — usage: fab.py <file.fab>")
    print("Running demo...\n")
    run_source(DEMO_SCRIPT)


if __name__ == "__main__":
    main()
