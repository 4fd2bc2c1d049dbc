"""clawroute - command line entry point."""

import sys

from clawroute.config import ConfigError, load_config, resolve_config_path
from clawroute.proxy.catalog import check_snapshot_models
from clawroute.routing.classifier import TierClassifier
from clawroute.utils.logger import setup_logging


def _print_main_usage() -> None:
    print("Usage:")
    print("  clawroute check [config_path]                 Validate config and show routing tables")
    print("  clawroute classify [--config PATH] <message>  Show how a message would be routed")
    print("  clawroute help                                Show this help")
    print("")
    print("Config path defaults to $CLAWROUTE_CONFIG, then ./routing_rules.yaml")


def _load_classifier(config_path: str | None) -> TierClassifier:
    config = load_config(config_path)
    setup_logging(config.log_level)
    return TierClassifier(config.router)


def _run_check(args: list[str]) -> int:
    config_path = args[0] if args else None
    path = resolve_config_path(config_path)
    try:
        classifier = _load_classifier(config_path)
    except ConfigError as e:
        print(f"Config error: {e}")
        return 1

    print(f"Config: {path}{'' if path.exists() else ' (not found, using defaults)'}")
    print(classifier.get_status())
    for warning in check_snapshot_models(classifier.snapshot):
        print(f"Warning: {warning}")
    print("OK")
    return 0


def _parse_classify_args(args: list[str]) -> tuple[str | None, str]:
    config_path: str | None = None
    words: list[str] = []
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--config":
            if i + 1 >= len(args):
                raise ValueError("--config requires a path")
            config_path = args[i + 1]
            i += 2
            continue
        if arg.startswith("--config="):
            config_path = arg.split("=", 1)[1]
        else:
            words.append(arg)
        i += 1
    return config_path, " ".join(words)


def _run_classify(args: list[str]) -> int:
    try:
        config_path, message = _parse_classify_args(args)
    except ValueError as e:
        print(f"Error: {e}")
        return 2
    if not message:
        print("Usage: clawroute classify [--config PATH] <message>")
        return 2

    try:
        classifier = _load_classifier(config_path)
    except ConfigError as e:
        print(f"Config error: {e}")
        return 1

    decision = classifier.decide(message)
    print(f"category: {decision.category or '(override)'}")
    print(f"tier    : {decision.tier.value}")
    print(f"model   : {decision.model}")
    print(f"message : {decision.cleaned_text}")
    return 0


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    args = sys.argv[1:] if argv is None else argv

    if not args or args[0] in {"-h", "--help", "help"}:
        _print_main_usage()
        return 0

    if args[0] == "check":
        return _run_check(args[1:])

    if args[0] == "classify":
        return _run_classify(args[1:])

    print(f"Unknown command: {args[0]}")
    _print_main_usage()
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
