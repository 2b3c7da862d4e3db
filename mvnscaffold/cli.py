"""Command-line entry point.

Runs one generator (the project root or a single module type) against a
destination directory::

    mvnscaffold project --defaults --group-id com.mysite --app-id mysite --name "My Site"
    mvnscaffold bundle --generate-into mysite/extra --package com.mysite.extra
    mvnscaffold project --modules core=bundle,ui.apps=package-apps --set core.package=com.mysite
"""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path
from typing import Any

from mvnscaffold.config import ScaffoldConfig
from mvnscaffold.errors import InvalidInputError, ScaffoldError
from mvnscaffold.generators import (
    GENERATORS,
    Environment,
    ProjectGenerator,
    RichPrompter,
    StaticPrompter,
)
from mvnscaffold.maven import AEM_VERSIONS
from mvnscaffold.utils import configure_logging, print_error, print_success, print_summary_table

# argparse destination -> generator option name
_OPTION_NAMES = {
    "generate_into": "generateInto",
    "examples": "examples",
    "name": "name",
    "app_id": "appId",
    "artifact_id": "artifactId",
    "group_id": "groupId",
    "version": "version",
    "java_version": "javaVersion",
    "aem_version": "aemVersion",
    "package": "package",
    "bundle_ref": "bundleRef",
    "apps_ref": "appsRef",
    "publish": "publish",
    "precompile_scripts": "precompileScripts",
    "templates": "templates",
    "single_country": "singleCountry",
    "language": "language",
    "country": "country",
    "enable_dynamic_media": "enableDynamicMedia",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mvnscaffold",
        description="Scaffold and extend multi-module Maven projects",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  mvnscaffold project --defaults --group-id com.mysite --app-id mysite --name 'My Site'\n"
            "  mvnscaffold bundle --generate-into mysite/extra --package com.mysite.extra\n"
        ),
    )
    parser.add_argument("generator", choices=["project", *GENERATORS], help="What to generate")
    parser.add_argument("--generate-into", "-d", default=None, help="Destination directory (default: cwd)")
    parser.add_argument("--defaults", action="store_true", help="Use defaults instead of asking")
    parser.add_argument("--no-prompt", action="store_true", help="Never ask; fail on missing values")
    parser.add_argument("--examples", action=argparse.BooleanOptionalAction, default=None)
    parser.add_argument("--name", default=None)
    parser.add_argument("--app-id", default=None)
    parser.add_argument("--artifact-id", default=None)

    project = parser.add_argument_group("project options")
    project.add_argument("--group-id", default=None)
    project.add_argument("--version", default=None, help="Starting project version")
    project.add_argument("--java-version", choices=["8", "11"], default=None)
    project.add_argument("--aem-version", choices=list(AEM_VERSIONS), default=None)
    project.add_argument(
        "--modules",
        default=None,
        help="Comma-separated module types or directory=type pairs",
    )
    project.add_argument(
        "--set",
        action="append",
        default=[],
        metavar="DIR.KEY=VALUE",
        help="Option for the module composed into DIR (repeatable)",
    )

    module = parser.add_argument_group("module options")
    module.add_argument("--package", default=None, help="Java source package")
    module.add_argument("--bundle-ref", default=None, help="Bundle module directory the apps package depends on")
    module.add_argument("--apps-ref", default=None, help="Apps package artifactId the content package references")
    module.add_argument("--publish", action=argparse.BooleanOptionalAction, default=None)
    module.add_argument("--precompile-scripts", action=argparse.BooleanOptionalAction, default=None)
    module.add_argument("--templates", action=argparse.BooleanOptionalAction, default=None)
    module.add_argument("--single-country", action=argparse.BooleanOptionalAction, default=None)
    module.add_argument("--language", default=None)
    module.add_argument("--country", default=None)
    module.add_argument("--enable-dynamic-media", action=argparse.BooleanOptionalAction, default=None)

    run = parser.add_argument_group("run options")
    run.add_argument("--config", default=None, help="JSON configuration file")
    run.add_argument("--skip-install", action="store_true", help="Do not run the build afterwards")
    run.add_argument("--hide-build-output", action="store_true", help="Capture the build output")
    run.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser


def parse_modules(value: str) -> list[str] | dict[str, str]:
    """Parse ``--modules``: either all bare types or all ``dir=type`` pairs."""
    entries = [entry.strip() for entry in value.split(",") if entry.strip()]
    pairs = [entry for entry in entries if "=" in entry]
    if not pairs:
        return entries
    if len(pairs) != len(entries):
        raise InvalidInputError("--modules must not mix module types and directory=type pairs.")
    return dict(entry.split("=", 1) for entry in entries)


def parse_module_options(values: list[str]) -> dict[str, dict[str, Any]]:
    options: dict[str, dict[str, Any]] = {}
    for value in values:
        key, sep, raw = value.partition("=")
        directory, dot, name = key.rpartition(".")
        if not sep or not dot or not directory or not name:
            raise InvalidInputError(f"Invalid --set value '{value}', expected DIR.KEY=VALUE.")
        options.setdefault(directory, {})[name] = _coerce(raw)
    return options


def _coerce(raw: str) -> Any:
    lowered = raw.lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    return raw


def build_options(args: argparse.Namespace) -> dict[str, Any]:
    """Translate parsed arguments into generator options."""
    options: dict[str, Any] = {
        option: getattr(args, dest)
        for dest, option in _OPTION_NAMES.items()
        if getattr(args, dest) is not None
    }
    if args.defaults:
        options["defaults"] = True
    if args.hide_build_output:
        options["showBuildOutput"] = False
    if args.modules is not None:
        options["modules"] = parse_modules(args.modules)
    if args.set:
        options["moduleOptions"] = parse_module_options(args.set)
    return options


def load_config(args: argparse.Namespace) -> ScaffoldConfig:
    config = ScaffoldConfig.load(Path(args.config)) if args.config else ScaffoldConfig.from_env()
    if args.skip_install:
        config = config.model_copy(update={"skip_install": True})
    return config


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for ``mvnscaffold`` / ``python -m mvnscaffold``."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        options = build_options(args)
        config = load_config(args)
    except (InvalidInputError, OSError, ValueError) as exc:
        print_error(f"Error: {exc}")
        return 1

    prompter = StaticPrompter() if args.defaults or args.no_prompt else RichPrompter()
    env = Environment(config=config, prompter=prompter)
    generator_cls = ProjectGenerator if args.generator == "project" else GENERATORS[args.generator]
    generator = generator_cls(env, options)

    try:
        asyncio.run(generator.run())
    except ScaffoldError as exc:
        print_error(str(exc))
        return 1

    print_summary_table(
        {key: value for key, value in generator.props.items() if not isinstance(value, dict)},
        title=f"{generator.display_name} generated in {generator.destination}",
    )
    print_success("Generation completed successfully!")
    return 0
