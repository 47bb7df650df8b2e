"""A tiny CLI.

Invoke using e.g. ``python -m glslbake build --shader-dir res --out-dir out``.
"""

import os
import sys
import logging
import argparse

import glslbake
from glslbake.utils import get_env_int, get_output_dir, get_shader_dir


COMMANDS = ["build", "list", "version", "help"]


def build_argument_parser():
    parser = argparse.ArgumentParser(
        prog="glslbake",
        description="Precompile and optimize the GLSL shader variants of the engine.",
    )
    parser.add_argument(
        "command", action="store", help="The command to run: " + ", ".join(COMMANDS)
    )
    parser.add_argument(
        "--shader-dir",
        default=None,
        help="The directory with the .glsl source fragments (env GLSLBAKE_SHADER_DIR).",
    )
    parser.add_argument(
        "--out-dir",
        default=None,
        help="The output directory (env GLSLBAKE_OUT_DIR or OUT_DIR, default ./out).",
    )
    parser.add_argument(
        "--platform",
        action="append",
        dest="platforms",
        choices=[p.value for p in glslbake.TargetPlatform],
        help="A platform to build for, can be repeated (default gl).",
    )
    parser.add_argument(
        "--optimizer",
        default=None,
        choices=sorted(glslbake.optimizer.OPTIMIZERS),
        help="The optimizer back-end (env GLSLBAKE_OPTIMIZER, default minify).",
    )
    parser.add_argument(
        "--optimizer-command",
        default=None,
        help="The command for the 'command' optimizer, with {stage}, {target}, {input}, {output}.",
    )
    parser.add_argument(
        "--registry",
        default=None,
        help="A JSON file with the shader feature registry (default builtin).",
    )
    parser.add_argument(
        "-j",
        "--jobs",
        type=int,
        default=None,
        help="The number of worker threads (env GLSLBAKE_JOBS, default the CPU count).",
    )
    parser.add_argument(
        "--no-manifest",
        action="store_true",
        help="Do not write the manifest with digests.",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log progress information."
    )
    return parser


def config_from_args(args):
    """Create a BuildConfig from parsed arguments and the environment."""
    optimizer = args.optimizer or os.getenv("GLSLBAKE_OPTIMIZER", "") or "minify"
    optimizer_options = {}
    if args.optimizer_command:
        optimizer_options["command"] = args.optimizer_command
    jobs = args.jobs if args.jobs is not None else get_env_int("GLSLBAKE_JOBS")
    return glslbake.BuildConfig(
        shader_dir=args.shader_dir or get_shader_dir(),
        output_dir=args.out_dir or get_output_dir(),
        platforms=args.platforms or ["gl"],
        optimizer=optimizer,
        optimizer_options=optimizer_options,
        registry=args.registry,
        max_workers=jobs,
        write_manifest=not args.no_manifest,
    )


def main(argv=None):
    # Get argv so we can massage it
    if argv is None:
        argv = sys.argv[1:]

    # Defaults and aliases
    if not argv:
        argv = ["help"]
    if argv == ["--version"]:
        argv = ["version"]

    # Let the rest to argparse
    parser = build_argument_parser()
    args = parser.parse_args(argv)
    command = args.command.lower()

    logging.basicConfig(format="%(levelname)s %(name)s: %(message)s")
    if args.verbose:
        glslbake.logger.setLevel(logging.INFO)

    if command == "help":
        parser.print_help()
        return 0
    elif command == "version":
        print("glslbake v" + glslbake.__version__)
        return 0
    elif command not in COMMANDS:
        print(f"Invalid command '{command}'", file=sys.stderr)
        return 2

    try:
        config = config_from_args(args)
    except (ValueError, TypeError) as err:
        print(f"glslbake: {err}", file=sys.stderr)
        return 2

    if command == "list":
        requests = glslbake.enumerate_permutations(
            config.platforms, config.get_registry()
        )
        for request in requests:
            print(f"{request.platform.name} {request.shader_id} {request.feature_config}")
        print(f"{len(requests)} shader variants")
        return 0

    # command == "build"
    if not config.shader_dir:
        print("glslbake: build needs --shader-dir (or GLSLBAKE_SHADER_DIR)", file=sys.stderr)
        return 2
    report = glslbake.build_shaders(config)
    print(report.summary())
    return report.exit_code


if __name__ == "__main__":
    sys.exit(main())
