import argparse
import logging
import sys

from ptx_builder.builder import Builder, Profile
from ptx_builder.error import PTXBuilderError
from ptx_builder.reporter import CargoAdapter, ErrorLogPrinter
from ptx_builder.source import CrateType

CRATE_TYPES : dict[str, CrateType] = {'lib': CrateType.LIBRARY, 'bin': CrateType.BINARY}

def parse_args(argv : list[str] | None = None) -> argparse.Namespace:
    """
    Parse CLI arguments.
    """
    parser = argparse.ArgumentParser(
        description = 'Build a CUDA crate into a PTX assembly, and report it to the host cargo build script.',
        formatter_class = argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument('crate', type = str, help = 'Path of the device crate.')
    parser.add_argument('--env-var', type = str, default = 'KERNEL_PTX_PATH', help = 'Environment variable that receives the assembly path.')
    parser.add_argument('--profile', choices = [p.value for p in Profile], default = Profile.RELEASE.value, help = 'Build profile.')
    parser.add_argument('--crate-type', choices = list(CRATE_TYPES), required = False, help = 'Target to build, required if the crate has both lib.rs and main.rs.')
    parser.add_argument('--no-colors', action = 'store_true', help = 'Disable colors in the error log.')
    parser.add_argument('--log-level', type = str, default = 'WARNING', help = 'Logging level.')

    return parser.parse_args(argv)

def main(argv : list[str] | None = None) -> int:

    args = parse_args(argv)

    logging.basicConfig(level = args.log_level.upper(), stream = sys.stderr)
    logging.info(f"Received arguments: {args}")

    try:
        builder = Builder(args.crate)
    except PTXBuilderError as error:
        printer = ErrorLogPrinter(error)
        if args.no_colors:
            printer.disable_colors()
        print(printer, file = sys.stderr, end = '')
        return 1

    builder.set_profile(Profile(args.profile)).set_colors(not args.no_colors)

    if args.crate_type is not None:
        builder.set_crate_type(CRATE_TYPES[args.crate_type])

    return CargoAdapter(args.env_var).build(builder)

if __name__ == "__main__":

    sys.exit(main())
