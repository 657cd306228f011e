"""Package entry point for ``python -m nft_marketplace_deployments``."""

import sys

from . import cli


def main(argv=None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    if not argv:
        parser = cli.build_parser(prog="python -m nft_marketplace_deployments")
        parser.print_help()
        return 2

    return cli.main(argv)


if __name__ == "__main__":  # pragma: no cover - module entry point
    sys.exit(main())
