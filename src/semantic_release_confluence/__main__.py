# Copyright (c) 2025 Francis Bain
# SPDX-License-Identifier: Apache-2.0

"""Main entry point for the semantic-release-confluence tool."""

import sys

from .cli import main as cli_main


def main() -> None:
    """Main entry point for the semantic-release-confluence tool."""
    sys.exit(cli_main())


if __name__ == "__main__":
    main()
