"""Allow running the CLI with ``python -m storybook.cli``."""

from storybook.cli.main import main

if __name__ == "__main__":
    main()
