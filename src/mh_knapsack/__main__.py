"""Main entry point for the mh_knapsack package."""
from mh_knapsack.cli import cli


def main():
    """Main entry point function."""
    cli()


if __name__ == "__main__":
    main()
