from skills_mcp.cli.main import app


def main():
    """Entry point for the ``skills-mcp`` command."""
    app()


if __name__ == "__main__":
    main()
