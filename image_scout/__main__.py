"""Allow ``python -m image_scout URL DIRECTORY``."""
from image_scout.cli import cli

if __name__ == "__main__":
    cli(prog_name="image-scout")
